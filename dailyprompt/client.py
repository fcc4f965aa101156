"""
client.py — small HTTP client for the daily prompt API.

Holds the caller's pair id / join code in a PairCache so the pair does not
have to be looked up on every call. The cache is advisory: whenever the
server says the cached pair is missing or not ours, the cache is dropped and
the pair is resolved again through /api/pairs/current.

Reveal is by polling: poll_today() keeps the last good payload and returns
it unchanged when a poll fails.
"""

import json
import logging
import time
from pathlib import Path
from typing import Any, Dict, Optional

import requests

logger = logging.getLogger(__name__)

PAIR_ID_KEY = "dp_pair_id"
JOIN_CODE_KEY = "dp_join_code"


class ApiError(Exception):
    def __init__(self, status_code: int, body: Any):
        super().__init__(f"HTTP {status_code}: {body}")
        self.status_code = status_code
        self.body = body


class PairCache:
    """pair id + join code, optionally mirrored to a JSON file."""

    def __init__(self, path: Optional[str] = None):
        self.path = Path(path) if path else None
        self._data: Dict[str, str] = {}
        if self.path and self.path.exists():
            try:
                data = json.loads(self.path.read_text(encoding="utf-8"))
            except (OSError, ValueError):
                logger.warning("Ignoring unreadable pair cache at %s", self.path)
                data = {}
            if isinstance(data, dict):
                self._data = {k: str(v) for k, v in data.items() if k in (PAIR_ID_KEY, JOIN_CODE_KEY)}

    @property
    def pair_id(self) -> Optional[str]:
        return self._data.get(PAIR_ID_KEY)

    @property
    def join_code(self) -> Optional[str]:
        return self._data.get(JOIN_CODE_KEY)

    def store(self, pair: Dict[str, Any]) -> None:
        self._data = {PAIR_ID_KEY: pair["id"], JOIN_CODE_KEY: pair["join_code"]}
        self._save()

    def clear(self) -> None:
        self._data = {}
        self._save()

    def _save(self) -> None:
        if not self.path:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self._data), encoding="utf-8")


class DailyPromptClient:
    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        cache: Optional[PairCache] = None,
        timeout: float = 10,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.cache = cache or PairCache()
        self.timeout = timeout
        self._last_today: Dict[str, Dict[str, Any]] = {}

    # ---------- plumbing ----------

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _request(self, method: str, path: str, **kwargs) -> Any:
        resp = requests.request(
            method,
            self.base_url + path,
            headers=self._headers(),
            timeout=self.timeout,
            **kwargs,
        )
        try:
            body = resp.json()
        except ValueError:
            body = resp.text
        if not resp.ok:
            raise ApiError(resp.status_code, body)
        return body

    # ---------- auth ----------

    def login(self, email: str, password: str) -> Dict[str, Any]:
        data = self._request("POST", "/api/auth/login", json={"email": email, "password": password})
        self.token = data["access_token"]
        return data

    # ---------- pairs ----------

    def create_pair(self) -> Dict[str, Any]:
        pair = self._request("POST", "/api/pairs")
        self.cache.store(pair)
        return pair

    def join_pair(self, code: str) -> Dict[str, Any]:
        pair = self._request("POST", "/api/pairs/join", json={"code": code})
        self.cache.store(pair)
        return pair

    def resolve_pair(self) -> Dict[str, Any]:
        cached = self.cache.pair_id
        if cached:
            try:
                pair = self._request("GET", f"/api/pairs/{cached}")
            except ApiError as e:
                if e.status_code not in (403, 404):
                    raise
                logger.info("Cached pair %s rejected (%s); re-resolving", cached, e.status_code)
                self.cache.clear()
            else:
                if pair.get("join_code") != self.cache.join_code:
                    self.cache.store(pair)
                return pair

        pair = self._request("GET", "/api/pairs/current")
        self.cache.store(pair)
        return pair

    # ---------- today ----------

    def generate(self, pair_id: str, tone: str = "cute", less_therapy: bool = False) -> Dict[str, Any]:
        return self._request(
            "POST",
            f"/api/pairs/{pair_id}/today/generate",
            json={"tone": tone, "less_therapy": less_therapy},
        )

    def submit_answer(self, pair_id: str, answer: str) -> Dict[str, Any]:
        today = self._request("POST", f"/api/pairs/{pair_id}/today/response", json={"answer": answer})
        self._last_today[pair_id] = today
        return today

    def poll_today(self, pair_id: str) -> Optional[Dict[str, Any]]:
        try:
            today = self._request("GET", f"/api/pairs/{pair_id}/today")
        except (requests.RequestException, ApiError) as e:
            logger.warning("Polling today for pair %s failed: %s", pair_id, e)
            return self._last_today.get(pair_id)
        self._last_today[pair_id] = today
        return today

    def wait_for_reveal(
        self,
        pair_id: str,
        interval: float = 5.0,
        attempts: int = 12,
    ) -> Optional[Dict[str, Any]]:
        today = None
        for attempt in range(attempts):
            today = self.poll_today(pair_id)
            if today and today["reveal"]["state"] == "revealed":
                return today
            if attempt < attempts - 1:
                time.sleep(interval)
        return today
