"""HTTP-level tests for the API routes."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from dailyprompt.core.config import cfg
from dailyprompt.services import llm


def test_health(client: TestClient) -> None:
    body = client.get("/api/health").json()
    assert body == {"ok": True, "provider": "gemini", "provider_configured": False}


# ---------- /api/generate ----------


def test_generate_without_credential_is_500(client: TestClient) -> None:
    resp = client.post("/api/generate", json={"tone": "cute"})
    assert resp.status_code == 500
    assert resp.json() == {"error": "Missing GEMINI_API_KEY environment variable."}


@pytest.mark.parametrize("body", [b"{not json", b"", b"[1, 2]", b'"cute"'])
def test_generate_malformed_body_is_400(client: TestClient, monkeypatch: pytest.MonkeyPatch, body: bytes) -> None:
    monkeypatch.setattr(cfg, "GEMINI_API_KEY", "k")
    resp = client.post("/api/generate", content=body, headers={"Content-Type": "application/json"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid JSON payload."


def test_generate_rejects_unknown_tone(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cfg, "GEMINI_API_KEY", "k")
    resp = client.post("/api/generate", json={"tone": "sarcastic"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid request body."
    assert "detail" in resp.json()


def test_generate_success_uses_defaults(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cfg, "GEMINI_API_KEY", "k")
    seen = {}

    def _fake(tone, less_therapy):
        seen.update(tone=tone, less_therapy=less_therapy)
        return "What made you laugh today?"

    monkeypatch.setattr(llm, "generate_prompt", _fake)
    resp = client.post("/api/generate", json={"tone": None})
    assert resp.status_code == 200
    assert resp.json() == {"prompt": "What made you laugh today?"}
    assert seen == {"tone": "cute", "less_therapy": False}


def test_generate_passes_upstream_status(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cfg, "GEMINI_API_KEY", "k")

    def _fail(tone, less_therapy):
        raise llm.UpstreamError("Gemini request failed.", detail="quota", status_code=429)

    monkeypatch.setattr(llm, "generate_prompt", _fail)
    resp = client.post("/api/generate", json={"tone": "deep", "less_therapy": True})
    assert resp.status_code == 429
    assert resp.json() == {"error": "Gemini request failed.", "detail": "quota"}


def test_generate_parse_error_includes_raw(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cfg, "GEMINI_API_KEY", "k")

    def _fail(tone, less_therapy):
        raise llm.ResponseParseError("Could not parse model response.", raw="nope")

    monkeypatch.setattr(llm, "generate_prompt", _fail)
    resp = client.post("/api/generate", json={})
    assert resp.status_code == 500
    assert resp.json() == {"error": "Could not parse model response.", "raw": "nope"}


# ---------- auth ----------


def test_register_and_login(client: TestClient) -> None:
    resp = client.post(
        "/api/auth/register",
        json={"email": "Alice@Example.com", "password": "secret123", "name": "Alice"},
    )
    assert resp.status_code == 200
    assert resp.json()["email"] == "alice@example.com"

    dup = client.post("/api/auth/register", json={"email": "alice@example.com", "password": "secret123"})
    assert dup.status_code == 400

    bad = client.post("/api/auth/login", json={"email": "alice@example.com", "password": "wrong"})
    assert bad.status_code == 401

    ok = client.post("/api/auth/login", json={"email": "alice@example.com", "password": "secret123"})
    assert ok.status_code == 200
    token = ok.json()["access_token"]

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["name"] == "Alice"


def test_protected_routes_need_token(client: TestClient) -> None:
    assert client.post("/api/pairs").status_code == 401
    assert client.get("/api/pairs/current", headers={"Authorization": "Bearer junk"}).status_code == 401


# ---------- pairs + today ----------


def test_pair_and_reveal_flow(client: TestClient, make_user, monkeypatch: pytest.MonkeyPatch) -> None:
    alice, alice_h = make_user("alice@example.com")
    bob, bob_h = make_user("bob@example.com")
    _, carol_h = make_user("carol@example.com")

    pair = client.post("/api/pairs", headers=alice_h).json()
    assert pair["user_a"] == alice.user_hash
    assert pair["user_b"] is None

    joined = client.post("/api/pairs/join", json={"code": pair["join_code"].lower()}, headers=bob_h)
    assert joined.status_code == 200
    assert joined.json()["user_b"] == bob.user_hash

    full = client.post("/api/pairs/join", json={"code": pair["join_code"]}, headers=carol_h)
    assert full.status_code == 409
    assert full.json()["detail"] == "That pair is already full."

    missing = client.post("/api/pairs/join", json={"code": "ZZZZZZ"}, headers=carol_h)
    if pair["join_code"] != "ZZZZZZ":
        assert missing.status_code == 404

    assert client.get(f"/api/pairs/{pair['id']}", headers=carol_h).status_code == 403
    assert client.get(f"/api/pairs/{pair['id']}/today", headers=carol_h).status_code == 403
    assert client.get("/api/pairs/current", headers=bob_h).json()["id"] == pair["id"]

    today_url = f"/api/pairs/{pair['id']}/today"
    view = client.get(today_url, headers=alice_h).json()
    assert view["paired"] is True
    assert view["prompt"] is None
    assert view["reveal"]["state"] == "none"

    prompts = iter(["First prompt?", "Second prompt?"])
    monkeypatch.setattr(llm, "generate_prompt", lambda tone, less_therapy: next(prompts))
    gen = client.post(f"{today_url}/generate", json={"tone": "goofy"}, headers=alice_h)
    assert gen.status_code == 200
    assert gen.json()["prompt"] == "First prompt?"
    regen = client.post(f"{today_url}/generate", json={"tone": "deep", "less_therapy": True}, headers=bob_h)
    assert regen.json()["id"] == gen.json()["id"]

    view = client.get(today_url, headers=alice_h).json()
    assert view["prompt"]["prompt"] == "Second prompt?"
    assert view["prompt"]["tone"] == "deep"

    blank = client.post(f"{today_url}/response", json={"answer": "   "}, headers=alice_h)
    assert blank.status_code == 400

    after_alice = client.post(f"{today_url}/response", json={"answer": " The beach. "}, headers=alice_h).json()
    assert after_alice["reveal"] == {
        "state": "waiting",
        "my_answer": "The beach.",
        "partner_answered": False,
        "partner_answer": None,
    }

    bob_view = client.get(today_url, headers=bob_h).json()
    assert bob_view["reveal"]["state"] == "waiting"
    assert bob_view["reveal"]["partner_answered"] is True
    assert bob_view["reveal"]["partner_answer"] is None

    after_bob = client.post(f"{today_url}/response", json={"answer": "Mountains."}, headers=bob_h).json()
    assert after_bob["reveal"]["state"] == "revealed"
    assert after_bob["reveal"]["partner_answer"] == "The beach."

    alice_view = client.get(today_url, headers=alice_h).json()
    assert alice_view["reveal"]["partner_answer"] == "Mountains."


def test_generate_for_pair_reports_provider_errors(client: TestClient, make_user, monkeypatch: pytest.MonkeyPatch) -> None:
    _, alice_h = make_user("alice@example.com")
    pair = client.post("/api/pairs", headers=alice_h).json()

    resp = client.post(f"/api/pairs/{pair['id']}/today/generate", json={}, headers=alice_h)
    assert resp.status_code == 500
    assert resp.json()["error"].startswith("Missing GEMINI_API_KEY")

    view = client.get(f"/api/pairs/{pair['id']}/today", headers=alice_h).json()
    assert view["prompt"] is None


def test_answer_before_prompt_is_409(client: TestClient, make_user) -> None:
    _, alice_h = make_user("alice@example.com")
    pair = client.post("/api/pairs", headers=alice_h).json()
    today_url = f"/api/pairs/{pair['id']}/today"

    resp = client.post(f"{today_url}/response", json={"answer": "Hi."}, headers=alice_h)
    assert resp.status_code == 409
    assert resp.json()["detail"] == "Generate a prompt first."

    view = client.get(today_url, headers=alice_h).json()
    assert view["reveal"]["state"] == "none"
    assert view["reveal"]["my_answer"] is None


def test_generate_for_pair_null_means_default(client: TestClient, make_user, monkeypatch: pytest.MonkeyPatch) -> None:
    _, alice_h = make_user("alice@example.com")
    pair = client.post("/api/pairs", headers=alice_h).json()
    seen = {}

    def _fake(tone, less_therapy):
        seen.update(tone=tone, less_therapy=less_therapy)
        return "What song reminds you of us?"

    monkeypatch.setattr(llm, "generate_prompt", _fake)
    resp = client.post(
        f"/api/pairs/{pair['id']}/today/generate",
        json={"tone": None, "less_therapy": None},
        headers=alice_h,
    )
    assert resp.status_code == 200
    assert resp.json()["tone"] == "cute"
    assert resp.json()["less_therapy"] is False
    assert seen == {"tone": "cute", "less_therapy": False}


@pytest.mark.parametrize(
    "body, error",
    [
        (b"{not json", "Invalid JSON payload."),
        (b"[1, 2]", "Invalid JSON payload."),
        (b'{"tone": "sarcastic"}', "Invalid request body."),
    ],
)
def test_generate_for_pair_bad_body_is_400(
    client: TestClient, make_user, monkeypatch: pytest.MonkeyPatch, body: bytes, error: str
) -> None:
    _, alice_h = make_user("alice@example.com")
    pair = client.post("/api/pairs", headers=alice_h).json()
    monkeypatch.setattr(llm, "generate_prompt", lambda tone, less_therapy: "unused")

    resp = client.post(
        f"/api/pairs/{pair['id']}/today/generate",
        content=body,
        headers={**alice_h, "Content-Type": "application/json"},
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == error

    view = client.get(f"/api/pairs/{pair['id']}/today", headers=alice_h).json()
    assert view["prompt"] is None


def test_prompt_and_answer_share_the_local_date(
    client: TestClient, make_user, monkeypatch: pytest.MonkeyPatch, freeze_clock
) -> None:
    # 02:15 UTC on 10 March is still 9 March in New York
    freeze_clock(datetime(2026, 3, 10, 2, 15, tzinfo=timezone.utc))
    monkeypatch.setattr(cfg, "APP_TIMEZONE", "America/New_York")
    monkeypatch.setattr(llm, "generate_prompt", lambda tone, less_therapy: "Favorite shared meal?")

    _, alice_h = make_user("alice@example.com")
    pair = client.post("/api/pairs", headers=alice_h).json()
    today_url = f"/api/pairs/{pair['id']}/today"

    gen = client.post(f"{today_url}/generate", json={}, headers=alice_h).json()
    view = client.post(f"{today_url}/response", json={"answer": "Dumplings."}, headers=alice_h).json()

    assert gen["date"] == "2026-03-09"
    assert view["date"] == "2026-03-09"
    assert view["prompt"]["id"] == gen["id"]
    assert view["reveal"]["my_answer"] == "Dumplings."
