"""
llm.py — one-shot prompt generation against the configured provider.

Flow: build instruction -> single request (no retry) -> pull the text out
of the provider payload -> extract JSON -> return the trimmed "prompt".

Every failure is raised as a PromptGenerationError subclass carrying the
HTTP status to report and, where there is one, the raw provider text.
"""

import json
import logging
import re
from typing import Any, Dict, Optional

import requests
from openai import APIError, APIStatusError, OpenAI

from dailyprompt.core.config import cfg as c
from dailyprompt.schemas import Tone
from dailyprompt.services.prompt import build_prompt

logger = logging.getLogger(__name__)

TEMPERATURE = 0.7
TOP_P = 0.9
MAX_OUTPUT_TOKENS = 200
NO_CONTENT = "No content returned."

_FENCED_JSON_RE = re.compile(r"```json\s*([\s\S]*?)\s*```", re.IGNORECASE)


# =============================================================================
# ERRORS
# =============================================================================


class PromptGenerationError(Exception):
    status_code = 500

    def __init__(
        self,
        error: str,
        *,
        detail: Optional[str] = None,
        raw: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(error)
        self.error = error
        self.detail = detail
        self.raw = raw
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.error}
        if self.detail is not None:
            body["detail"] = self.detail
        if self.raw is not None:
            body["raw"] = self.raw
        return body


class MissingCredentialError(PromptGenerationError):
    status_code = 500


class UpstreamError(PromptGenerationError):
    status_code = 502


class ResponseParseError(PromptGenerationError):
    status_code = 500


# =============================================================================
# RESPONSE PARSING
# =============================================================================


def extract_json(text: str) -> str:
    """
    Pick the JSON part of a model reply.

    1) body of a ```json fenced block
    2) first "{" through last "}"
    3) the text as-is
    """
    fenced = _FENCED_JSON_RE.search(text)
    if fenced and fenced.group(1):
        return fenced.group(1)
    first = text.find("{")
    last = text.rfind("}")
    if first != -1 and last != -1 and last > first:
        return text[first: last + 1]
    return text


def parse_prompt(raw: str) -> str:
    try:
        parsed = json.loads(extract_json(raw))
    except ValueError:
        logger.warning("Could not parse model response as JSON")
        logger.debug("Raw model response: %r", raw)
        raise ResponseParseError("Could not parse model response.", raw=raw)

    prompt = parsed.get("prompt") if isinstance(parsed, dict) else None
    if not isinstance(prompt, str) or not prompt.strip():
        logger.warning("Model response missing prompt")
        logger.debug("Raw model response: %r", raw)
        raise ResponseParseError("Model response missing prompt.", raw=raw)
    return prompt.strip()


# =============================================================================
# PROVIDERS
# =============================================================================


def _gemini_text(instruction: str, key: str) -> str:
    url = f"{c.GEMINI_BASE_URL.rstrip('/')}/models/{c.GEMINI_MODEL}:generateContent"
    payload = {
        "contents": [{"parts": [{"text": instruction}]}],
        "generationConfig": {
            "temperature": TEMPERATURE,
            "topP": TOP_P,
            "maxOutputTokens": MAX_OUTPUT_TOKENS,
        },
    }
    try:
        resp = requests.post(
            url,
            params={"key": key},
            headers={"Content-Type": "application/json"},
            json=payload,
            timeout=c.LLM_TIMEOUT_SECONDS,
        )
    except requests.RequestException as e:
        logger.error("Gemini request failed: %s", e)
        raise UpstreamError("Gemini request failed.", detail=str(e))

    if not resp.ok:
        logger.error("Gemini returned HTTP %s", resp.status_code)
        raise UpstreamError(
            "Gemini request failed.",
            detail=resp.text,
            status_code=resp.status_code,
        )

    try:
        data = resp.json()
    except ValueError:
        raise UpstreamError("Gemini returned a non-JSON body.", detail=resp.text)

    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        text = None
    return text.strip() if isinstance(text, str) else NO_CONTENT


def _openai_text(instruction: str, key: str) -> str:
    client = OpenAI(api_key=key, timeout=c.LLM_TIMEOUT_SECONDS)
    try:
        m = client.chat.completions.create(
            model=c.OPENAI_MODEL,
            messages=[{"role": "user", "content": instruction}],
            temperature=TEMPERATURE,
            top_p=TOP_P,
            max_tokens=MAX_OUTPUT_TOKENS,
        )
    except APIStatusError as e:
        logger.error("OpenAI returned HTTP %s", e.status_code)
        raise UpstreamError(
            "OpenAI request failed.",
            detail=e.response.text,
            status_code=e.status_code,
        )
    except APIError as e:
        logger.error("OpenAI request failed: %s", e)
        raise UpstreamError("OpenAI request failed.", detail=str(e))

    content = m.choices[0].message.content if m.choices else None
    return content.strip() if content else NO_CONTENT


PROVIDERS = {
    "gemini": _gemini_text,
    "openai": _openai_text,
}


def generate_prompt(tone: Tone | str = Tone.cute, less_therapy: bool = False) -> str:
    key = c.provider_key()
    if not key:
        raise MissingCredentialError(
            f"Missing {c.provider_key_name()} environment variable."
        )

    instruction = build_prompt(tone, less_therapy)
    raw = PROVIDERS[c.LLM_PROVIDER](instruction, key)
    return parse_prompt(raw)
