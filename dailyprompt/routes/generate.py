from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from dailyprompt import schemas
from dailyprompt.core.config import cfg as c
from dailyprompt.services import llm

logger = logging.getLogger(__name__)

r = APIRouter()


def error_response(err: llm.PromptGenerationError) -> JSONResponse:
    return JSONResponse(err.to_dict(), status_code=err.status_code)


def parse_generate_body(body) -> schemas.GenerateIn:
    """Raise PromptGenerationError(400) for anything that is not a usable request."""
    if not isinstance(body, dict):
        raise llm.PromptGenerationError("Invalid JSON payload.", status_code=400)
    # null means "use the default", same as leaving the key out
    fields = {k: v for k, v in body.items() if v is not None}
    try:
        return schemas.GenerateIn.model_validate(fields)
    except ValidationError as e:
        raise llm.PromptGenerationError(
            "Invalid request body.",
            detail=str(e),
            status_code=400,
        )


@r.post(
    "/api/generate",
    response_model=schemas.GenerateOut,
    responses={400: {}, 500: {}, 502: {}},
)
async def generate(request: Request):
    """
    Stateless proxy: returns {"prompt": "..."} or {"error": ..., "detail"/"raw": ...}.
    """
    if not c.provider_key():
        return error_response(
            llm.MissingCredentialError(f"Missing {c.provider_key_name()} environment variable.")
        )

    try:
        body = await request.json()
    except ValueError:
        return error_response(llm.PromptGenerationError("Invalid JSON payload.", status_code=400))

    try:
        x = parse_generate_body(body)
        prompt = await run_in_threadpool(llm.generate_prompt, x.tone, x.less_therapy)
    except llm.PromptGenerationError as e:
        return error_response(e)

    return schemas.GenerateOut(prompt=prompt)
