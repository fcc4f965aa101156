# dailyprompt/routes/today.py

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from dailyprompt.auth_utils import get_current_user
from dailyprompt.db import get_db
from dailyprompt import models, schemas
from dailyprompt.routes.generate import error_response, parse_generate_body
from dailyprompt.services import daily, llm, pairing

r = APIRouter(prefix="/api/pairs/{pair_id}/today", tags=["today"])


@r.get("", response_model=schemas.TodayOut)
def get_today(
    pair_id: str,
    current_user: models.Users = Depends(get_current_user),
    q: Session = Depends(get_db),
):
    """
    Today's payload for one pair.

    - The shared prompt, if it has been generated
    - Reveal state: none / waiting / revealed
    - Your own answer, and your partner's only once both exist

    Clients poll this to notice the reveal.
    """
    pair = pairing.get_pair_for_member(q, pair_id, current_user.user_hash)
    return daily.build_today(q, pair, current_user.user_hash)


@r.post(
    "/generate",
    response_model=schemas.DailyPromptOut,
    responses={400: {}, 500: {}, 502: {}},
)
async def generate_today(
    pair_id: str,
    request: Request,
    current_user: models.Users = Depends(get_current_user),
    q: Session = Depends(get_db),
):
    """
    Generate today's prompt and store it; a second call the same day replaces it.

    The body follows POST /api/generate: null means the default, a body that
    is not a JSON object is 400.
    """
    pair = await run_in_threadpool(pairing.get_pair_for_member, q, pair_id, current_user.user_hash)

    try:
        body = await request.json()
    except ValueError:
        return error_response(llm.PromptGenerationError("Invalid JSON payload.", status_code=400))

    try:
        x = parse_generate_body(body)
        text = await run_in_threadpool(llm.generate_prompt, x.tone, x.less_therapy)
    except llm.PromptGenerationError as e:
        return error_response(e)

    return await run_in_threadpool(
        daily.upsert_daily_prompt, q, pair.id, daily.today(), x.tone, x.less_therapy, text
    )


@r.post("/response", response_model=schemas.TodayOut)
def submit_response(
    pair_id: str,
    x: schemas.ResponseIn,
    current_user: models.Users = Depends(get_current_user),
    q: Session = Depends(get_db),
):
    pair = pairing.get_pair_for_member(q, pair_id, current_user.user_hash)
    day = daily.today()
    daily.submit_response(q, pair.id, day, current_user.user_hash, x.answer)
    return daily.build_today(q, pair, current_user.user_hash, day)
