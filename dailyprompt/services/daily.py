"""
daily.py — per-day rows for a pair: the shared prompt and the two answers.

Both writes are upserts on their natural keys, so repeating a request never
creates a second row:

- daily_prompt: (pair_id, date)          last generation wins
- responses:    (pair_id, date, user_id) resubmitting overwrites
"""

import logging
from datetime import date, datetime
from typing import List, Optional
from zoneinfo import ZoneInfo

from fastapi import HTTPException
from sqlalchemy.orm import Session

from dailyprompt import models, schemas
from dailyprompt.core.config import cfg as c
from dailyprompt.services.reveal import compute_reveal
from dailyprompt.services.store import upsert

logger = logging.getLogger(__name__)


def today(tz: Optional[str] = None) -> date:
    return datetime.now(ZoneInfo(tz or c.APP_TIMEZONE)).date()


def get_daily_prompt(q: Session, pair_id: str, day: date) -> Optional[models.DailyPrompt]:
    return (
        q.query(models.DailyPrompt)
        .filter(models.DailyPrompt.pair_id == pair_id, models.DailyPrompt.date == day)
        .first()
    )


def upsert_daily_prompt(
    q: Session,
    pair_id: str,
    day: date,
    tone: schemas.Tone | str,
    less_therapy: bool,
    prompt: str,
) -> models.DailyPrompt:
    # TODO: two sessions generating at once both succeed and the later write
    # replaces the earlier prompt; add an insert-only mode if that matters.
    tone_value = tone.value if isinstance(tone, schemas.Tone) else str(tone)
    row = upsert(
        q,
        models.DailyPrompt,
        {
            "pair_id": pair_id,
            "date": day,
            "tone": tone_value,
            "less_therapy": bool(less_therapy),
            "prompt": prompt,
        },
        conflict=["pair_id", "date"],
    )
    logger.info("Stored prompt for pair %s on %s (tone=%s)", pair_id, day, tone_value)
    return row


def list_responses(q: Session, pair_id: str, day: date) -> List[models.Responses]:
    return (
        q.query(models.Responses)
        .filter(models.Responses.pair_id == pair_id, models.Responses.date == day)
        .order_by(models.Responses.id.asc())
        .all()
    )


def submit_response(
    q: Session,
    pair_id: str,
    day: date,
    user_id: str,
    answer: str,
) -> models.Responses:
    text = (answer or "").strip()
    if not text:
        raise HTTPException(status_code=400, detail="Write a one sentence answer first.")
    # answers belong to a prompt; none may exist before it
    if get_daily_prompt(q, pair_id, day) is None:
        raise HTTPException(status_code=409, detail="Generate a prompt first.")

    row = upsert(
        q,
        models.Responses,
        {"pair_id": pair_id, "date": day, "user_id": user_id, "answer": text},
        conflict=["pair_id", "date", "user_id"],
    )
    logger.info("Stored answer from %s for pair %s on %s", user_id, pair_id, day)
    return row


def build_today(
    q: Session,
    pair: models.Pairs,
    user_id: str,
    day: Optional[date] = None,
) -> schemas.TodayOut:
    day = day or today()
    prompt = get_daily_prompt(q, pair.id, day)
    return schemas.TodayOut(
        date=day,
        pair_id=pair.id,
        join_code=pair.join_code,
        paired=pair.user_b is not None,
        prompt=schemas.DailyPromptOut.model_validate(prompt) if prompt else None,
        reveal=compute_reveal(list_responses(q, pair.id, day), user_id),
    )
