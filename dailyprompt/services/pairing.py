"""
pairing.py — create / join / resolve a two-person pair.

A pair starts with one member (user_a) and a 6-character join code that the
partner types in. The second slot (user_b) is written at most once, through a
conditional UPDATE that only matches while the slot is still empty.
"""

import logging
import secrets
import uuid
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from dailyprompt import models

logger = logging.getLogger(__name__)

# No I, O, 0 or 1: codes get read aloud and typed on phones.
JOIN_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
JOIN_CODE_LENGTH = 6
MAX_CREATE_ATTEMPTS = 5


def generate_join_code() -> str:
    return "".join(secrets.choice(JOIN_CODE_ALPHABET) for _ in range(JOIN_CODE_LENGTH))


def normalize_join_code(code: str) -> str:
    return (code or "").strip().upper()


def create_pair(q: Session, user_id: str) -> models.Pairs:
    for attempt in range(1, MAX_CREATE_ATTEMPTS + 1):
        pair = models.Pairs(
            id=uuid.uuid4().hex,
            join_code=generate_join_code(),
            user_a=user_id,
        )
        q.add(pair)
        try:
            q.commit()
        except IntegrityError:
            q.rollback()
            logger.info(
                "Join code collision for user %s (attempt %d/%d)",
                user_id, attempt, MAX_CREATE_ATTEMPTS,
            )
            continue
        q.refresh(pair)
        logger.info("Pair %s created by %s after %d attempt(s)", pair.id, user_id, attempt)
        return pair

    logger.warning("Could not create pair for %s: %d collisions", user_id, MAX_CREATE_ATTEMPTS)
    raise HTTPException(status_code=409, detail="Could not create a pair. Try again.")


def claim_second_member(q: Session, pair_id: str, user_id: str) -> bool:
    """
    Atomically set user_b if it is still empty.

    Returns True when this call won the slot. Two racing joiners both pass
    the "is it full?" read, but only one UPDATE can match `user_b IS NULL`.
    """
    updated = (
        q.query(models.Pairs)
        .filter(models.Pairs.id == pair_id, models.Pairs.user_b.is_(None))
        .update({models.Pairs.user_b: user_id}, synchronize_session=False)
    )
    q.commit()
    return updated == 1


def join_pair(q: Session, user_id: str, code: str) -> models.Pairs:
    normalized = normalize_join_code(code)
    if not normalized:
        raise HTTPException(status_code=400, detail="Enter a join code first.")

    pair = (
        q.query(models.Pairs)
        .filter(models.Pairs.join_code == normalized)
        .first()
    )
    if not pair:
        raise HTTPException(status_code=404, detail="Join code not found.")

    if pair.user_b == user_id:
        return pair
    if pair.user_a == user_id:
        raise HTTPException(status_code=400, detail="You can't join your own pair.")
    if pair.user_b:
        raise HTTPException(status_code=409, detail="That pair is already full.")

    if not claim_second_member(q, pair.id, user_id):
        logger.info("User %s lost the join race for pair %s", user_id, pair.id)
        raise HTTPException(status_code=409, detail="Could not join pair. Try again.")

    q.refresh(pair)
    logger.info("User %s joined pair %s", user_id, pair.id)
    return pair


def get_pair_for_member(q: Session, pair_id: str, user_id: str) -> models.Pairs:
    pair = q.query(models.Pairs).filter(models.Pairs.id == pair_id).first()
    if not pair:
        raise HTTPException(status_code=404, detail="Pair not found")
    if not pair.includes(user_id):
        raise HTTPException(status_code=403, detail="You are not a member of this pair")
    return pair


def resolve_pair(
    q: Session,
    user_id: str,
    cached_pair_id: Optional[str] = None,
) -> models.Pairs:
    """
    Find the pair to show this user.

    A cached id is only a hint: it is used when it still names a pair the
    user belongs to, otherwise the newest pair the user is in wins.
    """
    if cached_pair_id:
        pair = q.query(models.Pairs).filter(models.Pairs.id == cached_pair_id).first()
        if pair and pair.includes(user_id):
            return pair

    pair = (
        q.query(models.Pairs)
        .filter((models.Pairs.user_a == user_id) | (models.Pairs.user_b == user_id))
        .order_by(models.Pairs.created_at.desc())
        .first()
    )
    if not pair:
        raise HTTPException(
            status_code=404,
            detail="No pair found. Create or join a pair first.",
        )
    return pair
