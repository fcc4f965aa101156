"""
reveal.py — answer visibility for a pair's day.

Both answers stay hidden until both partners have answered:

- no rows      -> "none"
- one row      -> "waiting" (whoever answered first)
- two or more  -> "revealed"

The caller always sees their own answer. The partner's answer is only
returned once the state is "revealed".
"""

from typing import Iterable

from dailyprompt import models
from dailyprompt.schemas import RevealOut, RevealState


def reveal_state(count: int) -> RevealState:
    if count >= 2:
        return RevealState.revealed
    if count == 1:
        return RevealState.waiting
    return RevealState.none


def compute_reveal(responses: Iterable[models.Responses], user_id: str) -> RevealOut:
    rows = list(responses)
    state = reveal_state(len(rows))

    mine = next((row for row in rows if row.user_id == user_id), None)
    partner = next((row for row in rows if row.user_id != user_id), None)

    return RevealOut(
        state=state,
        my_answer=mine.answer if mine else None,
        partner_answered=partner is not None,
        partner_answer=partner.answer if partner and state == RevealState.revealed else None,
    )
