from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from dailyprompt.auth_utils import get_current_user
from dailyprompt.db import get_db
from dailyprompt import models, schemas
from dailyprompt.services import pairing

r = APIRouter(prefix="/api/pairs", tags=["pairs"])


@r.post("", response_model=schemas.PairOut)
def create_pair(
    current_user: models.Users = Depends(get_current_user),
    q: Session = Depends(get_db),
):
    """Start a pair and get a join code to share with your partner."""
    return pairing.create_pair(q, current_user.user_hash)


@r.post("/join", response_model=schemas.PairOut)
def join_pair(
    x: schemas.JoinPairIn,
    current_user: models.Users = Depends(get_current_user),
    q: Session = Depends(get_db),
):
    return pairing.join_pair(q, current_user.user_hash, x.code)


@r.get("/current", response_model=schemas.PairOut)
def current_pair(
    pair_id: Optional[str] = Query(None, description="Client-cached pair id (advisory)"),
    current_user: models.Users = Depends(get_current_user),
    q: Session = Depends(get_db),
):
    return pairing.resolve_pair(q, current_user.user_hash, cached_pair_id=pair_id)


@r.get("/{pair_id}", response_model=schemas.PairOut)
def get_pair(
    pair_id: str,
    current_user: models.Users = Depends(get_current_user),
    q: Session = Depends(get_db),
):
    return pairing.get_pair_for_member(q, pair_id, current_user.user_hash)
