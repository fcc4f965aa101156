from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from dailyprompt.db import get_db
from dailyprompt import models, schemas
from dailyprompt.auth_utils import (
    create_access_token,
    get_current_user,
    hash_password,
    verify_password,
)

logger = logging.getLogger(__name__)

r = APIRouter(prefix="/api/auth", tags=["auth"])


@r.post("/register", response_model=schemas.UserOut)
def register(
    payload: schemas.RegisterIn,
    db: Session = Depends(get_db),
):
    """
    Register a new user with email and password.

    Returns the user; call /login afterwards for a token.
    """
    email = payload.email.strip().lower()
    existing_user = (
        db.query(models.Users)
        .filter(models.Users.email == email)
        .first()
    )
    if existing_user:
        raise HTTPException(
            status_code=400,
            detail="An account with this email already exists",
        )

    user = models.Users(
        user_hash=f"email_{uuid.uuid4().hex[:12]}",
        email=email,
        name=payload.name,
        password_hash=hash_password(payload.password),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Registered user %s", user.user_hash)
    return user


@r.post("/login", response_model=schemas.TokenOut)
def login(
    payload: schemas.LoginIn,
    db: Session = Depends(get_db),
):
    user = (
        db.query(models.Users)
        .filter(models.Users.email == payload.email.strip().lower())
        .first()
    )
    if not user or not verify_password(payload.password, user.password_hash):
        raise HTTPException(
            status_code=401,
            detail="Invalid email or password",
        )

    jwt_token = create_access_token({"sub": user.user_hash})
    return schemas.TokenOut(
        access_token=jwt_token,
        user=schemas.UserOut.model_validate(user),
    )


@r.get("/me", response_model=schemas.UserOut)
def get_me(current_user: models.Users = Depends(get_current_user)):
    return current_user
