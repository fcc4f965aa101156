from __future__ import annotations

import os
import uuid
from collections.abc import Callable, Iterator
from datetime import datetime

# keep the app's own engine off the filesystem
os.environ.setdefault("DB_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from dailyprompt import models
from dailyprompt.auth_utils import create_access_token, hash_password
from dailyprompt.core.config import cfg
from dailyprompt.db import Base, get_db
from dailyprompt.main import app
from dailyprompt.services import daily


@pytest.fixture(autouse=True)
def isolate_provider(monkeypatch: pytest.MonkeyPatch) -> None:
    """Tests never see real provider keys from the environment."""
    monkeypatch.setattr(cfg, "LLM_PROVIDER", "gemini")
    monkeypatch.setattr(cfg, "GEMINI_API_KEY", None)
    monkeypatch.setattr(cfg, "OPENAI_API_KEY", None)


@pytest.fixture
def session_factory() -> Iterator[sessionmaker]:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    try:
        yield sessionmaker(bind=engine, autoflush=False, autocommit=False)
    finally:
        engine.dispose()


@pytest.fixture
def q(session_factory: sessionmaker) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory: sessionmaker) -> Iterator[TestClient]:
    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    try:
        with TestClient(app) as tc:
            yield tc
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_user(q: Session) -> Callable[[str], tuple[models.Users, dict[str, str]]]:
    """Create a user row and return it with a ready Authorization header."""

    def _make(email: str) -> tuple[models.Users, dict[str, str]]:
        user = models.Users(
            user_hash=f"email_{uuid.uuid4().hex[:12]}",
            email=email,
            password_hash=hash_password("secret123"),
        )
        q.add(user)
        q.commit()
        q.refresh(user)
        token = create_access_token({"sub": user.user_hash})
        return user, {"Authorization": f"Bearer {token}"}

    return _make


@pytest.fixture
def freeze_clock(monkeypatch: pytest.MonkeyPatch) -> Callable[[datetime], None]:
    """Pin the wall clock that decides "today" to a fixed UTC instant."""

    def _freeze(instant: datetime) -> None:
        class _Frozen(datetime):
            @classmethod
            def now(cls, tz=None):
                return instant.astimezone(tz) if tz else instant

        monkeypatch.setattr(daily, "datetime", _Frozen)

    return _freeze
