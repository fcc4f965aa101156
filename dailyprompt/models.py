from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    String,
    Integer,
    DateTime,
    Text,
    Date,
    Boolean,
    UniqueConstraint,
)
from sqlalchemy.sql import func

from .db import Base


class Users(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    user_hash = Column(String, unique=True, index=True, nullable=False)

    email = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=True)
    password_hash = Column(String, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())


class Pairs(Base):
    __tablename__ = "pairs"

    id = Column(String, primary_key=True, index=True)
    join_code = Column(String(6), unique=True, index=True, nullable=False)
    user_a = Column(String, index=True, nullable=False)
    # null until the partner joins; written once
    user_b = Column(String, index=True, nullable=True)
    # microsecond precision; resolve_pair picks the newest
    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
        index=True,
    )

    def includes(self, user_id: str) -> bool:
        return user_id in (self.user_a, self.user_b)

    def partner_of(self, user_id: str):
        if user_id == self.user_a:
            return self.user_b
        if user_id == self.user_b:
            return self.user_a
        return None


class DailyPrompt(Base):
    __tablename__ = "daily_prompt"
    __table_args__ = (
        UniqueConstraint("pair_id", "date", name="uq_daily_prompt_pair_date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    pair_id = Column(String, index=True, nullable=False)
    date = Column(Date, index=True, nullable=False)
    tone = Column(String, nullable=False, default="cute")
    less_therapy = Column(Boolean, nullable=False, default=False)
    prompt = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class Responses(Base):
    __tablename__ = "responses"
    __table_args__ = (
        UniqueConstraint("pair_id", "date", "user_id", name="uq_responses_pair_date_user"),
    )

    id = Column(Integer, primary_key=True, index=True)
    pair_id = Column(String, index=True, nullable=False)
    date = Column(Date, index=True, nullable=False)
    user_id = Column(String, index=True, nullable=False)
    answer = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
