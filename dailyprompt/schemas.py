from enum import Enum
from typing import Optional
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field


class Tone(str, Enum):
    cute = "cute"
    deep = "deep"
    goofy = "goofy"


class RevealState(str, Enum):
    none = "none"
    waiting = "waiting"
    revealed = "revealed"


# ============================================================================
# AUTH
# ============================================================================


class RegisterIn(BaseModel):
    """Schema for user registration with email and password."""
    email: str
    password: str = Field(min_length=6)
    name: Optional[str] = None


class LoginIn(BaseModel):
    """Schema for user login with email and password."""
    email: str
    password: str


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_hash: str
    email: str
    name: Optional[str] = None


class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserOut


# ============================================================================
# PAIRS
# ============================================================================


class PairOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    join_code: str
    user_a: str
    user_b: Optional[str] = None
    created_at: Optional[datetime] = None


class JoinPairIn(BaseModel):
    code: str


# ============================================================================
# PROMPTS / RESPONSES
# ============================================================================


class GenerateIn(BaseModel):
    tone: Tone = Tone.cute
    less_therapy: bool = False


class GenerateOut(BaseModel):
    prompt: str


class DailyPromptOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    pair_id: str
    date: date
    tone: Tone
    less_therapy: bool
    prompt: str
    created_at: Optional[datetime] = None


class ResponseIn(BaseModel):
    answer: str


class RevealOut(BaseModel):
    state: RevealState
    my_answer: Optional[str] = None
    partner_answered: bool = False
    # withheld until state == revealed
    partner_answer: Optional[str] = None


class TodayOut(BaseModel):
    date: date
    pair_id: str
    join_code: str
    paired: bool
    prompt: Optional[DailyPromptOut] = None
    reveal: RevealOut
