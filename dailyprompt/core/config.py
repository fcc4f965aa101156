from typing import List, Literal, Optional, Union

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Cfg(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # don't crash on unknown env keys
    )

    # --- Prompt generation ---
    LLM_PROVIDER: Literal["gemini", "openai"] = "gemini"
    GEMINI_API_KEY: Optional[str] = None
    GEMINI_MODEL: str = "gemini-2.0-flash"
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta"
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_MODEL: str = "gpt-4o-mini"
    LLM_TIMEOUT_SECONDS: float = 30.0

    # --- JWT settings for our own tokens ---
    JWT_SECRET_KEY: str = "change-this-in-env"   # override in .env
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_DAYS: int = 7

    # --- Infra ---
    DB_URL: str = "sqlite:///./dailyprompt.db"
    # "today" is the calendar date in this zone for both partners
    APP_TIMEZONE: str = "America/New_York"
    LOG_LEVEL: str = "INFO"

    # Accept JSON list or comma-separated string in .env
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://localhost:8000",
    ]

    @field_validator("ALLOWED_ORIGINS", mode="before")
    @classmethod
    def _parse_origins(cls, v: Union[str, List[str]]) -> List[str]:
        if isinstance(v, list):
            return [str(x).strip() for x in v]
        if isinstance(v, str):
            s = v.strip()
            if s.startswith("[") and s.endswith("]"):
                try:
                    import json
                    arr = json.loads(s)
                    return [str(x).strip() for x in arr]
                except ValueError:
                    pass
            return [x.strip() for x in s.split(",") if x.strip()]
        return ["http://localhost:3000", "http://localhost:8000"]

    @field_validator("LLM_PROVIDER", mode="before")
    @classmethod
    def _norm_provider(cls, v):
        return v.strip().lower() if isinstance(v, str) else v

    def provider_key(self) -> Optional[str]:
        if self.LLM_PROVIDER == "openai":
            return self.OPENAI_API_KEY
        return self.GEMINI_API_KEY

    def provider_key_name(self) -> str:
        return "OPENAI_API_KEY" if self.LLM_PROVIDER == "openai" else "GEMINI_API_KEY"


cfg = Cfg()
c = cfg
__all__ = ["cfg", "c", "Cfg"]
