from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from dailyprompt.core.config import cfg as c
from dailyprompt.db import get_db

r = APIRouter()


@r.get("/api/health")
def health(q: Session = Depends(get_db)):
    q.execute(text("SELECT 1"))
    return {
        "ok": True,
        "provider": c.LLM_PROVIDER,
        "provider_configured": bool(c.provider_key()),
    }
