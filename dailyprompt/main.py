from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dailyprompt.core.config import cfg as c
from dailyprompt.core.logging import configure_logging
from dailyprompt.db import Base, engine
from dailyprompt import models  # noqa: F401  registers tables on Base

configure_logging()

app = FastAPI(
    title="Daily Prompt (Couples)",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=c.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

Base.metadata.create_all(bind=engine)

from dailyprompt.routes.health import r as health_r
from dailyprompt.routes.generate import r as generate_r
from dailyprompt.routes.pairs import r as pairs_r
from dailyprompt.routes.today import r as today_r
from dailyprompt.routes import auth as auth_routes
app.include_router(health_r)
app.include_router(generate_r)
app.include_router(auth_routes.r)
app.include_router(pairs_r)
app.include_router(today_r)
