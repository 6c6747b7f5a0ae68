"""FastAPI application: Overtime Analysis API."""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes import router
from overtime_tool.config import get_settings
from overtime_tool.logging_config import setup_logging

settings = get_settings()
setup_logging(settings.log_level, settings.log_json)

app = FastAPI(
    title=settings.app_name,
    description="Regular, overtime and billable amount analysis from time-tracking data.",
    version=settings.app_version,
)

# CORS: set OVERTIME_ALLOWED_ORIGINS="*" to allow any origin
ALLOWED_ORIGINS: list[str] = ["*"] if settings.allow_all_origins else settings.allowed_origins

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=not settings.allow_all_origins,  # credentials not allowed with wildcard
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
    max_age=3600,
)

app.include_router(router)


@app.get("/")
async def root():
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
        "health": "/api/v1/health",
    }
