"""Liveness HTTP endpoint for Feedbell daemon."""

from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field

from .registry import DestinationRegistry


class HealthResponse(BaseModel):
    """Response model for the health check."""

    status: str = Field(..., description="'ok' while the daemon is running")
    timestamp: datetime = Field(..., description="Server time of the check")
    destinations: Optional[int] = Field(
        None, description="Number of subscribed channels, if the registry is readable"
    )


def create_app(registry: Optional[DestinationRegistry] = None) -> FastAPI:
    """Build the FastAPI app serving ``/`` and ``/health`` (no auth)."""
    app = FastAPI(
        title="Feedbell",
        description="Liveness endpoint for the feed notification daemon",
        version="0.1.0",
    )

    @app.get("/", response_class=PlainTextResponse)
    async def root() -> str:
        return "Feedbell is running"

    @app.get("/health", response_model=HealthResponse)
    async def health_check() -> HealthResponse:
        destinations = len(registry.snapshot()) if registry is not None else None
        return HealthResponse(
            status="ok",
            timestamp=datetime.now(timezone.utc),
            destinations=destinations,
        )

    return app
