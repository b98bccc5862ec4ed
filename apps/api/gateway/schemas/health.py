"""Schemas for liveness and upstream health endpoints."""
from __future__ import annotations

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    database: str
    server: str = "online"


class ApiStatus(BaseModel):
    status: str
    message: str | None = None


class ApiHealthResponse(BaseModel):
    status: str
    timestamp: str
    server: str
    database: str
    apis: dict[str, ApiStatus]
