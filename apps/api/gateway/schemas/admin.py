"""Schemas for admin, usage and notification endpoints."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class UsageStatsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_requests: int = Field(alias="totalRequests")
    today_requests: int = Field(alias="todayRequests")
    success_rate: float = Field(alias="successRate")


class UsageRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    api_key_id: int | None = None
    endpoint: str
    method: str
    status: int
    timestamp: datetime
    response_time: int | None = None


class EndpointUpdateRequest(BaseModel):
    endpoint: str | None = None
    url: str | None = None


class EndpointUpdateResponse(BaseModel):
    message: str
    endpoint: str
    url: str


class NotificationItem(BaseModel):
    subject: str
    message: str
    level: str
    timestamp: datetime
    recipient: str | None = None


class SubscribeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    notification_type: str = Field(default="all", alias="notificationType")
    enabled: bool = True


class MessageResponse(BaseModel):
    message: str
    status: str | None = None
