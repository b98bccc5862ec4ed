"""Admin and account endpoints for notifications, upstream URLs and usage."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.security import CurrentUser, require_admin, require_user
from ..db.session import get_session
from ..schemas import admin as admin_schema
from ..services import usage as usage_service
from ..services.notifications import NotificationService, get_notifier
from ..services.registry import UpstreamRegistry, get_registry

router = APIRouter()


@router.get("/notifications", response_model=list[admin_schema.NotificationItem])
async def list_notifications(
    _: CurrentUser = Depends(require_admin),
    notifier: NotificationService = Depends(get_notifier),
) -> list[admin_schema.NotificationItem]:
    """Return operator notifications, newest first."""

    return [admin_schema.NotificationItem(**item.as_dict()) for item in notifier.recent()]


@router.delete("/notifications", response_model=admin_schema.MessageResponse)
async def clear_notifications(
    _: CurrentUser = Depends(require_admin),
    notifier: NotificationService = Depends(get_notifier),
) -> admin_schema.MessageResponse:
    notifier.clear()
    return admin_schema.MessageResponse(message="All notifications cleared")


@router.post("/notifications/subscribe", response_model=admin_schema.MessageResponse)
async def subscribe(
    payload: admin_schema.SubscribeRequest,
    _: CurrentUser = Depends(require_user),
) -> admin_schema.MessageResponse:
    """Acknowledge a notification preference.

    Notifications live in process memory only, so the preference is not stored.
    """

    state = "enabled" if payload.enabled else "disabled"
    return admin_schema.MessageResponse(
        message=f"Notifications {state} for {payload.notification_type}",
        status="success",
    )


@router.patch("/admin/endpoints", response_model=admin_schema.EndpointUpdateResponse)
async def update_endpoint(
    payload: admin_schema.EndpointUpdateRequest,
    _: CurrentUser = Depends(require_admin),
    endpoints: UpstreamRegistry = Depends(get_registry),
) -> admin_schema.EndpointUpdateResponse:
    """Repoint a named upstream at a new base URL for this process."""

    if not payload.endpoint or not payload.url:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Endpoint name and URL are required")
    try:
        updated = endpoints.update(payload.endpoint, payload.url)
    except KeyError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown endpoint: {payload.endpoint}") from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return admin_schema.EndpointUpdateResponse(
        message="API endpoint updated successfully",
        endpoint=updated.name,
        url=updated.url,
    )


@router.get("/user/usage", response_model=admin_schema.UsageStatsResponse)
async def user_usage(
    all_users: bool = Query(default=False, alias="all"),
    user: CurrentUser = Depends(require_user),
    session: AsyncSession = Depends(get_session),
) -> admin_schema.UsageStatsResponse:
    """Return the caller's usage stats; admins may ask for everyone's with ``all=true``."""

    if all_users and user.is_admin_user:
        return await usage_service.usage_stats(session)
    return await usage_service.usage_stats(session, user_id=user.id)


@router.get("/usage", response_model=list[admin_schema.UsageRecord])
async def all_usage(
    limit: int = 1000,
    _: CurrentUser = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> list[admin_schema.UsageRecord]:
    return await usage_service.usage_records(session, limit=max(1, min(limit, 5000)))
