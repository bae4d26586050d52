"""Tracking refresh endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Body, Depends

from fastapi_couriers.dependencies import get_orchestrator, get_tenant_id
from fastapi_couriers.schemas import (
    EnhancedTrackingResponse,
    SyncRequest,
    SyncResponse,
    TrackingUpdateResponse,
)

router = APIRouter()


@router.post(
    "/orders/{order_id}/tracking", response_model=TrackingUpdateResponse
)
async def refresh_tracking(
    order_id: str,
    tenant_id: str = Depends(get_tenant_id),
    orchestrator=Depends(get_orchestrator),
) -> TrackingUpdateResponse:
    """Fetch and persist the latest courier status for one order."""
    update = await orchestrator.refresh_tracking(tenant_id, order_id)
    return TrackingUpdateResponse.from_update(update)


@router.get(
    "/orders/{order_id}/enhanced-tracking",
    response_model=EnhancedTrackingResponse,
)
async def enhanced_tracking(
    order_id: str,
    tenant_id: str = Depends(get_tenant_id),
    orchestrator=Depends(get_orchestrator),
) -> EnhancedTrackingResponse:
    """Full status history and financial info (Royal Express only)."""
    result = await orchestrator.enhanced_tracking(tenant_id, order_id)
    return EnhancedTrackingResponse.from_result(result)


@router.post("/tracking/sync", response_model=SyncResponse)
async def sync_tracking(
    body: SyncRequest | None = Body(default=None),
    tenant_id: str = Depends(get_tenant_id),
    orchestrator=Depends(get_orchestrator),
) -> SyncResponse:
    """Refresh every shipped order of the tenant."""
    provider = body.provider if body else None
    report = await orchestrator.sync_tenant(tenant_id, provider)
    return SyncResponse(
        processed=report.processed,
        updated=report.updated,
        failed=report.failed,
        updates=[
            TrackingUpdateResponse.from_update(update)
            for update in report.updates
        ],
    )
