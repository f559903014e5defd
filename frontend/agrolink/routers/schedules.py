"""Harvest schedule tracking routes — list active schedules, update a phase."""

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from agrolink.auth.deps import get_backend_client
from agrolink.clients.backend import BackendAPIError, BackendClient
from agrolink.middleware.exceptions import BackendRequestError
from agrolink.schemas.harvest import HarvestRecord
from agrolink.schemas.wizard import PhaseStatusUpdate
from agrolink.services.tracking import ScheduleFilter, filter_schedules


# ── Schemas ──────────────────────────────────────────────────

class ScheduleListResponse(BaseModel):
    items: list[HarvestRecord]
    total: int
    filter: ScheduleFilter
    search: str


# ── Routes ───────────────────────────────────────────────────

router = APIRouter()


@router.get("", response_model=ScheduleListResponse)
async def list_schedules(
    schedule_filter: ScheduleFilter = Query(ScheduleFilter.ALL, alias="filter"),
    search: str = Query("", max_length=200),
    client: BackendClient = Depends(get_backend_client),
):
    try:
        records = await client.list_schedules()
    except BackendAPIError as exc:
        raise BackendRequestError("Failed to load harvest schedules") from exc

    items = filter_schedules(records, schedule_filter, search)
    return ScheduleListResponse(
        items=items, total=len(items), filter=schedule_filter, search=search
    )


@router.put("/{harvest_id}/phases/{phase_index}/status")
async def update_phase_status(
    harvest_id: str,
    phase_index: int,
    body: PhaseStatusUpdate,
    client: BackendClient = Depends(get_backend_client),
):
    """Pass a phase status change through to the backend."""
    try:
        return await client.update_phase_status(
            harvest_id, phase_index, body.status, body.notes
        )
    except BackendAPIError as exc:
        raise BackendRequestError(
            exc.message, status_code=exc.status_code or 502
        ) from exc
