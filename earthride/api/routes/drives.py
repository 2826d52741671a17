"""Drive routes.  Every successful write refreshes the current-drives cache."""

from fastapi import APIRouter, Query

from earthride.errors import NotFoundError
from earthride.records.drive import DriveData, DriveStatus

from ..deps import Drives, DrivesCache, WriteAccess
from ..models import (
    DriveBatchRequest,
    DriveListResponse,
    DrivePatch,
    DriveResponse,
    MessageResponse,
    UpsertResponse,
)

router = APIRouter(prefix="/api/drives", tags=["drives"])


@router.get("", response_model=DriveListResponse)
async def list_drives(store: Drives, status: DriveStatus | None = Query(None)):
    drives = await store.list_by_status(status) if status else await store.list()
    return DriveListResponse(data=drives)


@router.post("", response_model=DriveResponse, dependencies=[WriteAccess])
async def add_drive(drive: DriveData, store: Drives, cache: DrivesCache):
    created = await store.add(drive)
    await cache.refresh()
    return DriveResponse(data=created)


@router.put("", response_model=UpsertResponse, dependencies=[WriteAccess])
async def save_drives(body: DriveBatchRequest, store: Drives, cache: DrivesCache):
    result = await store.upsert_batch(body.drives)
    if result.updated or result.added:
        await cache.refresh()
    return UpsertResponse(
        message="Drive data saved successfully",
        updated=result.updated,
        added=result.added,
    )


@router.get("/{drive_id}", response_model=DriveResponse)
async def get_drive(drive_id: str, store: Drives):
    drive = await store.get(drive_id)
    if drive is None:
        raise NotFoundError("drive", drive_id)
    return DriveResponse(data=drive)


@router.patch("/{drive_id}", response_model=DriveResponse, dependencies=[WriteAccess])
async def update_drive(drive_id: str, patch: DrivePatch, store: Drives, cache: DrivesCache):
    updated = await store.update(drive_id, patch.model_dump(exclude_unset=True))
    await cache.refresh()
    return DriveResponse(data=updated)


@router.delete("/{drive_id}", response_model=MessageResponse, dependencies=[WriteAccess])
async def delete_drive(drive_id: str, store: Drives, cache: DrivesCache):
    await store.delete(drive_id)
    await cache.refresh()
    return MessageResponse(message="Drive deleted successfully")
