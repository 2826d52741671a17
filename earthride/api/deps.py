"""FastAPI dependencies: store lookup from app state and write authentication."""

import hmac
from typing import Annotated

from fastapi import Depends, HTTPException, Request, Security
from fastapi.security import APIKeyHeader

from earthride.config import get_settings
from earthride.presentation import CurrentDrivesCache, RunningBanner
from earthride.store import AdminStore, BlogStore, DriveStore

_api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


async def verify_api_key(
    api_key: str | None = Security(_api_key_header),
) -> None:
    """Validate the ``X-API-Key`` header on write routes.

    When ``API_KEY`` is empty (local development) writes are open.

    Raises:
        HTTPException: 401 if the key is configured and missing or incorrect.
    """
    expected = get_settings().API_KEY.get_secret_value()
    if not expected:
        return
    if not api_key or not hmac.compare_digest(api_key, expected):
        raise HTTPException(status_code=401, detail="Invalid or missing API key.")


def get_blog_store(request: Request) -> BlogStore:
    return request.app.state.blog_store


def get_drive_store(request: Request) -> DriveStore:
    return request.app.state.drive_store


def get_admin_store(request: Request) -> AdminStore:
    return request.app.state.admin_store


def get_drives_cache(request: Request) -> CurrentDrivesCache:
    return request.app.state.drives_cache


def get_banner(request: Request) -> RunningBanner:
    return request.app.state.banner


WriteAccess = Depends(verify_api_key)
Blogs = Annotated[BlogStore, Depends(get_blog_store)]
Drives = Annotated[DriveStore, Depends(get_drive_store)]
Admins = Annotated[AdminStore, Depends(get_admin_store)]
DrivesCache = Annotated[CurrentDrivesCache, Depends(get_drives_cache)]
Banner = Annotated[RunningBanner, Depends(get_banner)]
