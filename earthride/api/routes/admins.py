"""Admin routes: read the admin table, replace it wholesale."""

from typing import Any

from fastapi import APIRouter, Body
from fastapi.responses import JSONResponse

from ..deps import Admins, WriteAccess
from ..errors import ErrorCode, error_response
from ..models import AdminListResponse

router = APIRouter(prefix="/api/admins", tags=["admins"])


@router.get("", response_model=AdminListResponse)
async def list_admins(store: Admins):
    return AdminListResponse(data=await store.list())


@router.post("", dependencies=[WriteAccess])
async def save_admins(store: Admins, body: Any = Body(None)):
    if not isinstance(body, list):
        return JSONResponse(
            status_code=400,
            content=error_response(
                ErrorCode.VALIDATION_ERROR,
                "Request body must be an array of admin objects",
            ),
        )
    written = await store.replace_all(body)
    return {"success": True, "written": written}
