"""Running banner view and the admin push of its drive list."""

from fastapi import APIRouter

from earthride.presentation import CURRENT_DRIVES, BannerState, RunningBanner

from ..deps import Banner, DrivesCache, WriteAccess
from ..models import BannerResponse, DriveBatchRequest

router = APIRouter(prefix="/api/banner", tags=["banner"])


def _view(banner: RunningBanner) -> BannerResponse:
    return BannerResponse(
        loading=banner.state is BannerState.LOADING,
        slide=banner.slide(),
    )


@router.get("", response_model=BannerResponse)
async def current_slide(banner: Banner):
    return _view(banner)


@router.put("", response_model=BannerResponse, dependencies=[WriteAccess])
async def push_current_drives(body: DriveBatchRequest, cache: DrivesCache, banner: Banner):
    """Replace the banner's drive list without touching the sheet.

    The pushed list holds until the cache TTL expires or a drive write
    reloads it from the sheet.
    """
    cache.publish(CURRENT_DRIVES, body.drives)
    return _view(banner)
