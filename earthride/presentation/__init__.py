"""Presentation state: current-drives cache and the running banner."""

from .banner import BannerState, RunningBanner, days_until, format_date, is_visible
from .cache import CURRENT_DRIVES, DEFAULT_DRIVES, CurrentDrivesCache, UpdateEvent

__all__ = [
    "BannerState",
    "RunningBanner",
    "days_until",
    "format_date",
    "is_visible",
    "CURRENT_DRIVES",
    "DEFAULT_DRIVES",
    "CurrentDrivesCache",
    "UpdateEvent",
]
