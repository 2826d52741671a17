"""Running banner: rotates through upcoming drives open for registration.

State machine::

    loading --mount()--> displaying(0) --tick()--> displaying((i + 1) % n)
                              ^                         |
                              +---- update event -------+   (index reset to 0
                                                             when out of range)

The rotation timer is one asyncio task; listeners are attached in
``mount`` and detached in ``unmount``.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any

from earthride.records.drive import DriveData

from .cache import CURRENT_DRIVES, CurrentDrivesCache, UpdateEvent

logger = logging.getLogger(__name__)

ROTATE_INTERVAL_SECONDS = 5.0


class BannerState(str, Enum):
    LOADING = "loading"
    DISPLAYING = "displaying"


def is_visible(drive: DriveData) -> bool:
    """Upcoming, registration open, and carrying title/location/date."""
    return bool(
        drive.title
        and drive.location
        and drive.date
        and drive.status == "upcoming"
        and drive.registration_open
    )


def _parse_date(value: str) -> date | None:
    try:
        return date.fromisoformat(value.strip())
    except (ValueError, AttributeError):
        return None


def days_until(value: str, today: date | None = None) -> int:
    """Whole days from ``today`` to the event date, never negative; 0 on bad input."""
    event_day = _parse_date(value)
    if event_day is None:
        logger.warning("Cannot compute days until %r", value)
        return 0
    today = today or datetime.now(timezone.utc).date()
    return max(0, (event_day - today).days)


def format_date(value: str) -> str:
    """``"2025-01-01"`` -> ``"Jan 1, 2025"``; unparseable input is returned as-is."""
    parsed = _parse_date(value)
    if parsed is None:
        return value
    return f"{parsed:%b} {parsed.day}, {parsed.year}"


class RunningBanner:
    """Rotating display index over the visible current drives.

    Args:
        cache: Source of the current-drives snapshot and update events.
        interval: Seconds between rotations.
    """

    def __init__(
        self,
        cache: CurrentDrivesCache,
        interval: float = ROTATE_INTERVAL_SECONDS,
    ) -> None:
        self._cache = cache
        self.interval = interval
        self.state = BannerState.LOADING
        self.drives: list[DriveData] = []
        self.index = 0
        self._unsubscribe = None
        self._task: asyncio.Task | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def mount(self) -> None:
        """Subscribe to updates and load the initial list."""
        if self._unsubscribe is None:
            self._unsubscribe = self._cache.subscribe(self.handle_update)
        self.drives = [d for d in await self._cache.get() if is_visible(d)]
        self.index = 0
        self.state = BannerState.DISPLAYING
        logger.info("Banner mounted with %d drives", len(self.drives))

    async def unmount(self) -> None:
        """Stop rotating and detach from the cache."""
        await self.stop()
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def handle_update(self, event: UpdateEvent) -> None:
        if event.section != CURRENT_DRIVES:
            return
        self.drives = [d for d in event.data if is_visible(d)]
        if self.index >= len(self.drives):
            self.index = 0
        self.state = BannerState.DISPLAYING

    # ------------------------------------------------------------------
    # Rotation
    # ------------------------------------------------------------------

    def tick(self) -> int:
        """Advance to the next drive; a single drive never rotates."""
        if len(self.drives) > 1:
            self.index = (self.index + 1) % len(self.drives)
        return self.index

    async def run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            self.tick()

    def start(self) -> None:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run())

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    # ------------------------------------------------------------------
    # View
    # ------------------------------------------------------------------

    def current(self) -> DriveData | None:
        if self.state is BannerState.LOADING or not self.drives:
            return None
        return self.drives[self.index]

    def slide(self, today: date | None = None) -> dict[str, Any] | None:
        """What the banner shows right now, or ``None`` when it renders nothing."""
        drive = self.current()
        if drive is None:
            return None
        return {
            "index": self.index,
            "total": len(self.drives),
            "drive": drive.model_dump(by_alias=True),
            "daysUntil": days_until(drive.date, today),
            "formattedDate": format_date(drive.date),
        }
