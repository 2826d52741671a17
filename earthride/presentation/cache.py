"""Read-through cache of the admin-curated "current drives" list.

Stands in for the browser-local snapshot the site used to keep: instead of
ambient global storage, consumers hold a ``CurrentDrivesCache`` and
subscribe to it.  Admin pushes (``publish``) and store writes (``refresh``)
notify every subscriber with an ``UpdateEvent``.

Reads never fail: when the loader raises, the last good snapshot (or the
built-in default list) is served and the failure is logged.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable

from cachetools import TTLCache
from pydantic import ValidationError

from earthride.records.drive import DriveData
from earthride.sheets import UpstreamError

logger = logging.getLogger(__name__)

CURRENT_DRIVES = "currentDrives"

# Shown when nothing has ever been loaded.
DEFAULT_DRIVES: tuple[DriveData, ...] = (
    DriveData(
        id="1",
        title="New Year Green Resolution Ride",
        location="Mumbai, India",
        date="2025-01-01",
        participants=150,
        trees_target=500,
        status="upcoming",
        registration_open=True,
        description=(
            "Start the new year with a green resolution! "
            "Join us for a massive tree planting drive."
        ),
        organizer="Mumbai Riders Club",
        logo="/Save-earth-ride-logo.jpg",
    ),
)


@dataclass(frozen=True)
class UpdateEvent:
    """Pushed to subscribers when a section's data changes."""

    section: str
    data: tuple[DriveData, ...]


Listener = Callable[[UpdateEvent], None]
Loader = Callable[[], Awaitable[list[DriveData]]]


class CurrentDrivesCache:
    """Snapshot of current drives with TTL expiry and subscribe/notify.

    Args:
        loader: Coroutine function returning the authoritative list
            (normally ``DriveStore.list``).  ``None`` means push-only.
        ttl: Seconds a loaded snapshot stays fresh.
        timer: Clock for TTL expiry; injectable for tests.
    """

    def __init__(
        self,
        loader: Loader | None = None,
        ttl: float = 60,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self._loader = loader
        self._snapshot: TTLCache[str, tuple[DriveData, ...]] = TTLCache(
            maxsize=1, ttl=ttl, timer=timer
        )
        self._last_good: tuple[DriveData, ...] | None = None
        self._listeners: list[Listener] = []

    # ------------------------------------------------------------------
    # Subscription
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener``; returns a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def _notify(self, event: UpdateEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Listener failed for section=%s", event.section)

    # ------------------------------------------------------------------
    # Reads / writes
    # ------------------------------------------------------------------

    def _store(self, drives: list[DriveData] | tuple[DriveData, ...]) -> tuple[DriveData, ...]:
        snapshot = tuple(drives)
        self._snapshot[CURRENT_DRIVES] = snapshot
        self._last_good = snapshot
        return snapshot

    def _fallback(self) -> tuple[DriveData, ...]:
        return self._last_good if self._last_good is not None else DEFAULT_DRIVES

    async def _load(self) -> tuple[DriveData, ...]:
        if self._loader is None:
            return self._fallback()
        try:
            drives = await self._loader()
        except (UpstreamError, ValidationError):
            logger.warning("Failed to load current drives; serving fallback", exc_info=True)
            return self._fallback()
        return self._store(drives)

    async def get(self) -> list[DriveData]:
        """Current snapshot, loading through ``loader`` when empty or expired."""
        cached = self._snapshot.get(CURRENT_DRIVES)
        if cached is None:
            cached = await self._load()
        return list(cached)

    def publish(self, section: str, data: list[DriveData]) -> None:
        """Admin push: replace the snapshot (for ``currentDrives``) and notify."""
        snapshot = self._store(data) if section == CURRENT_DRIVES else tuple(data)
        logger.info("Published %d items to section=%s", len(snapshot), section)
        self._notify(UpdateEvent(section=section, data=snapshot))

    def invalidate(self) -> None:
        """Drop the snapshot; the next ``get`` reloads."""
        self._snapshot.clear()

    async def refresh(self) -> list[DriveData]:
        """Invalidate, reload and notify subscribers with the fresh list."""
        self.invalidate()
        snapshot = await self._load()
        self._notify(UpdateEvent(section=CURRENT_DRIVES, data=snapshot))
        return list(snapshot)
