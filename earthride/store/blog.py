"""Blog CRUD against the ``blog`` tab.

Every operation re-reads the whole tab before acting and then issues its
writes one at a time.  Nothing here is atomic across calls: two concurrent
upserts can both compute ``max(id) + 1`` from the same read.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from earthride.errors import NotFoundError
from earthride.records.blog import (
    BLOG_COLUMN_COUNT,
    BlogPost,
    blog_to_row,
    has_blog_changed,
    row_to_blog,
)
from earthride.records.common import today_iso, utc_now_iso
from earthride.sheets import SheetsClient, row_range, tab_range

logger = logging.getLogger(__name__)

# Data starts below the (implicit) header row.
FIRST_DATA_ROW = 2

DUPLICATE_TITLE_MESSAGE = "A blog with this title already exists"


@dataclass(frozen=True)
class UpsertResult:
    updated: int
    added: int


@dataclass(frozen=True)
class AddResult:
    """Outcome of ``BlogStore.add_single``; a title collision is not an exception."""

    success: bool
    id: int | None = None
    message: str | None = None


class BlogStore:
    """Sheet-backed blog repository.

    Args:
        client: Sheets client bound to the content spreadsheet.
        tab: Tab name holding blog rows.
        clock: Returns the ISO-8601 timestamp stamped on writes.
    """

    def __init__(
        self,
        client: SheetsClient,
        tab: str = "blog",
        clock: Callable[[], str] = utc_now_iso,
    ) -> None:
        self.client = client
        self.tab = tab
        self._clock = clock

    @property
    def data_range(self) -> str:
        return tab_range(self.tab, BLOG_COLUMN_COUNT, start_row=FIRST_DATA_ROW)

    async def list(self) -> list[BlogPost]:
        rows = await self.client.get_values(self.data_range)
        now = self._clock()
        return [row_to_blog(row, i, now=now) for i, row in enumerate(rows)]

    async def _index(self) -> tuple[list[BlogPost], dict[int, tuple[BlogPost, int]]]:
        """All posts plus ``id -> (post, row number)``; the first row wins on duplicate ids."""
        posts = await self.list()
        by_id: dict[int, tuple[BlogPost, int]] = {}
        for i, post in enumerate(posts):
            by_id.setdefault(post.id, (post, i + FIRST_DATA_ROW))
        return posts, by_id

    async def get(self, blog_id: int) -> BlogPost:
        _, by_id = await self._index()
        found = by_id.get(blog_id)
        if found is None:
            raise NotFoundError("blog", blog_id)
        return found[0]

    async def upsert_batch(self, blogs: list[BlogPost]) -> UpsertResult:
        """Update changed posts in place and append new ones.

        A post is *new* when its id is not in the sheet.  New posts without
        an id (or repeating an id already taken in this batch) get
        ``max(id) + 1``.  Existing posts are rewritten only when a compared
        field differs; they keep their stored ``createdAt``.
        """
        _, by_id = await self._index()
        now = self._clock()
        today = today_iso()

        claimed: set[int] = set(by_id)
        next_id = max(claimed | {b.id for b in blogs}, default=0) + 1

        updates: list[tuple[BlogPost, int]] = []
        additions: list[BlogPost] = []

        for blog in blogs:
            existing = by_id.get(blog.id) if blog.id else None
            if existing is not None:
                current, row_number = existing
                if has_blog_changed(current, blog):
                    updates.append(
                        (
                            blog.model_copy(
                                update={"created_at": current.created_at, "updated_at": now}
                            ),
                            row_number,
                        )
                    )
                continue

            blog_id = blog.id
            if not blog_id or blog_id in claimed:
                blog_id = next_id
                next_id += 1
            claimed.add(blog_id)
            additions.append(
                blog.model_copy(
                    update={
                        "id": blog_id,
                        "date": blog.date or today,
                        "created_at": blog.created_at or now,
                        "updated_at": now,
                    }
                )
            )

        logger.info(
            "Found %d new blogs and %d blogs to update",
            len(additions),
            len(updates),
        )

        for blog, row_number in updates:
            await self.client.update_values(
                row_range(self.tab, row_number, BLOG_COLUMN_COUNT),
                [blog_to_row(blog)],
            )

        if additions:
            await self.client.append_values(
                self.data_range,
                [blog_to_row(blog) for blog in additions],
            )

        return UpsertResult(updated=len(updates), added=len(additions))

    async def delete(self, blog_id: int) -> None:
        """Remove the row carrying ``blog_id``.

        Raises:
            NotFoundError: no row has that id; the sheet is not touched.
        """
        _, by_id = await self._index()
        found = by_id.get(blog_id)
        if found is None:
            raise NotFoundError("blog", blog_id)
        await self.client.delete_row(self.tab, found[1])
        logger.info("Deleted blog id=%d (row %d)", blog_id, found[1])

    async def add_single(self, blog: BlogPost) -> AddResult:
        """Insert one post unless its title already exists (case-insensitive)."""
        posts = await self.list()
        new_id = max((p.id for p in posts), default=0) + 1

        title = blog.title.lower()
        if any(p.title.lower() == title for p in posts):
            logger.info("Rejected blog %r: duplicate title", blog.title)
            return AddResult(success=False, message=DUPLICATE_TITLE_MESSAGE)

        now = self._clock()
        await self.upsert_batch(
            [blog.model_copy(update={"id": new_id, "created_at": now, "updated_at": now})]
        )
        return AddResult(success=True, id=new_id)
