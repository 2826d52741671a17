"""Blog post record and its fixed 17-column row layout (tab ``blog``, A..Q).

Row 1 of the tab is never read as data; rows start at 2.  Column order::

    A id | B title | C excerpt | D content | E blogURL | F authorName
    G authorBio | H authorAvatar | I tags | J image | K readTime
    L featured | M status | N category | O date | P createdAt | Q updatedAt
"""

from __future__ import annotations

import logging
from typing import Any, Literal, get_args

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .common import (
    bool_cell,
    cell,
    join_list,
    parse_bool,
    split_list,
    today_iso,
    utc_now_iso,
)

logger = logging.getLogger(__name__)

BlogStatus = Literal["draft", "published", "archived"]
BLOG_STATUSES: tuple[str, ...] = get_args(BlogStatus)


class BlogPost(BaseModel):
    """A blog post as stored in one sheet row.

    JSON uses camelCase keys (``authorName``, ``blogURL``); Python code uses
    the snake_case attribute names.  ``id == 0`` means "not assigned yet".
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int = 0
    title: str = ""
    excerpt: str = ""
    content: str = ""
    blog_url: str = Field("", alias="blogURL")
    author_name: str = ""
    author_bio: str = ""
    author_avatar: str = ""
    tags: list[str] = Field(default_factory=list)
    image: str = ""
    read_time: str = ""
    featured: bool = False
    status: BlogStatus = "draft"
    category: str = ""
    date: str = ""
    created_at: str = ""
    updated_at: str = ""

    @field_validator("tags", mode="before")
    @classmethod
    def split_tag_string(cls, v: Any) -> Any:
        # Admin forms post tags as one comma-separated string.
        if isinstance(v, str):
            return split_list(v)
        if v is None:
            return []
        return v

    @field_validator("id", mode="before")
    @classmethod
    def blank_id_is_unassigned(cls, v: Any) -> Any:
        if v is None or v == "":
            return 0
        return v


# Column order == attribute order.
BLOG_COLUMNS: tuple[str, ...] = tuple(BlogPost.model_fields)
BLOG_COLUMN_COUNT = len(BLOG_COLUMNS)

# Fields whose difference makes an existing row "changed".  Identity and
# timestamps are deliberately absent.
BLOG_COMPARED_FIELDS: tuple[str, ...] = (
    "title",
    "excerpt",
    "content",
    "blog_url",
    "author_name",
    "author_bio",
    "author_avatar",
    "tags",
    "image",
    "read_time",
    "featured",
    "status",
    "category",
    "date",
)

_COLUMN_INDEX = {name: i for i, name in enumerate(BLOG_COLUMNS)}


def row_to_blog(
    row: list[Any],
    index: int,
    *,
    now: str | None = None,
    today: str | None = None,
) -> BlogPost:
    """Map one data row to a ``BlogPost``.

    Args:
        row: Cell values in column order (may be short).
        index: 0-based position of the row among data rows; ``index + 1``
            becomes the id when column A is empty or not numeric.
        now: Timestamp used for missing ``createdAt``/``updatedAt``.
        today: Date used for a missing ``date``.
    """
    now = now or utc_now_iso()
    raw_id = cell(row, 0).strip()
    try:
        blog_id = int(raw_id) or index + 1
    except ValueError:
        blog_id = index + 1

    status = cell(row, 12) or "draft"
    if status not in BLOG_STATUSES:
        logger.warning("Blog id=%s has unknown status %r; reading as draft", blog_id, status)
        status = "draft"

    return BlogPost(
        id=blog_id,
        title=cell(row, 1),
        excerpt=cell(row, 2),
        content=cell(row, 3),
        blog_url=cell(row, 4),
        author_name=cell(row, 5),
        author_bio=cell(row, 6),
        author_avatar=cell(row, 7),
        tags=split_list(cell(row, 8)),
        image=cell(row, 9),
        read_time=cell(row, 10),
        featured=parse_bool(cell(row, 11)),
        status=status,
        category=cell(row, 13),
        date=cell(row, 14) or today or today_iso(),
        created_at=cell(row, 15) or now,
        updated_at=cell(row, 16) or now,
    )


def blog_to_row(blog: BlogPost) -> list[str]:
    """Serialize a ``BlogPost`` into its 17 cell strings."""
    return [
        str(blog.id) if blog.id else "",
        blog.title,
        blog.excerpt,
        blog.content,
        blog.blog_url,
        blog.author_name,
        blog.author_bio,
        blog.author_avatar,
        join_list(blog.tags),
        blog.image,
        blog.read_time,
        bool_cell(blog.featured),
        blog.status,
        blog.category,
        blog.date,
        blog.created_at,
        blog.updated_at,
    ]


def has_blog_changed(existing: BlogPost, incoming: BlogPost) -> bool:
    """Exact string comparison of the serialized compared fields."""
    old = blog_to_row(existing)
    new = blog_to_row(incoming)
    return any(
        old[_COLUMN_INDEX[field]] != new[_COLUMN_INDEX[field]]
        for field in BLOG_COMPARED_FIELDS
    )
