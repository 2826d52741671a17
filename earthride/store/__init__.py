"""Sheet-backed CRUD stores for blog posts, drives and admin records."""

from .admin import AdminStore
from .blog import AddResult, BlogStore, UpsertResult
from .drive import DriveStore

__all__ = [
    "AddResult",
    "AdminStore",
    "BlogStore",
    "DriveStore",
    "UpsertResult",
]
