"""Row <-> record mappers for the blog, drive and admin tabs."""

from .admin import AdminRecord, admins_to_rows, rows_to_admins, validate_admins
from .blog import (
    BLOG_COLUMN_COUNT,
    BLOG_COMPARED_FIELDS,
    BlogPost,
    blog_to_row,
    has_blog_changed,
    row_to_blog,
)
from .drive import (
    DRIVE_COLUMN_COUNT,
    DRIVE_COMPARED_FIELDS,
    DRIVE_SHEET_HEADERS,
    DriveData,
    drive_to_row,
    has_drive_changed,
    row_to_drive,
    validate_drive,
)

__all__ = [
    "AdminRecord",
    "admins_to_rows",
    "rows_to_admins",
    "validate_admins",
    "BLOG_COLUMN_COUNT",
    "BLOG_COMPARED_FIELDS",
    "BlogPost",
    "blog_to_row",
    "has_blog_changed",
    "row_to_blog",
    "DRIVE_COLUMN_COUNT",
    "DRIVE_COMPARED_FIELDS",
    "DRIVE_SHEET_HEADERS",
    "DriveData",
    "drive_to_row",
    "has_drive_changed",
    "row_to_drive",
    "validate_drive",
]
