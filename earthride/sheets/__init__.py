"""Google Sheets access layer: A1 range helpers and the Sheets API client."""

from .client import (
    SheetsClient,
    SheetsUnavailableError,
    UpstreamError,
    get_sheets_client,
    load_credentials,
)
from .ranges import (
    column_index,
    column_letter,
    range_shape,
    row_range,
    split_range,
    tab_range,
)

__all__ = [
    "SheetsClient",
    "SheetsUnavailableError",
    "UpstreamError",
    "get_sheets_client",
    "load_credentials",
    "column_index",
    "column_letter",
    "range_shape",
    "row_range",
    "split_range",
    "tab_range",
]
