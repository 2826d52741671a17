"""Shared test fixtures for earthride tests."""

import re

import pytest

from earthride.sheets.ranges import split_range

BLOG_HEADER = [
    "id", "title", "excerpt", "content", "blogURL", "authorName", "authorBio",
    "authorAvatar", "tags", "image", "readTime", "featured", "status",
    "category", "date", "createdAt", "updatedAt",
]

_CELLS = re.compile(r"^([A-Z]*)(\d*)(?::([A-Z]*)(\d*))?$")


class FakeSheetsClient:
    """In-memory stand-in for ``SheetsClient``.

    Each tab is a list of rows (row 1 at index 0).  Reads trim trailing
    empty rows and trailing empty cells like the real API.  Every mutation
    is recorded in ``calls`` as ``(operation, range_or_tab, payload)``.
    """

    def __init__(self, tabs=None, tab_ids=None, available=True):
        self.tabs = {name: [list(r) for r in rows] for name, rows in (tabs or {}).items()}
        self.tab_ids = dict(tab_ids) if tab_ids is not None else {
            name: i for i, name in enumerate(self.tabs)
        }
        self.available = available
        self.calls = []
        self.fail_with = None

    # -- helpers ---------------------------------------------------------

    @staticmethod
    def _parse(a1_range):
        tab, cells = split_range(a1_range)
        match = _CELLS.match(cells)
        if not match:
            raise ValueError(f"unsupported range {a1_range!r}")
        _, first_row, _, last_row = match.groups()
        start_row = int(first_row) if first_row else 1
        end_row = int(last_row) if last_row else None
        return tab, start_row, end_row

    def _grid(self, tab):
        return self.tabs.setdefault(tab, [])

    def _check(self):
        if self.fail_with is not None:
            raise self.fail_with

    def ops(self, name):
        return [c for c in self.calls if c[0] == name]

    @property
    def mutations(self):
        return list(self.calls)

    # -- SheetsClient surface ---------------------------------------------

    def is_available(self):
        return self.available

    async def get_values(self, a1_range):
        self._check()
        tab, start_row, end_row = self._parse(a1_range)
        grid = self._grid(tab)
        stop = end_row if end_row is not None else len(grid)
        rows = [list(r) for r in grid[start_row - 1:stop]]
        while rows and not any(str(v) for v in rows[-1]):
            rows.pop()
        return [self._trim(r) for r in rows]

    @staticmethod
    def _trim(row):
        while row and row[-1] == "":
            row.pop()
        return row

    async def update_values(self, a1_range, rows):
        self._check()
        self.calls.append(("update", a1_range, [list(r) for r in rows]))
        tab, start_row, _ = self._parse(a1_range)
        grid = self._grid(tab)
        while len(grid) < start_row - 1 + len(rows):
            grid.append([])
        for offset, row in enumerate(rows):
            grid[start_row - 1 + offset] = [str(v) for v in row]

    async def append_values(self, a1_range, rows):
        self._check()
        self.calls.append(("append", a1_range, [list(r) for r in rows]))
        tab, start_row, _ = self._parse(a1_range)
        grid = self._grid(tab)
        while grid and not any(str(v) for v in grid[-1]):
            grid.pop()
        while len(grid) < start_row - 1:
            grid.append([])
        for row in rows:
            grid.append([str(v) for v in row])

    async def clear_values(self, a1_range):
        self._check()
        self.calls.append(("clear", a1_range, None))
        tab, start_row, end_row = self._parse(a1_range)
        grid = self._grid(tab)
        stop = min(end_row if end_row is not None else len(grid), len(grid))
        for i in range(start_row - 1, stop):
            grid[i] = []

    async def get_tab_ids(self):
        self._check()
        return dict(self.tab_ids)

    async def add_tab(self, title, row_count, column_count):
        self._check()
        self.calls.append(("add_tab", title, (row_count, column_count)))
        self.tab_ids[title] = max(self.tab_ids.values(), default=-1) + 1
        self._grid(title)

    async def delete_row(self, tab, row_number):
        self._check()
        self.calls.append(("delete", tab, row_number))
        del self._grid(tab)[row_number - 1]


def blog_row(blog_id, title, **overrides):
    """A full 17-cell blog row with stable timestamps."""
    values = {
        "id": str(blog_id),
        "title": title,
        "excerpt": "x",
        "content": "body",
        "blogURL": f"https://example.org/blog/{blog_id}",
        "authorName": "Asha",
        "authorBio": "Rider",
        "authorAvatar": "/a.png",
        "tags": "trees, cycling",
        "image": "/img.jpg",
        "readTime": "3 min",
        "featured": "false",
        "status": "published",
        "category": "news",
        "date": "2025-01-01",
        "createdAt": "2025-01-01T00:00:00.000Z",
        "updatedAt": "2025-01-01T00:00:00.000Z",
    }
    values.update(overrides)
    return [values[h] for h in BLOG_HEADER]


DRIVE_HEADER = [
    "id", "title", "location", "date", "participants", "treesTarget", "status",
    "registrationOpen", "description", "organizer", "contactEmail",
    "registrationDeadline", "meetingPoint", "duration", "difficulty", "logo",
    "createdAt", "updatedAt",
]


def drive_row(drive_id, title, **overrides):
    values = {
        "id": str(drive_id),
        "title": title,
        "location": "Pune",
        "date": "2025-03-01",
        "participants": "20",
        "treesTarget": "100",
        "status": "upcoming",
        "registrationOpen": "true",
        "description": "Ride and plant",
        "organizer": "Pune Riders",
        "contactEmail": "ride@example.org",
        "registrationDeadline": "",
        "meetingPoint": "",
        "duration": "",
        "difficulty": "Easy",
        "logo": "",
        "createdAt": "2025-01-01T00:00:00.000Z",
        "updatedAt": "2025-01-01T00:00:00.000Z",
    }
    values.update(overrides)
    return [values[h] for h in DRIVE_HEADER]


@pytest.fixture
def fake_sheets():
    """Empty fake spreadsheet with blog, drives and admins tabs."""
    return FakeSheetsClient(
        tabs={"blog": [BLOG_HEADER], "drives": [DRIVE_HEADER], "admins": []},
    )


@pytest.fixture(autouse=True)
def _clear_singleton_caches():
    """Reset all @lru_cache singletons between tests."""
    yield
    from earthride.config import get_settings

    get_settings.cache_clear()

    from earthride.sheets.client import get_sheets_client

    get_sheets_client.cache_clear()
