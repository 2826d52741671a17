"""A1-notation helpers for addressing sheet ranges."""


def column_letter(index: int) -> str:
    """Return the A1 column letter for a 1-based column index (1 -> A, 27 -> AA)."""
    if index < 1:
        raise ValueError(f"column index must be >= 1, got {index}")
    letters = ""
    while index:
        index, rem = divmod(index - 1, 26)
        letters = chr(ord("A") + rem) + letters
    return letters


def tab_range(tab: str, last_col: int, start_row: int = 1) -> str:
    """Open-ended range covering columns ``A..last_col`` from ``start_row`` down.

    ``tab_range("blog", 17, start_row=2)`` -> ``"blog!A2:Q"``.  With the
    default ``start_row`` the row bound is omitted entirely (``"drives!A:R"``).
    """
    end = column_letter(last_col)
    if start_row == 1:
        return f"{tab}!A:{end}"
    return f"{tab}!A{start_row}:{end}"


def row_range(tab: str, row: int, last_col: int) -> str:
    """Single-row range, e.g. ``row_range("blog", 5, 17)`` -> ``"blog!A5:Q5"``."""
    if row < 1:
        raise ValueError(f"row number must be >= 1, got {row}")
    end = column_letter(last_col)
    return f"{tab}!A{row}:{end}{row}"


def split_range(a1: str) -> tuple[str, str]:
    """Split ``"tab!A1:G1000"`` into ``("tab", "A1:G1000")``."""
    tab, _, cells = a1.partition("!")
    return tab.strip("'"), cells


def column_index(letters: str) -> int:
    """Inverse of ``column_letter``: ``"A"`` -> 1, ``"AA"`` -> 27."""
    index = 0
    for ch in letters.upper():
        if not "A" <= ch <= "Z":
            raise ValueError(f"invalid column letters: {letters!r}")
        index = index * 26 + (ord(ch) - ord("A") + 1)
    return index


def range_shape(cells: str) -> tuple[int, int | None]:
    """``"A1:G1000"`` -> ``(7, 1000)`` columns x rows; open-ended rows give ``None``."""
    start, _, end = cells.partition(":")
    end = end or start

    def _split(ref: str) -> tuple[str, int | None]:
        letters = "".join(ch for ch in ref if ch.isalpha())
        digits = "".join(ch for ch in ref if ch.isdigit())
        return letters, int(digits) if digits else None

    first_col, first_row = _split(start)
    last_col, last_row = _split(end)
    width = column_index(last_col) - column_index(first_col) + 1
    if first_row is None or last_row is None:
        return width, None
    return width, last_row - first_row + 1
