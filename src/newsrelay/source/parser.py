"""
Dashboard table extraction.

Parses the rendered react-table markup into RawRecords. Cell order:
time, sentiment, full tweet, summary, affected securities, sector.
"""

from __future__ import annotations

import re

from bs4 import BeautifulSoup, Tag

from newsrelay.contracts import RawRecord

ROW_SELECTOR = ".rt-tbody .rt-tr-group"
CELL_SELECTOR = ".rt-td"
PLACEHOLDER = "—"

_WHITESPACE = re.compile(r"\s+")
_DASHES_ONLY = re.compile(r"^[—\-]+$")
_TICKER_SPLIT = re.compile(r"[,\s;|/]+")


def clean(text: str | None) -> str:
    """Collapse whitespace runs and trim."""
    return _WHITESPACE.sub(" ", text or "").strip()


def normalize_placeholder(text: str) -> str:
    """Cells made only of dashes become the placeholder token."""
    return PLACEHOLDER if _DASHES_ONLY.match(text) else text


def split_tickers(text: str) -> tuple[str, ...]:
    """Split an affected-securities cell into symbols; placeholder means none."""
    if not text or normalize_placeholder(text) == PLACEHOLDER:
        return ()
    return tuple(part for part in _TICKER_SPLIT.split(text) if part)


def _cell_text(cell: Tag | None) -> str:
    return clean(cell.get_text(" ")) if cell is not None else ""


def _time_text(cell: Tag | None) -> str:
    if cell is None:
        return ""
    spans = cell.find_all("span")
    if not spans:
        return _cell_text(cell)
    parts = [clean(span.get_text(" ")) for span in spans[:2]]
    return clean(" ".join(p for p in parts if p))


def _summary_text(cell: Tag | None) -> str:
    # The UI truncates long summaries; the title attribute holds the full text
    if cell is None:
        return ""
    titled = cell.find(attrs={"title": True})
    if titled is not None:
        title = clean(str(titled.get("title", "")))
        if title:
            return title
    return _cell_text(cell)


def parse_row(group: Tag) -> RawRecord:
    """Parse one table row group."""
    row = group.select_one(".rt-tr") or group
    cells: list[Tag | None] = list(row.select(CELL_SELECTOR))
    cells.extend([None] * (6 - len(cells)))

    return RawRecord(
        time=_time_text(cells[0]),
        sentiment=_cell_text(cells[1]),
        full_tweet=_cell_text(cells[2]),
        summary=_summary_text(cells[3]),
        tickers=split_tickers(_cell_text(cells[4])),
        sector=normalize_placeholder(_cell_text(cells[5])),
    )


def parse_dashboard(html: str, limit: int) -> list[RawRecord]:
    """Parse up to limit rows, newest-first as displayed."""
    soup = BeautifulSoup(html, "html.parser")
    groups = soup.select(ROW_SELECTOR)[:limit]
    records = [parse_row(group) for group in groups]
    # Padding rows rendered by react-table carry no content
    return [r for r in records if r.time or r.summary or r.full_tweet]
