"""
Tests for dashboard table extraction.
"""

from __future__ import annotations

import pytest

from newsrelay.source.parser import (
    PLACEHOLDER,
    clean,
    normalize_placeholder,
    parse_dashboard,
    split_tickers,
)

ROW_TEMPLATE = """
<div class="rt-tr-group" role="rowgroup">
  <div class="rt-tr" role="row">
    <div class="rt-td">{time}</div>
    <div class="rt-td">{sentiment}</div>
    <div class="rt-td">{full_tweet}</div>
    <div class="rt-td">{summary}</div>
    <div class="rt-td">{tickers}</div>
    <div class="rt-td">{sector}</div>
  </div>
</div>
"""

PADDING_ROW = """
<div class="rt-tr-group" role="rowgroup">
  <div class="rt-tr -padRow" role="row">
    <div class="rt-td">&nbsp;</div><div class="rt-td"></div><div class="rt-td"></div>
    <div class="rt-td"></div><div class="rt-td"></div><div class="rt-td"></div>
  </div>
</div>
"""


def make_row(**overrides: str) -> str:
    fields = {
        "time": "<span>10:42 AM</span><span>Jan 27</span><span>(ET)</span>",
        "sentiment": "Bullish",
        "full_tweet": "We are pausing   tariffs\n on steel!",
        "summary": '<div title="Tariff pause announced for steel imports">Tariff pause ann...</div>',
        "tickers": "X, NUE",
        "sector": "Materials",
    }
    fields.update(overrides)
    return ROW_TEMPLATE.format(**fields)


def make_page(*rows: str) -> str:
    return (
        '<html><body><div class="ReactTable"><div class="rt-table">'
        '<div class="rt-thead">header</div>'
        f'<div class="rt-tbody">{"".join(rows)}</div>'
        "</div></div></body></html>"
    )


class TestHelpers:
    """Tests for text helpers."""

    def test_clean_collapses_whitespace(self) -> None:
        assert clean("  a \n\t b  ") == "a b"
        assert clean(None) == ""

    def test_dashes_become_placeholder(self) -> None:
        assert normalize_placeholder("--") == PLACEHOLDER
        assert normalize_placeholder("—") == PLACEHOLDER
        assert normalize_placeholder("Energy") == "Energy"

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("AAPL, MSFT", ("AAPL", "MSFT")),
            ("AAPL;MSFT | TSLA/NVDA", ("AAPL", "MSFT", "TSLA", "NVDA")),
            ("—", ()),
            ("-", ()),
            ("", ()),
        ],
    )
    def test_split_tickers(self, text: str, expected: tuple[str, ...]) -> None:
        assert split_tickers(text) == expected


class TestParseDashboard:
    """Tests for parse_dashboard."""

    def test_parses_row(self) -> None:
        records = parse_dashboard(make_page(make_row()), limit=10)

        assert len(records) == 1
        record = records[0]
        assert record.time == "10:42 AM Jan 27"
        assert record.sentiment == "Bullish"
        assert record.full_tweet == "We are pausing tariffs on steel!"
        assert record.summary == "Tariff pause announced for steel imports"
        assert record.tickers == ("X", "NUE")
        assert record.sector == "Materials"

    def test_summary_without_title_uses_text(self) -> None:
        page = make_page(make_row(summary="Short summary"))
        assert parse_dashboard(page, limit=10)[0].summary == "Short summary"

    def test_time_without_spans(self) -> None:
        page = make_page(make_row(time="10:42 AM"))
        assert parse_dashboard(page, limit=10)[0].time == "10:42 AM"

    def test_placeholders(self) -> None:
        page = make_page(make_row(tickers="--", sector="--"))
        record = parse_dashboard(page, limit=10)[0]
        assert record.tickers == ()
        assert record.sector == PLACEHOLDER

    def test_preserves_display_order(self) -> None:
        page = make_page(
            make_row(sentiment="newest", summary="one"),
            make_row(sentiment="older", summary="two"),
        )
        assert [r.summary for r in parse_dashboard(page, limit=10)] == ["one", "two"]

    def test_limit(self) -> None:
        page = make_page(*(make_row(summary=f"item {i}") for i in range(5)))
        assert [r.summary for r in parse_dashboard(page, limit=3)] == ["item 0", "item 1", "item 2"]

    def test_padding_rows_skipped(self) -> None:
        page = make_page(make_row(), PADDING_ROW, PADDING_ROW)
        assert len(parse_dashboard(page, limit=10)) == 1

    def test_missing_cells_are_empty(self) -> None:
        row = (
            '<div class="rt-tr-group"><div class="rt-tr">'
            '<div class="rt-td">9:00 AM</div><div class="rt-td">Neutral</div>'
            "</div></div>"
        )
        record = parse_dashboard(make_page(row), limit=10)[0]
        assert record.time == "9:00 AM"
        assert record.summary == ""
        assert record.full_tweet == ""
        assert record.tickers == ()

    def test_empty_table(self) -> None:
        assert parse_dashboard(make_page(), limit=10) == []
