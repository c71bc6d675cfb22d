"""Tests for the issue model, filters, colors and pagination."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from shissue.hosts.base import MAX_ITEMS, IssueFilter, Label, paginate
from shissue.utils import WHITE, parse_hex_color, parse_timestamp


def test_filter_defaults_to_open() -> None:
    issue_filter = IssueFilter()
    assert issue_filter.state == "open"
    assert issue_filter.labels is None


def test_filter_never_requests_zero_states() -> None:
    issue_filter = IssueFilter(include_open=False, include_closed=False)
    assert issue_filter.include_open is True
    assert issue_filter.state == "open"


@pytest.mark.parametrize(
    ("include_open", "include_closed", "state"),
    [(True, False, "open"), (False, True, "closed"), (True, True, "all")],
)
def test_filter_state(include_open: bool, include_closed: bool, state: str) -> None:
    assert IssueFilter(include_open=include_open, include_closed=include_closed).state == state


def test_filter_labels_become_a_sorted_name_list() -> None:
    issue_filter = IssueFilter(labels={"ui", "bug"})
    assert issue_filter.labels == frozenset({"bug", "ui"})
    assert issue_filter.label_names == ["bug", "ui"]


def test_hex_color() -> None:
    assert parse_hex_color("#ff00aa") == (255, 0, 170)
    assert parse_hex_color("FF00AA") == (255, 0, 170)


@pytest.mark.parametrize("value", [None, "", "#fff", "zzzzzz", "#12345678"])
def test_bad_hex_color_is_white(value: str | None) -> None:
    assert parse_hex_color(value) == WHITE


def test_label_defaults_to_white() -> None:
    assert Label("bug").color == (255, 255, 255)


def test_parse_timestamp_with_z_suffix() -> None:
    parsed = parse_timestamp("2018-06-01T12:30:00.000Z")
    assert parsed == datetime(2018, 6, 1, 12, 30, tzinfo=timezone.utc)


@pytest.mark.parametrize("value", [None, ""])
def test_missing_timestamp_is_an_error(value: str | None) -> None:
    with pytest.raises(ValueError):
        parse_timestamp(value)


class PageSource:
    """Serves fixed-size pages and records which ones were requested."""

    def __init__(self, sizes: list[int]) -> None:
        self.sizes = sizes
        self.requested: list[int] = []

    def __call__(self, page: int) -> list[int]:
        self.requested.append(page)
        size = self.sizes[page] if page < len(self.sizes) else 0
        return list(range(size))


def test_paginate_stops_on_short_page() -> None:
    source = PageSource([100, 100, 100, 40])
    items = paginate(source)
    assert len(items) == 340
    assert source.requested == [0, 1, 2, 3]


def test_paginate_stops_on_empty_page() -> None:
    source = PageSource([100, 100])
    assert len(paginate(source)) == 200
    assert source.requested == [0, 1, 2]


def test_paginate_stops_at_ceiling() -> None:
    source = PageSource([100] * 50)
    items = paginate(source)
    assert len(items) == MAX_ITEMS
    assert len(source.requested) == 10


def test_paginate_drops_everything_on_failure() -> None:
    def fetch(page: int) -> list[int]:
        if page == 2:
            raise RuntimeError("connection reset")
        return list(range(100))

    with pytest.raises(RuntimeError, match="connection reset"):
        paginate(fetch)
