from __future__ import annotations

import pytest

from marketplace_monitor.store.abstract import (
    DEFAULT_LIMIT,
    MAX_BIGINT,
    normalize_pagination,
    parse_record_id,
)

HISTORY_SIZE = 5


@pytest.fixture
def filled_store(memory_store, record_factory):
    # category encodes recency so pages are easy to read: minute 4 is newest
    categories = ["Electronics", "Agriculture", "Manufacturing", "Entertainment", "Education"]
    for minute in range(HISTORY_SIZE):
        memory_store.create(record_factory(minutes=minute, category=categories[minute]))
    return memory_store


def test_create_assigns_increasing_ids(memory_store, record_factory) -> None:
    first = memory_store.create(record_factory())
    second = memory_store.create(record_factory())
    assert first.id == 1
    assert second.id == 2
    assert len(memory_store) == 2


def test_find_all_is_newest_first_with_offset(filled_store) -> None:
    page = filled_store.find_all(limit=2, offset=1)
    assert [r.marketplace_data.category for r in page] == ["Entertainment", "Manufacturing"]


def test_find_all_with_garbage_pagination_uses_defaults(filled_store) -> None:
    assert len(filled_store.find_all(limit="abc", offset="xyz")) == HISTORY_SIZE
    assert filled_store.find_all(limit="abc", offset="xyz")[0].marketplace_data.category == "Education"


def test_offset_past_end_is_empty(filled_store) -> None:
    assert filled_store.find_all(limit=10, offset=50) == []


def test_same_timestamp_breaks_ties_by_id(memory_store, record_factory) -> None:
    memory_store.create(record_factory(category="Electronics"))
    newest = memory_store.create(record_factory(category="Education"))
    assert memory_store.find_latest() == newest


def test_find_latest_on_empty_store(memory_store) -> None:
    assert memory_store.find_latest() is None


def test_find_by_id(filled_store) -> None:
    assert filled_store.find_by_id(3).marketplace_data.category == "Manufacturing"
    assert filled_store.find_by_id("3").id == 3
    assert filled_store.find_by_id(999) is None
    assert filled_store.find_by_id("not-an-id") is None


def test_find_failed_includes_no_response_attempts(memory_store, record_factory) -> None:
    memory_store.create(record_factory(status_code=200, minutes=0))
    memory_store.create(record_factory(status_code=0, minutes=1, error="Request timed out after 10s"))
    memory_store.create(record_factory(status_code=101, minutes=2))
    memory_store.create(record_factory(status_code=503, minutes=3, error="Request failed with status code 503"))

    failed = memory_store.find_failed()
    assert [r.status_code for r in failed] == [503, 0]


def test_get_stats(memory_store, record_factory) -> None:
    for status in (200, 200, 200, 500):
        memory_store.create(record_factory(status_code=status))
    stats = memory_store.get_stats()
    assert (stats.total, stats.successful, stats.failed) == (4, 3, 1)
    assert stats.success_rate == pytest.approx(75.0)


@pytest.mark.parametrize(
    "limit, offset, expected",
    [
        (None, None, (DEFAULT_LIMIT, 0)),
        ("20", "40", (20, 40)),
        ("abc", "xyz", (DEFAULT_LIMIT, 0)),
        ("12abc", "3", (12, 3)),
        ("3.5", "2.9", (3, 2)),
        (" 20 ", "+4", (20, 4)),
        ("-7abc", "-2xyz", (DEFAULT_LIMIT, 0)),
        ("9" * 25, "9" * 25, (DEFAULT_LIMIT, MAX_BIGINT)),
        ("9" * 5000, "1" * 5000, (DEFAULT_LIMIT, MAX_BIGINT)),
        (10**30, 10**30, (DEFAULT_LIMIT, MAX_BIGINT)),
        ("0" * 30 + "12", "0" * 30 + "5", (12, 5)),
        (0, 0, (DEFAULT_LIMIT, 0)),
        (-5, -1, (DEFAULT_LIMIT, 0)),
        (7, 2, (7, 2)),
    ],
)
def test_normalize_pagination(limit, offset, expected) -> None:
    assert normalize_pagination(limit, offset) == expected


@pytest.mark.parametrize("raw, expected", [("12", 12), (5, 5), ("0", None), ("-3", None), ("abc", None), ("12abc", None), (None, None), (True, None), ("9" * 25, None)])
def test_parse_record_id(raw, expected) -> None:
    assert parse_record_id(raw) == expected
