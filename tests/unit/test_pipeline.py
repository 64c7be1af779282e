from __future__ import annotations

import itertools
from datetime import datetime, timezone

import pytest

from marketplace_monitor.exceptions import StorageError, TransportError
from marketplace_monitor.infrastructure.transport import TransportResponse
from marketplace_monitor.pipeline import PingPipeline

RECORDED_AT = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
ELAPSED_MS = 250


def _clock(step_seconds: float = ELAPSED_MS / 1000):
    ticks = itertools.count()
    return lambda: next(ticks) * step_seconds


class _FailingStore:
    name = "failing"

    def create(self, record):
        raise StorageError("create", RuntimeError("connection refused"))


@pytest.fixture
def make_pipeline(test_settings, memory_store, fake_transport, observation_factory):
    def _make(store=None, transport=None, generator=None):
        return PingPipeline(
            store if store is not None else memory_store,
            transport if transport is not None else fake_transport,
            settings=test_settings,
            generator=generator or observation_factory,
            monotonic=_clock(),
            now=lambda: RECORDED_AT,
        )

    return _make


def test_successful_ping_is_persisted(make_pipeline, memory_store, fake_transport) -> None:
    fake_transport.response = TransportResponse(status_code=200, body={"json": {"ok": 1}})

    record = make_pipeline().run()

    assert record is not None and record.id == 1
    assert record.status_code == 200
    assert record.error is None
    assert record.response_data == {"success": True, "raw": {"json": {"ok": 1}}}
    assert record.response_time == ELAPSED_MS
    assert record.timestamp == RECORDED_AT
    assert record.method == "POST"
    assert record.url == "https://example.test/anything"
    assert memory_store.find_latest() == record


def test_request_uses_configured_endpoint_headers_and_timeout(make_pipeline, fake_transport) -> None:
    record = make_pipeline().run()

    call = fake_transport.calls[0]
    assert call["url"] == "https://example.test/anything"
    assert call["timeout"] == pytest.approx(10.0)
    assert call["headers"]["Content-Type"] == "application/json"
    assert call["headers"]["User-Agent"] == "Marketplace-Analytics-Backend/1.0"
    assert call["payload"] == record.marketplace_data.to_payload()


def test_remote_error_status_is_recorded(make_pipeline, fake_transport) -> None:
    fake_transport.error = TransportError(
        "Request failed with status code 503", status_code=503, body={"error": "down"}
    )

    record = make_pipeline().run()

    assert record.status_code == 503
    assert record.response_data == {"error": "down"}
    assert record.error == "Request failed with status code 503"
    assert record.response_time == ELAPSED_MS


def test_no_response_is_recorded_with_status_zero(make_pipeline, fake_transport, no_response_error) -> None:
    fake_transport.error = no_response_error

    record = make_pipeline().run()

    assert record.status_code == 0
    assert record.response_data is None
    assert record.error == "Request timed out after 10s"


def test_unexpected_transport_exception_still_produces_record(make_pipeline, fake_transport) -> None:
    fake_transport.error = RuntimeError("socket exploded")

    record = make_pipeline().run()

    assert record.status_code == 0
    assert record.error == "socket exploded"


def test_storage_failure_returns_none(make_pipeline) -> None:
    assert make_pipeline(store=_FailingStore()).run() is None


def test_generator_failure_returns_none(make_pipeline, memory_store) -> None:
    def broken_generator():
        raise ValueError("bad draw")

    assert make_pipeline(generator=broken_generator).run() is None
    assert len(memory_store) == 0


def test_each_run_creates_exactly_one_record(make_pipeline, memory_store, fake_transport, no_response_error) -> None:
    pipeline = make_pipeline()
    pipeline.run()
    fake_transport.error = no_response_error
    pipeline.run()
    assert len(memory_store) == 2
