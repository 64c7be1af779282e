from __future__ import annotations

import pytest

from marketplace_monitor.notifier import NEW_RESPONSE, UPDATED_STATS, LiveNotifier
from marketplace_monitor.pipeline import PingPipeline
from marketplace_monitor.scheduler import IDLE, JOB_ID, PingScheduler


class _FakeScheduler:
    """Captures add_job/start/shutdown calls instead of spawning a thread."""

    def __init__(self) -> None:
        self.jobs = []
        self.running = False

    def add_job(self, func, trigger, **kwargs) -> None:
        self.jobs.append((func, trigger, kwargs))

    def start(self) -> None:
        self.running = True

    def shutdown(self, wait: bool = True) -> None:
        self.running = False


class _ExplodingPipeline:
    url = "https://example.test/anything"

    def run(self):
        raise RuntimeError("boom")


class _UnstoredPipeline:
    url = "https://example.test/anything"

    def run(self):
        return None


@pytest.fixture
def parts(test_settings, memory_store, fake_transport, fake_channel, observation_factory):
    pipeline = PingPipeline(memory_store, fake_transport, settings=test_settings, generator=observation_factory)
    notifier = LiveNotifier(memory_store, fake_channel)
    return pipeline, notifier


def test_tick_pings_then_broadcasts_record_and_stats(parts, memory_store, fake_channel, test_settings) -> None:
    pipeline, notifier = parts
    scheduler = PingScheduler(pipeline, memory_store, notifier, settings=test_settings, scheduler=_FakeScheduler())

    scheduler.tick()

    assert len(memory_store) == 1
    assert [e[0] for e in fake_channel.events] == [NEW_RESPONSE, UPDATED_STATS]
    assert fake_channel.events[1][1]["data"]["total"] == 1
    assert scheduler.state == IDLE


def test_tick_survives_pipeline_errors(memory_store, fake_channel, test_settings) -> None:
    notifier = LiveNotifier(memory_store, fake_channel)
    scheduler = PingScheduler(_ExplodingPipeline(), memory_store, notifier, settings=test_settings, scheduler=_FakeScheduler())

    scheduler.tick()
    scheduler.tick()

    assert fake_channel.events == []
    assert scheduler.state == IDLE


def test_start_registers_single_instance_job(parts, memory_store, test_settings) -> None:
    pipeline, notifier = parts
    fake = _FakeScheduler()
    scheduler = PingScheduler(pipeline, memory_store, notifier, settings=test_settings, scheduler=fake)

    scheduler.start()

    func, _trigger, kwargs = fake.jobs[0]
    assert func == scheduler.tick
    assert kwargs["id"] == JOB_ID
    assert kwargs["max_instances"] == 1
    assert kwargs["coalesce"] is True
    assert "next_run_time" not in kwargs
    assert scheduler.running

    scheduler.shutdown()
    assert not scheduler.running


def test_start_with_ping_on_startup_runs_immediately(parts, memory_store, test_settings) -> None:
    pipeline, notifier = parts
    fake = _FakeScheduler()
    settings = test_settings.model_copy(update={"ping_on_startup": True})

    PingScheduler(pipeline, memory_store, notifier, settings=settings, scheduler=fake).start()

    assert fake.jobs[0][2]["next_run_time"] is not None


def test_tick_skips_broadcast_when_outcome_was_not_stored(memory_store, fake_channel, test_settings, record_factory) -> None:
    memory_store.create(record_factory())
    notifier = LiveNotifier(memory_store, fake_channel)
    scheduler = PingScheduler(_UnstoredPipeline(), memory_store, notifier, settings=test_settings, scheduler=_FakeScheduler())

    scheduler.tick()

    assert fake_channel.events == []
    assert scheduler.state == IDLE
