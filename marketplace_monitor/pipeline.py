"""
Ping pipeline: generate an observation, POST it, normalize the outcome, persist.

Usage:
    from marketplace_monitor.pipeline import PingPipeline

    pipeline = PingPipeline(store=store, transport=RequestsTransport())
    record = pipeline.run()   # stored record, or None if persistence failed

`run()` never raises. Outbound failures become failure records (status 0 when
no response arrived); persistence failures are logged and the record is lost.
"""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Callable, Optional

from marketplace_monitor.config import Settings, get_settings
from marketplace_monitor.domain.generator import generate_observation
from marketplace_monitor.domain.models import MarketplaceObservation, MarketplaceRecord
from marketplace_monitor.exceptions import StorageError, TransportError
from marketplace_monitor.infrastructure.transport import HttpTransport, default_headers
from marketplace_monitor.store.abstract import RecordStore
from marketplace_monitor.utils.logging import get_logger

log = get_logger(__name__)

PING_METHOD = "POST"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PingPipeline:
    """
    One best-effort ping: generate → POST → normalize → persist.

    Parameters
    ----------
    store : RecordStore
        Destination for the outcome record.
    transport : HttpTransport
        Performs the outbound POST.
    settings : Settings | None
        Endpoint, timeout and user agent; defaults to get_settings().
    generator : callable
        Returns a MarketplaceObservation.
    monotonic : callable
        Seconds from a monotonic clock, used for elapsed time.
    now : callable
        Timezone-aware wall-clock time for the record timestamp.
    """

    def __init__(
        self,
        store: RecordStore,
        transport: HttpTransport,
        settings: Optional[Settings] = None,
        generator: Callable[[], MarketplaceObservation] = generate_observation,
        monotonic: Callable[[], float] = time.monotonic,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        settings = settings or get_settings()
        self.store = store
        self.transport = transport
        self.url = settings.ping_url
        self.timeout_seconds = settings.ping_timeout_seconds
        self.headers = default_headers(settings.ping_user_agent)
        self._generate = generator
        self._monotonic = monotonic
        self._now = now

    def _elapsed_ms(self, start: float) -> int:
        return max(0, int(round((self._monotonic() - start) * 1000)))

    def _attempt(self, observation: MarketplaceObservation, start: float) -> MarketplaceRecord:
        """POST the observation and fold either outcome into one record shape."""
        try:
            response = self.transport.post_json(
                self.url,
                observation.to_payload(),
                headers=self.headers,
                timeout_seconds=self.timeout_seconds,
            )
        except TransportError as exc:
            elapsed = self._elapsed_ms(start)
            log.error(
                f"[PING FAILED] {self.url}: {exc.message}",
                extra={"status_code": exc.status_code or 0, "response_time_ms": elapsed},
            )
            return MarketplaceRecord(
                url=self.url,
                method=PING_METHOD,
                marketplace_data=observation,
                status_code=exc.status_code if exc.has_response else 0,
                response_data=exc.body if exc.has_response else None,
                response_time=elapsed,
                timestamp=self._now(),
                error=exc.message,
            )
        except Exception as exc:  # unexpected transport bug; still a failed attempt
            elapsed = self._elapsed_ms(start)
            log.exception(f"[PING FAILED] {self.url}: unexpected error")
            return MarketplaceRecord(
                url=self.url,
                method=PING_METHOD,
                marketplace_data=observation,
                status_code=0,
                response_data=None,
                response_time=elapsed,
                timestamp=self._now(),
                error=str(exc) or exc.__class__.__name__,
            )

        elapsed = self._elapsed_ms(start)
        log.info(
            f"[PING OK] {self.url} status={response.status_code} time={elapsed}ms",
            extra={"status_code": response.status_code, "response_time_ms": elapsed},
        )
        return MarketplaceRecord(
            url=self.url,
            method=PING_METHOD,
            marketplace_data=observation,
            status_code=response.status_code,
            response_data={"success": True, "raw": response.body},
            response_time=elapsed,
            timestamp=self._now(),
        )

    def _persist(self, record: MarketplaceRecord) -> Optional[MarketplaceRecord]:
        try:
            stored = self.store.create(record)
        except StorageError as exc:
            log.error(
                "[PERSIST FAILED] Outcome record dropped",
                extra={"status_code": record.status_code, "error": exc.message},
            )
            return None
        log.debug("Outcome record stored", extra={"record_id": stored.id})
        return stored

    def run(self) -> Optional[MarketplaceRecord]:
        """
        Execute one ping end-to-end.

        Returns
        -------
        MarketplaceRecord | None
            The stored record (with id), or None when it could not be stored.
        """
        try:
            start = self._monotonic()
            observation = self._generate()
            log.info(
                f"[PING START] POST {self.url}",
                extra={"category": observation.category},
            )
            record = self._attempt(observation, start)
            return self._persist(record)
        except Exception:
            log.exception("[PING ABORTED] Unexpected error in ping pipeline")
            return None


__all__ = ["PingPipeline", "PING_METHOD"]
