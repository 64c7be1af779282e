"""
Live notifier: pushes marketplace records and stats to Socket.IO subscribers.

Events emitted:
- latestResponse  {success, data}             one subscriber, on connect / getLatestData
- newResponse     {success, data, timestamp}  everyone, after each ping
- updatedStats    {success, data, timestamp}  everyone, after each ping
- statsResponse   {success, data} | {success: false, error}   one subscriber, on getStats
"""

from __future__ import annotations

import threading
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, Protocol, Set, runtime_checkable

from marketplace_monitor.domain.models import MarketplaceRecord
from marketplace_monitor.exceptions import MonitorError
from marketplace_monitor.store.abstract import RecordStore
from marketplace_monitor.utils.logging import get_logger

log = get_logger(__name__)

LATEST_RESPONSE = "latestResponse"
NEW_RESPONSE = "newResponse"
UPDATED_STATS = "updatedStats"
STATS_RESPONSE = "statsResponse"

STATS_ERROR_MESSAGE = "Failed to fetch statistics"


@runtime_checkable
class SubscriberChannel(Protocol):
    def emit(self, event: str, payload: Dict[str, Any], to: Optional[str] = None) -> None:
        """Send a named event to one subscriber, or to all when `to` is None."""
        ...


class SocketIOChannel:
    """SubscriberChannel on top of a flask_socketio.SocketIO server."""

    def __init__(self, socketio: Any) -> None:
        self._socketio = socketio

    def emit(self, event: str, payload: Dict[str, Any], to: Optional[str] = None) -> None:
        if to is None:
            self._socketio.emit(event, payload)
        else:
            self._socketio.emit(event, payload, to=to)


def _iso_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class LiveNotifier:
    """Fan-out of new records and refreshed stats to connected subscribers."""

    def __init__(
        self,
        store: RecordStore,
        channel: SubscriberChannel,
        now_iso: Callable[[], str] = _iso_now,
    ) -> None:
        self.store = store
        self.channel = channel
        self._now_iso = now_iso
        self._subscribers: Set[str] = set()
        self._lock = threading.Lock()

    @property
    def subscribers(self) -> Set[str]:
        with self._lock:
            return set(self._subscribers)

    def on_connect(self, sid: str) -> None:
        with self._lock:
            self._subscribers.add(sid)
        log.info(f"Client connected: {sid}", extra={"subscribers": len(self._subscribers)})
        self.send_latest(sid)

    def on_disconnect(self, sid: str) -> None:
        with self._lock:
            self._subscribers.discard(sid)
        log.info(f"Client disconnected: {sid}", extra={"subscribers": len(self._subscribers)})

    def send_latest(self, sid: str) -> None:
        """Push the newest observation to one subscriber; nothing if history is empty."""
        try:
            latest = self.store.find_latest()
        except MonitorError as exc:
            log.error(f"Error sending latest response to client {sid}", extra={"error": exc.message})
            return
        if latest is None:
            return
        self.channel.emit(
            LATEST_RESPONSE,
            {"success": True, "data": latest.marketplace_data.to_payload()},
            to=sid,
        )

    def broadcast_new_record(self, record: MarketplaceRecord) -> None:
        log.info(
            "Broadcasting new marketplace data to all clients",
            extra={"record_id": record.id, "subscribers": len(self.subscribers)},
        )
        self.channel.emit(
            NEW_RESPONSE,
            {
                "success": True,
                "data": record.marketplace_data.to_payload(),
                "timestamp": self._now_iso(),
            },
        )

    def broadcast_stats(self) -> None:
        try:
            stats = self.store.get_stats()
        except MonitorError as exc:
            log.error("Error broadcasting updated stats", extra={"error": exc.message})
            return
        self.channel.emit(
            UPDATED_STATS,
            {"success": True, "data": stats.to_payload(), "timestamp": self._now_iso()},
        )

    def handle_get_latest(self, sid: str) -> None:
        log.info(f"Client {sid} requested latest data")
        self.send_latest(sid)

    def handle_get_stats(self, sid: str) -> None:
        try:
            stats = self.store.get_stats()
        except MonitorError as exc:
            log.error(f"Error sending stats to client {sid}", extra={"error": exc.message})
            self.channel.emit(
                STATS_RESPONSE,
                {"success": False, "error": STATS_ERROR_MESSAGE},
                to=sid,
            )
            return
        self.channel.emit(STATS_RESPONSE, {"success": True, "data": stats.to_payload()}, to=sid)


__all__ = [
    "LATEST_RESPONSE",
    "NEW_RESPONSE",
    "UPDATED_STATS",
    "STATS_RESPONSE",
    "LiveNotifier",
    "SocketIOChannel",
    "SubscriberChannel",
]
