"""
Web server for the Marketplace Monitor.

Combines the Flask query API, the Socket.IO live channel and the ping
scheduler into one process. Socket.IO runs in threading mode, so the
scheduler thread can broadcast while requests are being served.
"""

from __future__ import annotations

from typing import Optional

from flask import Flask, jsonify, request
from flask_cors import CORS
from flask_socketio import SocketIO

from marketplace_monitor import __version__
from marketplace_monitor.api import create_responses_blueprint
from marketplace_monitor.config import Settings, get_settings
from marketplace_monitor.infrastructure.db_factory import close_pools
from marketplace_monitor.infrastructure.transport import HttpTransport, RequestsTransport
from marketplace_monitor.notifier import LiveNotifier, SocketIOChannel
from marketplace_monitor.pipeline import PingPipeline
from marketplace_monitor.scheduler import PingScheduler
from marketplace_monitor.store.abstract import RecordStore
from marketplace_monitor.store.factory import create_record_store
from marketplace_monitor.utils.logging import get_logger

log = get_logger(__name__)


class MonitorServer:
    """Flask app + Socket.IO server + ping scheduler, wired around one record store."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        store: Optional[RecordStore] = None,
        transport: Optional[HttpTransport] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.store = store if store is not None else create_record_store(self.settings)
        self.transport = transport if transport is not None else RequestsTransport()

        self.app = Flask(__name__)
        origins = self.settings.cors_origin_list
        allow_any = origins == ["*"]
        CORS(self.app, origins="*" if allow_any else origins, supports_credentials=not allow_any)
        self.socketio = SocketIO(
            self.app,
            cors_allowed_origins="*" if allow_any else origins,
            async_mode="threading",
        )

        self.notifier = LiveNotifier(self.store, SocketIOChannel(self.socketio))
        self.pipeline = PingPipeline(self.store, self.transport, settings=self.settings)
        self.scheduler = PingScheduler(
            self.pipeline, self.store, self.notifier, settings=self.settings
        )

        self._setup_routes()
        self._setup_socket_events()

    def _setup_routes(self) -> None:
        self.app.register_blueprint(create_responses_blueprint(self.store))

        @self.app.get("/health")
        def health():
            return jsonify(
                {
                    "success": True,
                    "data": {
                        "version": __version__,
                        "store": self.store.name,
                        "scheduler": self.scheduler.state,
                        "subscribers": len(self.notifier.subscribers),
                    },
                }
            )

    def _setup_socket_events(self) -> None:
        @self.socketio.on("connect")
        def handle_connect(auth=None):
            self.notifier.on_connect(request.sid)

        @self.socketio.on("disconnect")
        def handle_disconnect(*args):
            self.notifier.on_disconnect(request.sid)

        @self.socketio.on("getLatestData")
        def handle_get_latest_data(*args):
            self.notifier.handle_get_latest(request.sid)

        @self.socketio.on("getStats")
        def handle_get_stats(*args):
            self.notifier.handle_get_stats(request.sid)

    def run(self, host: Optional[str] = None, port: Optional[int] = None) -> None:
        """Start the scheduler and serve until interrupted."""
        host = host or self.settings.host
        port = port or self.settings.port
        self.scheduler.start()
        log.info(f"Marketplace monitor listening on {host}:{port}", extra={"store": self.store.name})
        try:
            self.socketio.run(self.app, host=host, port=port, allow_unsafe_werkzeug=True)
        finally:
            self.shutdown()

    def shutdown(self) -> None:
        self.scheduler.shutdown()
        close = getattr(self.transport, "close", None)
        if callable(close):
            close()
        self.store.close()
        close_pools()


def create_app(settings: Optional[Settings] = None, **kwargs) -> Flask:
    """Flask application factory (for WSGI servers and `flask --app`)."""
    return MonitorServer(settings=settings, **kwargs).app


__all__ = ["MonitorServer", "create_app"]
