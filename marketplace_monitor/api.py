"""
Query API: read-only REST endpoints over the marketplace record history.

    GET /responses?limit=100&offset=0   observation history, newest first
    GET /responses/stats                success/failure statistics
    GET /responses/latest               newest observation or null
    GET /responses/failed               failed attempts, newest first
    GET /responses/<id>                 one observation or null

Every body is a `{success, data, ...}` envelope. Store failures turn into
`{success: false, error}` with HTTP 503.
"""

from __future__ import annotations

from typing import Any, Dict, List

from flask import Blueprint, jsonify, request

from marketplace_monitor.domain.models import MarketplaceRecord
from marketplace_monitor.exceptions import StorageError
from marketplace_monitor.store.abstract import RecordStore, normalize_pagination
from marketplace_monitor.utils.logging import get_logger

log = get_logger(__name__)


def _observation(record: MarketplaceRecord | None) -> Dict[str, Any] | None:
    return record.marketplace_data.to_payload() if record is not None else None


def _failure_summary(record: MarketplaceRecord) -> Dict[str, Any]:
    return {
        "id": record.id,
        "statusCode": record.status_code,
        "error": record.error,
        "responseTime": record.response_time,
        "timestamp": record.timestamp.isoformat(),
        "marketplaceData": record.marketplace_data.to_payload(),
    }


def _page(items: List[Any], limit: int, offset: int) -> Dict[str, Any]:
    return {
        "success": True,
        "data": items,
        "pagination": {"limit": limit, "offset": offset, "count": len(items)},
    }


def create_responses_blueprint(store: RecordStore) -> Blueprint:
    """Build the /responses blueprint bound to a record store."""
    bp = Blueprint("responses", __name__, url_prefix="/responses")

    @bp.errorhandler(StorageError)
    def handle_storage_error(exc: StorageError):
        log.error("Query failed", extra={"operation": exc.operation, "error": exc.message})
        return jsonify({"success": False, "error": "Record store unavailable"}), 503

    @bp.get("")
    @bp.get("/")
    def list_responses():
        limit, offset = normalize_pagination(request.args.get("limit"), request.args.get("offset"))
        log.info(f"Fetching responses - Limit: {limit}, Offset: {offset}")
        records = store.find_all(limit, offset)
        return jsonify(_page([_observation(r) for r in records], limit, offset))

    @bp.get("/stats")
    def response_stats():
        log.info("Fetching response statistics")
        return jsonify({"success": True, "data": store.get_stats().to_payload()})

    @bp.get("/latest")
    def latest_response():
        log.info("Fetching latest marketplace data")
        return jsonify({"success": True, "data": _observation(store.find_latest())})

    @bp.get("/failed")
    def failed_responses():
        limit, offset = normalize_pagination(request.args.get("limit"), request.args.get("offset"))
        records = store.find_failed(limit, offset)
        return jsonify(_page([_failure_summary(r) for r in records], limit, offset))

    @bp.get("/<record_id>")
    def response_by_id(record_id: str):
        return jsonify({"success": True, "data": _observation(store.find_by_id(record_id))})

    return bp


__all__ = ["create_responses_blueprint"]
