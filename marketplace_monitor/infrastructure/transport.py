"""
Outbound HTTP transport.

Wraps `requests` behind a one-method interface: POST a JSON body and get the
status and decoded body back, or a TransportError. Any non-2xx answer is
raised as an error that still carries the remote status and body.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Protocol, runtime_checkable

import requests

from marketplace_monitor.exceptions import TransportError


@dataclass(frozen=True)
class TransportResponse:
    status_code: int
    body: Any


@runtime_checkable
class HttpTransport(Protocol):
    def post_json(
        self,
        url: str,
        payload: Any,
        headers: Mapping[str, str],
        timeout_seconds: float,
    ) -> TransportResponse:
        """
        Issue one POST.

        Raises
        ------
        TransportError
            On timeouts, connection failures and non-2xx responses.
        """
        ...


def _decode_body(response: requests.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class RequestsTransport:
    """HttpTransport backed by a requests.Session."""

    def __init__(self, session: Optional[requests.Session] = None) -> None:
        self._session = session or requests.Session()

    def post_json(
        self,
        url: str,
        payload: Any,
        headers: Mapping[str, str],
        timeout_seconds: float,
    ) -> TransportResponse:
        try:
            response = self._session.post(
                url,
                json=payload,
                headers=dict(headers),
                timeout=timeout_seconds,
            )
        except requests.Timeout as exc:
            raise TransportError(
                f"Request timed out after {timeout_seconds:g}s: {exc}", url=url
            ) from exc
        except requests.RequestException as exc:
            raise TransportError(f"Request failed: {exc}", url=url) from exc

        body = _decode_body(response)
        if not 200 <= response.status_code < 300:
            raise TransportError(
                f"Request failed with status code {response.status_code}",
                status_code=response.status_code,
                body=body,
                url=url,
            )
        return TransportResponse(status_code=response.status_code, body=body)

    def close(self) -> None:
        self._session.close()


def default_headers(user_agent: str) -> Dict[str, str]:
    return {
        "Content-Type": "application/json",
        "User-Agent": user_agent,
    }


__all__ = ["HttpTransport", "RequestsTransport", "TransportResponse", "default_headers"]
