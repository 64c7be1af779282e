"""
Domain models for the Marketplace Monitor.

Defines the synthetic marketplace observation, the two persisted outcome
record shapes and the derived statistics summary. Python attributes are
snake_case; the JSON representation (API, Socket.IO, JSONB columns) uses the
camelCase aliases.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Tuple

from pydantic import BaseModel, Field

CATEGORIES: Tuple[str, ...] = (
    "Electronics",
    "Agriculture",
    "Manufacturing",
    "Entertainment",
    "Education",
    "Technology",
)

SUCCESS_MIN = 200
SUCCESS_MAX = 400  # exclusive
FAILURE_MIN = 400


def is_successful_status(status_code: int) -> bool:
    return SUCCESS_MIN <= status_code < SUCCESS_MAX


def is_failed_status(status_code: int) -> bool:
    return status_code >= FAILURE_MIN


_FROZEN = {
    "frozen": True,
    "populate_by_name": True,
    "arbitrary_types_allowed": False,
}


class MarketplaceObservation(BaseModel):
    """
    One synthetic snapshot of marketplace activity.

    Bounds are closed-open: `active_deals` lies in [50, 250), and so on.
    """

    timestamp: int = Field(..., ge=0, description="Epoch milliseconds at generation time.")
    active_deals: int = Field(..., alias="activeDeals", ge=50, lt=250)
    new_deals: int = Field(..., alias="newDeals", ge=0, lt=10)
    average_deal_value_usd: int = Field(..., alias="averageDealValueUSD", ge=5000, lt=55000)
    offers_submitted: int = Field(..., alias="offersSubmitted", ge=0, lt=30)
    user_views: int = Field(..., alias="userViews", ge=0, lt=500)
    category: str = Field(..., pattern="^(" + "|".join(CATEGORIES) + ")$")

    model_config = _FROZEN

    def to_payload(self) -> dict:
        """JSON-ready dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


class OutcomeRecord(BaseModel):
    """
    Result of one outbound attempt.

    `status_code == 0` means no response was received (timeout, DNS or
    connection failure); `error` is set whenever the attempt failed.
    """

    id: Optional[int] = Field(None, description="Store-assigned identity.")
    url: str
    method: str = "POST"
    request_payload: Any = Field(None, alias="requestPayload")
    status_code: int = Field(..., alias="statusCode", ge=0)
    response_data: Any = Field(None, alias="responseData")
    response_time: int = Field(..., alias="responseTime", ge=0, description="Milliseconds.")
    timestamp: datetime
    error: Optional[str] = None

    model_config = _FROZEN

    @property
    def is_successful(self) -> bool:
        return is_successful_status(self.status_code)

    @property
    def is_failed(self) -> bool:
        return is_failed_status(self.status_code)

    def to_payload(self) -> dict:
        payload = self.model_dump(mode="json", by_alias=True)
        if self.error is None:
            payload.pop("error", None)
        return payload


class MarketplaceRecord(OutcomeRecord):
    """Outcome record enriched with the observation that was sent."""

    marketplace_data: MarketplaceObservation = Field(..., alias="marketplaceData")


class ResponseStats(BaseModel):
    """
    Summary statistics over the stored outcome records.

    `success_rate` is a percentage (0-100).
    """

    total: int = Field(0, ge=0)
    successful: int = Field(0, ge=0)
    failed: int = Field(0, ge=0)
    success_rate: float = Field(0.0, alias="successRate", ge=0, le=100)
    average_response_time: float = Field(0.0, alias="averageResponseTime", ge=0)

    model_config = _FROZEN

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


__all__ = [
    "CATEGORIES",
    "MarketplaceObservation",
    "OutcomeRecord",
    "MarketplaceRecord",
    "ResponseStats",
    "is_failed_status",
    "is_successful_status",
]
