"""Unified exception hierarchy for dymension-bridge.

Every error raised by the toolkit inherits from BridgeException so callers
can catch one type at the boundary and render a structured payload:

    from dymension_bridge.exceptions import BridgeException

    try:
        result = router.transfer(request, quote)
    except BridgeException as e:
        return e.to_dict()

All exceptions have:
- error_code: Machine-readable error code (e.g., "INVALID_FORMAT")
- message: Human-readable error message
- details: Optional additional context dictionary
- to_dict(): Convert to a response-friendly dictionary

Errors from the core are terminal. Nothing in the core retries; only the
fee-quoting collaborator talks to the network.
"""
from __future__ import annotations

from typing import Any, Optional


class BridgeException(Exception):
    """Base exception for all bridge errors.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code
        details: Optional additional context
    """

    error_code: str = "BRIDGE_ERROR"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if error_code:
            self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a serializable dictionary."""
        result: dict[str, Any] = {
            "error": self.error_code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Input Errors
# =============================================================================

class InvalidFormatError(BridgeException):
    """Malformed address, amount or payload supplied by the caller."""

    error_code = "INVALID_FORMAT"

    def __init__(
        self,
        message: str,
        expected: Optional[str] = None,
        value: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        if expected:
            details["expected"] = expected
        if value is not None:
            details["value"] = value
        super().__init__(message, details=details)
        self.expected = expected
        self.value = value


class UnknownEntityError(BridgeException):
    """Unrecognized chain, token or route kind."""

    error_code = "UNKNOWN_ENTITY"

    def __init__(
        self,
        entity_type: str,
        entity_id: str,
        message: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        message = message or f"Unknown {entity_type}: {entity_id}"
        details = details or {}
        details["entity_type"] = entity_type
        details["entity_id"] = entity_id
        super().__init__(message, details=details)
        self.entity_type = entity_type
        self.entity_id = entity_id


# =============================================================================
# Economic & Routing Errors
# =============================================================================

class InsufficientBudgetError(BridgeException):
    """Hop-2 fees exceed what hop 1 delivered to the Hub.

    The shortfall is the smallest number of additional base units that would
    make the transfer feasible, so a caller can retry with a larger amount.
    """

    error_code = "INSUFFICIENT_BUDGET"

    def __init__(
        self,
        shortfall: int,
        hub_budget: int,
        required: int,
        message: Optional[str] = None,
    ) -> None:
        message = message or (
            f"Insufficient budget: hub budget {hub_budget} does not cover "
            f"required {required} (short by {shortfall})"
        )
        super().__init__(
            message,
            details={
                "shortfall": str(shortfall),
                "hub_budget": str(hub_budget),
                "required": str(required),
            },
        )
        self.shortfall = shortfall
        self.hub_budget = hub_budget
        self.required = required


class UnsupportedRouteError(BridgeException):
    """A valid chain pair with no defined transfer path."""

    error_code = "UNSUPPORTED_ROUTE"

    def __init__(
        self,
        source: str,
        destination: str,
        message: Optional[str] = None,
    ) -> None:
        message = message or f"No route from {source} to {destination}"
        super().__init__(
            message,
            details={"source": source, "destination": destination},
        )
        self.source = source
        self.destination = destination


# =============================================================================
# Collaborator Errors
# =============================================================================

class FeeQuoteError(BridgeException):
    """Fetching live fee data from the Hub or a source chain failed."""

    error_code = "FEE_QUOTE_ERROR"

    def __init__(
        self,
        message: str,
        endpoint: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        details: dict[str, Any] = {}
        if endpoint:
            details["endpoint"] = endpoint
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(message, details=details)
        self.endpoint = endpoint
        self.status_code = status_code


class ConfigurationError(BridgeException):
    """Registry or settings are inconsistent."""

    error_code = "CONFIGURATION_ERROR"


__all__ = [
    "BridgeException",
    "InvalidFormatError",
    "UnknownEntityError",
    "InsufficientBudgetError",
    "UnsupportedRouteError",
    "FeeQuoteError",
    "ConfigurationError",
]
