"""Failure taxonomy shared by the search core and the HTTP layer."""
from __future__ import annotations

from typing import Any, Dict, Optional


class SearchError(Exception):
    """Base error carrying the message shown to API callers."""

    status_code = 500

    def __init__(self, message: str, *, details: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_payload(self, include_details: bool = True) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"error": self.message}
        if include_details and self.details:
            payload["details"] = self.details
        return payload


class ValidationFailure(SearchError):
    """Caller input rejected before any engine call is attempted."""

    status_code = 400


class EngineUnavailable(SearchError):
    """The search engine or backing store could not serve the request."""

    status_code = 500


class RecordNotFound(SearchError):
    status_code = 404


__all__ = ["SearchError", "ValidationFailure", "EngineUnavailable", "RecordNotFound"]
