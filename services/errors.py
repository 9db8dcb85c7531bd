from __future__ import annotations

from typing import Any, Dict


class SearchError(Exception):
    """
    Base error for an event search. Carries the ``{message, code}`` payload
    the HTTP layer echoes back to the caller.
    """

    code: int = -1

    def __init__(self, message: Any, code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message, "code": self.code}


class ValidationError(SearchError):
    """Required input missing; raised before any upstream call."""

    code = 1


class MismatchedInputError(ValidationError):
    """venue and event ID lists of different length."""


class UpstreamError(SearchError):
    """Transport failure, non-2xx status or unparseable body from the Graph API."""

    code = -1
