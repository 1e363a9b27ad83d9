"""Exceptions for the recommendation scorer client."""

from __future__ import annotations

from app.services.exceptions import UnavailableError


class ScorerUnavailableError(UnavailableError):
    """The scorer could not be reached, timed out, or answered with an error."""

    def __init__(
        self,
        message: str = "Recommendations are temporarily unavailable, please try again",
        status_code: int | None = None,
    ) -> None:
        self.status_code = status_code
        super().__init__(message)
