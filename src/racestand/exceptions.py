"""Custom exceptions for RaceStand."""

from __future__ import annotations


class RaceStandError(Exception):
    """Base exception for all RaceStand errors."""


class RaceStandValidationError(RaceStandError):
    """Raised when configuration or competitor data fails model validation."""


class CompetitorError(RaceStandValidationError):
    """Raised when a competitor cannot be added, renamed or removed."""


class ResultError(RaceStandValidationError):
    """Raised when a race result update is rejected."""


class PayloadError(RaceStandError):
    """Raised when an imported championship payload is malformed.

    The individual validation messages are kept on ``errors``.
    """

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        self.errors = list(errors or [])
        super().__init__(message)
