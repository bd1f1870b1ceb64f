"""Exception hierarchy for the interview core.

Only collaborator and configuration problems are modelled as exceptions.
Bad input coming from the conversation (unknown fields, malformed options,
unparseable numbers) is filtered silently and never raised.
"""

from __future__ import annotations

from typing import Any, Optional


class RevenueArchitectError(Exception):
    """Base exception; carries an optional ``details`` dict for logging."""

    def __init__(self, message: str, *, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.details = details or {}


class GenerationError(RevenueArchitectError):
    """The natural-language generator failed or returned nothing usable."""


class BenchmarkDataError(RevenueArchitectError):
    """The benchmark table could not be read or validated."""

    def __init__(
        self,
        message: str,
        *,
        path: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, details=details)
        self.path = path
