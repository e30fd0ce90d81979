"""Exceptions raised while talking to GG.deals.

They are caught once by ``GGDealsService`` and turned into a single user
notification per run.
"""

from __future__ import annotations


class GGDealsError(Exception):
    """Base exception for GG.deals integration errors."""

    def __init__(self, message: str, details: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class AuthenticationError(GGDealsError):
    """The auth token is missing, expired or rejected."""


class GGDealsApiClientError(GGDealsError):
    """Transport or protocol failure while submitting games."""


class GamePageNotFoundError(GGDealsError, LookupError):
    """GG.deals could not resolve the page of the submitted games."""
