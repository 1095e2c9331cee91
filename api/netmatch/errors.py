"""Exception hierarchy for the search and match pipeline."""

from __future__ import annotations


class NetmatchError(Exception):
    """Base exception for netmatch."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class CompletionError(NetmatchError):
    """The completion endpoint failed, timed out or returned an unusable body."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        model: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.status_code = status_code
        self.model = model


class StoreError(NetmatchError):
    """A read or write against the record store failed."""

    def __init__(
        self,
        message: str,
        table: str | None = None,
        operation: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.table = table
        self.operation = operation


class SupabaseUnavailable(StoreError):
    """Supabase credentials are not configured."""


class MatchUnavailable(NetmatchError):
    """No match explanation can be produced for the requested pair."""
