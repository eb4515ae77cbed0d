"""Exception types raised by schema parsing, synthesis and runtime queries."""

from __future__ import annotations

from typing import Any, Sequence


class RqlobjError(Exception):
    """Base class for all rqlobj errors."""


class ConfigurationError(RqlobjError, ValueError):
    """Raised when annotations or schema shape cannot support an operation."""


class NoKeyFieldError(ConfigurationError):
    """Raised for tables without a key field."""

    def __init__(self, message: str = "table has no key field") -> None:
        super().__init__(message)


class KeyMissingError(RqlobjError, ValueError):
    """Raised when a key value is required but not set."""

    def __init__(self, message: str = "key is not set") -> None:
        super().__init__(message)


class NoRowsError(RqlobjError, LookupError):
    """Raised when a lookup or keyed delete matches no rows."""

    def __init__(self, message: str = "no rows in result set") -> None:
        super().__init__(message)


class ScanError(RqlobjError):
    """Raised when a fetched row cannot be decoded into its receivers."""


class SynthesisError(RqlobjError):
    """Raised when code or DDL generation cannot produce valid output."""


class StoreError(RqlobjError):
    """Raised by store adapters when one or more statements fail."""

    def __init__(self, message: str, results: Sequence[Any] = ()) -> None:
        super().__init__(message)
        self.results = list(results)
