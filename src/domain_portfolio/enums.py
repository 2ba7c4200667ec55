"""
Enumeration types for the domain portfolio tracker.

These enums provide type-safe constants for ownership classification,
refresh outcomes, validation error codes and logging levels.
"""

from enum import Enum


class DomainStatus(Enum):
    """User-set ownership classification of a tracked domain."""

    OWNED = "OWNED"
    BACKORDER = "BACKORDER"
    WATCHLIST = "WATCHLIST"
    EXPIRED = "EXPIRED"


class UpdateStatus(Enum):
    """Outcome of the most recent refresh attempt, as stored on a record."""

    SUCCESS = "success"
    MANUAL_CHECK = "manual_check"


class LookupOutcome(Enum):
    """Classified outcome of a single RDAP lookup."""

    SUCCESS = "success"
    NOT_FOUND = "not_found"
    TRANSPORT_ERROR = "transport_error"
    SKIPPED = "skipped"


class LogLevel(Enum):
    """Logging severity levels."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


class DomainValidationErrorCode(Enum):
    """Error codes for domain validation failures."""

    FORBIDDEN_CHARS = "forbidden_chars"
    MISSING_TLD = "missing_tld"
    IDNA_ERROR = "idna_error"
    EMPTY_INPUT = "empty_input"
