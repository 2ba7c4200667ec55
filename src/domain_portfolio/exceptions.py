"""
Exception classes for the domain portfolio tracker.

All exceptions inherit from DomainPortfolioError and provide structured
error information with codes, messages, and optional details.
"""

from typing import Optional


class DomainPortfolioError(Exception):
    """Base exception for all domain portfolio errors."""

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[dict] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"

    def to_dict(self) -> dict:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(DomainPortfolioError):
    """Raised when a domain name or a record field fails validation."""

    pass


class ConfigurationError(DomainPortfolioError):
    """Raised when configuration values are missing or invalid."""

    pass


class ProtocolError(DomainPortfolioError):
    """Raised when an RDAP response cannot be used (bad status, malformed body)."""

    pass


class UnexpectedStatusError(ProtocolError):
    """Raised for HTTP statuses outside the handled not-found set."""

    def __init__(self, status_code: int) -> None:
        super().__init__(
            code="unexpected_status",
            message=f"RDAP error: {status_code}",
            details={"http_status_code": status_code},
        )
        self.status_code = status_code


class PersistenceError(DomainPortfolioError):
    """Raised when the domain store cannot be read, parsed or written."""

    pass


class DomainNotFoundError(DomainPortfolioError):
    """Raised when a domain name is not present in the store."""

    pass
