"""
Domain name validation and normalization.

Names entered by the user or read from an import file are trimmed,
lowercased and, when they contain non-ASCII characters, IDNA-encoded so the
stored name can be used directly in an RDAP query path.
"""

import re
from dataclasses import dataclass
from typing import Optional

import idna

from domain_portfolio.enums import DomainValidationErrorCode
from domain_portfolio.exceptions import ValidationError


# Control characters, whitespace and symbols that never appear in a hostname
FORBIDDEN_CHARS_PATTERN = re.compile(
    r'[\x00-\x1f\x7f'
    r'\s'
    r'!@#$%^&*()+=\[\]{}|\\:;"\'<>,?/`~]'
)


@dataclass
class DomainValidationError:
    """Structured error information for domain validation failures."""

    code: DomainValidationErrorCode
    message: str
    details: dict


@dataclass
class DomainValidationResult:
    """Result of domain validation operation."""

    valid: bool
    canonical_domain: Optional[str]
    error: Optional[DomainValidationError]


class DomainValidator:
    """
    Validates and normalizes domain names.

    Unlike a registry-specific checker, any TLD is accepted: the portfolio
    may track names under TLDs the public RDAP resolver does not serve.
    """

    def validate(self, raw_domain: str) -> DomainValidationResult:
        """
        Validate and normalize a domain string.

        Args:
            raw_domain: The raw domain string to validate

        Returns:
            DomainValidationResult with the canonical form or an error
        """
        if not raw_domain or not raw_domain.strip():
            return self._failure(
                DomainValidationErrorCode.EMPTY_INPUT,
                "Domain input is empty",
                {"raw_input": raw_domain},
            )

        domain = raw_domain.strip().rstrip(".")

        forbidden_found = FORBIDDEN_CHARS_PATTERN.findall(domain)
        if forbidden_found:
            return self._failure(
                DomainValidationErrorCode.FORBIDDEN_CHARS,
                "Domain contains forbidden characters",
                {"raw_input": raw_domain, "forbidden_chars": forbidden_found},
            )

        try:
            canonical = self.normalize_to_canonical(domain)
        except ValidationError as e:
            return self._failure(
                DomainValidationErrorCode.IDNA_ERROR, e.message, e.details
            )

        labels = canonical.split(".")
        if len(labels) < 2 or not all(labels):
            return self._failure(
                DomainValidationErrorCode.MISSING_TLD,
                "Domain must contain a name and a TLD",
                {"raw_input": raw_domain, "canonical": canonical},
            )

        return DomainValidationResult(
            valid=True,
            canonical_domain=canonical,
            error=None,
        )

    def normalize_to_canonical(self, domain: str) -> str:
        """
        Convert domain to canonical form (lowercase, IDNA-encoded).

        Raises:
            ValidationError: If IDNA encoding fails
        """
        domain_lower = domain.lower()

        if all(ord(c) < 128 for c in domain_lower):
            return domain_lower

        try:
            return idna.encode(domain_lower, uts46=True).decode("ascii")
        except idna.IDNAError as e:
            raise ValidationError(
                code=DomainValidationErrorCode.IDNA_ERROR.value,
                message=f"IDNA encoding failed: {e}",
                details={"domain": domain, "idna_error": str(e)},
            )

    def canonicalize(self, raw_domain: str) -> str:
        """
        Return the canonical form or raise.

        Raises:
            ValidationError: If the name is not a valid domain
        """
        result = self.validate(raw_domain)
        if not result.valid:
            raise ValidationError(
                code=result.error.code.value,
                message=result.error.message,
                details=result.error.details,
            )
        return result.canonical_domain

    @staticmethod
    def _failure(
        code: DomainValidationErrorCode, message: str, details: dict
    ) -> DomainValidationResult:
        return DomainValidationResult(
            valid=False,
            canonical_domain=None,
            error=DomainValidationError(code=code, message=message, details=details),
        )


def extract_tld(domain: str) -> Optional[str]:
    """Return the last label of a domain name, or None if there is none."""
    if not domain or "." not in domain:
        return None
    tld = domain.rsplit(".", 1)[1].lower()
    return tld or None
