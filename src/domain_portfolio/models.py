"""
Data models for the domain portfolio tracker.

This module defines the tracked Domain record, its serialized form,
record creation for imports, and portfolio statistics.
"""

import time
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Iterable, Optional

from .enums import DomainStatus, UpdateStatus
from .exceptions import ValidationError


DEFAULT_REGISTRAR = "Unknown"
EXPIRING_SOON_DAYS = 30
SECONDS_PER_DAY = 86400


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


@dataclass
class Domain:
    """A tracked domain name and everything known about it."""

    id: str
    name: str
    registrar: str = DEFAULT_REGISTRAR
    registration_date: Optional[str] = None  # ISO YYYY-MM-DD
    expiration_date: Optional[str] = None  # ISO YYYY-MM-DD
    status: DomainStatus = DomainStatus.WATCHLIST
    raw_whois: str = ""
    notes: str = ""
    added_at: int = 0  # epoch ms
    last_updated: Optional[int] = None  # epoch ms of last refresh attempt
    update_status: Optional[UpdateStatus] = None

    def __post_init__(self) -> None:
        self.name = (self.name or "").strip().lower()
        if not self.name:
            raise ValidationError(
                code="empty_name",
                message="Domain name must not be empty",
                details={"id": self.id},
            )
        if (self.last_updated is None) != (self.update_status is None):
            raise ValidationError(
                code="inconsistent_update_markers",
                message="last_updated and update_status must be set together",
                details={"name": self.name},
            )

    def to_dict(self) -> dict:
        """Serialize using the camelCase keys of the stored format."""
        data = {
            "id": self.id,
            "name": self.name,
            "registrar": self.registrar,
            "registrationDate": self.registration_date,
            "expirationDate": self.expiration_date,
            "status": self.status.value,
            "rawWhois": self.raw_whois,
            "notes": self.notes,
            "addedAt": self.added_at,
        }
        if self.last_updated is not None:
            data["lastUpdated"] = self.last_updated
        if self.update_status is not None:
            data["updateStatus"] = self.update_status.value
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Domain":
        """
        Build a record from its serialized form.

        Raises:
            KeyError: If ``id`` or ``name`` is missing
            ValueError: If ``status`` or ``updateStatus`` is not a known value
        """
        update_status = data.get("updateStatus")
        registrar = data.get("registrar")
        return cls(
            id=data["id"],
            name=data["name"],
            registrar=registrar if registrar is not None else DEFAULT_REGISTRAR,
            registration_date=data.get("registrationDate"),
            expiration_date=data.get("expirationDate"),
            status=DomainStatus(data.get("status", DomainStatus.WATCHLIST.value)),
            raw_whois=data.get("rawWhois", ""),
            notes=data.get("notes", ""),
            added_at=data.get("addedAt", 0),
            last_updated=data.get("lastUpdated"),
            update_status=UpdateStatus(update_status) if update_status else None,
        )


def create_domain(name: str, added_at: Optional[int] = None) -> Domain:
    """
    Create a fresh WATCHLIST record for an imported name.

    The name is expected to be canonical already (see DomainValidator).
    """
    return Domain(
        id=uuid.uuid4().hex,
        name=name,
        added_at=added_at if added_at is not None else now_ms(),
    )


def parse_iso_date(value: str) -> date:
    """
    Parse a calendar date in ISO ``YYYY-MM-DD`` form.

    Raises:
        ValidationError: If the value is not a valid date
    """
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        raise ValidationError(
            code="invalid_date",
            message=f"Not an ISO date (YYYY-MM-DD): {value!r}",
            details={"value": value},
        )


@dataclass
class PortfolioStats:
    """Headline counts for the portfolio."""

    total: int
    owned: int
    backorder: int
    expiring_soon: int


def days_until_expiration(domain: Domain, today: Optional[date] = None) -> Optional[int]:
    """Days until the domain expires, negative when already past, None if unknown."""
    if not domain.expiration_date:
        return None
    try:
        expires = date.fromisoformat(domain.expiration_date)
    except ValueError:
        return None
    return (expires - (today or date.today())).days


def time_until_expiration(domain: Domain, now: Optional[datetime] = None) -> Optional[float]:
    """
    Fractional days from ``now`` to UTC midnight of the expiration date.

    Returns None when the expiration date is unknown or unparseable.
    """
    if not domain.expiration_date:
        return None
    try:
        expires = date.fromisoformat(domain.expiration_date)
    except ValueError:
        return None
    expires_at = datetime(expires.year, expires.month, expires.day, tzinfo=timezone.utc)
    elapsed = expires_at - (now or datetime.now(timezone.utc))
    return elapsed.total_seconds() / SECONDS_PER_DAY


def compute_stats(domains: Iterable[Domain], now: Optional[datetime] = None) -> PortfolioStats:
    """
    Count records by ownership status and those expiring within 30 days.

    A record is expiring soon when strictly between 0 and 30 fractional days
    remain until UTC midnight of its expiration date.
    """
    domains = list(domains)
    now = now or datetime.now(timezone.utc)
    expiring = 0
    for domain in domains:
        days = time_until_expiration(domain, now)
        if days is not None and 0 < days < EXPIRING_SOON_DAYS:
            expiring += 1
    return PortfolioStats(
        total=len(domains),
        owned=sum(1 for d in domains if d.status == DomainStatus.OWNED),
        backorder=sum(1 for d in domains if d.status == DomainStatus.BACKORDER),
        expiring_soon=expiring,
    )
