"""
Refresh Orchestrator for the domain portfolio tracker.

Drives the RDAP client over an ordered snapshot of tracked domains:
- strictly one lookup at a time, in the original order
- a fixed pause after every item, the last one included
- a progress callback before each lookup
- a per-item callback with the merged record right after each lookup

The per-item callback is the primary channel for keeping a store live
during a long batch; the returned list is only complete once every item
has been processed.
"""

import asyncio
import time
from dataclasses import replace
from typing import Callable, Optional, Protocol

from .audit_logger import AuditLogger
from .models import Domain, now_ms
from .rdap_client import LookupResult


ProgressCallback = Callable[[int, int, str], None]
ItemUpdatedCallback = Callable[[Domain], None]

COMPONENT = "RefreshOrchestrator"


class DomainLookup(Protocol):
    """Anything that can look up a domain name, e.g. RDAPClient."""

    async def lookup(self, domain: str) -> Optional[LookupResult]:
        ...


def merge_lookup_result(
    domain: Domain,
    result: LookupResult,
    updated_at: Optional[int] = None,
) -> Domain:
    """
    Merge a lookup result over a copy of the record.

    Field-level overwrite: only the fields the result resolved change, plus
    ``raw_whois``, ``update_status`` and ``last_updated``. Ownership status,
    notes and identity fields are never touched.
    """
    return replace(
        domain,
        **result.to_update(),
        last_updated=updated_at if updated_at is not None else now_ms(),
    )


REFRESH_FIELDS = ("raw_whois", "update_status", "last_updated")
RESOLVED_FIELDS = ("registration_date", "expiration_date", "registrar")


def rebase_refreshed(current: Domain, original: Domain, refreshed: Domain) -> Domain:
    """
    Carry a refresh's changes onto the current stored version of a record.

    ``original`` is the record the lookup started from and ``refreshed`` the
    merged result. The refresh fields always move over; registrar and dates
    only when the lookup changed them. Everything else comes from ``current``.
    """
    changes = {name: getattr(refreshed, name) for name in REFRESH_FIELDS}
    for name in RESOLVED_FIELDS:
        if getattr(refreshed, name) != getattr(original, name):
            changes[name] = getattr(refreshed, name)
    return replace(current, **changes)


class RefreshOrchestrator:
    """Sequential bulk refresh over a snapshot of domain records."""

    def __init__(
        self,
        client: DomainLookup,
        delay_seconds: float = 1.0,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        """
        Initialize the orchestrator.

        Args:
            client: Lookup provider, normally an RDAPClient
            delay_seconds: Pause after every item, including the last
            logger: Optional audit logger
        """
        self._client = client
        self._delay_seconds = delay_seconds
        self._logger = logger

    @property
    def delay_seconds(self) -> float:
        return self._delay_seconds

    async def refresh_all(
        self,
        domains: list[Domain],
        on_progress: ProgressCallback,
        on_item_updated: Optional[ItemUpdatedCallback] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> list[Domain]:
        """
        Refresh every domain in order and return the updated collection.

        Exceptions raised by the client are not caught here: they abort the
        batch, leaving already-emitted records updated and the rest as they
        were. Setting ``cancel_event`` stops the run before the next item.
        """
        updated = list(domains)
        total = len(updated)
        start_time = time.perf_counter()
        refreshed = 0

        self._log_info(
            f"Starting refresh of {total} domain(s)",
            {"total": total, "delay_seconds": self._delay_seconds},
        )

        for index, domain in enumerate(updated):
            if cancel_event is not None and cancel_event.is_set():
                self._log_info(
                    "Refresh cancelled",
                    {"processed": index, "total": total},
                )
                break

            on_progress(index + 1, total, domain.name)

            result = await self._client.lookup(domain.name)

            if result is not None:
                merged = merge_lookup_result(domain, result)
                updated[index] = merged
                refreshed += 1
                self._log_info(
                    f"{domain.name}: {result.outcome.value}",
                    {
                        "domain": domain.name,
                        "outcome": result.outcome.value,
                        "update_status": result.update_status.value,
                    },
                )
                if on_item_updated is not None:
                    on_item_updated(merged)

            await asyncio.sleep(self._delay_seconds)

        self._log_info(
            "Refresh completed",
            {
                "total": total,
                "refreshed": refreshed,
                "duration_ms": (time.perf_counter() - start_time) * 1000,
            },
        )
        return updated

    def _log_info(self, message: str, data: dict) -> None:
        if self._logger:
            self._logger.info(COMPONENT, message, data)
