"""
RDAP Client for the domain portfolio refresh.

This module provides an async RDAP client that looks up one domain at a
time against a public RDAP resolver, extracts registration date, expiration
date and registrar from the loosely-typed reply, and classifies the outcome.

``RDAPClient.lookup`` is total: every expected failure (unsupported TLD,
not-found status, transport or parse error) comes back as a LookupResult
tagged with its outcome and a diagnostic text in ``raw_whois``.
"""

import json
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional
from urllib.parse import urlparse

import httpx

from .audit_logger import AuditLogger
from .domain_validator import extract_tld
from .enums import LookupOutcome, UpdateStatus
from .exceptions import ConfigurationError, UnexpectedStatusError


RDAP_MEDIA_TYPE = "application/rdap+json"

# Statuses the public resolver uses for unregistered names and unserved TLDs
NOT_FOUND_STATUSES = frozenset({400, 404, 500})

COMPONENT = "RDAPClient"


@dataclass
class LookupResult:
    """
    Outcome of a single lookup.

    Only SUCCESS results carry extracted fields, and only those that were
    actually found in the reply; everything else leaves them None.
    """

    domain: str
    outcome: LookupOutcome
    raw_whois: str
    registration_date: Optional[str] = None
    expiration_date: Optional[str] = None
    registrar: Optional[str] = None
    http_status_code: Optional[int] = None
    response_time_ms: float = 0.0

    @property
    def update_status(self) -> UpdateStatus:
        if self.outcome == LookupOutcome.SUCCESS:
            return UpdateStatus.SUCCESS
        return UpdateStatus.MANUAL_CHECK

    def to_update(self) -> dict:
        """
        Fields to overwrite on the tracked record.

        ``raw_whois`` and ``update_status`` are always present; the WHOIS
        fields only when this lookup resolved them.
        """
        update: dict[str, Any] = {
            "raw_whois": self.raw_whois,
            "update_status": self.update_status,
        }
        if self.outcome == LookupOutcome.SUCCESS:
            for name in ("registration_date", "expiration_date", "registrar"):
                value = getattr(self, name)
                if value is not None:
                    update[name] = value
        return update


def _find_first(items: Any, predicate: Callable[[Any], bool]) -> Any:
    if not isinstance(items, list):
        return None
    for item in items:
        if predicate(item):
            return item
    return None


def extract_event_date(document: Any, action: str) -> Optional[str]:
    """
    Date portion of the first event whose ``eventAction`` equals ``action``.

    ``2020-01-15T00:00:00Z`` becomes ``2020-01-15``. Returns None when the
    event list, the event or its date is missing or malformed.
    """
    if not isinstance(document, dict):
        return None

    event = _find_first(
        document.get("events"),
        lambda e: isinstance(e, dict) and e.get("eventAction") == action,
    )
    if event is None:
        return None

    event_date = event.get("eventDate")
    if not isinstance(event_date, str) or not event_date:
        return None
    return event_date.split("T", 1)[0]


def extract_registrar(document: Any) -> Optional[str]:
    """
    Formatted name (vcard ``fn``) of the first entity with role "registrar".

    Only the first matching entity and its first ``fn`` item are inspected.
    A vcard item looks like ``["fn", {}, "text", "Example Registrar, Inc."]``.
    """
    if not isinstance(document, dict):
        return None

    entity = _find_first(
        document.get("entities"),
        lambda e: (
            isinstance(e, dict)
            and isinstance(e.get("roles"), list)
            and "registrar" in e["roles"]
        ),
    )
    if entity is None:
        return None

    vcard_array = entity.get("vcardArray")
    if not isinstance(vcard_array, list) or len(vcard_array) < 2:
        return None

    fn_item = _find_first(
        vcard_array[1],
        lambda item: isinstance(item, list) and len(item) > 0 and item[0] == "fn",
    )
    if fn_item is None or len(fn_item) < 4:
        return None

    name = fn_item[3]
    if not isinstance(name, str) or not name:
        return None
    return name


def _describe_error(error: BaseException) -> str:
    text = str(error)
    return text if text else type(error).__name__


class RDAPClient:
    """
    Async RDAP client for a single public resolver.

    Use as an async context manager so the underlying HTTP connection pool
    is shared across a whole refresh batch and closed afterwards.
    """

    def __init__(
        self,
        base_url: str = "https://rdap.org",
        timeout: float = 10.0,
        unsupported_tlds: Optional[list[str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        """
        Initialize the RDAP client.

        Args:
            base_url: Resolver root; lookups go to ``{base_url}/domain/{name}``
            timeout: Request timeout in seconds
            unsupported_tlds: TLDs answered locally with a manual-check result
            transport: Optional httpx transport (tests pass a MockTransport)
            logger: Optional audit logger

        Raises:
            ConfigurationError: If ``base_url`` does not use HTTPS
        """
        if urlparse(base_url).scheme.lower() != "https":
            raise ConfigurationError(
                code="insecure_endpoint",
                message=f"RDAP resolver must use HTTPS: {base_url}",
                details={"base_url": base_url},
            )

        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._unsupported_tlds = frozenset(
            tld.lower().lstrip(".")
            for tld in (unsupported_tlds if unsupported_tlds is not None else ["cn"])
        )
        self._transport = transport
        self._logger = logger
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "RDAPClient":
        self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                verify=True,
                timeout=httpx.Timeout(self._timeout),
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    @property
    def unsupported_tlds(self) -> frozenset[str]:
        return self._unsupported_tlds

    def build_url(self, domain: str) -> str:
        return f"{self._base_url}/domain/{domain}"

    def unsupported_tld_of(self, domain: str) -> Optional[str]:
        """Return the TLD if the resolver is known not to serve it."""
        tld = extract_tld(domain)
        if tld is not None and tld in self._unsupported_tlds:
            return tld
        return None

    async def lookup(self, domain: str) -> LookupResult:
        """
        Look up one (already normalized) domain name.

        Never raises for expected failures; see the module docstring.
        """
        start_time = time.perf_counter()

        tld = self.unsupported_tld_of(domain)
        if tld is not None:
            self._log_info(
                f"Skipping lookup for unsupported TLD .{tld}",
                {"domain": domain, "tld": tld},
            )
            return LookupResult(
                domain=domain,
                outcome=LookupOutcome.SKIPPED,
                raw_whois=f"{tld.upper()} domains are not supported by public RDAP services.",
                response_time_ms=self._elapsed_ms(start_time),
            )

        url = self.build_url(domain)
        client = self._ensure_client()

        try:
            response = await client.get(url, headers={"Accept": RDAP_MEDIA_TYPE})

            if response.status_code in NOT_FOUND_STATUSES:
                self._log_info(
                    f"No RDAP data for {domain}",
                    {"domain": domain, "http_status_code": response.status_code},
                )
                return LookupResult(
                    domain=domain,
                    outcome=LookupOutcome.NOT_FOUND,
                    raw_whois=(
                        "Whois lookup failed or not supported for this TLD "
                        f"(Status: {response.status_code})"
                    ),
                    http_status_code=response.status_code,
                    response_time_ms=self._elapsed_ms(start_time),
                )

            if not response.is_success:
                raise UnexpectedStatusError(response.status_code)

            payload = response.json()

        except Exception as e:
            if self._logger:
                self._logger.log_error(
                    COMPONENT,
                    f"Error fetching RDAP data for {domain}",
                    error=e,
                    request_url=url,
                    response_status_code=getattr(e, "status_code", None),
                )
            return LookupResult(
                domain=domain,
                outcome=LookupOutcome.TRANSPORT_ERROR,
                raw_whois=f"Error during fetch: {_describe_error(e)}",
                http_status_code=getattr(e, "status_code", None),
                response_time_ms=self._elapsed_ms(start_time),
            )

        result = LookupResult(
            domain=domain,
            outcome=LookupOutcome.SUCCESS,
            raw_whois=json.dumps(payload, indent=2, ensure_ascii=False),
            registration_date=extract_event_date(payload, "registration"),
            expiration_date=extract_event_date(payload, "expiration"),
            registrar=extract_registrar(payload),
            http_status_code=response.status_code,
            response_time_ms=self._elapsed_ms(start_time),
        )
        self._log_info(
            f"RDAP data retrieved for {domain}",
            {
                "domain": domain,
                "registrar": result.registrar,
                "expiration_date": result.expiration_date,
            },
        )
        return result

    def _log_info(self, message: str, data: dict) -> None:
        if self._logger:
            self._logger.info(COMPONENT, message, data)

    def _elapsed_ms(self, start_time: float) -> float:
        return (time.perf_counter() - start_time) * 1000

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
