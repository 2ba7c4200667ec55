"""
Property-based tests for the refresh orchestrator.

A fake lookup client stands in for RDAPClient so the tests exercise the
sequencing, callbacks, pacing and merge rules without any HTTP.
"""

import asyncio
import string
import time
from dataclasses import replace
from typing import Optional
from unittest.mock import patch

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from domain_portfolio.enums import DomainStatus, LookupOutcome, UpdateStatus
from domain_portfolio.models import Domain, create_domain
from domain_portfolio.orchestrator import (
    RefreshOrchestrator,
    merge_lookup_result,
    rebase_refreshed,
)
from domain_portfolio.rdap_client import LookupResult


class FakeLookupClient:
    """Answers lookups from a fixed table and records the call order."""

    def __init__(
        self,
        results: Optional[dict[str, LookupResult]] = None,
        fail_on: Optional[str] = None,
    ) -> None:
        self._results = results or {}
        self._fail_on = fail_on
        self.calls: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def lookup(self, domain: str) -> Optional[LookupResult]:
        self.calls.append(domain)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0)
            if domain == self._fail_on:
                raise RuntimeError(f"lookup exploded for {domain}")
            return self._results.get(domain, success_result(domain))
        finally:
            self.in_flight -= 1


def success_result(domain: str, registrar: Optional[str] = "Example Registrar, Inc.") -> LookupResult:
    return LookupResult(
        domain=domain,
        outcome=LookupOutcome.SUCCESS,
        raw_whois='{"ldhName": "%s"}' % domain,
        registration_date="2020-01-15",
        expiration_date="2030-01-15",
        registrar=registrar,
    )


def manual_check_result(domain: str) -> LookupResult:
    return LookupResult(
        domain=domain,
        outcome=LookupOutcome.NOT_FOUND,
        raw_whois="Whois lookup failed or not supported for this TLD (Status: 404)",
        http_status_code=404,
    )


def run_refresh(orchestrator: RefreshOrchestrator, domains: list[Domain], **kwargs):
    progress: list[tuple[int, int, str]] = []
    updated: list[Domain] = []

    result = asyncio.run(orchestrator.refresh_all(
        domains,
        lambda current, total, name: progress.append((current, total, name)),
        updated.append,
        **kwargs,
    ))
    return result, progress, updated


@st.composite
def domain_list_strategy(draw, max_size: int = 8) -> list[Domain]:
    """Generate records with unique names and arbitrary ownership status."""
    labels = draw(st.lists(
        st.text(alphabet=string.ascii_lowercase + string.digits, min_size=1, max_size=12),
        max_size=max_size,
        unique=True,
    ))
    domains = []
    for label in labels:
        domain = create_domain(f"{label}.{draw(st.sampled_from(['com', 'net', 'org', 'cn']))}")
        domain.status = draw(st.sampled_from(list(DomainStatus)))
        domain.registrar = draw(st.sampled_from(["Unknown", "GoDaddy", "Namecheap"]))
        domains.append(domain)
    return domains


class TestSequentialRefreshProperty:
    """
    Property 1: One lookup at a time, in order, with one progress call and
    one update callback per domain.
    """

    @given(domains=domain_list_strategy())
    @settings(max_examples=50, deadline=None)
    def test_progress_and_updates_per_domain(self, domains: list[Domain]) -> None:
        client = FakeLookupClient()
        orchestrator = RefreshOrchestrator(client, delay_seconds=0)

        result, progress, updated = run_refresh(orchestrator, domains)

        total = len(domains)
        assert progress == [(i + 1, total, d.name) for i, d in enumerate(domains)]
        assert [d.id for d in updated] == [d.id for d in domains]
        assert client.calls == [d.name for d in domains]
        assert client.max_in_flight <= 1
        assert result == updated

    @given(domains=domain_list_strategy())
    @settings(max_examples=50, deadline=None)
    def test_refresh_never_touches_ownership_or_identity(self, domains: list[Domain]) -> None:
        results = {d.name: manual_check_result(d.name) for d in domains[::2]}
        orchestrator = RefreshOrchestrator(FakeLookupClient(results), delay_seconds=0)

        result, _, _ = run_refresh(orchestrator, domains)

        for before, after in zip(domains, result):
            assert after.status == before.status
            assert after.id == before.id
            assert after.name == before.name
            assert after.notes == before.notes
            assert after.added_at == before.added_at
            assert after.last_updated is not None
            assert after.update_status is not None

    def test_empty_collection(self) -> None:
        client = FakeLookupClient()
        result, progress, updated = run_refresh(
            RefreshOrchestrator(client, delay_seconds=0), []
        )

        assert result == []
        assert progress == []
        assert updated == []
        assert client.calls == []

    def test_input_is_snapshotted(self) -> None:
        domains = [create_domain("a.com"), create_domain("b.com")]
        progress: list[tuple[int, int, str]] = []

        def on_progress(current: int, total: int, name: str) -> None:
            progress.append((current, total, name))
            domains.append(create_domain(f"late{current}.com"))

        orchestrator = RefreshOrchestrator(FakeLookupClient(), delay_seconds=0)
        result = asyncio.run(orchestrator.refresh_all(domains, on_progress))

        assert progress == [(1, 2, "a.com"), (2, 2, "b.com")]
        assert [d.name for d in result] == ["a.com", "b.com"]

    def test_none_result_leaves_record_and_skips_callback(self) -> None:
        class NoDataClient:
            async def lookup(self, domain: str) -> Optional[LookupResult]:
                return None

        domain = create_domain("a.com")
        result, progress, updated = run_refresh(
            RefreshOrchestrator(NoDataClient(), delay_seconds=0), [domain]
        )

        assert progress == [(1, 1, "a.com")]
        assert updated == []
        assert result == [domain]


class TestPacingProperty:
    """
    Property 2: A batch of N domains takes at least N x delay, the pause
    following every item including the last.
    """

    @given(count=st.integers(min_value=1, max_value=4))
    @settings(max_examples=5, deadline=None)
    def test_batch_takes_at_least_n_delays(self, count: int) -> None:
        delay = 0.02
        domains = [create_domain(f"site{i}.com") for i in range(count)]
        orchestrator = RefreshOrchestrator(FakeLookupClient(), delay_seconds=delay)

        start = time.monotonic()
        run_refresh(orchestrator, domains)
        elapsed = time.monotonic() - start

        resolution = time.get_clock_info("monotonic").resolution
        assert elapsed >= count * delay - count * resolution, (
            f"{count} domains refreshed in {elapsed:.3f}s, expected >= {count * delay:.3f}s"
        )

    def test_delay_follows_every_item(self) -> None:
        events: list[str] = []
        real_sleep = asyncio.sleep

        class TracingClient(FakeLookupClient):
            async def lookup(self, domain: str) -> Optional[LookupResult]:
                events.append(f"lookup:{domain}")
                return await super().lookup(domain)

        async def traced_sleep(seconds: float) -> None:
            events.append(f"sleep:{seconds}")
            await real_sleep(0)

        async def go() -> None:
            orchestrator = RefreshOrchestrator(TracingClient(), delay_seconds=1.0)
            with patch("domain_portfolio.orchestrator.asyncio.sleep", traced_sleep):
                await orchestrator.refresh_all(
                    [create_domain("a.com"), create_domain("b.com")],
                    lambda *args: None,
                )

        asyncio.run(go())

        assert [e for e in events if not e.startswith("sleep:0")] == [
            "lookup:a.com", "sleep:1.0", "lookup:b.com", "sleep:1.0",
        ]


class TestMergeProperty:
    """
    Property 3: Merging is a field-level overwrite, not a record replacement.
    """

    def test_missing_registrar_keeps_previous_value(self) -> None:
        domain = create_domain("example.com")
        domain.registrar = "GoDaddy"

        merged = merge_lookup_result(domain, success_result("example.com", registrar=None), 1234)

        assert merged.registrar == "GoDaddy"
        assert merged.registration_date == "2020-01-15"
        assert merged.update_status == UpdateStatus.SUCCESS
        assert merged.last_updated == 1234

    def test_manual_check_keeps_whois_fields_but_replaces_raw_text(self) -> None:
        domain = create_domain("example.com")
        domain.registrar = "GoDaddy"
        domain.expiration_date = "2027-06-01"
        domain.raw_whois = '{"old": true}'
        domain.notes = "bought at auction"

        merged = merge_lookup_result(domain, manual_check_result("example.com"), 99)

        assert merged.registrar == "GoDaddy"
        assert merged.expiration_date == "2027-06-01"
        assert merged.notes == "bought at auction"
        assert merged.raw_whois.endswith("(Status: 404)")
        assert merged.update_status == UpdateStatus.MANUAL_CHECK
        assert merged.last_updated == 99

    @given(status=st.sampled_from(list(DomainStatus)))
    @settings(max_examples=20)
    def test_merge_never_alters_status(self, status: DomainStatus) -> None:
        domain = create_domain("example.com")
        domain.status = status

        merged = merge_lookup_result(domain, success_result("example.com"))

        assert merged.status == status

    def test_merge_returns_a_copy(self) -> None:
        domain = create_domain("example.com")

        merged = merge_lookup_result(domain, success_result("example.com"))

        assert merged is not domain
        assert domain.update_status is None
        assert domain.last_updated is None


class TestRebaseProperty:
    """
    Property 4: Re-basing a refreshed record onto a concurrently edited one
    keeps the edits and applies only what the lookup produced.
    """

    @given(
        status=st.sampled_from(list(DomainStatus)),
        notes=st.text(max_size=40),
        registrar=st.text(max_size=40),
    )
    @settings(max_examples=50)
    def test_edits_made_during_lookup_survive(self, status: DomainStatus, notes: str, registrar: str) -> None:
        original = create_domain("example.com")
        refreshed = merge_lookup_result(original, success_result("example.com", registrar=None), 1234)
        current = replace(original, status=status, notes=notes, registrar=registrar)

        rebased = rebase_refreshed(current, original, refreshed)

        assert rebased.status == status
        assert rebased.notes == notes
        assert rebased.registrar == registrar
        assert rebased.registration_date == "2020-01-15"
        assert rebased.expiration_date == "2030-01-15"
        assert rebased.raw_whois == refreshed.raw_whois
        assert rebased.update_status == UpdateStatus.SUCCESS
        assert rebased.last_updated == 1234

    def test_resolved_registrar_overrides_edit(self) -> None:
        original = create_domain("example.com")
        refreshed = merge_lookup_result(original, success_result("example.com"), 1)
        current = replace(original, registrar="GoDaddy", expiration_date="2027-06-01")

        rebased = rebase_refreshed(current, original, refreshed)

        assert rebased.registrar == "Example Registrar, Inc."
        assert rebased.expiration_date == "2030-01-15"

    def test_manual_check_keeps_edited_dates(self) -> None:
        original = create_domain("example.com")
        refreshed = merge_lookup_result(original, manual_check_result("example.com"), 5)
        current = replace(original, expiration_date="2027-06-01")

        rebased = rebase_refreshed(current, original, refreshed)

        assert rebased.expiration_date == "2027-06-01"
        assert rebased.update_status == UpdateStatus.MANUAL_CHECK


class TestBatchAbortAndCancel:
    """Unexpected client errors abort the batch; cancellation stops it early."""

    def test_client_exception_aborts_batch(self) -> None:
        domains = [create_domain(n) for n in ("a.com", "b.com", "c.com", "d.com")]
        updated: list[Domain] = []
        orchestrator = RefreshOrchestrator(
            FakeLookupClient(fail_on="c.com"), delay_seconds=0
        )

        with pytest.raises(RuntimeError, match="c.com"):
            asyncio.run(orchestrator.refresh_all(domains, lambda *a: None, updated.append))

        assert [d.name for d in updated] == ["a.com", "b.com"]

    def test_cancel_event_stops_before_next_item(self) -> None:
        domains = [create_domain(n) for n in ("a.com", "b.com", "c.com")]
        client = FakeLookupClient()

        async def go() -> list[Domain]:
            cancel = asyncio.Event()

            def on_item_updated(domain: Domain) -> None:
                if domain.name == "a.com":
                    cancel.set()

            orchestrator = RefreshOrchestrator(client, delay_seconds=0)
            return await orchestrator.refresh_all(
                domains, lambda *a: None, on_item_updated, cancel_event=cancel
            )

        result = asyncio.run(go())

        assert client.calls == ["a.com"]
        assert result[0].update_status == UpdateStatus.SUCCESS
        assert result[1:] == domains[1:]
