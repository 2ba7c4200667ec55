"""
Command-line interface for the domain portfolio tracker.

This module provides the main CLI entry point with commands for:
- add / import: Track new domains (deduplicated by name)
- list / show / stats: Inspect the portfolio
- set / remove: Manual edits
- refresh: Bulk RDAP refresh with live progress
- config: Configuration management
"""

import argparse
import asyncio
import sys
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Optional

from . import __version__
from .audit_logger import AuditLogger
from .config import (
    DEFAULT_CONFIG_PATH,
    AppConfig,
    StorageConfig,
    apply_env_overrides,
    create_default_config,
    load_config_from_file,
    save_config_to_file,
    validate_config,
)
from .domain_store import (
    DomainStore,
    add_unique,
    get_by_name,
    parse_domain_names,
    remove_by_id,
    replace_by_id,
)
from .enums import DomainStatus, UpdateStatus
from .exceptions import (
    ConfigurationError,
    DomainNotFoundError,
    PersistenceError,
    ValidationError,
)
from .i18n import SUPPORTED_LANGUAGES, get_message
from .models import Domain, compute_stats, days_until_expiration, parse_iso_date
from .orchestrator import RefreshOrchestrator, rebase_refreshed
from .rdap_client import RDAPClient


def resolve_config(args: argparse.Namespace) -> AppConfig:
    """
    Build the effective configuration for a command.

    Raises:
        ConfigurationError: If the config file or resulting values are invalid
    """
    config_path = Path(args.config) if args.config else DEFAULT_CONFIG_PATH
    config = load_config_from_file(config_path) or create_default_config()
    config = apply_env_overrides(config)

    if args.store:
        config = replace(config, storage=StorageConfig(file_path=Path(args.store)))
    if args.language:
        config = replace(config, language=args.language)

    validate_config(config)
    return config


def create_logger(config: AppConfig, verbose: bool) -> Optional[AuditLogger]:
    """Logging is only shown with --verbose."""
    if not verbose:
        return None
    return AuditLogger.from_level_name(
        config.logging.level,
        output_format=config.logging.output_format,
    )


def format_timestamp(epoch_ms: Optional[int]) -> str:
    if epoch_ms is None:
        return "-"
    return datetime.fromtimestamp(epoch_ms / 1000).strftime("%Y-%m-%d %H:%M")


def format_update_status(domain: Domain, language: str) -> str:
    if domain.update_status is None:
        return get_message("update.never", language)
    return get_message(f"update.{domain.update_status.value}", language)


def format_expiration(domain: Domain) -> str:
    if not domain.expiration_date:
        return "-"
    days = days_until_expiration(domain)
    if days is None:
        return domain.expiration_date
    return f"{domain.expiration_date} ({days:+d}d)"


def print_domain(domain: Domain, language: str) -> None:
    """Print every field of a record, one per line."""
    rows = [
        ("field.name", domain.name),
        ("field.status", get_message(f"status.{domain.status.value}", language)),
        ("field.registrar", domain.registrar),
        ("field.registration_date", domain.registration_date or "-"),
        ("field.expiration_date", format_expiration(domain)),
        ("field.added_at", format_timestamp(domain.added_at)),
        ("field.last_updated", format_timestamp(domain.last_updated)),
        ("field.update_status", format_update_status(domain, language)),
        ("field.notes", domain.notes or "-"),
    ]
    width = max(len(get_message(key, language)) for key, _ in rows)
    for key, value in rows:
        print(f"{get_message(key, language):<{width}}  {value}")


def import_names(store: DomainStore, text: str, language: str) -> int:
    """
    Add the names in ``text`` to the store.

    Returns:
        Exit code (0 if at least one name was valid, 1 otherwise)
    """
    new_domains, rejected = parse_domain_names(text)
    for result in rejected:
        print(
            get_message(
                "cli.invalid_name",
                language,
                name=result.error.details.get("raw_input", ""),
                error=result.error.message,
            ),
            file=sys.stderr,
        )

    domains = store.load()
    merged, skipped = add_unique(domains, new_domains)
    store.save(merged)

    print(get_message("cli.added", language, count=len(merged) - len(domains)))
    if skipped:
        print(get_message("cli.skipped_duplicates", language, count=len(skipped)))

    return 0 if new_domains or not rejected else 1


async def refresh_domains(
    store: DomainStore,
    config: AppConfig,
    names: Optional[list[str]] = None,
    delay_seconds: Optional[float] = None,
    logger: Optional[AuditLogger] = None,
) -> int:
    """
    Refresh RDAP data for all (or the named) tracked domains.

    Every updated record is folded into the store and saved as soon as it
    arrives, so an aborted run keeps the records already refreshed. The
    store is re-read for each item and only the refreshed fields are
    applied, so edits made meanwhile survive. A record removed meanwhile
    stays removed.

    Returns:
        Exit code (0 on completion, 1 if the batch was aborted)
    """
    language = config.language
    domains = store.load()

    targets = [get_by_name(domains, name) for name in names] if names else domains
    if not targets:
        print(get_message("cli.no_domains", language))
        return 0

    saved: list[Domain] = []

    def on_progress(current: int, total: int, domain_name: str) -> None:
        print(get_message(
            "cli.updating", language, current=current, total=total, domain=domain_name
        ))

    originals = {d.id: d for d in targets}

    def on_item_updated(updated: Domain) -> None:
        current_domains = store.load()
        current = next((d for d in current_domains if d.id == updated.id), None)
        if current is None:
            return
        rebased = rebase_refreshed(current, originals[updated.id], updated)
        store.save(replace_by_id(current_domains, rebased))
        saved.append(rebased)
        print(f"  {rebased.name}: {format_update_status(rebased, language)}")

    client = RDAPClient(
        base_url=config.rdap.base_url,
        timeout=config.rdap.timeout_seconds,
        unsupported_tlds=config.rdap.unsupported_tlds,
        logger=logger,
    )
    orchestrator = RefreshOrchestrator(
        client,
        delay_seconds=(
            delay_seconds if delay_seconds is not None else config.refresh.delay_seconds
        ),
        logger=logger,
    )

    async with client:
        try:
            await orchestrator.refresh_all(targets, on_progress, on_item_updated)
        except Exception as e:
            if logger:
                logger.log_error("CLI", "Refresh aborted", error=e)
            print(get_message("cli.refresh_failed", language, error=e), file=sys.stderr)
            print(get_message("cli.refresh_interrupted", language, count=len(saved)))
            return 1

    manual = sum(1 for d in saved if d.update_status == UpdateStatus.MANUAL_CHECK)
    print(get_message("cli.refresh_done", language, count=len(saved), manual=manual))
    return 0


def cmd_add(args: argparse.Namespace) -> int:
    """Handle the 'add' command."""
    config = resolve_config(args)
    store = DomainStore(config.storage.file_path)
    return import_names(store, "\n".join(args.names), config.language)


def cmd_import(args: argparse.Namespace) -> int:
    """Handle the 'import' command."""
    config = resolve_config(args)
    store = DomainStore(config.storage.file_path)

    if args.file == "-":
        text = sys.stdin.read()
    else:
        try:
            with open(args.file, "r", encoding="utf-8") as f:
                text = f.read()
        except OSError as e:
            print(
                get_message(
                    "cli.read_failed", config.language, path=args.file, error=e.strerror or e
                ),
                file=sys.stderr,
            )
            return 1

    return import_names(store, text, config.language)


def cmd_list(args: argparse.Namespace) -> int:
    """Handle the 'list' command."""
    config = resolve_config(args)
    language = config.language
    domains = DomainStore(config.storage.file_path).load()

    if not domains:
        print(get_message("cli.no_domains", language))
        return 0

    width = max(len(d.name) for d in domains)
    for domain in domains:
        status = get_message(f"status.{domain.status.value}", language)
        print(
            f"{domain.name:<{width}}  {status:<10}  {domain.registrar:<24.24}  "
            f"{format_expiration(domain):<20}  {format_update_status(domain, language)}"
        )
    return 0


def cmd_show(args: argparse.Namespace) -> int:
    """Handle the 'show' command."""
    config = resolve_config(args)
    domain = get_by_name(DomainStore(config.storage.file_path).load(), args.name)

    if args.raw:
        print(domain.raw_whois)
    else:
        print_domain(domain, config.language)
    return 0


def _date_arg(value: Optional[str]) -> Optional[str]:
    # An empty string clears the date
    if value == "":
        return None
    return parse_iso_date(value).isoformat()


def cmd_set(args: argparse.Namespace) -> int:
    """Handle the 'set' command."""
    config = resolve_config(args)
    language = config.language
    store = DomainStore(config.storage.file_path)
    domains = store.load()
    domain = get_by_name(domains, args.name)

    changes = {}
    if args.status is not None:
        changes["status"] = DomainStatus(args.status)
    if args.registrar is not None:
        changes["registrar"] = args.registrar
    if args.registration_date is not None:
        changes["registration_date"] = _date_arg(args.registration_date)
    if args.expiration_date is not None:
        changes["expiration_date"] = _date_arg(args.expiration_date)
    if args.notes is not None:
        changes["notes"] = args.notes

    if not changes:
        print(get_message("cli.nothing_changed", language))
        return 0

    store.save(replace_by_id(domains, replace(domain, **changes)))
    print(get_message("cli.updated", language, domain=domain.name))
    return 0


def cmd_remove(args: argparse.Namespace) -> int:
    """Handle the 'remove' command."""
    config = resolve_config(args)
    store = DomainStore(config.storage.file_path)
    domains = store.load()
    domain = get_by_name(domains, args.name)

    store.save(remove_by_id(domains, domain.id))
    print(get_message("cli.removed", config.language, domain=domain.name))
    return 0


def cmd_refresh(args: argparse.Namespace) -> int:
    """Handle the 'refresh' command."""
    config = resolve_config(args)
    logger = create_logger(config, args.verbose)

    return asyncio.run(refresh_domains(
        store=DomainStore(config.storage.file_path),
        config=config,
        names=args.names,
        delay_seconds=args.delay,
        logger=logger,
    ))


def cmd_stats(args: argparse.Namespace) -> int:
    """Handle the 'stats' command."""
    config = resolve_config(args)
    language = config.language
    stats = compute_stats(DomainStore(config.storage.file_path).load())

    rows = [
        ("stats.total", stats.total),
        ("stats.owned", stats.owned),
        ("stats.backorder", stats.backorder),
        ("stats.expiring_soon", stats.expiring_soon),
    ]
    width = max(len(get_message(key, language)) for key, _ in rows)
    for key, value in rows:
        print(f"{get_message(key, language):<{width}}  {value}")
    return 0


def cmd_config(args: argparse.Namespace) -> int:
    """Handle the 'config' command."""
    config_path = Path(args.config) if args.config else DEFAULT_CONFIG_PATH
    language = args.language

    if args.action == "show":
        config = load_config_from_file(config_path)
        if config is None:
            print(get_message("config.missing", language, path=config_path))
            return 1

        print(f"Configuration from: {config_path}")
        print(f"  Language: {config.language}")
        print(f"  RDAP resolver: {config.rdap.base_url}")
        print(f"  Timeout: {config.rdap.timeout_seconds}s")
        print(f"  Unsupported TLDs: {', '.join(config.rdap.unsupported_tlds) or '-'}")
        print(f"  Refresh delay: {config.refresh.delay_seconds}s")
        print(f"  Store file: {config.storage.file_path}")
        print(f"  Log level: {config.logging.level}")
        return 0

    elif args.action == "init":
        if config_path.exists() and not args.force:
            print(get_message("config.exists", language, path=config_path))
            return 1

        config = create_default_config(
            language=language or "en",
            store_path=Path(args.store) if args.store else None,
        )
        save_config_to_file(config, config_path)
        print(get_message("config.created", language, path=config_path))
        return 0

    elif args.action == "validate":
        if load_config_from_file(config_path) is None:
            print(get_message("config.missing", language, path=config_path))
            return 1

        print(get_message("config.valid", language, path=config_path))
        return 0

    return 1


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config", "-c",
        help="Path to configuration file",
    )
    common.add_argument(
        "--store", "-s",
        help="Path to the domain store file",
    )
    common.add_argument(
        "--language", "-l",
        choices=sorted(SUPPORTED_LANGUAGES),
        default=None,
        help="Output language (default: from config, else en)",
    )
    common.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output",
    )

    parser = argparse.ArgumentParser(
        prog="domain-portfolio",
        description="Track a portfolio of domain names and refresh their RDAP data",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    add_parser = subparsers.add_parser(
        "add", parents=[common], help="Track one or more domains",
    )
    add_parser.add_argument("names", nargs="+", help="Domain names (e.g., example.com)")
    add_parser.set_defaults(func=cmd_add)

    import_parser = subparsers.add_parser(
        "import", parents=[common],
        help="Track domains from a file (one per line or comma-separated)",
    )
    import_parser.add_argument("file", help="Path to the file, or - for stdin")
    import_parser.set_defaults(func=cmd_import)

    list_parser = subparsers.add_parser(
        "list", parents=[common], help="List tracked domains",
    )
    list_parser.set_defaults(func=cmd_list)

    show_parser = subparsers.add_parser(
        "show", parents=[common], help="Show one domain",
    )
    show_parser.add_argument("name", help="Domain name")
    show_parser.add_argument(
        "--raw",
        action="store_true",
        help="Print only the raw WHOIS/RDAP record",
    )
    show_parser.set_defaults(func=cmd_show)

    set_parser = subparsers.add_parser(
        "set", parents=[common], help="Edit a domain by hand",
    )
    set_parser.add_argument("name", help="Domain name")
    set_parser.add_argument(
        "--status",
        choices=[status.value for status in DomainStatus],
        help="Ownership status",
    )
    set_parser.add_argument("--registrar", help="Registrar name")
    set_parser.add_argument(
        "--registration-date",
        help="Registration date (YYYY-MM-DD, empty to clear)",
    )
    set_parser.add_argument(
        "--expiration-date",
        help="Expiration date (YYYY-MM-DD, empty to clear)",
    )
    set_parser.add_argument("--notes", help="Free-text notes")
    set_parser.set_defaults(func=cmd_set)

    remove_parser = subparsers.add_parser(
        "remove", parents=[common], help="Stop tracking a domain",
    )
    remove_parser.add_argument("name", help="Domain name")
    remove_parser.set_defaults(func=cmd_remove)

    refresh_parser = subparsers.add_parser(
        "refresh", parents=[common],
        help="Fetch RDAP data for all (or the named) domains, one at a time",
    )
    refresh_parser.add_argument("names", nargs="*", help="Only refresh these domains")
    refresh_parser.add_argument(
        "--delay",
        type=float,
        default=None,
        help="Seconds to wait after each lookup (default: from config, 1.0)",
    )
    refresh_parser.set_defaults(func=cmd_refresh)

    stats_parser = subparsers.add_parser(
        "stats", parents=[common], help="Show portfolio statistics",
    )
    stats_parser.set_defaults(func=cmd_stats)

    config_parser = subparsers.add_parser(
        "config", parents=[common], help="Configuration management",
    )
    config_parser.add_argument(
        "action",
        choices=["show", "init", "validate"],
        help="Configuration action",
    )
    config_parser.add_argument(
        "--force", "-f",
        action="store_true",
        help="Force overwrite existing configuration",
    )
    config_parser.set_defaults(func=cmd_config)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    language = args.language
    try:
        return args.func(args)
    except ConfigurationError as e:
        print(get_message("error.config", language, error=e.message), file=sys.stderr)
    except PersistenceError as e:
        print(get_message("error.persistence", language, error=e.message), file=sys.stderr)
    except DomainNotFoundError as e:
        print(
            get_message("cli.not_tracked", language, domain=e.details.get("name", "")),
            file=sys.stderr,
        )
    except ValidationError as e:
        print(get_message("error.validation", language, error=e.message), file=sys.stderr)
    return 1


if __name__ == "__main__":
    sys.exit(main())
