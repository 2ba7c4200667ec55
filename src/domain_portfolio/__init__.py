"""
Domain Portfolio - track a personal portfolio of domain names.

This package keeps an ordered list of domains with ownership status,
registrar and registration/expiration dates, and refreshes that data from a
public RDAP resolver one domain at a time.
"""

__version__ = "0.1.0"
__author__ = "Domain Portfolio Team"

from domain_portfolio.exceptions import (
    DomainPortfolioError,
    ValidationError,
    ConfigurationError,
    ProtocolError,
    UnexpectedStatusError,
    PersistenceError,
    DomainNotFoundError,
)
from domain_portfolio.enums import (
    DomainStatus,
    UpdateStatus,
    LookupOutcome,
    LogLevel,
    DomainValidationErrorCode,
)
from domain_portfolio.domain_validator import (
    DomainValidator,
    DomainValidationResult,
    DomainValidationError,
)
from domain_portfolio.config import (
    RDAPConfig,
    RefreshConfig,
    StorageConfig,
    LoggingConfig,
    AppConfig,
)
from domain_portfolio.models import (
    Domain,
    PortfolioStats,
    create_domain,
    compute_stats,
)
from domain_portfolio.rdap_client import (
    RDAPClient,
    LookupResult,
    extract_event_date,
    extract_registrar,
)
from domain_portfolio.orchestrator import (
    RefreshOrchestrator,
    merge_lookup_result,
    rebase_refreshed,
)
from domain_portfolio.domain_store import (
    DomainStore,
    parse_domain_names,
)
from domain_portfolio.audit_logger import (
    AuditLogger,
    LogEntry,
)
from domain_portfolio.i18n import (
    get_message,
    SUPPORTED_LANGUAGES,
    DEFAULT_LANGUAGE,
)
from domain_portfolio.cli import (
    main as cli_main,
    create_parser,
)

__all__ = [
    # Exceptions
    "DomainPortfolioError",
    "ValidationError",
    "ConfigurationError",
    "ProtocolError",
    "UnexpectedStatusError",
    "PersistenceError",
    "DomainNotFoundError",
    # Enums
    "DomainStatus",
    "UpdateStatus",
    "LookupOutcome",
    "LogLevel",
    "DomainValidationErrorCode",
    # Domain Validator
    "DomainValidator",
    "DomainValidationResult",
    "DomainValidationError",
    # Configuration
    "RDAPConfig",
    "RefreshConfig",
    "StorageConfig",
    "LoggingConfig",
    "AppConfig",
    # Models
    "Domain",
    "PortfolioStats",
    "create_domain",
    "compute_stats",
    # RDAP Client
    "RDAPClient",
    "LookupResult",
    "extract_event_date",
    "extract_registrar",
    # Orchestrator
    "RefreshOrchestrator",
    "merge_lookup_result",
    "rebase_refreshed",
    # Store
    "DomainStore",
    "parse_domain_names",
    # Audit Logger
    "AuditLogger",
    "LogEntry",
    # I18n
    "get_message",
    "SUPPORTED_LANGUAGES",
    "DEFAULT_LANGUAGE",
    # CLI
    "cli_main",
    "create_parser",
]
