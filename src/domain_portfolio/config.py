"""
Configuration for the domain portfolio tracker.

Defines the configuration dataclasses, JSON config file loading and saving,
and environment overrides (a ``.env`` file is honoured via python-dotenv).
Precedence: defaults, then config file, then environment, then CLI flags.
"""

import json
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

from dotenv import find_dotenv, load_dotenv

from .exceptions import ConfigurationError
from .i18n import SUPPORTED_LANGUAGES


DEFAULT_HOME = Path.home() / ".domain_portfolio"
DEFAULT_CONFIG_PATH = DEFAULT_HOME / "config.json"
DEFAULT_STORE_PATH = DEFAULT_HOME / "domains.json"
DEFAULT_RDAP_URL = "https://rdap.org"

SUPPORTED_OUTPUT_FORMATS = ("json", "text", "both")
SUPPORTED_LOG_LEVELS = ("debug", "info", "warn", "error")

ENV_RDAP_URL = "DOMAIN_PORTFOLIO_RDAP_URL"
ENV_TIMEOUT = "DOMAIN_PORTFOLIO_TIMEOUT"
ENV_DELAY = "DOMAIN_PORTFOLIO_DELAY"
ENV_STORE = "DOMAIN_PORTFOLIO_STORE"
ENV_LANG = "DOMAIN_PORTFOLIO_LANG"
ENV_LOG_LEVEL = "DOMAIN_PORTFOLIO_LOG_LEVEL"


@dataclass
class RDAPConfig:
    """Public RDAP resolver settings."""

    base_url: str = DEFAULT_RDAP_URL
    timeout_seconds: float = 10.0
    # TLDs the public resolver is known not to serve; looked up by hand instead
    unsupported_tlds: list[str] = field(default_factory=lambda: ["cn"])


@dataclass
class RefreshConfig:
    """Pacing of the bulk refresh."""

    delay_seconds: float = 1.0


@dataclass
class StorageConfig:
    """Location of the domain store file."""

    file_path: Path = DEFAULT_STORE_PATH


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "info"
    output_format: str = "text"  # 'json', 'text', 'both'


@dataclass
class AppConfig:
    """Main configuration combining all sub-configurations."""

    rdap: RDAPConfig = field(default_factory=RDAPConfig)
    refresh: RefreshConfig = field(default_factory=RefreshConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    language: str = "en"  # 'en' or 'zh'


def create_default_config(
    language: str = "en",
    store_path: Optional[Path] = None,
) -> AppConfig:
    """Create a configuration with default settings."""
    return AppConfig(
        storage=StorageConfig(file_path=store_path or DEFAULT_STORE_PATH),
        language=language,
    )


def config_from_dict(data: dict) -> AppConfig:
    """
    Build an AppConfig from parsed JSON, falling back to defaults per key.

    Raises:
        ConfigurationError: If a section has the wrong shape
    """
    try:
        rdap_data = data.get("rdap", {})
        refresh_data = data.get("refresh", {})
        storage_data = data.get("storage", {})
        logging_data = data.get("logging", {})

        store_path = storage_data.get("file_path")
        return AppConfig(
            rdap=RDAPConfig(
                base_url=rdap_data.get("base_url", DEFAULT_RDAP_URL),
                timeout_seconds=float(rdap_data.get("timeout_seconds", 10.0)),
                unsupported_tlds=list(rdap_data.get("unsupported_tlds", ["cn"])),
            ),
            refresh=RefreshConfig(
                delay_seconds=float(refresh_data.get("delay_seconds", 1.0)),
            ),
            storage=StorageConfig(
                file_path=Path(store_path).expanduser() if store_path else DEFAULT_STORE_PATH,
            ),
            logging=LoggingConfig(
                level=logging_data.get("level", "info"),
                output_format=logging_data.get("output_format", "text"),
            ),
            language=data.get("language", "en"),
        )
    except (AttributeError, TypeError, ValueError) as e:
        raise ConfigurationError(
            code="invalid_config",
            message=f"Invalid configuration: {e}",
        )


def config_to_dict(config: AppConfig) -> dict:
    """Serialize an AppConfig to plain JSON-compatible data."""
    return {
        "rdap": {
            "base_url": config.rdap.base_url,
            "timeout_seconds": config.rdap.timeout_seconds,
            "unsupported_tlds": list(config.rdap.unsupported_tlds),
        },
        "refresh": {
            "delay_seconds": config.refresh.delay_seconds,
        },
        "storage": {
            "file_path": str(config.storage.file_path),
        },
        "logging": {
            "level": config.logging.level,
            "output_format": config.logging.output_format,
        },
        "language": config.language,
    }


def load_config_from_file(config_path: Path) -> Optional[AppConfig]:
    """
    Load configuration from a JSON file.

    Returns:
        AppConfig if the file exists, None otherwise

    Raises:
        ConfigurationError: If the file cannot be parsed or is invalid
    """
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        return None
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(
            code="unreadable_config",
            message=f"Could not read config {config_path}: {e}",
            details={"path": str(config_path)},
        )

    if not isinstance(data, dict):
        raise ConfigurationError(
            code="invalid_config",
            message="Configuration root must be a JSON object",
            details={"path": str(config_path)},
        )

    config = config_from_dict(data)
    validate_config(config)
    return config


def save_config_to_file(config: AppConfig, config_path: Path) -> None:
    """
    Save configuration to a JSON file.

    Raises:
        ConfigurationError: If the file cannot be written
    """
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(config_to_dict(config), f, indent=2, ensure_ascii=False)
    except OSError as e:
        raise ConfigurationError(
            code="unwritable_config",
            message=f"Could not write config {config_path}: {e}",
            details={"path": str(config_path)},
        )


def _float_env(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except ValueError:
        raise ConfigurationError(
            code="invalid_env",
            message=f"{name} must be a number",
            details={"variable": name, "value": os.getenv(name)},
        )


def apply_env_overrides(config: AppConfig, dotenv_path: Optional[Path] = None) -> AppConfig:
    """
    Return a copy of ``config`` with environment variables applied.

    A ``.env`` file in the working directory (or ``dotenv_path``) is loaded
    first; variables already set in the process environment win over it.
    """
    load_dotenv(dotenv_path=dotenv_path or find_dotenv(usecwd=True))

    rdap = replace(
        config.rdap,
        base_url=os.getenv(ENV_RDAP_URL, config.rdap.base_url),
        timeout_seconds=_float_env(ENV_TIMEOUT, config.rdap.timeout_seconds),
    )
    refresh = replace(
        config.refresh,
        delay_seconds=_float_env(ENV_DELAY, config.refresh.delay_seconds),
    )
    store = os.getenv(ENV_STORE)
    storage = replace(
        config.storage,
        file_path=Path(store).expanduser() if store else config.storage.file_path,
    )
    logging_config = replace(
        config.logging,
        level=(os.getenv(ENV_LOG_LEVEL) or config.logging.level).lower(),
    )
    return replace(
        config,
        rdap=rdap,
        refresh=refresh,
        storage=storage,
        logging=logging_config,
        language=(os.getenv(ENV_LANG) or config.language).lower(),
    )


def validate_config(config: AppConfig) -> None:
    """
    Check configuration values.

    Raises:
        ConfigurationError: On the first invalid value found
    """
    if urlparse(config.rdap.base_url).scheme.lower() != "https":
        raise ConfigurationError(
            code="insecure_endpoint",
            message=f"RDAP resolver must use HTTPS: {config.rdap.base_url}",
            details={"base_url": config.rdap.base_url},
        )
    if config.rdap.timeout_seconds <= 0:
        raise ConfigurationError(
            code="invalid_timeout",
            message="RDAP timeout must be positive",
            details={"timeout_seconds": config.rdap.timeout_seconds},
        )
    if config.refresh.delay_seconds < 0:
        raise ConfigurationError(
            code="invalid_delay",
            message="Refresh delay must not be negative",
            details={"delay_seconds": config.refresh.delay_seconds},
        )
    if config.logging.level not in SUPPORTED_LOG_LEVELS:
        raise ConfigurationError(
            code="invalid_log_level",
            message=f"Unknown log level: {config.logging.level}",
            details={"supported": list(SUPPORTED_LOG_LEVELS)},
        )
    if config.logging.output_format not in SUPPORTED_OUTPUT_FORMATS:
        raise ConfigurationError(
            code="invalid_output_format",
            message=f"Unknown log output format: {config.logging.output_format}",
            details={"supported": list(SUPPORTED_OUTPUT_FORMATS)},
        )
    if config.language not in SUPPORTED_LANGUAGES:
        raise ConfigurationError(
            code="invalid_language",
            message=f"Unsupported language: {config.language}",
            details={"supported": sorted(SUPPORTED_LANGUAGES)},
        )
