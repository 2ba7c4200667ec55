"""
Domain Store module for the tracked domain collection.

Persists the ordered list of Domain records as a JSON file and provides
the collection operations the CLI needs: id-keyed replacement, name-unique
append, removal and lookup, plus parsing of import text.
"""

import json
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional

from .domain_validator import DomainValidationResult, DomainValidator
from .exceptions import DomainNotFoundError, PersistenceError, ValidationError
from .models import Domain, create_domain


# Imported text is split on runs of newlines and commas
IMPORT_SEPARATORS = re.compile(r"[\r\n,]+")


class DomainStore:
    """
    JSON file persistence for the domain collection.

    The file holds ``{"version", "updated_at", "domains"}``; records use the
    camelCase keys of ``Domain.to_dict`` and round-trip losslessly.
    """

    VERSION = 1

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path

    @property
    def file_path(self) -> Path:
        return self._file_path

    def load(self) -> list[Domain]:
        """
        Load the collection in stored order.

        Returns:
            The stored records, or an empty list if the file doesn't exist

        Raises:
            PersistenceError: If the file cannot be read or parsed
        """
        if not self._file_path.exists():
            return []

        try:
            with open(self._file_path, "r", encoding="utf-8") as f:
                raw_data = json.load(f)
        except json.JSONDecodeError as e:
            raise PersistenceError(
                code="parse_error",
                message=f"Failed to parse domain store: {e}",
                details={"file_path": str(self._file_path)},
            )
        except OSError as e:
            raise PersistenceError(
                code="io_error",
                message=f"Failed to read domain store: {e}",
                details={"file_path": str(self._file_path)},
            )

        # A bare list is the format of the browser's local storage export
        records = raw_data.get("domains") if isinstance(raw_data, dict) else raw_data
        if not isinstance(records, list):
            raise PersistenceError(
                code="invalid_format",
                message="Domain store does not contain a list of domains",
                details={"file_path": str(self._file_path)},
            )

        domains = []
        for index, record in enumerate(records):
            try:
                domains.append(Domain.from_dict(record))
            except (KeyError, TypeError, ValueError, AttributeError, ValidationError) as e:
                raise PersistenceError(
                    code="invalid_record",
                    message=f"Invalid domain record at position {index}: {e}",
                    details={"file_path": str(self._file_path), "index": index},
                )
        return domains

    def save(self, domains: Iterable[Domain]) -> None:
        """
        Write the collection, replacing the file contents.

        Raises:
            PersistenceError: If the file cannot be written
        """
        output_data = {
            "version": self.VERSION,
            "updated_at": datetime.now(timezone.utc).isoformat(),
            "domains": [domain.to_dict() for domain in domains],
        }

        self._file_path.parent.mkdir(parents=True, exist_ok=True)

        # Written beside the store, then renamed over it
        tmp_path = self._file_path.with_name(self._file_path.name + ".tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(output_data, f, indent=2, ensure_ascii=False)
            tmp_path.replace(self._file_path)
        except OSError as e:
            raise PersistenceError(
                code="io_error",
                message=f"Failed to write domain store: {e}",
                details={"file_path": str(self._file_path)},
            )


def replace_by_id(domains: list[Domain], updated: Domain) -> list[Domain]:
    """Return a new list with the record sharing ``updated.id`` replaced."""
    return [updated if d.id == updated.id else d for d in domains]


def remove_by_id(domains: list[Domain], domain_id: str) -> list[Domain]:
    return [d for d in domains if d.id != domain_id]


def find_by_name(domains: Iterable[Domain], name: str) -> Optional[Domain]:
    name = name.strip().lower()
    for domain in domains:
        if domain.name == name:
            return domain
    return None


def get_by_name(domains: Iterable[Domain], name: str) -> Domain:
    """
    Like find_by_name but raises.

    Raises:
        DomainNotFoundError: If no record has this name
    """
    domain = find_by_name(domains, name)
    if domain is None:
        raise DomainNotFoundError(
            code="domain_not_found",
            message=f"Domain not tracked: {name}",
            details={"name": name},
        )
    return domain


def add_unique(
    domains: list[Domain], new_domains: Iterable[Domain]
) -> tuple[list[Domain], list[str]]:
    """
    Append records whose name is not yet tracked.

    Returns:
        Tuple of (merged list, names skipped as duplicates)
    """
    merged = list(domains)
    seen = {d.name for d in merged}
    skipped = []
    for domain in new_domains:
        if domain.name in seen:
            skipped.append(domain.name)
            continue
        seen.add(domain.name)
        merged.append(domain)
    return merged, skipped


def split_import_text(text: str) -> list[str]:
    """Split import text into trimmed, non-empty, non-comment entries."""
    names = []
    for part in IMPORT_SEPARATORS.split(text):
        part = part.strip()
        if part and not part.startswith("#"):
            names.append(part)
    return names


def parse_domain_names(
    text: str, validator: Optional[DomainValidator] = None
) -> tuple[list[Domain], list[DomainValidationResult]]:
    """
    Turn import text into new WATCHLIST records.

    Returns:
        Tuple of (new records in input order, failed validation results)
    """
    validator = validator or DomainValidator()
    created = []
    rejected = []
    for name in split_import_text(text):
        result = validator.validate(name)
        if result.valid:
            created.append(create_domain(result.canonical_domain))
        else:
            rejected.append(result)
    return created, rejected
