"""
Broker catalog loader for JSON and CSV files.

JSON format
-----------
Either a top-level array of broker objects, or an object with a ``brokers``
array. Keys may be camelCase (as exported by the web catalog) or snake_case::

    [{"id": "ic-markets", "name": "IC Markets", "rating": 4.6,
      "trustScore": 8.9, "verified": true, "spreadsFrom": 0.0,
      "minDeposit": 200, "maxLeverage": 500, "platforms": ["MT4", "MT5"]}]

CSV format
----------
Header row required. Column names are matched case-insensitively after
normalising spaces/dashes to underscores, so ``Min Deposit`` and
``min_deposit`` are equivalent. Required: ``name`` (or ``broker_name``) and
``rating`` (or ``overall_rating``). ``id`` defaults to a slug of the name.

List columns (``platforms``, ``restricted_countries``) are ``;`` or ``|``
separated. Boolean columns accept true/1/yes/t/y. Empty cells use the model
default.

All records are validated before any are returned. If any record fails, one
``CatalogError`` is raised listing the first 10 failures.
"""

from __future__ import annotations

import csv
import json
import logging
import re
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from broker_matcher.errors import CatalogError
from broker_matcher.models.broker import Broker

logger = logging.getLogger(__name__)

_MAX_ERRORS_SHOWN = 10

# Normalised CSV header -> Broker field.
_CSV_ALIASES: dict[str, str] = {
    "broker_name":     "name",
    "overall_rating":  "rating",
    "trustscore":      "trust_score",
    "spreads":         "spreads_from",
    "minimum_deposit": "min_deposit",
    "leverage":        "max_leverage",
    "restricted":      "restricted_countries",
}

_LIST_FIELDS = frozenset({"platforms", "restricted_countries"})
_BOOL_FIELDS = frozenset({"verified", "featured"})
_LIST_SPLIT = re.compile(r"[;|]")


def load_catalog(path: Path) -> list[Broker]:
    """Load and validate a broker catalog, dispatching on file extension.

    Args:
        path: ``.json`` or ``.csv`` file.

    Returns:
        Validated brokers in file order.

    Raises:
        CatalogError: If the file is missing, has an unsupported extension,
            cannot be parsed, or contains invalid records.
    """
    path = Path(path)
    records = read_records(path)
    first_line = 2 if path.suffix.lower() == ".csv" else 1  # CSV: skip header row

    brokers = parse_records(records, source=path.name, first_line=first_line)
    logger.info("Loaded %d brokers from %s", len(brokers), path.name)
    return brokers


def read_records(path: Path) -> list[dict[str, Any]]:
    """Read raw (unvalidated) broker records from a ``.json`` or ``.csv`` file.

    CSV rows are normalised to ``Broker`` field names; values are not
    validated.

    Raises:
        CatalogError: If the file is missing, unparsable, or not JSON/CSV.
    """
    path = Path(path)
    if not path.exists():
        raise CatalogError(f"Catalog file not found: {path}")

    suffix = path.suffix.lower()
    if suffix == ".json":
        return _read_json_records(path)
    if suffix == ".csv":
        return _read_csv_records(path)
    raise CatalogError(
        f"Unsupported catalog format '{suffix}' for {path}. Use .json or .csv."
    )


def parse_records(
    records: list[dict[str, Any]],
    source: str = "<memory>",
    first_line: int = 1,
) -> list[Broker]:
    """Validate raw broker dicts into ``Broker`` models, all-or-nothing."""
    brokers: list[Broker] = []
    errors: list[tuple[int, str]] = []

    for i, record in enumerate(records):
        try:
            brokers.append(Broker.model_validate(record))
        except ValidationError as exc:
            errors.append((i + first_line, _summarise(exc)))

    if errors:
        detail = "\n".join(f"  Row {ln}: {msg}" for ln, msg in errors[:_MAX_ERRORS_SHOWN])
        extra = len(errors) - _MAX_ERRORS_SHOWN
        suffix = f"\n  … and {extra} more" if extra > 0 else ""
        raise CatalogError(
            f"{len(errors)} record(s) failed validation in {source}:\n{detail}{suffix}"
        )
    return brokers


def slugify(name: str) -> str:
    """Build a URL-safe id from a broker name: ``"IG Group!"`` -> ``"ig-group"``."""
    slug = re.sub(r"[^a-z0-9\s-]", "", name.lower())
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")


# ── Private helpers ────────────────────────────────────────────────────────────

def _read_json_records(path: Path) -> list[dict[str, Any]]:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise CatalogError(f"Invalid JSON in {path}: {exc}") from exc

    if isinstance(payload, dict):
        payload = payload.get("brokers")
    if not isinstance(payload, list):
        raise CatalogError(
            f"{path} must contain a JSON array or an object with a 'brokers' array."
        )
    for i, item in enumerate(payload):
        if not isinstance(item, dict):
            raise CatalogError(f"Record {i + 1} in {path} is not a JSON object.")
    return payload


def _read_csv_records(path: Path) -> list[dict[str, Any]]:
    with open(path, encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        if reader.fieldnames is None:
            raise CatalogError(f"CSV file is empty or has no header row: {path}")
        rows = list(reader)

    if not rows:
        logger.warning("Catalog CSV is empty (header only): %s", path)
    return [_row_to_record(row) for row in rows]


def _row_to_record(row: dict[str, str]) -> dict[str, Any]:
    """Convert a CSV row (all strings) into a dict ``Broker`` can validate."""
    record: dict[str, Any] = {}
    for raw_key, raw_val in row.items():
        if raw_key is None:
            continue
        key = _normalise_header(raw_key)
        key = _CSV_ALIASES.get(key, key)
        value = (raw_val or "").strip()
        if not value:
            continue
        if key in _LIST_FIELDS:
            record[key] = [v.strip() for v in _LIST_SPLIT.split(value) if v.strip()]
        elif key in _BOOL_FIELDS:
            record[key] = value.lower() in ("true", "1", "yes", "t", "y")
        else:
            record[key] = value

    if "id" not in record and "name" in record:
        record["id"] = slugify(record["name"])
    return record


def _normalise_header(header: str) -> str:
    return re.sub(r"[\s\-/]+", "_", header.strip().lower())


def _summarise(exc: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(p) for p in err['loc']) or 'record'}: {err['msg']}"
        for err in exc.errors()
    )
