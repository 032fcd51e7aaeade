"""
Catalog validation: per-record checks and a whole-catalog integrity report.

Two layers of checks run on raw (unparsed) broker records:

- **Schema errors** — anything ``Broker`` rejects (missing id/name, rating
  outside [0, 5], negative costs, ...). A record with schema errors is
  invalid and cannot be scored.
- **Business warnings** — the record is valid but looks suspicious:
    * rating and trust score disagree by more than 1 star
      (``|rating - trust_score / 2| > 1``)
    * minimum deposit above 10,000
    * fewer than 10 reviews
    * no platform tokens (asset / experience rules can never match)

``build_integrity_report()`` additionally flags duplicate ids and grades the
catalog:

    excellent  no errors, no warnings
    good       no errors, <= 2 records with warnings
    fair       <= 2 errors, <= 5 records with warnings
    poor       anything worse

Errors are invalid records plus duplicate ids.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Literal

from pydantic import ValidationError

from broker_matcher.models.broker import Broker

Severity = Literal["error", "warning"]
Health = Literal["excellent", "good", "fair", "poor"]

HIGH_MIN_DEPOSIT = 10_000.0
LOW_REVIEW_COUNT = 10
MAX_RATING_TRUST_GAP = 1.0

# Minimum bar for a broker to be listed at all.
MIN_LISTING_RATING = 3.0
MIN_LISTING_TRUST = 6.0


@dataclass
class ValidationResult:
    """Outcome of validating one record or a list of records."""

    is_valid: bool = True
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass
class IntegrityIssue:
    broker_id: str
    issue: str
    severity: Severity


@dataclass
class CatalogIntegrityReport:
    """Summary of a catalog validation pass.

    Attributes:
        total_brokers:   Records inspected.
        valid_brokers:   Records that pass schema validation.
        invalid_brokers: Records that fail schema validation.
        duplicate_ids:   Ids seen more than once (each listed once per repeat).
        issues:          Per-record errors and warnings.
        overall_health:  Letter-style grade, see module docstring.
    """

    total_brokers: int
    valid_brokers: int
    invalid_brokers: int
    duplicate_ids: list[str]
    issues: list[IntegrityIssue]
    overall_health: Health

    @property
    def is_clean(self) -> bool:
        return self.invalid_brokers == 0 and not self.duplicate_ids


def validate_broker_record(record: Mapping[str, Any]) -> ValidationResult:
    """Validate one raw broker record (schema + business rules)."""
    result = ValidationResult()

    try:
        Broker.model_validate(dict(record))
    except ValidationError as exc:
        result.is_valid = False
        result.errors = [
            f"{'.'.join(str(p) for p in err['loc']) or 'record'}: {err['msg']}"
            for err in exc.errors()
        ]

    rating = _number(record, "rating")
    trust = _number(record, "trust_score", "trustScore")
    if rating is not None and trust:
        if abs(rating - trust / 2) > MAX_RATING_TRUST_GAP:
            result.warnings.append("Rating and trust score seem inconsistent")

    min_deposit = _number(record, "min_deposit", "minDeposit")
    if min_deposit is not None and min_deposit > HIGH_MIN_DEPOSIT:
        result.warnings.append("Minimum deposit is unusually high")

    review_count = _number(record, "review_count", "reviewCount") or 0
    if review_count < LOW_REVIEW_COUNT:
        result.warnings.append("Low review count may indicate limited user feedback")

    if not record.get("platforms"):
        result.warnings.append("No platforms listed; asset and experience rules cannot match")

    return result


def validate_catalog(records: Sequence[Mapping[str, Any]]) -> ValidationResult:
    """Validate a list of raw records, prefixing messages with the record index."""
    result = ValidationResult()
    seen: set[str] = set()

    for index, record in enumerate(records):
        record_result = validate_broker_record(record)
        if not record_result.is_valid:
            result.is_valid = False
            result.errors.extend(f"Broker {index}: {e}" for e in record_result.errors)
        result.warnings.extend(f"Broker {index}: {w}" for w in record_result.warnings)

        # ids may be any JSON value at this point.
        broker_id = str(record.get("id") or "")
        if broker_id:
            if broker_id in seen:
                result.is_valid = False
                result.errors.append(f"Duplicate broker ID: {broker_id}")
            else:
                seen.add(broker_id)

    return result


def build_integrity_report(records: Sequence[Mapping[str, Any]]) -> CatalogIntegrityReport:
    """Validate every record and grade the catalog as a whole."""
    valid = 0
    invalid = 0
    duplicates: list[str] = []
    issues: list[IntegrityIssue] = []
    seen: set[str] = set()
    warned: set[int] = set()

    for index, record in enumerate(records):
        broker_id = str(record.get("id") or f"#{index}")
        result = validate_broker_record(record)

        if result.is_valid:
            valid += 1
        else:
            invalid += 1
            issues.append(IntegrityIssue(broker_id, ", ".join(result.errors), "error"))

        if broker_id in seen:
            duplicates.append(broker_id)
        else:
            seen.add(broker_id)

        for warning in result.warnings:
            issues.append(IntegrityIssue(broker_id, warning, "warning"))
            warned.add(index)

    return CatalogIntegrityReport(
        total_brokers=len(records),
        valid_brokers=valid,
        invalid_brokers=invalid,
        duplicate_ids=duplicates,
        issues=issues,
        overall_health=_grade(invalid + len(duplicates), len(warned)),
    )


def meets_minimum_requirements(broker: Broker) -> bool:
    """Return ``True`` if ``broker`` clears the minimum listing bar.

    Requires rating >= 3.0, trust score >= 6.0 and at least one platform.
    """
    return (
        broker.rating >= MIN_LISTING_RATING
        and (broker.trust_score or 0.0) >= MIN_LISTING_TRUST
        and len(broker.platforms) > 0
    )


# ── Helpers ───────────────────────────────────────────────────────────────────

def _grade(error_count: int, warning_count: int) -> Health:
    if error_count == 0 and warning_count == 0:
        return "excellent"
    if error_count == 0 and warning_count <= 2:
        return "good"
    if error_count <= 2 and warning_count <= 5:
        return "fair"
    return "poor"


def _number(record: Mapping[str, Any], *keys: str) -> float | None:
    for key in keys:
        value = record.get(key)
        if value is None or value == "":
            continue
        try:
            return float(value)
        except (TypeError, ValueError):
            return None
    return None
