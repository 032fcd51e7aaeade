"""
ASCII terminal formatters for CLI output.

All formatters return plain multi-line strings suitable for ``typer.echo()``.
No third-party dependencies (no ``rich``, no ``colorama``).
"""

from __future__ import annotations

from broker_matcher.models.broker import Broker
from broker_matcher.scoring.aggregator import BrokerRecommendation
from broker_matcher.validation.integrity import CatalogIntegrityReport

_HEALTH_TAGS: dict[str, str] = {
    "excellent": "[EXCELLENT]",
    "good":      "[GOOD]",
    "fair":      "[FAIR]",
    "poor":      "[POOR]",
}


def format_recommendation_table(recommendations: list[BrokerRecommendation]) -> str:
    """Format an explained shortlist: one row per broker, reasons indented below."""
    if not recommendations:
        return "  No brokers match these preferences."

    header = f"  {'#':>3}  {'Broker':<28} {'Score':>7}  {'Rating':>6}  {'Spread':>6}  {'Min dep':>8}"
    lines = [header, "  " + "-" * (len(header) - 2)]
    for rec in recommendations:
        b = rec.broker
        lines.append(
            f"  {rec.rank:>3}  {_truncate(b.name, 28):<28} {rec.score:>7.1f}  "
            f"{b.rating:>6.1f}  {b.spreads_from:>6.2f}  {b.min_deposit:>8,.0f}"
        )
        for text in rec.reason_texts:
            lines.append(f"         - {text}")
    return "\n".join(lines)


def format_broker_list(brokers: list[Broker]) -> str:
    """Format a plain ranked broker list (no scores or reasons)."""
    if not brokers:
        return "  No brokers match these preferences."
    return "\n".join(
        f"  {rank:>3}. {b.name} ({b.id})" for rank, b in enumerate(brokers, start=1)
    )


def format_integrity_report(report: CatalogIntegrityReport, max_issues: int = 20) -> str:
    """Format a catalog integrity report with a health banner and issue list."""
    lines = [
        f"  {_HEALTH_TAGS[report.overall_health]} Catalog health: {report.overall_health}",
        f"  Brokers: {report.total_brokers} total, "
        f"{report.valid_brokers} valid, {report.invalid_brokers} invalid",
    ]
    if report.duplicate_ids:
        lines.append(f"  Duplicate ids: {', '.join(report.duplicate_ids)}")
    for issue in report.issues[:max_issues]:
        lines.append(f"  [{issue.severity.upper()}] {issue.broker_id}: {issue.issue}")
    hidden = len(report.issues) - max_issues
    if hidden > 0:
        lines.append(f"  ... and {hidden} more issue(s)")
    return "\n".join(lines)


def _truncate(text: str, width: int) -> str:
    return text if len(text) <= width else text[: width - 3] + "..."
