"""
Recommendation report writer: CSV and JSON output for ranked brokers.

All functions are pure I/O — they consume an in-memory
``BrokerRecommendation`` list and write human-readable + machine-readable
files.

Output files
------------
  data/outputs/recommendations/
    recommendations_{label}_{date}.csv
    recommendations_{label}_{date}.json
"""

from __future__ import annotations

import csv
import json
import logging
from datetime import date
from pathlib import Path

from broker_matcher.models.preferences import UserPreferences
from broker_matcher.scoring.aggregator import BrokerRecommendation

logger = logging.getLogger(__name__)

SCHEMA_VERSION = "v1"


def write_recommendation_csv(
    recommendations: list[BrokerRecommendation],
    output_dir: Path,
    label: str,
    run_date: date | None = None,
) -> Path:
    """Write ranked recommendations to a CSV file.

    Columns: rank, broker_id, name, score, rating, spreads_from,
             min_deposit, max_leverage, reasons (``; `` separated).

    Returns:
        Path to the written CSV file.
    """
    if run_date is None:
        run_date = date.today()

    output_dir.mkdir(parents=True, exist_ok=True)
    csv_path = output_dir / f"recommendations_{label}_{run_date}.csv"

    fieldnames = [
        "rank", "broker_id", "name", "score", "rating",
        "spreads_from", "min_deposit", "max_leverage", "reasons",
    ]

    with csv_path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        for rec in recommendations:
            writer.writerow(
                {
                    "rank":         rec.rank,
                    "broker_id":    rec.broker.id,
                    "name":         rec.broker.name,
                    "score":        round(rec.score, 2),
                    "rating":       rec.broker.rating,
                    "spreads_from": rec.broker.spreads_from,
                    "min_deposit":  rec.broker.min_deposit,
                    "max_leverage": rec.broker.max_leverage,
                    "reasons":      "; ".join(rec.reason_texts),
                }
            )

    logger.info("Recommendation CSV written: %s (%d rows)", csv_path, len(recommendations))
    return csv_path


def write_recommendation_json(
    recommendations: list[BrokerRecommendation],
    output_dir: Path,
    label: str,
    preferences: UserPreferences | None = None,
    run_date: date | None = None,
) -> Path:
    """Write ranked recommendations to a structured JSON file.

    Each reason is written as ``{"kind", "text", "asset"}`` so consumers can
    restyle or translate by ``kind``.

    Returns:
        Path to the written JSON file.
    """
    if run_date is None:
        run_date = date.today()

    output_dir.mkdir(parents=True, exist_ok=True)
    json_path = output_dir / f"recommendations_{label}_{run_date}.json"

    payload: dict = {
        "schema_version": SCHEMA_VERSION,
        "generated_at":   run_date.isoformat(),
        "preferences":    preferences.model_dump(mode="json") if preferences else None,
        "recommendations": [
            {
                "rank":   rec.rank,
                "score":  round(rec.score, 2),
                "broker": rec.broker.model_dump(mode="json"),
                "match_reasons": [
                    {
                        "kind":  reason.kind.value,
                        "text":  reason.text,
                        "asset": reason.asset.value if reason.asset else None,
                    }
                    for reason in rec.match_reasons
                ],
            }
            for rec in recommendations
        ],
    }

    json_path.write_text(json.dumps(payload, indent=2, default=str), encoding="utf-8")
    logger.info("Recommendation JSON written: %s", json_path)
    return json_path
