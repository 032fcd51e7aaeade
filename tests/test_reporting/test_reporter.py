"""
Tests for broker_matcher.reporting.reporter — CSV / JSON recommendation files.

Covers:
  - File naming: recommendations_{label}_{date}.{csv,json}
  - CSV columns, row order and joined reasons
  - JSON schema_version, preferences echo and tagged reasons
  - Empty shortlist still writes a header / empty list
"""

from __future__ import annotations

import csv
import json
from datetime import date

from broker_matcher.models.preferences import UserPreferences
from broker_matcher.reporting.reporter import (
    write_recommendation_csv,
    write_recommendation_json,
)
from broker_matcher.scoring.aggregator import recommend
from broker_matcher.taxonomy.preference_taxonomy import AssetType, FeePreference

RUN_DATE = date(2026, 3, 1)

PREFS = UserPreferences(
    assets=(AssetType.FOREX,),
    fee_preference=FeePreference.ZERO_COMMISSION,
)


class TestRecommendationCsv:
    def test_writes_named_file_with_rows(self, tmp_path, sample_catalog):
        recs = recommend(sample_catalog, PREFS, limit=3)
        path = write_recommendation_csv(recs, tmp_path / "out", "fx", RUN_DATE)

        assert path.name == "recommendations_fx_2026-03-01.csv"
        with path.open(encoding="utf-8", newline="") as f:
            rows = list(csv.DictReader(f))

        assert len(rows) == 3
        assert [r["rank"] for r in rows] == ["1", "2", "3"]
        assert rows[0]["broker_id"] == recs[0].broker.id
        assert rows[0]["reasons"] == "; ".join(recs[0].reason_texts)

    def test_empty_shortlist_writes_header_only(self, tmp_path):
        path = write_recommendation_csv([], tmp_path, "empty", RUN_DATE)
        lines = path.read_text(encoding="utf-8").splitlines()
        assert lines == [
            "rank,broker_id,name,score,rating,spreads_from,min_deposit,max_leverage,reasons",
        ]


class TestRecommendationJson:
    def test_payload_structure(self, tmp_path, sample_catalog):
        recs = recommend(sample_catalog, PREFS, limit=2)
        path = write_recommendation_json(recs, tmp_path, "fx", PREFS, RUN_DATE)

        assert path.name == "recommendations_fx_2026-03-01.json"
        payload = json.loads(path.read_text(encoding="utf-8"))
        assert payload["schema_version"] == "v1"
        assert payload["generated_at"] == "2026-03-01"
        assert payload["preferences"]["assets"] == ["forex"]
        assert payload["preferences"]["fee_preference"] == "zero-commission"
        assert len(payload["recommendations"]) == 2

    def test_reasons_are_tagged(self, tmp_path, sample_catalog):
        recs = recommend(sample_catalog, PREFS, limit=1)
        path = write_recommendation_json(recs, tmp_path, "fx", run_date=RUN_DATE)
        payload = json.loads(path.read_text(encoding="utf-8"))

        first = payload["recommendations"][0]
        assert first["rank"] == 1
        assert payload["preferences"] is None
        kinds = {r["kind"] for r in first["match_reasons"]}
        assert kinds <= {"verified", "asset-support", "zero-commission"}
        for reason in first["match_reasons"]:
            if reason["kind"] == "asset-support":
                assert reason["asset"] == "forex"
            else:
                assert reason["asset"] is None

    def test_empty_shortlist(self, tmp_path):
        path = write_recommendation_json([], tmp_path, "none", run_date=RUN_DATE)
        assert json.loads(path.read_text(encoding="utf-8"))["recommendations"] == []
