"""
Tests for broker_matcher/service.py.

What we test
------------
filter_brokers() (debounced):
  - Rapid calls produce exactly one callback, for the last preferences.
  - cancel() / dispose() prevent the pending callback.
  - A scoring error is logged and reported as an empty list.
  - A successful pass logs match counts as structured fields.
  - Calling after dispose() raises SchedulerError.

filter_brokers_immediate():
  - Returns the top 20 synchronously; errors propagate.

get_broker_recommendations():
  - Limit honoured, ranks and reasons present.

set_brokers() / from_config():
  - Catalog replacement is seen by later passes.
  - debounce_ms is converted to seconds.
  - recommendation_limit becomes the default shortlist size.
"""

from __future__ import annotations

import asyncio
import logging

import pytest

import broker_matcher.service as service_module
from broker_matcher.config import AppConfig, FilterConfig
from broker_matcher.errors import SchedulerError
from broker_matcher.models.broker import Broker
from broker_matcher.models.preferences import UserPreferences
from broker_matcher.service import BrokerFilterService
from broker_matcher.taxonomy.preference_taxonomy import AssetType, FeePreference

QUIET = 0.02


async def _settle() -> None:
    await asyncio.sleep(QUIET * 5)


class TestDebouncedFilter:
    def test_burst_yields_single_callback_for_last_prefs(self, sample_catalog):
        received: list[list[Broker]] = []

        async def scenario() -> None:
            svc = BrokerFilterService(sample_catalog, quiet_period=QUIET)
            svc.filter_brokers(UserPreferences(country="KP"), received.append)
            svc.filter_brokers(UserPreferences(country="US"), received.append)
            svc.filter_brokers(UserPreferences(), received.append)
            assert svc.has_pending
            await _settle()
            assert not svc.has_pending

        asyncio.run(scenario())
        assert len(received) == 1
        assert [b.id for b in received[0]] == ["beta", "alpha", "delta", "gamma"]

    def test_superseded_callback_never_fires(self, sample_catalog):
        first: list[list[Broker]] = []
        second: list[list[Broker]] = []

        async def scenario() -> None:
            svc = BrokerFilterService(sample_catalog, quiet_period=QUIET)
            svc.filter_brokers(UserPreferences(), first.append)
            svc.filter_brokers(UserPreferences(), second.append)
            await _settle()

        asyncio.run(scenario())
        assert first == []
        assert len(second) == 1

    def test_cancel_drops_pending_pass(self, sample_catalog):
        received: list[list[Broker]] = []
        cancelled: list[bool] = []

        async def scenario() -> None:
            svc = BrokerFilterService(sample_catalog, quiet_period=QUIET)
            svc.filter_brokers(UserPreferences(), received.append)
            cancelled.append(svc.cancel())
            await _settle()

        asyncio.run(scenario())
        assert received == []
        assert cancelled == [True]

    def test_dispose_drops_pending_pass(self, sample_catalog):
        received: list[list[Broker]] = []

        async def scenario() -> None:
            svc = BrokerFilterService(sample_catalog, quiet_period=QUIET)
            svc.filter_brokers(UserPreferences(), received.append)
            svc.dispose()
            await _settle()
            assert svc.brokers == ()
            with pytest.raises(SchedulerError):
                svc.filter_brokers(UserPreferences(), received.append)

        asyncio.run(scenario())
        assert received == []

    def test_scoring_error_reports_empty_list(self, sample_catalog, monkeypatch, caplog):
        def boom(*args, **kwargs):
            raise RuntimeError("scoring failed")

        monkeypatch.setattr(service_module, "top_matches", boom)
        received: list[list[Broker]] = []

        async def scenario() -> None:
            svc = BrokerFilterService(sample_catalog, quiet_period=QUIET)
            svc.filter_brokers(UserPreferences(), received.append)
            await _settle()

        with caplog.at_level(logging.ERROR, logger="broker_matcher.service"):
            asyncio.run(scenario())

        assert received == [[]]
        assert "Error filtering brokers" in caplog.text

    def test_pass_logs_match_counts(self, sample_catalog, caplog):
        async def scenario() -> None:
            svc = BrokerFilterService(sample_catalog, quiet_period=QUIET)
            svc.filter_brokers(UserPreferences(country="US"), lambda brokers: None)
            await _settle()

        with caplog.at_level(logging.DEBUG, logger="broker_matcher.service"):
            asyncio.run(scenario())

        (record,) = [r for r in caplog.records if r.msg.startswith("Filter pass")]
        assert record.matches == 3
        assert record.catalog_size == 4

    def test_requires_running_loop(self, sample_catalog):
        svc = BrokerFilterService(sample_catalog, quiet_period=QUIET)
        with pytest.raises(SchedulerError):
            svc.filter_brokers(UserPreferences(), lambda brokers: None)


class TestSynchronousPaths:
    def test_immediate_returns_ranked_brokers(self, sample_catalog):
        svc = BrokerFilterService(sample_catalog)
        result = svc.filter_brokers_immediate(UserPreferences(country="US"))
        assert [b.id for b in result] == ["beta", "alpha", "delta"]

    def test_immediate_caps_at_twenty(self, make_broker):
        svc = BrokerFilterService([make_broker(id=f"b{i}") for i in range(30)])
        assert len(svc.filter_brokers_immediate(UserPreferences())) == 20

    def test_immediate_propagates_errors(self, sample_catalog, monkeypatch):
        def boom(*args, **kwargs):
            raise RuntimeError("scoring failed")

        monkeypatch.setattr(service_module, "top_matches", boom)
        svc = BrokerFilterService(sample_catalog)
        with pytest.raises(RuntimeError, match="scoring failed"):
            svc.filter_brokers_immediate(UserPreferences())

    def test_recommendations(self, sample_catalog):
        svc = BrokerFilterService(sample_catalog)
        recs = svc.get_broker_recommendations(
            UserPreferences(fee_preference=FeePreference.ZERO_COMMISSION), limit=2,
        )
        assert [r.rank for r in recs] == [1, 2]
        # alpha: 40 + 25 zero-commission beats delta (40, spread 0.8)
        assert recs[1].broker.id == "alpha"
        assert recs[1].reason_texts == ["Zero commission trading"]

    def test_empty_catalog(self):
        svc = BrokerFilterService()
        assert svc.filter_brokers_immediate(UserPreferences(assets=(AssetType.FOREX,))) == []
        assert svc.get_broker_recommendations(UserPreferences()) == []


class TestCatalogAndConfig:
    def test_set_brokers_replaces_catalog(self, sample_catalog, make_broker):
        svc = BrokerFilterService(sample_catalog)
        svc.set_brokers([make_broker(id="only")])
        assert [b.id for b in svc.filter_brokers_immediate(UserPreferences())] == ["only"]

    def test_from_config_converts_debounce_ms(self, sample_catalog):
        config = AppConfig(filter=FilterConfig(debounce_ms=250))
        svc = BrokerFilterService.from_config(config, sample_catalog)
        assert svc._debouncer.quiet_period == pytest.approx(0.25)
        assert len(svc.brokers) == len(sample_catalog)

    def test_from_config_uses_recommendation_limit(self, make_broker):
        config = AppConfig(filter=FilterConfig(recommendation_limit=2))
        catalog = [make_broker(id=f"b{i}") for i in range(5)]
        svc = BrokerFilterService.from_config(config, catalog)
        assert len(svc.get_broker_recommendations(UserPreferences())) == 2
        assert len(svc.get_broker_recommendations(UserPreferences(), limit=4)) == 4

    def test_default_recommendation_limit_is_ten(self, make_broker):
        svc = BrokerFilterService([make_broker(id=f"b{i}") for i in range(15)])
        assert len(svc.get_broker_recommendations(UserPreferences())) == 10
