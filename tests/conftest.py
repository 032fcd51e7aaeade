"""
Shared pytest fixtures for the Broker Matcher test suite.

Provides:
  - ``make_broker``: factory for ``Broker`` objects with neutral defaults
    (no trust score, not verified/featured, no platforms) so each test only
    spells out the fields it cares about.
  - ``sample_catalog``: a small mixed catalog for ranking tests.
  - ``reference_broker``: the fully-loaded broker used in the worked
    162.5-point example.
"""

from __future__ import annotations

from typing import Any, Callable

import pytest

from broker_matcher.models.broker import Broker


def _broker(**overrides: Any) -> Broker:
    fields: dict[str, Any] = {
        "id": "test-broker",
        "name": "Test Broker",
        "rating": 4.0,
        "spreads_from": 2.0,
        "min_deposit": 1000.0,
        "max_leverage": 30.0,
        "platforms": (),
    }
    fields.update(overrides)
    return Broker(**fields)


@pytest.fixture
def make_broker() -> Callable[..., Broker]:
    """Return a ``Broker`` factory; keyword arguments override defaults."""
    return _broker


@pytest.fixture
def reference_broker() -> Broker:
    return _broker(
        id="reference",
        name="Reference Markets",
        rating=4.5,
        trust_score=8.5,
        verified=True,
        featured=True,
        spreads_from=0.0,
        min_deposit=50.0,
        max_leverage=500.0,
        platforms=("MT4", "MT5"),
    )


@pytest.fixture
def sample_catalog() -> list[Broker]:
    return [
        _broker(id="alpha", name="Alpha FX", rating=4.0, spreads_from=0.0,
                min_deposit=100.0, max_leverage=500.0, platforms=("MT4", "WebTrader")),
        _broker(id="beta", name="Beta Stocks", rating=4.5, trust_score=9.0,
                verified=True, spreads_from=1.5, min_deposit=0.0,
                platforms=("Stock screener", "Web")),
        _broker(id="gamma", name="Gamma Crypto", rating=3.5, spreads_from=2.5,
                min_deposit=10.0, platforms=("Crypto wallet", "Bitcoin futures"),
                restricted_countries=frozenset({"US"})),
        _broker(id="delta", name="Delta CFD", rating=3.0, featured=True,
                spreads_from=0.8, min_deposit=250.0, max_leverage=200.0,
                platforms=("CFD", "MT5")),
    ]
