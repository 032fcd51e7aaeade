"""
Preference taxonomy for the broker questionnaire.

Every answer the user can give maps onto one of these closed vocabularies:
  - ``AssetType``         — the *what*: which markets the user wants to trade.
  - ``TradingExperience`` — the *who*:  how seasoned the user is.
  - ``FeePreference``     — cost sensitivity.
  - ``TradingFrequency``  — how often the user expects to trade.
  - ``DepositAmount``     — the budget band for the first deposit.

Country is the only free-text dimension (ISO 3166 alpha-2 region code) and
therefore has no enum here.

Usage example::

    from broker_matcher.taxonomy.preference_taxonomy import AssetType, FeePreference

    assets = (AssetType.FOREX, AssetType.CRYPTOS)
    fees   = FeePreference.LOW_COST

This module has NO imports from any other ``broker_matcher`` package.
"""

from enum import StrEnum


class AssetType(StrEnum):
    """Asset class a user wants to trade."""

    FOREX = "forex"
    """Spot currency pairs; the classic MT4/MT5 market."""

    STOCKS_ETFS = "stocks-etfs"
    """Listed equities and exchange-traded funds."""

    CFDS = "cfds"
    """Contracts for difference on any underlying."""

    CRYPTOS = "cryptos"
    """Spot or derivative cryptocurrency exposure."""

    OPTIONS = "options"
    FUTURES = "futures"
    COMMODITIES = "commodities"
    BONDS = "bonds"


class TradingExperience(StrEnum):
    """Self-reported trading experience, least to most experienced."""

    FIRST_TIMER = "first-timer"
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    PROFESSIONAL = "professional"


class FeePreference(StrEnum):
    """How much the user cares about trading costs."""

    ZERO_COMMISSION = "zero-commission"
    LOW_COST = "low-cost"
    REASONABLE_FEES = "reasonable-fees"
    NOT_SURE = "not-sure"


class TradingFrequency(StrEnum):
    """Expected trading cadence."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class DepositAmount(StrEnum):
    """Budget band for the initial deposit, in USD."""

    LESS_THAN_50 = "<50"
    RANGE_51_200 = "51-200"
    RANGE_201_500 = "201-500"
    RANGE_501_1000 = "501-1000"
    MORE_THAN_1000 = ">1000"


# ── Display labels ────────────────────────────────────────────────────────────

ASSET_LABELS: dict[AssetType, str] = {
    AssetType.FOREX:       "Forex",
    AssetType.STOCKS_ETFS: "Stock/ETF",
    AssetType.CFDS:        "CFD",
    AssetType.CRYPTOS:     "Cryptocurrency",
    AssetType.OPTIONS:     "Options",
    AssetType.FUTURES:     "Futures",
    AssetType.COMMODITIES: "Commodities",
    AssetType.BONDS:       "Bond",
}
