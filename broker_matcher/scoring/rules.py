"""
Scoring rules: one preference dimension + one broker -> (points, reasons).

Every rule is a pure function returning a ``RuleResult``. No I/O, no shared
state. The aggregator calls them in this order and sums the points:

    1. country        hard filter; a veto zeroes the broker and stops scoring
    2. base quality   rating*10 + trust_score*5 + verified 20 + featured 10
    3. assets         +15 per keyword-matched asset class, +5 for classes
                      with no keyword table
    4. experience     first-timer / professional checks, else flat +5
    5. fee preference spread thresholds 0 / 1 / 3, else flat +5
    6. frequency      daily -> tight spreads, yearly -> low deposit, else +5
    7. deposit        +20 if min_deposit fits the selected budget band

Weights and thresholds are fixed constants below; they are not tunable at
call time.

Flat +5 fallback
----------------
Experience levels, fee preferences and frequencies without a dedicated check
(and asset classes without a keyword table) earn a flat +5 with no reason.
The intent is "do not punish missing data", but it means a broker with
sparse ``platforms`` metadata can outrank a better-matching one on base
quality alone.

Reasons are returned as tagged ``MatchReason`` values so a display surface
can restyle or translate them by ``kind``; ``text`` holds the English copy.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import StrEnum

from broker_matcher.models.broker import Broker
from broker_matcher.taxonomy.preference_taxonomy import (
    ASSET_LABELS,
    AssetType,
    DepositAmount,
    FeePreference,
    TradingExperience,
    TradingFrequency,
)

# Jurisdictions no broker in the catalog may serve.
RESTRICTED_COUNTRIES: frozenset[str] = frozenset({"KP"})

# ── Base quality weights ──────────────────────────────────────────────────────
RATING_WEIGHT = 10.0
TRUST_WEIGHT = 5.0
VERIFIED_BONUS = 20.0
FEATURED_BONUS = 10.0

# ── Preference weights ────────────────────────────────────────────────────────
ASSET_MATCH_POINTS = 15.0
FALLBACK_POINTS = 5.0

FIRST_TIMER_MAX_DEPOSIT = 100.0
FIRST_TIMER_DEPOSIT_POINTS = 20.0
FIRST_TIMER_WEB_POINTS = 10.0
PRO_MIN_LEVERAGE = 100.0
PRO_LEVERAGE_POINTS = 15.0
PRO_PLATFORM_POINTS = 15.0

ZERO_COMMISSION_POINTS = 25.0
LOW_COST_MAX_SPREAD = 1.0
LOW_COST_POINTS = 20.0
REASONABLE_MAX_SPREAD = 3.0
REASONABLE_POINTS = 15.0

DAILY_MAX_SPREAD = 1.0
DAILY_POINTS = 20.0
YEARLY_MAX_DEPOSIT = 500.0
YEARLY_POINTS = 15.0

DEPOSIT_FIT_POINTS = 20.0

# Platform keywords that indicate support for an asset class.
ASSET_KEYWORDS: dict[AssetType, tuple[str, ...]] = {
    AssetType.FOREX:       ("forex", "mt4", "mt5"),
    AssetType.STOCKS_ETFS: ("stock", "equity"),
    AssetType.CFDS:        ("cfd",),
    AssetType.CRYPTOS:     ("crypto", "bitcoin"),
}

PRO_PLATFORM_KEYWORDS: tuple[str, ...] = ("mt4", "mt5")
WEB_PLATFORM_KEYWORDS: tuple[str, ...] = ("web",)

# Budget band -> inclusive (min, max) deposit in USD.
DEPOSIT_RANGES: dict[DepositAmount, tuple[float, float]] = {
    DepositAmount.LESS_THAN_50:  (0.0, 50.0),
    DepositAmount.RANGE_51_200:  (51.0, 200.0),
    DepositAmount.RANGE_201_500: (201.0, 500.0),
}
_OPEN_RANGE: tuple[float, float] = (0.0, math.inf)


class ReasonKind(StrEnum):
    """Machine-readable tag for a match reason."""

    VERIFIED = "verified"
    ASSET_SUPPORT = "asset-support"
    LOW_MIN_DEPOSIT = "low-min-deposit"
    WEB_PLATFORM = "web-platform"
    HIGH_LEVERAGE = "high-leverage"
    PRO_PLATFORMS = "pro-platforms"
    ZERO_COMMISSION = "zero-commission"
    LOW_COST = "low-cost"
    REASONABLE_FEES = "reasonable-fees"
    TIGHT_SPREADS = "tight-spreads"
    LONG_TERM = "long-term"
    DEPOSIT_FIT = "deposit-fit"


@dataclass(frozen=True)
class MatchReason:
    """One explanation for why a broker matched.

    Attributes:
        kind:  Tag for styling / localisation.
        text:  English display copy.
        asset: Asset class for ``ASSET_SUPPORT`` reasons, else ``None``.
    """

    kind: ReasonKind
    text: str
    asset: AssetType | None = None

    def __str__(self) -> str:
        return self.text


@dataclass
class RuleResult:
    """Points and reasons contributed by a single rule."""

    points: float = 0.0
    reasons: list[MatchReason] = field(default_factory=list)

    def add(self, points: float, reason: MatchReason | None = None) -> None:
        self.points += points
        if reason is not None:
            self.reasons.append(reason)


# ── Rules ─────────────────────────────────────────────────────────────────────

def is_country_vetoed(broker: Broker, country: str | None) -> bool:
    """Return ``True`` if ``broker`` must be excluded for ``country``.

    No country selected means no filter.
    """
    if not country:
        return False
    code = country.strip().upper()
    return code in RESTRICTED_COUNTRIES or not broker.serves_country(code)


def score_base_quality(broker: Broker) -> RuleResult:
    """Preference-independent quality score every broker receives."""
    result = RuleResult(points=broker.rating * RATING_WEIGHT)
    if broker.trust_score:
        result.add(broker.trust_score * TRUST_WEIGHT)
    if broker.verified:
        result.add(VERIFIED_BONUS, MatchReason(ReasonKind.VERIFIED, "Verified broker"))
    if broker.featured:
        result.add(FEATURED_BONUS)
    return result


def score_assets(broker: Broker, assets: tuple[AssetType, ...]) -> RuleResult:
    """Score each selected asset class against the broker's platform tokens."""
    result = RuleResult()
    for asset in assets:
        keywords = ASSET_KEYWORDS.get(asset)
        if keywords is None:
            result.add(FALLBACK_POINTS)
        elif broker.has_platform(*keywords):
            result.add(
                ASSET_MATCH_POINTS,
                MatchReason(
                    ReasonKind.ASSET_SUPPORT,
                    f"Supports {ASSET_LABELS[asset]} trading",
                    asset=asset,
                ),
            )
    return result


def score_experience(broker: Broker, experience: TradingExperience) -> RuleResult:
    result = RuleResult()
    if experience == TradingExperience.FIRST_TIMER:
        if broker.min_deposit <= FIRST_TIMER_MAX_DEPOSIT:
            result.add(
                FIRST_TIMER_DEPOSIT_POINTS,
                MatchReason(ReasonKind.LOW_MIN_DEPOSIT, "Low minimum deposit for beginners"),
            )
        if broker.has_platform(*WEB_PLATFORM_KEYWORDS):
            result.add(
                FIRST_TIMER_WEB_POINTS,
                MatchReason(ReasonKind.WEB_PLATFORM, "User-friendly web platform"),
            )
    elif experience == TradingExperience.PROFESSIONAL:
        if broker.max_leverage >= PRO_MIN_LEVERAGE:
            result.add(
                PRO_LEVERAGE_POINTS,
                MatchReason(ReasonKind.HIGH_LEVERAGE, "High leverage available"),
            )
        if broker.has_platform(*PRO_PLATFORM_KEYWORDS):
            result.add(
                PRO_PLATFORM_POINTS,
                MatchReason(ReasonKind.PRO_PLATFORMS, "Professional trading platforms"),
            )
    else:
        result.add(FALLBACK_POINTS)
    return result


def score_fees(broker: Broker, fee_preference: FeePreference) -> RuleResult:
    result = RuleResult()
    spread = broker.spreads_from
    if fee_preference == FeePreference.ZERO_COMMISSION:
        if spread == 0:
            result.add(
                ZERO_COMMISSION_POINTS,
                MatchReason(ReasonKind.ZERO_COMMISSION, "Zero commission trading"),
            )
    elif fee_preference == FeePreference.LOW_COST:
        if spread <= LOW_COST_MAX_SPREAD:
            result.add(LOW_COST_POINTS, MatchReason(ReasonKind.LOW_COST, "Low cost trading"))
    elif fee_preference == FeePreference.REASONABLE_FEES:
        if spread <= REASONABLE_MAX_SPREAD:
            result.add(
                REASONABLE_POINTS,
                MatchReason(ReasonKind.REASONABLE_FEES, "Reasonable trading fees"),
            )
    else:
        result.add(FALLBACK_POINTS)
    return result


def score_frequency(broker: Broker, frequency: TradingFrequency) -> RuleResult:
    result = RuleResult()
    if frequency == TradingFrequency.DAILY:
        if broker.spreads_from <= DAILY_MAX_SPREAD:
            result.add(
                DAILY_POINTS,
                MatchReason(ReasonKind.TIGHT_SPREADS, "Tight spreads for frequent trading"),
            )
    elif frequency == TradingFrequency.YEARLY:
        if broker.min_deposit <= YEARLY_MAX_DEPOSIT:
            result.add(
                YEARLY_POINTS,
                MatchReason(ReasonKind.LONG_TERM, "Suitable for long-term investing"),
            )
    else:
        result.add(FALLBACK_POINTS)
    return result


def deposit_range(deposit_amount: DepositAmount) -> tuple[float, float]:
    """Return the inclusive ``(min, max)`` USD range for a budget band."""
    return DEPOSIT_RANGES.get(deposit_amount, _OPEN_RANGE)


def score_deposit(broker: Broker, deposit_amount: DepositAmount) -> RuleResult:
    """Reward brokers whose minimum deposit is within the budget band.

    Only the band's upper bound is checked: a broker asking for less than
    the band's minimum still fits the budget.
    """
    result = RuleResult()
    _, upper = deposit_range(deposit_amount)
    if broker.min_deposit <= upper:
        result.add(
            DEPOSIT_FIT_POINTS,
            MatchReason(
                ReasonKind.DEPOSIT_FIT,
                f"Minimum deposit fits your budget (${_format_amount(broker.min_deposit)})",
            ),
        )
    return result


# ── Helper ────────────────────────────────────────────────────────────────────

def _format_amount(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)
