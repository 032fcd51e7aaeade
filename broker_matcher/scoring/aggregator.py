"""
Score aggregation: runs every applicable rule for every broker and ranks.

Usage flow
----------
1. score_broker(broker, prefs)
   -> BrokerScore  (total points + ordered reasons; 0 when vetoed)

2. rank_brokers(brokers, prefs)
   -> list[BrokerScore]  (score > 0 only, best first)

3. top_matches(brokers, prefs, limit=20)
   -> list[Broker]  (interactive result list, reasons dropped)

4. recommend(brokers, prefs, limit=10)
   -> list[BrokerRecommendation]  (explained shortlist)

Tie-break policy
----------------
Sorting is stable: brokers with equal scores keep their catalog order.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from broker_matcher.models.broker import Broker
from broker_matcher.models.preferences import UserPreferences
from broker_matcher.scoring.rules import (
    MatchReason,
    RuleResult,
    is_country_vetoed,
    score_assets,
    score_base_quality,
    score_deposit,
    score_experience,
    score_fees,
    score_frequency,
)

INTERACTIVE_LIMIT = 20
RECOMMENDATION_LIMIT = 10


@dataclass
class BrokerScore:
    """A broker paired with its score for one preference vector.

    Attributes:
        broker:        The scored broker.
        score:         Total points; ``0`` when vetoed by the country filter.
        match_reasons: Reasons in rule-evaluation order.
    """

    broker: Broker
    score: float
    match_reasons: list[MatchReason] = field(default_factory=list)

    @property
    def is_match(self) -> bool:
        return self.score > 0


@dataclass
class BrokerRecommendation:
    """One entry of the explained shortlist.

    Attributes:
        broker:        The recommended broker.
        match_reasons: Why the broker matched, in rule-evaluation order.
        score:         Total points.
        rank:          1-based position in the shortlist.
    """

    broker: Broker
    match_reasons: list[MatchReason]
    score: float
    rank: int

    @property
    def reason_texts(self) -> list[str]:
        return [r.text for r in self.match_reasons]


def score_broker(broker: Broker, prefs: UserPreferences) -> BrokerScore:
    """Run all rules for one broker.

    The country veto short-circuits: a vetoed broker scores 0 with no
    reasons. Unanswered preference dimensions are skipped entirely.
    """
    if is_country_vetoed(broker, prefs.country):
        return BrokerScore(broker=broker, score=0.0)

    results: list[RuleResult] = [score_base_quality(broker)]
    if prefs.assets:
        results.append(score_assets(broker, prefs.assets))
    if prefs.experience is not None:
        results.append(score_experience(broker, prefs.experience))
    if prefs.fee_preference is not None:
        results.append(score_fees(broker, prefs.fee_preference))
    if prefs.frequency is not None:
        results.append(score_frequency(broker, prefs.frequency))
    if prefs.deposit_amount is not None:
        results.append(score_deposit(broker, prefs.deposit_amount))

    return BrokerScore(
        broker=broker,
        score=sum(r.points for r in results),
        match_reasons=[reason for r in results for reason in r.reasons],
    )


def rank_brokers(
    brokers: Sequence[Broker],
    prefs:   UserPreferences,
) -> list[BrokerScore]:
    """Score every broker, drop non-matches, and sort best first.

    Args:
        brokers: The catalog to rank.
        prefs:   The user's preferences.

    Returns:
        ``BrokerScore`` list with ``score > 0``, sorted by score descending.
        Equal scores keep catalog order.
    """
    scored = [score_broker(b, prefs) for b in brokers]
    return sorted((s for s in scored if s.is_match), key=lambda s: -s.score)


def top_matches(
    brokers: Sequence[Broker],
    prefs:   UserPreferences,
    limit:   int = INTERACTIVE_LIMIT,
) -> list[Broker]:
    """Return at most ``limit`` best-matching brokers, without reasons."""
    if limit <= 0:
        return []
    return [s.broker for s in rank_brokers(brokers, prefs)[:limit]]


def recommend(
    brokers: Sequence[Broker],
    prefs:   UserPreferences,
    limit:   int = RECOMMENDATION_LIMIT,
) -> list[BrokerRecommendation]:
    """Return at most ``limit`` best-matching brokers with their reasons."""
    if limit <= 0:
        return []
    return [
        BrokerRecommendation(
            broker=s.broker,
            match_reasons=list(s.match_reasons),
            score=s.score,
            rank=rank,
        )
        for rank, s in enumerate(rank_brokers(brokers, prefs)[:limit], start=1)
    ]
