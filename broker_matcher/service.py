"""
BrokerFilterService — the engine's entry point for host applications.

The host (a questionnaire view, the CLI, a web handler) constructs one
service, hands it the broker catalog once, and then asks for results on one
of three paths:

  filter_brokers(prefs, callback)
      Interactive path. Debounced: a burst of calls within the quiet period
      (500 ms by default) produces a single callback with the top 20 brokers
      for the *last* preferences supplied. Scoring errors are logged and
      reported as an empty list; they never reach the caller.

  filter_brokers_immediate(prefs)
      Final-submit path. Synchronous, no debouncing, errors propagate.

  get_broker_recommendations(prefs, limit=None)
      Explained shortlist with match reasons. Without a ``limit`` the
      service-wide shortlist size is used (10 unless configured).
      Synchronous, errors propagate.

Call ``dispose()`` when the host goes away; a pending interactive run is
dropped and its callback never fires.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Optional

from broker_matcher.errors import SchedulerError
from broker_matcher.models.broker import Broker
from broker_matcher.models.preferences import UserPreferences
from broker_matcher.scoring.aggregator import (
    INTERACTIVE_LIMIT,
    RECOMMENDATION_LIMIT,
    BrokerRecommendation,
    recommend,
    top_matches,
)
from broker_matcher.scoring.debounce import (
    DEFAULT_QUIET_PERIOD_S,
    DebounceState,
    Debouncer,
)

if TYPE_CHECKING:
    from broker_matcher.config import AppConfig

logger = logging.getLogger(__name__)

FilterCallback = Callable[[list[Broker]], None]


class BrokerFilterService:
    """Ranks a broker catalog against user preferences.

    Args:
        brokers:      Initial catalog (may be set later with ``set_brokers``).
        quiet_period: Debounce quiet period in seconds.
        recommendation_limit: Default shortlist size for
                      ``get_broker_recommendations``.
        loop:         Event loop for the interactive path; defaults to the
                      running loop when ``filter_brokers`` is called.
    """

    def __init__(
        self,
        brokers: Optional[Iterable[Broker]] = None,
        quiet_period: float = DEFAULT_QUIET_PERIOD_S,
        recommendation_limit: int = RECOMMENDATION_LIMIT,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> None:
        self._brokers: tuple[Broker, ...] = tuple(brokers or ())
        self._debouncer = Debouncer(quiet_period=quiet_period, loop=loop)
        self._recommendation_limit = recommendation_limit
        self._disposed = False

    @classmethod
    def from_config(
        cls,
        config: "AppConfig",
        brokers: Optional[Iterable[Broker]] = None,
    ) -> "BrokerFilterService":
        return cls(
            brokers=brokers,
            quiet_period=config.filter.debounce_ms / 1000.0,
            recommendation_limit=config.filter.recommendation_limit,
        )

    # ── Catalog ───────────────────────────────────────────────────────────────

    @property
    def brokers(self) -> tuple[Broker, ...]:
        return self._brokers

    def set_brokers(self, brokers: Iterable[Broker]) -> None:
        """Replace the catalog used by all subsequent filtering passes."""
        self._brokers = tuple(brokers)
        logger.debug("Catalog set: %d brokers", len(self._brokers))

    # ── Interactive path ──────────────────────────────────────────────────────

    @property
    def has_pending(self) -> bool:
        return self._debouncer.state == DebounceState.PENDING

    def filter_brokers(self, prefs: UserPreferences, callback: FilterCallback) -> None:
        """Schedule a debounced filtering pass.

        Any pending pass is cancelled; its callback will not be called.

        Raises:
            SchedulerError: If the service was disposed or no event loop is
                available.
        """
        if self._disposed:
            raise SchedulerError("BrokerFilterService has been disposed.")
        self._debouncer.schedule(self._run_filter, prefs, callback)

    def _run_filter(self, prefs: UserPreferences, callback: FilterCallback) -> None:
        try:
            results = top_matches(self._brokers, prefs, limit=INTERACTIVE_LIMIT)
        except Exception:
            logger.exception("Error filtering brokers")
            results = []
        else:
            logger.debug(
                "Filter pass: %d of %d brokers matched",
                len(results), len(self._brokers),
                extra={"matches": len(results), "catalog_size": len(self._brokers)},
            )
        callback(results)

    def cancel(self) -> bool:
        """Drop a pending interactive pass. Returns ``True`` if one was pending."""
        return self._debouncer.cancel()

    def dispose(self) -> None:
        """Cancel pending work and release the catalog."""
        self._debouncer.cancel()
        self._brokers = ()
        self._disposed = True

    # ── Synchronous paths ─────────────────────────────────────────────────────

    def filter_brokers_immediate(self, prefs: UserPreferences) -> list[Broker]:
        """Rank now and return the top 20 brokers."""
        return top_matches(self._brokers, prefs, limit=INTERACTIVE_LIMIT)

    def get_broker_recommendations(
        self,
        prefs: UserPreferences,
        limit: Optional[int] = None,
    ) -> list[BrokerRecommendation]:
        """Rank now and return up to ``limit`` brokers with match reasons.

        ``limit`` defaults to the service's ``recommendation_limit``.
        """
        if limit is None:
            limit = self._recommendation_limit
        return recommend(self._brokers, prefs, limit=limit)
