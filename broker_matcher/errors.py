"""Exception hierarchy for broker_matcher."""

from __future__ import annotations


class BrokerMatcherError(Exception):
    """Base class for all broker_matcher errors."""


class CatalogError(BrokerMatcherError):
    """A broker catalog file is missing, unreadable, or has invalid rows."""


class SchedulerError(BrokerMatcherError):
    """A debounced request could not be scheduled."""
