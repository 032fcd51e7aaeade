"""
Domain models: the broker catalog entry and the user preference vector.

Both are frozen pydantic models; the scoring engine never mutates them.
"""

from broker_matcher.models.broker import Broker
from broker_matcher.models.preferences import UserPreferences

__all__ = ["Broker", "UserPreferences"]
