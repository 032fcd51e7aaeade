"""Broker Matcher — ranks brokers against a user's trading preferences."""

from broker_matcher.models.broker import Broker
from broker_matcher.models.preferences import UserPreferences
from broker_matcher.service import BrokerFilterService

__version__ = "0.1.0"

__all__ = ["Broker", "BrokerFilterService", "UserPreferences", "__version__"]
