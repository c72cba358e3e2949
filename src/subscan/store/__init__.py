"""
Subscription Record Store Package

Persistence boundary for the user's subscription records.

Key Components:
- base: SubscriptionStore protocol
- json_store: JSON-file implementation
- models: record entity and insert/update payloads
"""

from .base import SubscriptionStore
from .json_store import STORE_FILENAME, JsonSubscriptionStore
from .models import ExistingSubscriptionRecord, NewSubscription, SubscriptionUpdate

__all__ = [
    "STORE_FILENAME",
    "ExistingSubscriptionRecord",
    "JsonSubscriptionStore",
    "NewSubscription",
    "SubscriptionStore",
    "SubscriptionUpdate",
]
