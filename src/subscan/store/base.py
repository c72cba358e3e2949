#!/usr/bin/env python3
"""
SubscriptionStore Protocol - interface to the user's subscription records.

Reconciliation reads records through ``list_records``; only the commit step
writes, one record at a time. Implementations raise ``RecordStoreError`` for
any failed operation.
"""

from typing import Protocol

from .models import ExistingSubscriptionRecord, NewSubscription, SubscriptionUpdate


class SubscriptionStore(Protocol):
    """Persistent store of subscription records, scoped by user."""

    async def list_records(self, user_id: str) -> list[ExistingSubscriptionRecord]:
        """
        Load all records for a user.

        Returns:
            Records in store order (possibly empty)
        """
        ...

    async def insert_record(self, user_id: str, subscription: NewSubscription) -> str:
        """
        Insert a new record.

        Returns:
            The new record's id
        """
        ...

    async def update_record(self, record_id: str, update: SubscriptionUpdate) -> None:
        """
        Apply a price change to an existing record.

        Raises:
            RecordStoreError: If the record does not exist or cannot be written
        """
        ...
