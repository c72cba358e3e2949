#!/usr/bin/env python3
"""
JSON-file SubscriptionStore

Keeps every user's records in a single ``subscriptions.json`` under the
configured store directory. Each write rewrites the whole file through a
temporary file in the same directory, so an interrupted write leaves the
previous contents in place.
"""

import logging
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any

from ..core.errors import RecordStoreError
from ..core.json_utils import read_json, write_json
from .models import ExistingSubscriptionRecord, NewSubscription, SubscriptionUpdate

logger = logging.getLogger(__name__)

STORE_FILENAME = "subscriptions.json"


class JsonSubscriptionStore:
    """
    SubscriptionStore backed by a JSON file.

    File layout: ``{"records": [{"id": ..., "user_id": ..., ...}, ...]}``.
    """

    def __init__(self, store_dir: Path):
        """
        Initialize the store.

        Args:
            store_dir: Directory holding subscriptions.json
        """
        self.store_dir = Path(store_dir)
        self.store_file = self.store_dir / STORE_FILENAME

    async def list_records(self, user_id: str) -> list[ExistingSubscriptionRecord]:
        """Load all records for a user."""
        try:
            return [
                ExistingSubscriptionRecord.from_dict(raw)
                for raw in self._load_raw()
                if raw.get("user_id") == user_id
            ]
        except (AttributeError, KeyError, TypeError, ValueError, ArithmeticError) as e:
            raise RecordStoreError(f"Corrupt record in {self.store_file}: {e!r}") from e

    async def insert_record(self, user_id: str, subscription: NewSubscription) -> str:
        """Insert a new record and return its id."""
        record_id = uuid.uuid4().hex
        raw: dict[str, Any] = {
            "id": record_id,
            "user_id": user_id,
            "name": subscription.name,
            "cost": str(subscription.cost.to_decimal()),
            "currency": subscription.cost.currency,
            "frequency": subscription.frequency,
            "category": subscription.category,
            "status": subscription.status,
            "renewal_date": subscription.renewal_date.to_iso_string(),
            "trust_score": subscription.trust_score,
            "source_message_id": subscription.source_message_id,
            "created_at": datetime.now().isoformat(),
        }

        records = self._load_raw()
        records.append(raw)
        self._save_raw(records)

        logger.info(f"Inserted subscription {subscription.name!r} ({subscription.cost}) as {record_id}")
        return record_id

    async def update_record(self, record_id: str, update: SubscriptionUpdate) -> None:
        """Apply a price change to an existing record."""
        records = self._load_raw()
        for raw in records:
            if raw.get("id") == record_id:
                raw["cost"] = str(update.cost.to_decimal())
                raw["currency"] = update.cost.currency
                raw["renewal_date"] = update.renewal_date.to_iso_string()
                if update.previous_cost is not None:
                    raw["previous_cost"] = str(update.previous_cost.to_decimal())
                if update.last_price_change_date is not None:
                    raw["last_price_change_date"] = update.last_price_change_date.to_iso_string()
                raw["updated_at"] = datetime.now().isoformat()
                break
        else:
            raise RecordStoreError(f"Record {record_id} not found in {self.store_file}")

        self._save_raw(records)
        logger.info(f"Updated subscription {record_id} to {update.cost}")

    def exists(self) -> bool:
        """Check if the store file exists."""
        return self.store_file.exists()

    def last_modified(self) -> datetime | None:
        """Get timestamp of the store file."""
        if not self.exists():
            return None
        return datetime.fromtimestamp(self.store_file.stat().st_mtime)

    def item_count(self) -> int | None:
        """Get count of records across all users."""
        if not self.exists():
            return None
        return len(self._load_raw())

    def summary_text(self) -> str:
        """Get human-readable summary."""
        count = self.item_count()
        if count is None:
            return "No subscription records found"
        return f"Subscription records: {count}"

    def _load_raw(self) -> list[dict[str, Any]]:
        if not self.exists():
            return []
        try:
            data = read_json(self.store_file)
        except (OSError, ValueError) as e:
            raise RecordStoreError(f"Failed to read {self.store_file}: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("records"), list):
            raise RecordStoreError(f"Unexpected layout in {self.store_file}")
        for raw in data["records"]:
            if not isinstance(raw, dict):
                raise RecordStoreError(f"Corrupt record in {self.store_file}: expected an object, got {raw!r}")
        return data["records"]

    def _save_raw(self, records: list[dict[str, Any]]) -> None:
        try:
            write_json(self.store_file, {"records": records})
        except OSError as e:
            raise RecordStoreError(f"Failed to write {self.store_file}: {e}") from e
