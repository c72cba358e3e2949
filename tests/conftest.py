"""
Pytest Configuration and Shared Fixtures

Provides common test fixtures and configuration for the entire test suite.
"""

import base64
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable

import pytest

from subscan.core import config as config_module
from subscan.core.dates import BillingDate
from subscan.core.errors import RecordStoreError
from subscan.core.money import Money
from subscan.extraction.models import BillingFrequency, ExtractionConfidence, SubscriptionCandidate
from subscan.gmail.fetcher import RawMessage
from subscan.store.models import ExistingSubscriptionRecord, NewSubscription, SubscriptionUpdate


class FakeTextGenerator:
    """Text generator returning canned responses and counting calls."""

    def __init__(self, response: str | None = None, error: Exception | None = None):
        self.response = response
        self.error = error
        self.prompts: list[str] = []

    @property
    def call_count(self) -> int:
        return len(self.prompts)

    async def generate(self, prompt: str) -> str | None:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.response


class InMemorySubscriptionStore:
    """Subscription store held in a dict; can be told to fail for given names or ids."""

    def __init__(self, records: list[ExistingSubscriptionRecord] | None = None, fail_on: set[str] | None = None):
        self.records = {r.id: r for r in records or []}
        self.owner = {r.id: "test-user" for r in records or []}
        self.fail_on = fail_on or set()
        self.inserted: list[NewSubscription] = []
        self.updated: list[tuple[str, SubscriptionUpdate]] = []
        self.list_calls = 0

    async def list_records(self, user_id: str) -> list[ExistingSubscriptionRecord]:
        self.list_calls += 1
        return [r for r in self.records.values() if self.owner[r.id] == user_id]

    async def insert_record(self, user_id: str, subscription: NewSubscription) -> str:
        if subscription.name in self.fail_on:
            raise RecordStoreError(f"insert rejected for {subscription.name}")
        record_id = f"rec-{len(self.records) + 1:03d}"
        self.records[record_id] = ExistingSubscriptionRecord(
            id=record_id,
            name=subscription.name,
            cost=subscription.cost,
            frequency=subscription.frequency,
            category=subscription.category,
            renewal_date=subscription.renewal_date,
            source_message_id=subscription.source_message_id,
        )
        self.owner[record_id] = user_id
        self.inserted.append(subscription)
        return record_id

    async def update_record(self, record_id: str, update: SubscriptionUpdate) -> None:
        if record_id in self.fail_on or record_id not in self.records:
            raise RecordStoreError(f"update rejected for {record_id}")
        old = self.records[record_id]
        self.records[record_id] = ExistingSubscriptionRecord(
            id=old.id,
            name=old.name,
            cost=update.cost,
            frequency=old.frequency,
            renewal_date=update.renewal_date,
            previous_cost=update.previous_cost,
            last_price_change_date=update.last_price_change_date,
        )
        self.updated.append((record_id, update))


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as temp_path:
        yield Path(temp_path)


@pytest.fixture
def fake_generator() -> Callable[..., FakeTextGenerator]:
    """Factory for fake text generators."""
    return FakeTextGenerator


@pytest.fixture
def memory_store() -> Callable[..., InMemorySubscriptionStore]:
    """Factory for in-memory subscription stores."""
    return InMemorySubscriptionStore


@pytest.fixture
def make_message() -> Callable[..., RawMessage]:
    """Factory for RawMessage objects."""

    def _make(
        id: str = "msg-1",
        subject: str = "Your receipt",
        snippet: str = "",
        body: str = "",
        received_at: datetime | None = None,
    ) -> RawMessage:
        return RawMessage(
            id=id,
            subject=subject,
            received_at=received_at or datetime(2024, 10, 15, 10, 30, tzinfo=timezone.utc),
            snippet=snippet,
            body=body,
        )

    return _make


@pytest.fixture
def make_candidate() -> Callable[..., SubscriptionCandidate]:
    """Factory for SubscriptionCandidate objects."""

    def _make(
        merchant_name: str = "Spotify",
        amount: str = "11.99",
        currency: str = "USD",
        source_message_id: str = "msg-1",
        frequency: BillingFrequency = BillingFrequency.MONTHLY,
        billing_date: str | None = "2024-10-15",
        confidence: ExtractionConfidence = ExtractionConfidence.HIGH,
    ) -> SubscriptionCandidate:
        return SubscriptionCandidate(
            source_message_id=source_message_id,
            merchant_name=merchant_name,
            amount=Money.from_amount(amount, currency),
            billing_frequency=frequency,
            billing_date=BillingDate.parse(billing_date),
            extraction_confidence=confidence,
        )

    return _make


@pytest.fixture
def make_record() -> Callable[..., ExistingSubscriptionRecord]:
    """Factory for ExistingSubscriptionRecord objects."""

    def _make(id: str = "rec-1", name: str = "Spotify Premium", cost: str = "9.99", **kwargs: Any):
        return ExistingSubscriptionRecord(id=id, name=name, cost=Money.from_amount(cost), **kwargs)

    return _make


@pytest.fixture
def gmail_payload() -> Callable[..., dict[str, Any]]:
    """Factory for Gmail API ``format=full`` message payloads."""

    def _make(
        id: str,
        subject: str | None = "Your receipt",
        body: str | None = "Total $9.99",
        snippet: str = "",
        date: str | None = "Tue, 15 Oct 2024 10:30:00 +0000",
        mime_type: str = "text/plain",
    ) -> dict[str, Any]:
        headers = []
        if subject is not None:
            headers.append({"name": "Subject", "value": subject})
        if date is not None:
            headers.append({"name": "Date", "value": date})

        parts = []
        if body is not None:
            data = base64.urlsafe_b64encode(body.encode("utf-8")).decode("ascii").rstrip("=")
            parts.append({"mimeType": mime_type, "body": {"data": data}})

        return {
            "id": id,
            "snippet": snippet,
            "payload": {"mimeType": "multipart/alternative", "headers": headers, "parts": parts},
        }

    return _make


@pytest.fixture(autouse=True)
def setup_test_environment(monkeypatch, tmp_path):
    """Set up test environment variables."""
    # Ensure tests don't use real data or services
    monkeypatch.setenv("SUBSCAN_ENV", "test")
    monkeypatch.setenv("SUBSCAN_DATA_DIR", str(tmp_path / "subscan_data"))
    monkeypatch.setenv("SUBSCAN_USER_ID", "test-user")
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("GMAIL_ACCESS_TOKEN", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)

    # Drop any configuration cached by an earlier test
    monkeypatch.setattr(config_module, "_config", None)


# Test markers for categorizing tests
def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests for individual components"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests for complete workflows"
    )
    config.addinivalue_line(
        "markers", "currency: Tests for currency handling and precision"
    )
    config.addinivalue_line(
        "markers", "gmail: Tests for mailbox search and MIME decoding"
    )
    config.addinivalue_line(
        "markers", "extraction: Tests for candidate extraction"
    )
    config.addinivalue_line(
        "markers", "reconcile: Tests for candidate classification"
    )
    config.addinivalue_line(
        "markers", "review: Tests for resolution session and commit"
    )
    config.addinivalue_line(
        "markers", "store: Tests for the subscription record store"
    )
