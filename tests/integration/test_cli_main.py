#!/usr/bin/env python3
"""
Integration tests for CLI Main Entry Point

Tests end-to-end CLI command execution with real command invocation.
The mailbox is replaced by an in-process fake; everything else is real.
"""

import asyncio
import json
import os
from datetime import date
from pathlib import Path

import pytest
from click.testing import CliRunner

from subscan.cli.main import main
from subscan.core.config import ScanConfig
from subscan.core.dates import BillingDate
from subscan.core.errors import MailboxAuthError
from subscan.core.money import Money
from subscan.extraction import build_extractor
from subscan.pipeline import DiscoveryPipeline
from subscan.store import STORE_FILENAME, JsonSubscriptionStore, NewSubscription


class FakeFetcher:
    """Mailbox returning fixed messages and remembering the token and window it was given."""

    def __init__(self, messages, error=None):
        self.messages = messages
        self.error = error
        self.tokens: list[str] = []
        self.days: list[int | None] = []

    async def fetch_messages(self, access_token, days=None):
        self.tokens.append(access_token)
        self.days.append(days)
        if self.error is not None:
            raise self.error
        return self.messages


@pytest.fixture
def inbox(make_message):
    """A price change, a new subscription and a duplicate, in that order."""
    return [
        make_message(id="m1", subject="Spotify: Your receipt", body="Total $11.99"),
        make_message(id="m2", subject="Netflix - Your receipt", body="You were charged $15.99"),
        make_message(id="m3", subject="Hulu: payment receipt", body="Amount paid: $7.99"),
    ]


@pytest.fixture
def store(memory_store, make_record):
    """In-memory store tracking Spotify at the old price and Hulu."""
    return memory_store(
        [
            make_record(id="rec-1", name="Spotify Premium", cost="9.99"),
            make_record(id="rec-2", name="Hulu", cost="7.99"),
        ]
    )


@pytest.fixture
def use_pipeline(monkeypatch, store):
    """Route the scan commands to a pipeline over the given fetcher."""

    def _use(fetcher: FakeFetcher) -> FakeFetcher:
        def fake_build_pipeline(config, entitlement_check=None):
            return DiscoveryPipeline(
                store=store,
                user_id=config.user_id,
                fetcher=fetcher,
                extractor=build_extractor(ScanConfig()),
            )

        monkeypatch.setattr("subscan.cli.scan.build_pipeline", fake_build_pipeline)
        return fetcher

    return _use


@pytest.mark.integration
class TestCLIMainIntegration:
    """Test main CLI entry point with real command execution."""

    def setup_method(self):
        """Set up test environment."""
        self.runner = CliRunner()

    def test_help_command_lists_all_subcommands(self):
        """Test subscan --help shows all registered subcommands."""
        result = self.runner.invoke(main, ["--help"])

        assert result.exit_code == 0
        assert "Subscription Discovery" in result.output
        for command in ["scan", "review", "records", "config", "version"]:
            assert command in result.output

    def test_version_command_shows_version_info(self):
        """Test subscan version displays version and author."""
        result = self.runner.invoke(main, ["version"])

        assert result.exit_code == 0
        assert "subscan v" in result.output
        assert "Author:" in result.output

    def test_config_command_redacts_secrets(self, monkeypatch):
        """Test subscan config shows settings without secret values."""
        monkeypatch.setenv("OPENAI_API_KEY", "sk-secret")
        monkeypatch.setenv("GMAIL_ACCESS_TOKEN", "ya29.secret")

        result = self.runner.invoke(main, ["config"])

        assert result.exit_code == 0
        assert "Current Configuration:" in result.output
        assert "Environment: test" in result.output
        assert "User: test-user" in result.output
        assert "Lookback Days: 30" in result.output
        assert "***REDACTED***" in result.output
        assert "sk-secret" not in result.output
        assert "ya29.secret" not in result.output

    def test_invalid_configuration_fails(self, monkeypatch):
        """Test validation errors abort the command."""
        monkeypatch.setenv("SUBSCAN_MAX_MESSAGES", "0")

        result = self.runner.invoke(main, ["config"])

        assert result.exit_code != 0
        assert "Scan message cap must be positive" in str(result.exception)

    def test_invalid_command_shows_error(self):
        """Test unknown subcommands are rejected."""
        result = self.runner.invoke(main, ["nonexistent"])

        assert result.exit_code != 0
        assert "No such command" in result.output

    def test_records_empty(self):
        """Test listing records before anything was saved."""
        result = self.runner.invoke(main, ["records"])

        assert result.exit_code == 0
        assert "No subscription records found" in result.output

    def test_records_lists_saved_subscriptions(self):
        """Test saved records are listed with cost and renewal date."""
        store = JsonSubscriptionStore(Path(os.environ["SUBSCAN_DATA_DIR"]) / "store")
        asyncio.run(
            store.insert_record(
                "test-user",
                NewSubscription(
                    name="Netflix",
                    cost=Money.from_amount("15.99"),
                    frequency="monthly",
                    renewal_date=BillingDate(date=date(2024, 11, 1)),
                    category="Software",
                ),
            )
        )

        result = self.runner.invoke(main, ["records"])

        assert result.exit_code == 0
        assert "Subscription records: 1" in result.output
        assert "Netflix" in result.output
        assert "$15.99" in result.output
        assert "renews 2024-11-01" in result.output

    @pytest.mark.parametrize(
        "contents,message",
        [
            ("{not json", "Failed to read"),
            (json.dumps({"records": ["garbage"]}), "Corrupt record"),
        ],
    )
    def test_records_unreadable_store(self, contents, message):
        """Test a damaged store file is reported as an error, not a traceback."""
        store_dir = Path(os.environ["SUBSCAN_DATA_DIR"]) / "store"
        store_dir.mkdir(parents=True, exist_ok=True)
        (store_dir / STORE_FILENAME).write_text(contents, encoding="utf-8")

        result = self.runner.invoke(main, ["records"])

        assert result.exit_code == 1
        assert f"Error: {message}" in result.output
        assert "Traceback" not in result.output


@pytest.mark.integration
class TestScanCommand:
    """Test the scan command."""

    def setup_method(self):
        """Set up test environment."""
        self.runner = CliRunner()

    def test_requires_token(self, use_pipeline, inbox):
        """Test scanning without a token is a usage error."""
        fetcher = use_pipeline(FakeFetcher(inbox))

        result = self.runner.invoke(main, ["scan"])

        assert result.exit_code == 2
        assert "mailbox access token is required" in result.output
        assert fetcher.tokens == []

    def test_rejects_non_positive_days(self, use_pipeline, inbox):
        """Test --days must be at least one."""
        use_pipeline(FakeFetcher(inbox))

        result = self.runner.invoke(main, ["scan", "--token", "t", "--days", "0"])

        assert result.exit_code == 2

    def test_scan_lists_candidates(self, use_pipeline, inbox, store):
        """Test candidates are shown without writing anything."""
        fetcher = use_pipeline(FakeFetcher(inbox))

        result = self.runner.invoke(main, ["scan", "--token", "token-abc", "--days", "90"])

        assert result.exit_code == 0, result.output
        assert "Scanned 3 message(s)" in result.output
        assert "Found 3 potential subscriptions." in result.output
        assert "conflict" in result.output
        assert "duplicate" in result.output
        assert "Netflix" in result.output
        assert fetcher.tokens == ["token-abc"]
        assert store.inserted == [] and store.updated == []

    def test_token_from_environment(self, use_pipeline, inbox, monkeypatch):
        """Test GMAIL_ACCESS_TOKEN is used when --token is absent."""
        monkeypatch.setenv("GMAIL_ACCESS_TOKEN", "env-token")
        fetcher = use_pipeline(FakeFetcher(inbox))

        result = self.runner.invoke(main, ["scan"])

        assert result.exit_code == 0, result.output
        assert fetcher.tokens == ["env-token"]

    def test_scan_import_new(self, use_pipeline, inbox, store):
        """Test --import-new saves only the new subscription."""
        use_pipeline(FakeFetcher(inbox))

        result = self.runner.invoke(main, ["scan", "--token", "t", "--import-new"])

        assert result.exit_code == 0, result.output
        assert "✅ Saved 1 subscription(s)" in result.output
        assert [s.name for s in store.inserted] == ["Netflix"]

    def test_scan_output_file(self, use_pipeline, inbox, temp_dir):
        """Test --output writes the result and summary as JSON."""
        use_pipeline(FakeFetcher(inbox))
        output = temp_dir / "scan.json"

        result = self.runner.invoke(main, ["scan", "--token", "t", "--output", str(output)])

        assert result.exit_code == 0, result.output
        data = json.loads(output.read_text())
        assert data["found"] == 3
        assert data["summary"]["classification_breakdown"] == {"conflict": 1, "new": 1, "duplicate": 1}
        assert data["candidates"][0]["matched_record_id"] == "rec-1"

    def test_scan_empty_mailbox(self, use_pipeline):
        """Test an empty mailbox reports no bills."""
        use_pipeline(FakeFetcher([]))

        result = self.runner.invoke(main, ["scan", "--token", "t"])

        assert result.exit_code == 0
        assert "No bills found." in result.output

    def test_scan_failure(self, use_pipeline):
        """Test a rejected token exits non-zero with the scan error."""
        use_pipeline(FakeFetcher([], error=MailboxAuthError("Mailbox access was denied", status_code=401)))

        result = self.runner.invoke(main, ["scan", "--token", "expired"])

        assert result.exit_code == 1
        assert "Mailbox access was denied" in result.output


@pytest.mark.integration
class TestReviewCommand:
    """Test the interactive review command."""

    def setup_method(self):
        """Set up test environment."""
        self.runner = CliRunner()

    def test_accept_defaults(self, use_pipeline, inbox, store):
        """Test --yes updates the conflict and imports the new subscription."""
        fetcher = use_pipeline(FakeFetcher(inbox))

        result = self.runner.invoke(main, ["review", "--token", "t", "--yes"])

        assert result.exit_code == 0, result.output
        assert "Lookback window" not in result.output
        assert fetcher.days == [None]
        assert "✅ Saved 2 subscription(s)" in result.output
        assert [s.name for s in store.inserted] == ["Netflix"]
        assert [record_id for record_id, _ in store.updated] == ["rec-1"]

    def test_interactive_choices(self, use_pipeline, inbox, store):
        """Test prompts drive per-candidate decisions."""
        fetcher = use_pipeline(FakeFetcher(inbox))

        # Default lookback, then Spotify: add separate, Netflix: decline, Hulu duplicate: add anyway
        result = self.runner.invoke(main, ["review", "--token", "t"], input="\nadd\nn\ny\n")

        assert result.exit_code == 0, result.output
        assert "Lookback window in days (30, 90, 365) [30]" in result.output
        assert fetcher.days == [30]
        assert "Price change: Spotify" in result.output
        assert "currently tracked as Spotify Premium at $9.99" in result.output
        assert [s.name for s in store.inserted] == ["Spotify", "Hulu"]
        assert store.updated == []

    def test_days_option_skips_lookback_prompt(self, use_pipeline, inbox):
        """Test an explicit --days is used as given and listed presets appear in help."""
        fetcher = use_pipeline(FakeFetcher(inbox))

        result = self.runner.invoke(main, ["review", "--token", "t", "--days", "45"], input="skip\nn\nn\n")
        help_result = self.runner.invoke(main, ["review", "--help"])

        assert result.exit_code == 0, result.output
        assert "Lookback window" not in result.output
        assert fetcher.days == [45]
        assert "365" in help_result.output

    def test_nothing_selected(self, use_pipeline, inbox, store):
        """Test skipping everything commits nothing."""
        fetcher = use_pipeline(FakeFetcher(inbox))

        result = self.runner.invoke(main, ["review", "--token", "t"], input="365\nskip\nn\nn\n")

        assert result.exit_code == 0, result.output
        assert fetcher.days == [365]
        assert "Nothing selected" in result.output
        assert store.inserted == [] and store.updated == []

    def test_partial_commit_failure(self, use_pipeline, inbox, memory_store, make_record, monkeypatch):
        """Test failed items are counted without stopping the rest."""
        failing = memory_store([make_record(id="rec-1", name="Spotify Premium", cost="9.99")], fail_on={"rec-1"})
        monkeypatch.setattr(
            "subscan.cli.scan.build_pipeline",
            lambda config, entitlement_check=None: DiscoveryPipeline(
                store=failing, user_id=config.user_id, fetcher=FakeFetcher(inbox), extractor=build_extractor(ScanConfig())
            ),
        )

        result = self.runner.invoke(main, ["review", "--token", "t", "--yes"])

        assert result.exit_code == 0, result.output
        assert "✅ Saved 2 subscription(s)" in result.output
        assert "1 item(s) could not be saved" in result.output
        assert [s.name for s in failing.inserted] == ["Netflix", "Hulu"]
