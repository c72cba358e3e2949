#!/usr/bin/env python3
"""
Gmail Message Fetcher Module

Searches a connected Gmail mailbox for billing-related messages and fetches
their full payloads through the Gmail REST API.

The search call and the payload fetches are the only points where a scan can
fail outright: any transport error here is raised as ``MailboxError`` before
extraction begins.
"""

import asyncio
import html
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

import httpx

from ..core.config import GmailConfig, ScanConfig
from ..core.dates import parse_header_datetime
from ..core.errors import MailboxAuthError, MailboxError
from .mime import decode_header_text, extract_body_text, header_value

logger = logging.getLogger(__name__)

NO_SUBJECT = "(No Subject)"


@dataclass(frozen=True)
class RawMessage:
    """One mailbox message, decoded for extraction. Lives for a single scan."""

    id: str
    subject: str
    received_at: datetime
    snippet: str
    body: str


def build_search_query(keywords: list[str], days: int) -> str:
    """
    Build a Gmail search query for billing messages.

    Each keyword is matched against the subject and the full text.

    Example:
        build_search_query(["receipt", "renews on"], 30)
        -> 'newer_than:30d (subject:(receipt OR "renews on") OR receipt OR "renews on")'
    """
    terms = " OR ".join(f'"{k}"' if " " in k else k for k in keywords)
    return f"newer_than:{days}d (subject:({terms}) OR {terms})"


class GmailFetcher:
    """
    Fetches candidate billing messages from the Gmail API.

    Payloads are fetched concurrently; the only bound is the message cap.
    """

    def __init__(
        self,
        scan_config: ScanConfig | None = None,
        gmail_config: GmailConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        """
        Initialize the fetcher.

        Args:
            scan_config: Message cap, keywords and truncation length
            gmail_config: API base URL and timeout
            client: Pre-built HTTP client (tests inject a mock transport here)
        """
        self.scan_config = scan_config or ScanConfig()
        self.gmail_config = gmail_config or GmailConfig()
        self._client = client

    async def fetch_messages(self, access_token: str, days: int | None = None) -> list[RawMessage]:
        """
        Search the mailbox and fetch every matching message.

        Args:
            access_token: OAuth bearer token for the mailbox
            days: Lookback window; defaults to the configured lookback

        Returns:
            Messages in search-result order; empty when nothing matched

        Raises:
            MailboxError: If the search or any payload fetch fails
        """
        lookback = days if days is not None else self.scan_config.lookback_days
        headers = {"Authorization": f"Bearer {access_token}"}

        if self._client is not None:
            return await self._fetch_with(self._client, headers, lookback)

        async with httpx.AsyncClient(
            base_url=self.gmail_config.api_base_url, timeout=self.gmail_config.timeout
        ) as client:
            return await self._fetch_with(client, headers, lookback)

    async def _fetch_with(
        self, client: httpx.AsyncClient, headers: dict[str, str], days: int
    ) -> list[RawMessage]:
        message_ids = await self.search_message_ids(client, headers, days)
        if not message_ids:
            return []

        payloads = await asyncio.gather(
            *(
                self._get_json(client, f"/messages/{message_id}", headers, {"format": "full"})
                for message_id in message_ids
            )
        )

        messages = [self.parse_message(payload) for payload in payloads]
        logger.info(f"Fetched {len(messages)} message payloads")
        return messages

    async def search_message_ids(
        self, client: httpx.AsyncClient, headers: dict[str, str], days: int
    ) -> list[str]:
        """Run the keyword search and return up to ``max_messages`` ids."""
        query = build_search_query(self.scan_config.search_keywords, days)
        cap = self.scan_config.max_messages
        logger.info(f"Searching mailbox: {query!r} (cap {cap})")

        data = await self._get_json(client, "/messages", headers, {"q": query, "maxResults": cap})
        ids = [m["id"] for m in data.get("messages") or [] if m.get("id")][:cap]

        logger.info(f"Search matched {len(ids)} messages")
        return ids

    def parse_message(self, data: dict[str, Any]) -> RawMessage:
        """
        Convert a Gmail ``format=full`` message resource to a RawMessage.

        Missing ``Date`` falls back to now; missing ``Subject`` to "(No Subject)".
        """
        payload = data.get("payload") or {}
        headers = payload.get("headers") or []

        subject = decode_header_text(header_value(headers, "Subject") or "").strip() or NO_SUBJECT

        return RawMessage(
            id=str(data.get("id", "")),
            subject=subject,
            received_at=parse_header_datetime(header_value(headers, "Date")),
            snippet=html.unescape(data.get("snippet") or ""),
            body=extract_body_text(payload, self.scan_config.body_truncate_length),
        )

    async def _get_json(
        self,
        client: httpx.AsyncClient,
        path: str,
        headers: dict[str, str],
        params: dict[str, Any],
    ) -> dict[str, Any]:
        try:
            response = await client.get(path, headers=headers, params=params)
        except httpx.HTTPError as e:
            raise MailboxError(f"Mailbox request failed: {e}") from e

        if response.status_code in (401, 403):
            raise MailboxAuthError(
                "Mailbox access was denied - reconnect your email account and try again",
                status_code=response.status_code,
            )
        if response.status_code >= 400:
            raise MailboxError(
                f"Mailbox API error {response.status_code}: {response.reason_phrase}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise MailboxError(f"Mailbox returned invalid JSON for {path}") from e
