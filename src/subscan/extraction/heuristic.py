#!/usr/bin/env python3
"""
Heuristic Extraction Stage

Regex fallback used when model extraction is unavailable or fails. Once the
keyword gate has passed, this stage always produces a candidate: it never
re-decides whether the message is a bill.
"""

import logging
import re

from ..core.currency import DEFAULT_CURRENCY, sanitize_currency
from ..core.dates import BillingDate
from ..core.money import Money
from ..gmail.fetcher import RawMessage
from .models import (
    BillingFrequency,
    Extracted,
    ExtractionConfidence,
    ExtractionResult,
    SubscriptionCandidate,
)

logger = logging.getLogger(__name__)

MERCHANT_NAME_MAX_CHARS = 30

# At most nine integer digits; longer digit runs are references, not prices
_NUMBER = r"(?<![\d.,])(\d{1,3}(?:,\d{3}){1,2}(?:\.\d{1,2})?|\d{1,9}(?:[.,]\d{1,2})?)(?!\d)"
_SYMBOL = r"([$€£])"
_CODE = r"\b(USD|EUR|GBP|JPY|CAD|AUD|NZD|CHF|SEK|NOK|DKK|INR|SGD|HKD|MXN|BRL|ZAR|PLN)\b"

# (pattern, group holding the amount, group holding the currency)
AMOUNT_PATTERNS: list[tuple[re.Pattern[str], int, int]] = [
    (re.compile(_SYMBOL + r"\s?" + _NUMBER), 2, 1),
    (re.compile(_CODE + r"\s?" + _NUMBER), 2, 1),
    (re.compile(_NUMBER + r"\s?" + _SYMBOL), 1, 2),
    (re.compile(_NUMBER + r"\s?" + _CODE), 1, 2),
]

_MERCHANT_DELIMITERS = re.compile(r"[:\-–]")


def find_amount(text: str) -> tuple[str, str] | None:
    """
    Find the first currency-tagged amount in text.

    Args:
        text: Combined subject and body

    Returns:
        (amount_text, currency_marker) for the earliest match, or None

    Examples:
        find_amount("Total $15.99 charged") -> ("15.99", "$")
        find_amount("Betrag 9,99 €") -> ("9,99", "€")
        find_amount("EUR 12.00 due") -> ("12.00", "EUR")
    """
    best: tuple[int, str, str] | None = None
    for pattern, amount_group, currency_group in AMOUNT_PATTERNS:
        match = pattern.search(text)
        if match and (best is None or match.start() < best[0]):
            best = (match.start(), match.group(amount_group), match.group(currency_group))

    if best is None:
        return None
    return best[1], best[2]


def merchant_from_subject(subject: str) -> str:
    """
    Derive a merchant name from a subject line.

    Cuts at the first colon, hyphen or en-dash and caps the length.

    Example:
        merchant_from_subject("Spotify: Your receipt") -> "Spotify"
    """
    head = _MERCHANT_DELIMITERS.split(subject, maxsplit=1)[0]
    return head.strip()[:MERCHANT_NAME_MAX_CHARS].strip()


class HeuristicExtractionStage:
    """Last extraction stage: regex amount and subject-derived merchant."""

    async def extract(self, message: RawMessage) -> ExtractionResult:
        """Always yields a candidate; amount is zero when none is found."""
        text = f"{message.subject}\n{message.body or message.snippet}"
        found = find_amount(text)

        if found:
            amount_text, currency_marker = found
            currency = sanitize_currency(currency_marker)
            amount = Money.from_amount(amount_text, currency)
        else:
            logger.debug(f"No amount found in message {message.id}")
            amount = Money.zero(DEFAULT_CURRENCY)

        candidate = SubscriptionCandidate(
            source_message_id=message.id,
            merchant_name=merchant_from_subject(message.subject),
            amount=amount,
            billing_frequency=BillingFrequency.MONTHLY,
            billing_date=BillingDate.from_datetime(message.received_at),
            extraction_confidence=ExtractionConfidence.LOW,
        )
        return Extracted(candidate)
