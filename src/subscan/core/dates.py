#!/usr/bin/env python3
"""
BillingDate Primitive Type

Immutable date wrapper with consistent formatting for billing and renewal dates.
Provides standardized parsing of mailbox ``Date`` headers and model-produced dates.
"""

import email.utils
import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone

logger = logging.getLogger(__name__)

# Formats the text-generation service has been seen to return besides ISO
_FALLBACK_FORMATS = ("%Y/%m/%d", "%m/%d/%Y", "%b %d, %Y", "%B %d, %Y", "%d %b %Y", "%d %B %Y")


def parse_header_datetime(header_value: str | None) -> datetime:
    """
    Parse an RFC 2822 ``Date`` header.

    Args:
        header_value: Raw header value, e.g. "Tue, 15 Oct 2024 10:30:00 +0000"

    Returns:
        Timezone-aware datetime; the current time when absent or unparseable
    """
    if header_value:
        try:
            parsed = email.utils.parsedate_to_datetime(header_value)
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=timezone.utc)
            return parsed
        except (TypeError, ValueError, IndexError):
            logger.debug("Unparseable Date header %r, using now", header_value)
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class BillingDate:
    """Immutable billing date wrapper with consistent formatting."""

    date: date

    @classmethod
    def from_string(cls, date_str: str, format: str = "%Y-%m-%d") -> "BillingDate":
        """
        Parse from string in specified format.

        Args:
            date_str: Date string to parse
            format: Date format (default: ISO format "%Y-%m-%d")

        Returns:
            BillingDate object
        """
        return cls(date=datetime.strptime(date_str, format).date())

    @classmethod
    def parse(cls, value: str | None) -> "BillingDate | None":
        """
        Leniently parse a date produced by the text-generation service.

        Accepts ISO dates and datetimes ("2024-10-15", "2024-10-15T00:00:00Z")
        plus a handful of common human formats.

        Returns:
            BillingDate, or None if the value is empty or unrecognized
        """
        if not value:
            return None
        text = str(value).strip()
        if not text:
            return None

        try:
            return cls(date=datetime.fromisoformat(text.replace("Z", "+00:00")).date())
        except ValueError:
            pass

        for fmt in _FALLBACK_FORMATS:
            try:
                return cls.from_string(text, fmt)
            except ValueError:
                continue

        logger.debug("Could not parse billing date %r", value)
        return None

    @classmethod
    def from_datetime(cls, value: datetime) -> "BillingDate":
        """Take the calendar date of a datetime."""
        return cls(date=value.date())

    @classmethod
    def today(cls) -> "BillingDate":
        """Get today's date."""
        return cls(date=date.today())

    def to_iso_string(self) -> str:
        """Format as YYYY-MM-DD."""
        return self.date.isoformat()

    def __str__(self) -> str:
        """String representation."""
        return self.to_iso_string()

    def __repr__(self) -> str:
        """Repr format."""
        return f"BillingDate(date={self.date!r})"
