#!/usr/bin/env python3
"""
Currency Handling Utilities

Currency parsing and normalization for subscription discovery.
All amount arithmetic uses integer cents to avoid floating-point errors.

Currency Systems:
- Internal amounts are integer cents: 100 cents = 1.00
- Extracted amounts arrive as free text ("$15.99", "15,99 €", "USD 1,299.00")
  or as JSON numbers from the text-generation service
- Currencies are ISO 4217 codes; symbols are mapped to codes on the way in

Key Principles:
- Never use floating-point arithmetic for currency comparisons
- Parse through Decimal, store as cents
- Unknown or empty currency defaults to USD
"""

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

DEFAULT_CURRENCY = "USD"

_NON_NUMERIC = re.compile(r"[^\d.,\-]")

# Larger amounts are treated as unparseable
MAX_AMOUNT = Decimal("1000000000")

SYMBOL_TO_ISO: dict[str, str] = {
    "$": "USD",
    "€": "EUR",
    "£": "GBP",
    "¥": "JPY",
}

ISO_TO_SYMBOL: dict[str, str] = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "CAD": "C$",
    "AUD": "A$",
}


def sanitize_currency(currency: str | None) -> str:
    """
    Normalize a currency symbol or code to an ISO 4217 code.

    Args:
        currency: Symbol ("$", "€"), code ("usd", "EUR") or None

    Returns:
        Upper-case ISO code, DEFAULT_CURRENCY when empty

    Examples:
        sanitize_currency("€") -> "EUR"
        sanitize_currency(" gbp ") -> "GBP"
        sanitize_currency(None) -> "USD"
    """
    if not currency:
        return DEFAULT_CURRENCY
    stripped = str(currency).strip()
    if not stripped:
        return DEFAULT_CURRENCY
    if stripped in SYMBOL_TO_ISO:
        return SYMBOL_TO_ISO[stripped]
    upper = stripped.upper()
    return SYMBOL_TO_ISO.get(upper, upper)


def currency_symbol(currency: str) -> str:
    """Get display symbol for an ISO code, falling back to the code itself."""
    return ISO_TO_SYMBOL.get(sanitize_currency(currency), f"{sanitize_currency(currency)} ")


def normalize_amount_text(amount_str: str) -> str:
    """
    Normalize a free-text amount to a plain decimal string.

    Handles thousands separators and decimal commas:
        "1,299.00" -> "1299.00"
        "15,99"    -> "15.99"
        "1.299,00" -> "1299.00"

    Args:
        amount_str: Amount text with currency symbols already removed

    Returns:
        Decimal-parseable string (may be empty)
    """
    clean = amount_str.strip().replace(" ", "")
    if "," in clean and "." in clean:
        # Whichever separator comes last is the decimal separator
        if clean.rfind(",") > clean.rfind("."):
            clean = clean.replace(".", "").replace(",", ".")
        else:
            clean = clean.replace(",", "")
    elif "," in clean:
        head, _, tail = clean.rpartition(",")
        if len(tail) == 2:
            clean = f"{head.replace(',', '')}.{tail}"
        else:
            clean = clean.replace(",", "")
    return clean


def to_decimal(value: Union[str, int, float, Decimal, None]) -> Decimal:
    """
    Convert a loosely typed amount to Decimal.

    Floats are converted via their string representation so that 15.99
    stays 15.99 rather than 15.9900000000000002131628...

    Returns:
        Decimal amount, Decimal("0") for missing, unparseable, non-finite
        or out-of-range input (NaN, Infinity, 1e30)
    """
    if value is None or isinstance(value, bool):
        return Decimal("0")

    try:
        if isinstance(value, Decimal):
            amount = value
        elif isinstance(value, int):
            amount = Decimal(value)
        elif isinstance(value, float):
            amount = Decimal(repr(value))
        else:
            # Drop symbols and codes ("$", "USD", "C$"), keep digits and separators
            text = normalize_amount_text(_NON_NUMERIC.sub("", str(value)))
            if not text:
                return Decimal("0")
            amount = Decimal(text)
    except (InvalidOperation, ValueError):
        return Decimal("0")

    if not amount.is_finite() or abs(amount) >= MAX_AMOUNT:
        return Decimal("0")
    return amount


def decimal_to_cents(amount: Decimal) -> int:
    """Round a Decimal amount to integer cents (half-up); 0 if it cannot be represented."""
    if not amount.is_finite() or abs(amount) >= MAX_AMOUNT:
        return 0
    try:
        return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    except (InvalidOperation, ValueError):
        return 0


def safe_amount_to_cents(value: Union[str, int, float, Decimal, None]) -> int:
    """
    Safely convert any amount representation to integer cents.

    Examples:
        safe_amount_to_cents("$15.99") -> 1599
        safe_amount_to_cents(11.99) -> 1199
        safe_amount_to_cents("15,99") -> 1599
        safe_amount_to_cents(None) -> 0
    """
    return decimal_to_cents(to_decimal(value))


def cents_to_decimal(cents: int) -> Decimal:
    """Convert integer cents to an exact two-place Decimal."""
    return (Decimal(cents) / 100).quantize(Decimal("0.01"))


def cents_to_amount_str(cents: int) -> str:
    """
    Convert cents to a plain amount string using integer arithmetic.

    Example:
        cents_to_amount_str(1599) -> "15.99"
        cents_to_amount_str(-5) -> "-0.05"
    """
    is_negative = cents < 0
    abs_cents = abs(int(cents))
    whole = abs_cents // 100
    remainder = abs_cents % 100
    return f"{'-' if is_negative else ''}{whole}.{remainder:02d}"


def format_amount(cents: int, currency: str = DEFAULT_CURRENCY) -> str:
    """Format cents with a currency symbol, e.g. "$15.99" or "€9.99"."""
    return f"{currency_symbol(currency)}{cents_to_amount_str(cents)}"
