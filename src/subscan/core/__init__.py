"""
Core Utilities Package

Shared primitives and infrastructure used across the discovery pipeline.

This package provides:
- Currency handling with integer cents and symbol-to-ISO normalization
- Money and BillingDate immutable value types
- Configuration management for environment-specific settings
- JSON helpers, including lenient parsing of model output
- The exception hierarchy for transport and store failures
"""

from .config import (
    Config,
    Environment,
    GmailConfig,
    ModelConfig,
    ScanConfig,
    StoreConfig,
    get_config,
    reload_config,
)
from .currency import (
    format_amount,
    safe_amount_to_cents,
    sanitize_currency,
)
from .dates import BillingDate, parse_header_datetime
from .errors import (
    MailboxAuthError,
    MailboxError,
    NotEntitledError,
    RecordStoreError,
    SubscanError,
)
from .money import PRICE_EPSILON, Money

__all__ = [
    "PRICE_EPSILON",
    "BillingDate",
    # Configuration
    "Config",
    "Environment",
    "GmailConfig",
    "MailboxAuthError",
    # Errors
    "MailboxError",
    "ModelConfig",
    "Money",
    "NotEntitledError",
    "RecordStoreError",
    "ScanConfig",
    "StoreConfig",
    "SubscanError",
    "format_amount",
    "get_config",
    "parse_header_datetime",
    "reload_config",
    "safe_amount_to_cents",
    "sanitize_currency",
]
