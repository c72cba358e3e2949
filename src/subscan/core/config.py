#!/usr/bin/env python3
"""
Configuration Management for subscan

Handles environment-based configuration with secure defaults and validation.
Supports multiple environments (development, test, production) with appropriate
logging and validation for each.
"""

import logging
import os
import tempfile
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

DEFAULT_SEARCH_KEYWORDS = [
    "receipt",
    "invoice",
    "subscription",
    "renews on",
    "renewal",
    "billing",
    "order confirmation",
    "payment received",
]

DEFAULT_GATE_KEYWORDS = [
    "receipt",
    "invoice",
    "subscription",
    "renew",
    "billing",
    "billed",
    "charged",
    "payment",
    "order confirmation",
    "membership",
    "your plan",
    "trial",
]

LOOKBACK_PRESETS = (30, 90, 365)


class Environment(Enum):
    """Application environment types."""

    DEVELOPMENT = "development"
    TEST = "test"
    PRODUCTION = "production"


@dataclass
class GmailConfig:
    """Mailbox provider (Gmail REST API) configuration."""

    api_base_url: str = "https://gmail.googleapis.com/gmail/v1/users/me"
    timeout: float = 30.0
    access_token: str | None = None


@dataclass
class ModelConfig:
    """Text-generation service configuration."""

    api_key: str | None = None
    model: str = "gpt-4o-mini"
    timeout_seconds: float = 20.0  # Wall-clock limit per extraction call
    max_tokens: int = 500
    temperature: float = 0.1


@dataclass
class ScanConfig:
    """
    Scan limits and keyword lists.

    Kept explicit so tests can shrink the search space.
    """

    max_messages: int = 50
    lookback_days: int = 30
    keyword_list: list[str] = field(default_factory=lambda: list(DEFAULT_GATE_KEYWORDS))
    search_keywords: list[str] = field(default_factory=lambda: list(DEFAULT_SEARCH_KEYWORDS))
    body_truncate_length: int = 1500
    prompt_body_length: int = 800


@dataclass
class StoreConfig:
    """Subscription record store configuration."""

    data_dir: Path
    default_category: str = "Software"
    default_trust_score: int = 100


@dataclass
class Config:
    """
    Main configuration class for subscan.

    Loads configuration from environment variables with secure defaults
    and validation for each environment type.
    """

    environment: Environment
    data_dir: Path

    # Component configurations
    gmail: GmailConfig
    model: ModelConfig
    scan: ScanConfig
    store: StoreConfig

    # Application settings
    user_id: str = "default"
    debug: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_environment(cls) -> "Config":
        """Create configuration from environment variables."""
        env = Environment(os.getenv("SUBSCAN_ENV", "development"))

        if env == Environment.TEST:
            default_test_dir = Path(tempfile.gettempdir()) / "test_subscan"
            data_dir = Path(os.getenv("SUBSCAN_DATA_DIR", str(default_test_dir)))
        else:
            data_dir = Path(os.getenv("SUBSCAN_DATA_DIR", "./data")).expanduser().resolve()

        data_dir.mkdir(parents=True, exist_ok=True)

        gmail = GmailConfig(
            api_base_url=os.getenv("GMAIL_API_BASE_URL", GmailConfig.api_base_url),
            timeout=float(os.getenv("GMAIL_TIMEOUT", "30")),
            access_token=os.getenv("GMAIL_ACCESS_TOKEN"),
        )

        model = ModelConfig(
            api_key=os.getenv("OPENAI_API_KEY"),
            model=os.getenv("SUBSCAN_MODEL", ModelConfig.model),
            timeout_seconds=float(os.getenv("SUBSCAN_MODEL_TIMEOUT", "20")),
            max_tokens=int(os.getenv("SUBSCAN_MODEL_MAX_TOKENS", "500")),
        )

        scan = ScanConfig(
            max_messages=int(os.getenv("SUBSCAN_MAX_MESSAGES", "50")),
            lookback_days=int(os.getenv("SUBSCAN_LOOKBACK_DAYS", "30")),
            keyword_list=_parse_list(os.getenv("SUBSCAN_KEYWORDS", "")) or list(DEFAULT_GATE_KEYWORDS),
            body_truncate_length=int(os.getenv("SUBSCAN_BODY_LENGTH", "1500")),
        )

        store = StoreConfig(
            data_dir=data_dir / "store",
            default_category=os.getenv("SUBSCAN_DEFAULT_CATEGORY", "Software"),
        )

        return cls(
            environment=env,
            data_dir=data_dir,
            gmail=gmail,
            model=model,
            scan=scan,
            store=store,
            user_id=os.getenv("SUBSCAN_USER_ID", "default"),
            debug=os.getenv("DEBUG", "false").lower() == "true",
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    def validate(self) -> list:
        """Validate configuration and return list of errors."""
        errors = []

        if not self.data_dir.exists():
            errors.append(f"data_dir does not exist: {self.data_dir}")

        if self.environment == Environment.PRODUCTION and not self.model.api_key:
            errors.append("OPENAI_API_KEY is required in production")

        if self.scan.max_messages <= 0:
            errors.append("Scan message cap must be positive")
        if self.scan.lookback_days <= 0:
            errors.append("Lookback days must be positive")
        if self.scan.body_truncate_length <= 0 or self.scan.prompt_body_length <= 0:
            errors.append("Body truncation lengths must be positive")
        if not self.scan.keyword_list:
            errors.append("Keyword list must not be empty")
        if self.gmail.timeout <= 0 or self.model.timeout_seconds <= 0:
            errors.append("Timeouts must be positive")

        return errors

    def setup_logging(self) -> None:
        """Configure logging based on configuration."""
        level = getattr(logging, self.log_level, logging.INFO)

        if self.environment == Environment.DEVELOPMENT:
            format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        else:
            format_str = "%(asctime)s - %(levelname)s - %(message)s"

        logging.basicConfig(level=level, format=format_str, datefmt="%Y-%m-%d %H:%M:%S")

        # HTTP client libraries log every request at INFO
        if self.environment != Environment.DEVELOPMENT:
            logging.getLogger("httpx").setLevel(logging.WARNING)
            logging.getLogger("openai").setLevel(logging.WARNING)

    def get_sensitive_fields(self) -> list:
        """Get list of field names that contain sensitive data."""
        return [
            "gmail.access_token",
            "model.api_key",
        ]

    def to_dict(self, include_sensitive: bool = False) -> dict[str, Any]:
        """Convert configuration to dictionary, optionally excluding sensitive data."""
        result: dict[str, Any] = {}

        for field_name, field_value in self.__dict__.items():
            if hasattr(field_value, "__dict__") and not isinstance(field_value, Enum):
                nested_dict: dict[str, Any] = {}
                for nested_name, nested_value in field_value.__dict__.items():
                    full_field_name = f"{field_name}.{nested_name}"

                    if not include_sensitive and full_field_name in self.get_sensitive_fields():
                        nested_dict[nested_name] = "***REDACTED***" if nested_value else None
                    elif isinstance(nested_value, Path):
                        nested_dict[nested_name] = str(nested_value)
                    else:
                        nested_dict[nested_name] = nested_value

                result[field_name] = nested_dict
            elif isinstance(field_value, Path):
                result[field_name] = str(field_value)
            elif isinstance(field_value, Enum):
                result[field_name] = field_value.value
            else:
                result[field_name] = field_value

        return result


def _parse_list(value: str, delimiter: str = ",") -> list:
    """Parse comma-separated string into list, handling empty values."""
    if not value:
        return []
    return [item.strip() for item in value.split(delimiter) if item.strip()]


# Global configuration instance
_config: Config | None = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config.from_environment()

        errors = _config.validate()
        if errors:
            raise ValueError(f"Configuration validation failed: {'; '.join(errors)}")

        _config.setup_logging()

    return _config


def reload_config() -> Config:
    """Reload configuration from environment (useful for testing)."""
    global _config
    _config = None
    return get_config()

