#!/usr/bin/env python3
"""
Model-Assisted Extraction Stage

Asks a text-generation service for a strict JSON description of a billing
message. Every failure mode (call error, timeout, empty text, malformed JSON)
is reported as ``Unextractable`` so the heuristic stage can take over.
"""

import asyncio
import logging
from typing import Any

from ..core.config import ScanConfig
from ..core.dates import BillingDate
from ..core.json_utils import parse_json_object
from ..core.money import Money
from ..gmail.fetcher import RawMessage
from .models import (
    BillingFrequency,
    Extracted,
    ExtractionConfidence,
    ExtractionResult,
    NotSubscription,
    SubscriptionCandidate,
    Unextractable,
)
from .text_generation import TextGenerator

logger = logging.getLogger(__name__)

PROMPT_TEMPLATE = """You are extracting recurring-billing information from one email.

Subject: {subject}
Preview: {snippet}
Body:
{body}

Decide whether this email is a receipt, invoice or renewal notice for a
subscription or recurring service. Respond with ONLY a JSON object, no prose
and no markdown, using exactly these keys:

{{
  "is_subscription": true | false,
  "merchant_name": "Service name, e.g. Netflix",
  "amount": 0.00,
  "currency": "ISO 4217 code, e.g. USD",
  "billing_frequency": "monthly" | "yearly" | "one_time",
  "billing_date": "YYYY-MM-DD or null"
}}
"""


def _is_true(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("true", "yes", "1")


class ModelExtractionStage:
    """First extraction stage: structured extraction by a language model."""

    def __init__(
        self,
        generator: TextGenerator,
        scan_config: ScanConfig | None = None,
        timeout_seconds: float = 20.0,
    ):
        """
        Initialize the stage.

        Args:
            generator: Text-generation client
            scan_config: Supplies the prompt body length
            timeout_seconds: Wall-clock limit for one generation call
        """
        self.generator = generator
        self.scan_config = scan_config or ScanConfig()
        self.timeout_seconds = timeout_seconds

    def build_prompt(self, message: RawMessage) -> str:
        """Embed the message into the extraction prompt, capping the body."""
        return PROMPT_TEMPLATE.format(
            subject=message.subject,
            snippet=message.snippet,
            body=message.body[: self.scan_config.prompt_body_length],
        )

    async def extract(self, message: RawMessage) -> ExtractionResult:
        """Run one model call and interpret its output."""
        prompt = self.build_prompt(message)

        try:
            text = await asyncio.wait_for(self.generator.generate(prompt), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            logger.warning(f"Model extraction timed out for message {message.id}")
            return Unextractable("timeout")
        except Exception as e:
            logger.warning(f"Model extraction failed for message {message.id}: {e}")
            return Unextractable(f"call_failed: {e}")

        if not text:
            logger.warning(f"Model returned no text for message {message.id}")
            return Unextractable("empty_response")

        data = parse_json_object(text)
        if data is None:
            logger.warning(f"Model returned malformed JSON for message {message.id}")
            return Unextractable("malformed_json")

        return self.interpret(message, data)

    def interpret(self, message: RawMessage, data: dict[str, Any]) -> ExtractionResult:
        """Turn the model's JSON object into an extraction result."""
        if not _is_true(data.get("is_subscription", False)):
            logger.debug(f"Model judged message {message.id} not a subscription")
            return NotSubscription("model_rejected")

        try:
            billing_date = BillingDate.parse(data.get("billing_date")) or BillingDate.from_datetime(
                message.received_at
            )
            candidate = SubscriptionCandidate(
                source_message_id=message.id,
                merchant_name=str(data.get("merchant_name") or "").strip(),
                amount=Money.from_amount(data.get("amount"), data.get("currency")),
                billing_frequency=BillingFrequency.normalize(data.get("billing_frequency")),
                billing_date=billing_date,
                extraction_confidence=ExtractionConfidence.HIGH,
            )
        except (TypeError, ValueError, ArithmeticError) as e:
            logger.warning(f"Model returned unusable fields for message {message.id}: {e}")
            return Unextractable("bad_fields")
        return Extracted(candidate)
