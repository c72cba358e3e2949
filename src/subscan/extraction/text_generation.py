#!/usr/bin/env python3
"""
Text-Generation Service Client

Thin async wrapper around the OpenAI chat completions API. Callers get back
free-form text (or None) and are responsible for parsing it defensively.
"""

import logging
from typing import Protocol

from openai import APIStatusError, AsyncOpenAI, RateLimitError

from ..core.config import ModelConfig

logger = logging.getLogger(__name__)


class TextGenerator(Protocol):
    """Anything that turns a prompt into free-form text."""

    async def generate(self, prompt: str) -> str | None:
        """Return generated text, or None when the service produced nothing."""
        ...


class OpenAITextGenerator:
    """Text generator backed by the OpenAI chat completions API."""

    def __init__(self, config: ModelConfig | None = None, client: AsyncOpenAI | None = None):
        """
        Initialize the generator.

        Args:
            config: Model name, token limit and temperature
            client: Pre-built AsyncOpenAI client; one is created from config.api_key if omitted
        """
        self.config = config or ModelConfig()
        self._client = client or AsyncOpenAI(api_key=self.config.api_key, max_retries=0)

    async def generate(self, prompt: str) -> str | None:
        """
        Generate a completion for a single-turn prompt.

        Quota exhaustion (HTTP 429) is reported as None rather than raised so
        callers fall back without treating it as an outage. Other API errors
        propagate.
        """
        try:
            response = await self._client.chat.completions.create(
                model=self.config.model,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=self.config.max_tokens,
                temperature=self.config.temperature,
            )
        except RateLimitError:
            logger.warning("Text-generation quota exhausted (429), skipping model extraction")
            return None
        except APIStatusError as e:
            if e.status_code == 429:
                logger.warning("Text-generation quota exhausted (429), skipping model extraction")
                return None
            raise

        if not response.choices:
            return None
        content = response.choices[0].message.content
        return content.strip() if content else None
