"""Anthropic Claude provider using anthropic SDK with native async."""

import logging
import os

import anthropic as anthropic_sdk

from council.providers.base import AIProvider, ProviderError
from council_config.config_loader import ProviderConfig

logger = logging.getLogger(__name__)


class AnthropicProvider(AIProvider):
    """Anthropic Claude provider via anthropic SDK."""

    def __init__(self, config: ProviderConfig) -> None:
        self._config = config
        api_key = os.environ.get(config.api_key_env, "").strip()
        if not api_key:
            raise ProviderError(config.name, f"Missing API key: {config.api_key_env}")
        self._client = anthropic_sdk.AsyncAnthropic(api_key=api_key)

    def name(self) -> str:
        return self._config.name

    async def complete(self, model: str, prompt: str, timeout_sec: float) -> str:
        try:
            response = await self._client.messages.create(
                model=model,
                max_tokens=self._config.max_tokens,
                messages=[{"role": "user", "content": prompt}],
                timeout=timeout_sec,
            )
        except anthropic_sdk.APIError as exc:
            raise ProviderError(model, f"API call failed: {exc}") from exc

        text_blocks = [b.text for b in response.content if b.type == "text"]
        if not text_blocks:
            raise ProviderError(model, "No text blocks in response")

        if response.usage:
            logger.debug(
                "Anthropic %s: %s tokens",
                model,
                response.usage.input_tokens + response.usage.output_tokens,
            )
        return "\n".join(text_blocks)
