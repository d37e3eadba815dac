"""OpenAI provider using openai SDK with native async."""

import logging
import os

from openai import APIError, AsyncOpenAI

from council.providers.base import AIProvider, ProviderError
from council_config.config_loader import ProviderConfig

logger = logging.getLogger(__name__)


class OpenAIProvider(AIProvider):
    """OpenAI provider via openai SDK."""

    def __init__(self, config: ProviderConfig) -> None:
        self._config = config
        api_key = os.environ.get(config.api_key_env, "").strip()
        if not api_key:
            raise ProviderError(config.name, f"Missing API key: {config.api_key_env}")
        self._client = self._make_client(api_key)

    def _make_client(self, api_key: str) -> AsyncOpenAI:
        return AsyncOpenAI(api_key=api_key)

    def name(self) -> str:
        return self._config.name

    async def complete(self, model: str, prompt: str, timeout_sec: float) -> str:
        try:
            response = await self._client.chat.completions.create(
                model=model,
                messages=[{"role": "user", "content": prompt}],
                max_completion_tokens=self._config.max_tokens,
                timeout=timeout_sec,
            )
        except APIError as exc:
            raise ProviderError(model, f"API call failed: {exc}") from exc

        choice = response.choices[0] if response.choices else None
        if not choice or not choice.message.content:
            raise ProviderError(model, "Empty response content")

        if response.usage:
            logger.debug("%s %s: %s tokens", self.name(), model, response.usage.total_tokens)
        return choice.message.content
