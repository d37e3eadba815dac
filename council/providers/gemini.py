"""Gemini provider using google-genai SDK with native async."""

import logging
import os

from google import genai
from google.genai import errors as genai_errors
from google.genai import types as genai_types

from council.providers.base import AIProvider, ProviderError
from council_config.config_loader import ProviderConfig

logger = logging.getLogger(__name__)


class GeminiProvider(AIProvider):
    """Google Gemini provider via google-genai SDK."""

    def __init__(self, config: ProviderConfig) -> None:
        self._config = config
        api_key = os.environ.get(config.api_key_env, "").strip()
        if not api_key:
            raise ProviderError(config.name, f"Missing API key: {config.api_key_env}")
        self._client = genai.Client(api_key=api_key)

    def name(self) -> str:
        return self._config.name

    async def complete(self, model: str, prompt: str, timeout_sec: float) -> str:
        try:
            response = await self._client.aio.models.generate_content(
                model=model,
                contents=prompt,
                config=genai_types.GenerateContentConfig(
                    max_output_tokens=self._config.max_tokens,
                    # google-genai takes the HTTP timeout in milliseconds
                    http_options=genai_types.HttpOptions(timeout=int(timeout_sec * 1000)),
                ),
            )
        except genai_errors.APIError as exc:
            raise ProviderError(model, f"API call failed: {exc}") from exc

        if not response.text:
            raise ProviderError(model, "Empty response text")

        if response.usage_metadata:
            logger.debug("Gemini %s: %s tokens", model, response.usage_metadata.total_token_count)
        return response.text
