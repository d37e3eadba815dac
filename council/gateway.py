"""Invocation gateway: route a participant's model identifier to a vendor provider."""

import logging
from abc import ABC, abstractmethod

from council.errors import ProviderError
from council.providers.anthropic import AnthropicProvider
from council.providers.base import AIProvider
from council.providers.gemini import GeminiProvider
from council.providers.openai_provider import OpenAIProvider
from council.providers.xai import XAIProvider
from council_config.config_loader import AppConfig

logger = logging.getLogger(__name__)

PROVIDER_CLASSES: dict[str, type[AIProvider]] = {
    "anthropic": AnthropicProvider,
    "openai": OpenAIProvider,
    "gemini": GeminiProvider,
    "xai": XAIProvider,
}


class Gateway(ABC):
    """Executes one prompt against one participant.

    Implementations must be safe to call concurrently, for the same or for
    different participants, without caller-side locking.
    """

    @abstractmethod
    async def invoke(self, participant: str, prompt: str, timeout_sec: float) -> str:
        """Return the participant's text or raise ProviderError."""
        ...


class ProviderGateway(Gateway):
    """Routes model identifiers to providers by longest matching prefix."""

    def __init__(self, providers: dict[str, AIProvider], routes: dict[str, str]) -> None:
        """
        Args:
            providers: Provider instances keyed by provider name.
            routes: Model-id prefix -> provider name.
        """
        self._providers = providers
        self._routes = sorted(routes.items(), key=lambda kv: len(kv[0]), reverse=True)

    def resolve(self, participant: str) -> AIProvider:
        for prefix, provider_name in self._routes:
            if participant.startswith(prefix):
                provider = self._providers.get(provider_name)
                if provider is None:
                    raise ProviderError(
                        participant, f"Provider '{provider_name}' is not available (missing API key?)"
                    )
                return provider
        raise ProviderError(participant, "No provider configured for this model")

    async def invoke(self, participant: str, prompt: str, timeout_sec: float) -> str:
        provider = self.resolve(participant)
        return await provider.complete(participant, prompt, timeout_sec)


def build_gateway(config: AppConfig) -> ProviderGateway:
    """Instantiate every provider that has an API key and build the routing table."""
    providers: dict[str, AIProvider] = {}
    routes: dict[str, str] = {}
    for name, provider_cfg in config.providers.items():
        for prefix in provider_cfg.prefixes:
            routes[prefix] = name
        if name not in config.available_providers:
            continue
        provider_cls = PROVIDER_CLASSES.get(provider_cfg.sdk)
        if provider_cls is None:
            logger.warning("Provider '%s' uses unknown sdk '%s', skipping", name, provider_cfg.sdk)
            continue
        try:
            providers[name] = provider_cls(provider_cfg)
        except ProviderError as exc:
            logger.warning("Failed to instantiate provider '%s': %s", name, exc)
    return ProviderGateway(providers, routes)
