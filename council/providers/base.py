"""Abstract base for all vendor providers."""

from abc import ABC, abstractmethod

from council.errors import ProviderError

__all__ = ["AIProvider", "ProviderError"]


class AIProvider(ABC):
    """One vendor SDK client, shared by every concurrent call routed to it."""

    @abstractmethod
    def name(self) -> str:
        """Return the short provider name (e.g. 'anthropic', 'gemini')."""
        ...

    @abstractmethod
    async def complete(self, model: str, prompt: str, timeout_sec: float) -> str:
        """Send a single-turn prompt to ``model`` and return its text.

        Args:
            model: The model identifier the participant was configured with.
            prompt: The full prompt text to send.
            timeout_sec: Per-call budget, forwarded to the SDK's request timeout.

        Returns:
            The generated text.

        Raises:
            ProviderError: On API failure or empty response.
        """
        ...
