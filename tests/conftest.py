"""Shared pytest fixtures."""

import asyncio
import inspect
from collections.abc import Callable
from pathlib import Path

import pytest

from council.errors import ProviderError
from council.gateway import Gateway
from council.models import CallResult
from council.pipeline import CouncilConfig

REVIEW_MARKER = "You are reviewing answers"
AGGREGATION_MARKER = "Several AI models answered"

Reply = str | Exception | Callable[[str], object]


class FakeGateway(Gateway):
    """Test double gateway with scripted replies per participant.

    A reply is a string, an exception to raise, or a callable taking the prompt
    (sync or async) that returns either of those.
    """

    def __init__(
        self,
        replies: dict[str, Reply] | None = None,
        delays: dict[str, float] | None = None,
        default: str = "Mock answer",
    ) -> None:
        self.replies = replies or {}
        self.delays = delays or {}
        self.default = default
        self.calls: list[tuple[str, str]] = []

    async def invoke(self, participant: str, prompt: str, timeout_sec: float) -> str:
        self.calls.append((participant, prompt))
        delay = self.delays.get(participant, 0.0)
        if delay:
            await asyncio.sleep(delay)
        reply = self.replies.get(participant, self.default)
        if callable(reply) and not isinstance(reply, Exception):
            reply = reply(prompt)
            if inspect.isawaitable(reply):
                reply = await reply
        if isinstance(reply, Exception):
            raise reply
        return reply

    def prompts_for(self, participant: str) -> list[str]:
        return [prompt for name, prompt in self.calls if name == participant]


def by_stage(answer: Reply, review: Reply = "No ranking here.", aggregate: Reply = "Final answer.") -> Callable:
    """Build a reply that depends on which stage's prompt was received."""

    def reply(prompt: str) -> object:
        if prompt.startswith(REVIEW_MARKER):
            chosen = review
        elif prompt.startswith(AGGREGATION_MARKER):
            chosen = aggregate
        else:
            chosen = answer
        if callable(chosen) and not isinstance(chosen, Exception):
            return chosen(prompt)
        return chosen

    return reply


async def hang(prompt: str) -> str:
    await asyncio.sleep(30)
    return "too late"


@pytest.fixture
def fake_gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def council_config() -> CouncilConfig:
    return CouncilConfig(
        participants=["claude-sonnet-4.5", "gpt-5.2", "gemini-3-pro-preview"],
        aggregator="gpt-4.1",
        timeout_sec=5.0,
    )


@pytest.fixture
def sample_question() -> str:
    return "Should we use YAML or JSON for config?"


@pytest.fixture
def three_answers() -> list[CallResult]:
    return [
        CallResult("p0", "Use YAML.", 1.0),
        CallResult("p1", "Use JSON.", 1.2),
        CallResult("p2", "Use TOML.", 0.8),
    ]


@pytest.fixture
def failed_call() -> CallResult:
    return CallResult("p3", "", 5.0, ProviderError("p3", "Request timed out after 5s"))


@pytest.fixture
def settings_file(tmp_path: Path) -> Path:
    path = tmp_path / "settings.yaml"
    path.write_text(
        """
defaults:
  participants: [claude-sonnet-4.5, gpt-5.2]
  aggregator: gpt-4.1
  timeout_sec: 30
providers:
  anthropic:
    sdk: anthropic
    api_key_env: TEST_ANTHROPIC_KEY
    prefixes: [claude]
    max_tokens: 2048
  openai:
    sdk: openai
    api_key_env: TEST_OPENAI_KEY
    prefixes: [gpt, o3]
""",
        encoding="utf-8",
    )
    return path
