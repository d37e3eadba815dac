"""Fan-out executor: run one prompt per participant concurrently, each on its own deadline."""

import asyncio
import logging
import time
from collections.abc import Callable, Sequence

from council.errors import ProviderError
from council.gateway import Gateway
from council.models import CallResult

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, float, ProviderError | None], None]


def _notify(on_progress: ProgressCallback | None, result: CallResult) -> None:
    if on_progress is None:
        return
    try:
        on_progress(result.participant, result.elapsed_sec, result.error)
    except Exception:
        logger.exception("Progress callback failed for %s", result.participant)


async def call_participant(
    gateway: Gateway,
    participant: str,
    prompt: str,
    timeout_sec: float,
    on_progress: ProgressCallback | None = None,
) -> CallResult:
    """Call a single participant under its own deadline.

    Never raises: timeouts and transport errors come back as a CallResult
    carrying a ProviderError and empty text.
    """
    start = time.monotonic()
    try:
        text = await asyncio.wait_for(
            gateway.invoke(participant, prompt, timeout_sec),
            timeout=timeout_sec,
        )
    except TimeoutError:
        error = ProviderError(participant, f"Request timed out after {timeout_sec:g}s")
        result = CallResult(participant, "", time.monotonic() - start, error)
    except ProviderError as exc:
        result = CallResult(participant, "", time.monotonic() - start, exc)
    except Exception as exc:
        error = ProviderError(participant, f"Unexpected error: {exc}")
        result = CallResult(participant, "", time.monotonic() - start, error)
    else:
        result = CallResult(participant, text or "", time.monotonic() - start)

    if result.error is not None:
        logger.warning("%s failed after %.2fs: %s", participant, result.elapsed_sec, result.error.message)
    else:
        logger.debug("%s answered in %.2fs (%d chars)", participant, result.elapsed_sec, len(result.text))

    _notify(on_progress, result)
    return result


async def fan_out_prompts(
    gateway: Gateway,
    requests: Sequence[tuple[str, str]],
    timeout_sec: float,
    on_progress: ProgressCallback | None = None,
) -> list[CallResult]:
    """Run (participant, prompt) pairs concurrently.

    Returns one CallResult per request, in request order regardless of
    completion order. A failing or slow call only affects its own slot.
    """
    tasks = [
        call_participant(gateway, participant, prompt, timeout_sec, on_progress)
        for participant, prompt in requests
    ]
    return list(await asyncio.gather(*tasks))


async def fan_out(
    gateway: Gateway,
    participants: Sequence[str],
    prompt: str,
    timeout_sec: float,
    on_progress: ProgressCallback | None = None,
) -> list[CallResult]:
    """Send the same prompt to every participant. See fan_out_prompts."""
    return await fan_out_prompts(
        gateway,
        [(participant, prompt) for participant in participants],
        timeout_sec,
        on_progress,
    )
