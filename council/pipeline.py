"""Council orchestration: parallel answers, anonymized peer review, aggregated synthesis."""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from council.anonymize import anonymize, label_map
from council.errors import AggregationFailedError, AllFailedError, ProviderError
from council.fanout import ProgressCallback, call_participant, fan_out, fan_out_prompts
from council.gateway import Gateway
from council.models import AnonymizedEntry, CallResult, PipelineResult, PipelineState, ReviewOutcome
from council.prompts import (
    AGGREGATION_TEMPLATE,
    REVIEW_TEMPLATE,
    compose_aggregation_prompt,
    compose_initial_prompt,
    compose_review_prompt,
)
from council.rankings import aggregate_rankings, extract_rankings, resolve_rankings
from council_config.config_loader import PromptsConfig

logger = logging.getLogger(__name__)

# Warn when fewer than this many participants answer in Stage 1
_MIN_QUALITY_RESPONSES = 3

StageCallback = Callable[[PipelineState], None]


@dataclass
class CouncilConfig:
    participants: list[str]
    aggregator: str
    timeout_sec: float
    verbose: bool = False


class CouncilPipeline:
    """Runs one question through the three council stages.

    An instance owns the result of exactly one run. Concurrent questions need
    separate instances; only the gateway may be shared between them.
    """

    def __init__(
        self,
        gateway: Gateway,
        config: CouncilConfig,
        prompts: PromptsConfig | None = None,
        on_progress: ProgressCallback | None = None,
        on_stage: StageCallback | None = None,
    ) -> None:
        if not config.participants:
            raise ValueError("At least one participant is required")
        if config.timeout_sec <= 0:
            raise ValueError(f"timeout_sec must be positive, got {config.timeout_sec}")
        self._gateway = gateway
        self._config = config
        self._review_template = (prompts.review if prompts else None) or REVIEW_TEMPLATE
        self._aggregation_template = (prompts.aggregation if prompts else None) or AGGREGATION_TEMPLATE
        self._on_progress = on_progress
        self._on_stage = on_stage
        self._state = PipelineState.IDLE

    @property
    def state(self) -> PipelineState:
        return self._state

    def _transition(self, result: PipelineResult, state: PipelineState) -> None:
        logger.debug("Pipeline %s -> %s", self._state.value, state.value)
        self._state = state
        result.state = state
        if self._on_stage:
            try:
                self._on_stage(state)
            except Exception:
                logger.exception("Stage callback failed on %s", state.value)

    async def run(self, question: str) -> PipelineResult:
        """Run the council and return everything it produced.

        Never raises for call failures: a failed run is reported through
        ``PipelineResult.error`` alongside whatever data was collected.

        Raises:
            RuntimeError: If this instance has already run.
        """
        if self._state is not PipelineState.IDLE:
            raise RuntimeError("CouncilPipeline instances run a single question; create a new one")

        run_start = time.monotonic()
        result = PipelineResult(question=question, aggregator=self._config.aggregator)

        successful = await self._stage1(result)
        if not successful:
            result.error = AllFailedError(len(self._config.participants))
            logger.error("%s", result.error)
            self._transition(result, PipelineState.ALL_FAILED)
            result.timings.total_sec = time.monotonic() - run_start
            return result

        await self._stage2(result, successful)
        await self._stage3(result)

        result.timings.total_sec = time.monotonic() - run_start
        return result

    async def _stage1(self, result: PipelineResult) -> list[CallResult]:
        participants = self._config.participants
        self._transition(result, PipelineState.STAGE1_RUNNING)
        logger.info("Stage 1: querying %d participants", len(participants))

        start = time.monotonic()
        result.call_results = await fan_out(
            self._gateway,
            participants,
            compose_initial_prompt(result.question),
            self._config.timeout_sec,
            self._on_progress,
        )
        result.timings.stage1_sec = time.monotonic() - start

        successful = [r for r in result.call_results if r.ok]
        logger.info(
            "Stage 1 complete: %d/%d participants answered in %.2fs",
            len(successful),
            len(participants),
            result.timings.stage1_sec,
        )
        if successful and len(participants) >= _MIN_QUALITY_RESPONSES and len(successful) < _MIN_QUALITY_RESPONSES:
            logger.warning(
                "Only %d/%d participants answered in Stage 1. "
                "Peer review quality is degraded; consider a longer timeout.",
                len(successful),
                len(participants),
            )
        return successful

    async def _stage2(self, result: PipelineResult, successful: list[CallResult]) -> None:
        self._transition(result, PipelineState.STAGE2_RUNNING)
        if len(successful) < 2:
            logger.info("Stage 2 skipped: peer review needs at least 2 answers, got %d", len(successful))
            return

        logger.info("Stage 2: %d participants reviewing each other", len(successful))
        # participant index of each usable answer
        slots = [i for i, r in enumerate(result.call_results) if r.ok]
        requests: list[tuple[str, str]] = []
        reviewer_entries: list[list[AnonymizedEntry]] = []
        for index, own in enumerate(successful):
            entries = anonymize(successful, exclude_index=index)
            logger.debug("Review labels for %s: %s", own.participant, label_map(entries, successful))
            prompt = compose_review_prompt(result.question, entries, successful, self._review_template)
            if self._config.verbose:
                logger.debug("Review prompt for %s:\n%s", own.participant, prompt)
            requests.append((own.participant, prompt))
            reviewer_entries.append(entries)

        start = time.monotonic()
        review_calls = await fan_out_prompts(
            self._gateway, requests, self._config.timeout_sec, self._on_progress
        )
        result.timings.stage2_sec = time.monotonic() - start

        for call, entries in zip(review_calls, reviewer_entries):
            outcome = ReviewOutcome(
                reviewer=call.participant,
                elapsed_sec=call.elapsed_sec,
                error=call.error,
                text=call.text,
            )
            if call.ok:
                parsed = extract_rankings(call.text, eligible_count=len(entries))
                outcome.rankings = resolve_rankings(parsed, entries, successful, slots)
                if not outcome.rankings:
                    logger.info("No rankings could be parsed from %s's review", call.participant)
            result.reviews.append(outcome)

        result.aggregate_ranks = aggregate_rankings(result.reviews, self._config.participants)
        logger.info(
            "Stage 2 complete: %d/%d reviews succeeded in %.2fs",
            sum(1 for r in result.reviews if r.error is None),
            len(result.reviews),
            result.timings.stage2_sec,
        )

    async def _stage3(self, result: PipelineResult) -> None:
        aggregator = self._config.aggregator
        self._transition(result, PipelineState.STAGE3_RUNNING)
        logger.info("Stage 3: synthesizing via %s", aggregator)

        prompt = compose_aggregation_prompt(
            result.question,
            result.call_results,
            result.reviews,
            result.aggregate_ranks,
            self._aggregation_template,
        )
        if self._config.verbose:
            logger.debug("Aggregation prompt:\n%s", prompt)

        call = await call_participant(
            self._gateway, aggregator, prompt, self._config.timeout_sec, self._on_progress
        )
        result.timings.stage3_sec = call.elapsed_sec

        if not call.ok:
            cause = call.error or ProviderError(aggregator, "Aggregator returned empty content")
            result.error = AggregationFailedError(aggregator, cause)
            logger.error("%s", result.error)
            self._transition(result, PipelineState.STAGE3_FAILED)
            return

        result.aggregated_text = call.text
        logger.info("Stage 3 complete in %.2fs", call.elapsed_sec)
        self._transition(result, PipelineState.DONE)


async def run_council(
    gateway: Gateway,
    config: CouncilConfig,
    question: str,
    prompts: PromptsConfig | None = None,
    on_progress: ProgressCallback | None = None,
    on_stage: StageCallback | None = None,
) -> PipelineResult:
    """Run one question on a fresh pipeline."""
    pipeline = CouncilPipeline(gateway, config, prompts, on_progress, on_stage)
    return await pipeline.run(question)
