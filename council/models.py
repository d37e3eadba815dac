"""Pure dataclasses for the council pipeline. No logic, no deps."""

from dataclasses import dataclass, field
from enum import Enum

from council.errors import CouncilError, ProviderError


@dataclass(frozen=True)
class CallResult:
    participant: str       # model identifier, e.g. "claude-sonnet-4.5"
    text: str              # always "" when error is set
    elapsed_sec: float
    error: ProviderError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and bool(self.text)


@dataclass(frozen=True)
class AnonymizedEntry:
    label: str             # "A", "B", ...
    source_index: int      # index into the reviewer's candidate list


@dataclass(frozen=True)
class RankAssertion:
    label: str
    rank: int              # 1 = best
    justification: str
    participant: str | None = None
    participant_index: int | None = None


@dataclass
class ReviewOutcome:
    reviewer: str
    rankings: list[RankAssertion] = field(default_factory=list)
    elapsed_sec: float = 0.0
    error: ProviderError | None = None
    text: str = ""


@dataclass
class AggregateRank:
    participant: str
    average_rank: float
    votes: int


@dataclass
class StageTimings:
    stage1_sec: float = 0.0
    stage2_sec: float = 0.0
    stage3_sec: float = 0.0
    total_sec: float = 0.0


class PipelineState(str, Enum):
    IDLE = "idle"
    STAGE1_RUNNING = "stage1_running"
    ALL_FAILED = "all_failed"
    STAGE2_RUNNING = "stage2_running"
    STAGE3_RUNNING = "stage3_running"
    DONE = "done"
    STAGE3_FAILED = "stage3_failed"


@dataclass
class PipelineResult:
    question: str
    aggregator: str
    call_results: list[CallResult] = field(default_factory=list)
    reviews: list[ReviewOutcome] = field(default_factory=list)
    aggregate_ranks: list[AggregateRank] = field(default_factory=list)
    aggregated_text: str | None = None
    timings: StageTimings = field(default_factory=StageTimings)
    state: PipelineState = PipelineState.IDLE
    error: CouncilError | None = None

    @property
    def succeeded(self) -> bool:
        return self.state is PipelineState.DONE

    @property
    def successful_results(self) -> list[CallResult]:
        return [r for r in self.call_results if r.ok]
