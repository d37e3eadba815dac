"""Tests for council/output.py."""

import io

import pytest
from rich.console import Console

import council.output as output
from council.errors import AggregationFailedError, ProviderError
from council.models import (
    AggregateRank,
    CallResult,
    PipelineResult,
    PipelineState,
    RankAssertion,
    ReviewOutcome,
    StageTimings,
)


@pytest.fixture
def captured(monkeypatch) -> io.StringIO:
    buffer = io.StringIO()
    monkeypatch.setattr(output, "console", Console(file=buffer, width=120, color_system=None))
    return buffer


@pytest.fixture
def done_result(three_answers, failed_call) -> PipelineResult:
    return PipelineResult(
        question="Q?",
        aggregator="gpt-4.1",
        call_results=three_answers + [failed_call],
        reviews=[
            ReviewOutcome("p0", rankings=[RankAssertion("A", 1, "precise", "p1", 1)], elapsed_sec=2.0),
            ReviewOutcome("p1", error=ProviderError("p1", "Request timed out after 5s")),
            ReviewOutcome("p2"),
        ],
        aggregate_ranks=[AggregateRank("p1", 1.0, 1)],
        aggregated_text="## Verdict\nUse YAML.",
        timings=StageTimings(1.2, 2.0, 3.0, 6.2),
        state=PipelineState.DONE,
    )


def test_suggestion_for_timeout():
    assert "--timeout" in output._suggestion(ProviderError("m", "Request timed out after 5s"))


def test_suggestion_for_missing_key():
    assert ".env" in output._suggestion(ProviderError("m", "Provider 'x' is not available (missing API key?)"))


def test_suggestion_empty_for_other_errors():
    assert output._suggestion(ProviderError("m", "500 Internal")) == ""


def test_truncate():
    assert output._truncate("short", 10) == "short"
    assert output._truncate("a" * 20, 10) == "aaaaaaa..."


def test_print_answers_shows_failures_with_suggestion(captured, done_result):
    output.print_answers(done_result)
    text = captured.getvalue()
    assert "p0" in text and "Use YAML." in text
    assert "p3" in text
    assert "Suggestion: Try --timeout 120" in text


def test_print_peer_reviews(captured, done_result):
    output.print_peer_reviews(done_result)
    text = captured.getvalue()
    assert "Rank 1: p1 - precise" in text
    assert "Error: Request timed out" in text
    assert "No structured rankings extracted" in text
    assert "Average peer rank" in text


def test_print_final_answer_success(captured, done_result):
    output.print_final_answer(done_result)
    text = captured.getvalue()
    assert "Final Answer" in text
    assert "Use YAML." in text


def test_print_final_answer_failure(captured, three_answers):
    result = PipelineResult(
        question="Q?",
        aggregator="gpt-4.1",
        call_results=three_answers,
        state=PipelineState.STAGE3_FAILED,
        error=AggregationFailedError("gpt-4.1", ProviderError("gpt-4.1", "overloaded")),
    )
    output.print_final_answer(result)
    assert "Aggregation via gpt-4.1 failed: overloaded" in captured.getvalue()


def test_print_summary(captured, done_result):
    output.print_summary(done_result)
    text = captured.getvalue()
    assert "3/4 successful" in text
    assert "p2 (0.80s)" in text
    assert "2/3 reviews successful" in text
    assert "6.20s" in text


def test_run_display_prints_each_completion(captured):
    progress = output.make_progress()
    display = output.RunDisplay(progress)
    with progress:
        display.on_stage(PipelineState.STAGE1_RUNNING)
        display.on_progress("gpt-5.2", 1.5, None)
        display.on_progress("gemini-3-pro-preview", 5.0, ProviderError("gemini-3-pro-preview", "Request timed out after 5s"))
        display.on_stage(PipelineState.STAGE2_RUNNING)
        display.on_stage(PipelineState.DONE)
    text = captured.getvalue()
    assert "OK" in text and "gpt-5.2" in text
    assert "FAIL" in text and "timed out" in text
