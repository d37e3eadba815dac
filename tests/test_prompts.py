"""Tests for council/prompts.py."""

from council.anonymize import anonymize
from council.models import AggregateRank, RankAssertion, ReviewOutcome
from council.prompts import compose_aggregation_prompt, compose_initial_prompt, compose_review_prompt


def test_initial_prompt_is_question_verbatim():
    question = "  What is {this}?\n"
    assert compose_initial_prompt(question) == question


def test_review_prompt_is_anonymized(sample_question, three_answers):
    entries = anonymize(three_answers, exclude_index=1)

    prompt = compose_review_prompt(sample_question, entries, three_answers)

    assert sample_question in prompt
    assert "Response A:\nUse YAML." in prompt
    assert "Response B:\nUse TOML." in prompt
    assert "Use JSON." not in prompt  # reviewer's own answer
    for name in ("p0", "p1", "p2"):
        assert name not in prompt


def test_review_prompt_requests_parseable_ranking(sample_question, three_answers):
    entries = anonymize(three_answers, exclude_index=0)
    prompt = compose_review_prompt(sample_question, entries, three_answers)
    for criterion in ("Accuracy", "Depth", "Usefulness", "Clarity"):
        assert criterion in prompt
    assert "Ranking:\n1. Response X:" in prompt


def test_review_prompt_custom_template(three_answers):
    entries = anonymize(three_answers, exclude_index=2)
    prompt = compose_review_prompt("Q?", entries, three_answers, template="{question}|{responses}")
    assert prompt == "Q?|Response A:\nUse YAML.\n\nResponse B:\nUse JSON."


def _reviews() -> list[ReviewOutcome]:
    return [
        ReviewOutcome(
            "p0",
            rankings=[
                RankAssertion("B", 1, "more precise", "p2", 2),
                RankAssertion("A", 2, "vague", "p1", 1),
            ],
        ),
        ReviewOutcome("p1", error=None, rankings=[]),
    ]


def test_aggregation_prompt_contents(sample_question, three_answers, failed_call):
    calls = three_answers + [failed_call]

    prompt = compose_aggregation_prompt(
        sample_question,
        calls,
        _reviews(),
        [AggregateRank("p2", 1.0, 1), AggregateRank("p1", 2.0, 1)],
    )

    assert sample_question in prompt
    assert "## Answer from p0\nUse YAML." in prompt
    assert "## Answer from p3\n(error: Request timed out after 5s)" in prompt
    assert "### Ranking by p0\n1. p2: more precise\n2. p1: vague" in prompt
    assert "Ranking by p1" not in prompt  # nothing parsed
    assert "- p2: 1.00 (1 vote)" in prompt
    assert "decisive" in prompt


def test_aggregation_prompt_without_reviews(sample_question, three_answers):
    prompt = compose_aggregation_prompt(sample_question, three_answers[:1], [])
    assert "Peer reviews" not in prompt
    assert "Average peer rank" not in prompt
    assert "Use YAML." in prompt


def test_aggregation_prompt_is_deterministic(sample_question, three_answers, failed_call):
    calls = three_answers + [failed_call]
    first = compose_aggregation_prompt(sample_question, calls, _reviews())
    second = compose_aggregation_prompt(sample_question, calls, _reviews())
    assert first == second
