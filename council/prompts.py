"""Prompt templates for the three council stages. Pure functions, no I/O."""

from collections.abc import Sequence

from council.models import AggregateRank, AnonymizedEntry, CallResult, ReviewOutcome

# Kept in lockstep with rankings.extract_rankings, which parses the
# "Ranking:" block requested at the end.
REVIEW_TEMPLATE = """You are reviewing answers that other assistants gave to the same question.
The answers are anonymized; judge them only on their content.

Question:
{question}

{responses}

Evaluate each response on:
1. Accuracy - is it factually correct and free of errors?
2. Depth - does it cover the important aspects of the question?
3. Usefulness - would it actually help the person asking?
4. Clarity - is it well organized and easy to follow?

Write a short critique of each response, then finish with your ranking from
best to worst, using exactly this format and nothing after it:

Ranking:
1. Response X: one-sentence reasoning
2. Response Y: one-sentence reasoning
"""

AGGREGATION_TEMPLATE = """Several AI models answered the question below, then reviewed and ranked each other's answers anonymously.

Question:
{question}

{answers}
{reviews}{average_ranking}
Using the answers and the peer reviews above, write the single best final answer:
- keep the points the answers agree on and the strongest insights unique to one answer
- where the answers contradict each other, decide which is right and say why
- prefer the claims the reviewers found most accurate

Give one decisive, evidence-backed answer. Do not hedge between options or summarize
each model in turn; state the answer directly and clearly.
"""


def compose_initial_prompt(question: str) -> str:
    """Stage 1: the question goes to every participant verbatim."""
    return question


def _format_responses(entries: Sequence[AnonymizedEntry], results: Sequence[CallResult]) -> str:
    return "\n\n".join(
        f"Response {entry.label}:\n{results[entry.source_index].text}" for entry in entries
    )


def compose_review_prompt(
    question: str,
    entries: Sequence[AnonymizedEntry],
    results: Sequence[CallResult],
    template: str = REVIEW_TEMPLATE,
) -> str:
    """Stage 2: one reviewer's prompt over its anonymized peers."""
    return template.format(
        question=question,
        responses=_format_responses(entries, results),
    )


def _format_answers(call_results: Sequence[CallResult]) -> str:
    parts: list[str] = []
    for result in call_results:
        if result.error is not None:
            body = f"(error: {result.error.message})"
        elif not result.text:
            body = "(error: empty response)"
        else:
            body = result.text
        parts.append(f"## Answer from {result.participant}\n{body}\n")
    return "\n".join(parts)


def _format_reviews(reviews: Sequence[ReviewOutcome]) -> str:
    parsed = [r for r in reviews if r.error is None and r.rankings]
    if not parsed:
        return ""
    parts = ["## Peer reviews\n"]
    for review in parsed:
        parts.append(f"### Ranking by {review.reviewer}")
        for assertion in review.rankings:
            name = assertion.participant or f"Response {assertion.label}"
            line = f"{assertion.rank}. {name}"
            if assertion.justification:
                line += f": {assertion.justification}"
            parts.append(line)
        parts.append("")
    return "\n".join(parts) + "\n"


def _format_average_ranking(aggregate_ranks: Sequence[AggregateRank]) -> str:
    if not aggregate_ranks:
        return ""
    lines = ["## Average peer rank (lower is better)"]
    lines += [
        f"- {a.participant}: {a.average_rank:.2f} ({a.votes} vote{'s' if a.votes != 1 else ''})"
        for a in aggregate_ranks
    ]
    return "\n".join(lines) + "\n"


def compose_aggregation_prompt(
    question: str,
    call_results: Sequence[CallResult],
    reviews: Sequence[ReviewOutcome],
    aggregate_ranks: Sequence[AggregateRank] = (),
    template: str = AGGREGATION_TEMPLATE,
) -> str:
    """Stage 3: every answer (failures included), parsed reviews, and the synthesis instruction."""
    return template.format(
        question=question,
        answers=_format_answers(call_results),
        reviews=_format_reviews(reviews),
        average_ranking=_format_average_ranking(aggregate_ranks),
    )
