"""Extract rank assertions from free-text peer reviews.

The extractor reads the block that ``prompts.REVIEW_TEMPLATE`` asks for::

    Ranking:
    1. Response B: reasoning
    2. Response A: reasoning

Changing that template means changing the matching here as well.
"""

import logging
import re
from collections import defaultdict
from collections.abc import Sequence

from council.anonymize import LABELS
from council.models import AggregateRank, AnonymizedEntry, CallResult, RankAssertion, ReviewOutcome

logger = logging.getLogger(__name__)

_LABEL_RE = re.compile(r"(?i:response)\s+([A-Z])\b")
_HEADER_RE = re.compile(r"^\W*ranking\W*$", re.IGNORECASE)
_JUSTIFICATION_STRIP = " \t*_:-\u2013\u2014.,)"


def _rank_marker(rank: int) -> re.Pattern[str]:
    return re.compile(rf"(?<!\d){rank}[.:](?!\d)")


def _ranking_lines(review_text: str) -> list[str]:
    lines = review_text.splitlines()
    header_positions = [i for i, line in enumerate(lines) if _HEADER_RE.match(line.strip())]
    if header_positions:
        return lines[header_positions[-1] + 1:]
    return lines


def extract_rankings(review_text: str, eligible_count: int) -> list[RankAssertion]:
    """Best-effort parse of a review into rank assertions, best first.

    Scans line by line looking for rank 1, then 2, and so on. A line commits
    the sought rank when it carries the marker ``N.`` or ``N:`` and mentions
    an unclaimed ``Response X`` label; the earliest mention on the line wins.
    Unparseable text yields an empty list.
    """
    if not review_text or eligible_count <= 0:
        return []

    eligible = set(LABELS[:eligible_count])
    claimed: set[str] = set()
    assertions: list[RankAssertion] = []
    sought = 1

    for line in _ranking_lines(review_text):
        if sought > eligible_count:
            break
        if not _rank_marker(sought).search(line):
            continue
        for match in _LABEL_RE.finditer(line):
            label = match.group(1)
            if label not in eligible or label in claimed:
                continue
            justification = line[match.end():].strip(_JUSTIFICATION_STRIP)
            assertions.append(RankAssertion(label=label, rank=sought, justification=justification))
            claimed.add(label)
            sought += 1
            break

    logger.debug("Extracted %d/%d rankings", len(assertions), eligible_count)
    return assertions


def resolve_rankings(
    assertions: Sequence[RankAssertion],
    entries: Sequence[AnonymizedEntry],
    results: Sequence[CallResult],
    slots: Sequence[int] | None = None,
) -> list[RankAssertion]:
    """Attach the originating participant to each label, using one reviewer's entries.

    ``slots[i]`` is the participant index of ``results[i]`` when ``results``
    holds only the usable Stage 1 answers; without it the two are the same.
    """
    by_label = {entry.label: entry.source_index for entry in entries}
    resolved: list[RankAssertion] = []
    for assertion in assertions:
        index = by_label.get(assertion.label)
        if index is None:
            continue
        resolved.append(
            RankAssertion(
                label=assertion.label,
                rank=assertion.rank,
                justification=assertion.justification,
                participant=results[index].participant,
                participant_index=slots[index] if slots is not None else index,
            )
        )
    return resolved


def aggregate_rankings(
    reviews: Sequence[ReviewOutcome],
    participants: Sequence[str],
) -> list[AggregateRank]:
    """Average peer position per participant slot, best first.

    Votes are keyed by ``participant_index``, so a model listed twice gets
    one row per slot. Ties keep the order of ``participants``.
    """
    positions: dict[int, list[int]] = defaultdict(list)
    for review in reviews:
        for assertion in review.rankings:
            if assertion.participant_index is not None:
                positions[assertion.participant_index].append(assertion.rank)

    aggregate = [
        (
            index,
            AggregateRank(
                participant=participants[index],
                average_rank=round(sum(ranks) / len(ranks), 2),
                votes=len(ranks),
            ),
        )
        for index, ranks in positions.items()
    ]
    aggregate.sort(key=lambda item: (item[1].average_rank, item[0]))
    return [rank for _, rank in aggregate]
