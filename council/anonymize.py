"""Label-masked views of Stage 1 answers for peer review."""

import logging
from collections.abc import Sequence

from council.models import AnonymizedEntry, CallResult

logger = logging.getLogger(__name__)

LABELS = "ABCDEFGH"


def anonymize(results: Sequence[CallResult], exclude_index: int) -> list[AnonymizedEntry]:
    """Label every result except ``exclude_index`` with A, B, C, ... in input order.

    ``results`` is the list of usable answers; the entry at ``exclude_index`` is
    the reviewer's own. Results beyond the label alphabet are left out of the
    review.
    """
    entries: list[AnonymizedEntry] = []
    for index in range(len(results)):
        if index == exclude_index:
            continue
        if len(entries) == len(LABELS):
            logger.debug(
                "Label alphabet exhausted, %s left out of review",
                results[index].participant,
            )
            continue
        entries.append(AnonymizedEntry(label=LABELS[len(entries)], source_index=index))
    return entries


def label_map(entries: Sequence[AnonymizedEntry], results: Sequence[CallResult]) -> dict[str, str]:
    """label -> participant, for one reviewer's prompt only."""
    return {entry.label: results[entry.source_index].participant for entry in entries}
