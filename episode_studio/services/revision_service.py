"""
Revision Decision & Aggregator

Turns the character panel's evaluations into a revision decision and, when
revision is needed, one block of feedback for the episode generator.

Score bands (totalScore):
- low:  s < 4.0         -> revision required, improvements are priority
- mid:  4.0 <= s < 4.5  -> improvements are reference opinions
- high: s >= 4.5        -> highlights are points to preserve

Pure functions only; min and average are reported for logging.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from episode_studio.config.limits import LOW_BAND_UPPER, HIGH_BAND_LOWER
from episode_studio.models import CharacterEvaluation

logger = logging.getLogger(__name__)

PRIORITY_SECTION_TITLE = "Priority Improvements"
REFERENCE_SECTION_TITLE = "Reference Opinions"
PRESERVE_SECTION_TITLE = "Points to Preserve"


@dataclass
class RevisionDecision:
    """Derived from evaluations; never persisted"""

    needs_revision: bool
    low_score_evaluations: List[CharacterEvaluation] = field(default_factory=list)
    mid_score_evaluations: List[CharacterEvaluation] = field(default_factory=list)
    high_score_evaluations: List[CharacterEvaluation] = field(default_factory=list)
    min_score: Optional[float] = None
    average_score: Optional[float] = None
    revision_feedback: Optional[str] = None


def partition_by_band(
    evaluations: Sequence[CharacterEvaluation]
) -> Tuple[List[CharacterEvaluation], List[CharacterEvaluation], List[CharacterEvaluation]]:
    """Split evaluations into (low, mid, high) bands, keeping input order."""
    low, mid, high = [], [], []
    for evaluation in evaluations:
        if evaluation.total_score < LOW_BAND_UPPER:
            low.append(evaluation)
        elif evaluation.total_score < HIGH_BAND_LOWER:
            mid.append(evaluation)
        else:
            high.append(evaluation)
    return low, mid, high


def _feedback_line(evaluation: CharacterEvaluation, text: str) -> str:
    return f"{evaluation.character_name} (score: {evaluation.total_score:.1f}): {text}"


def compile_revision_feedback(
    low: Sequence[CharacterEvaluation],
    mid: Sequence[CharacterEvaluation],
    high: Sequence[CharacterEvaluation]
) -> str:
    """
    Compile the feedback handed to the revision pass.

    Three labeled sections, always in this order:
    1. Priority Improvements: low band entries that carry improvements
    2. Reference Opinions: mid band entries that carry improvements
    3. Points to Preserve: highlights from the high band

    An empty section keeps its heading with "(none)" so the generator can
    tell it was considered.

    Args:
        low: Low band evaluations
        mid: Mid band evaluations
        high: High band evaluations

    Returns:
        Feedback text
    """
    priority = [_feedback_line(e, e.improvements) for e in low if e.improvements]
    reference = [_feedback_line(e, e.improvements) for e in mid if e.improvements]
    preserve = [_feedback_line(e, e.highlights) for e in high]

    feedback_parts = []
    for title, lines in (
        (PRIORITY_SECTION_TITLE, priority),
        (REFERENCE_SECTION_TITLE, reference),
        (PRESERVE_SECTION_TITLE, preserve),
    ):
        feedback_parts.append(f"### {title}")
        if lines:
            feedback_parts.extend(f"- {line}" for line in lines)
        else:
            feedback_parts.append("(none)")
        feedback_parts.append("")

    return "\n".join(feedback_parts).rstrip()


def decide(evaluations: Sequence[CharacterEvaluation]) -> RevisionDecision:
    """
    Decide whether the draft needs one revision pass.

    Revision happens iff at least one evaluation is in the low band.
    With no evaluations at all there is nothing to act on: no revision,
    and min/average are None.

    Args:
        evaluations: Panel results in cast order

    Returns:
        RevisionDecision (revision_feedback set only when revising)
    """
    if not evaluations:
        return RevisionDecision(needs_revision=False)

    scores = [e.total_score for e in evaluations]
    low, mid, high = partition_by_band(evaluations)
    decision = RevisionDecision(
        needs_revision=bool(low),
        low_score_evaluations=low,
        mid_score_evaluations=mid,
        high_score_evaluations=high,
        min_score=min(scores),
        average_score=sum(scores) / len(scores),
    )

    if decision.needs_revision:
        decision.revision_feedback = compile_revision_feedback(low, mid, high)
        low_names = ", ".join(f"{e.character_name}({e.total_score:.1f})" for e in low)
        logger.info(
            f"🔄 Revision needed (min {decision.min_score:.1f}, avg {decision.average_score:.2f}); "
            f"low scores from: {low_names}"
        )
    else:
        logger.info(
            f"✅ Panel approved draft (min {decision.min_score:.1f}, avg {decision.average_score:.2f})"
        )

    return decision
