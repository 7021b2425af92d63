"""Score computation for submitted answers."""
from __future__ import annotations

from typing import Mapping, Sequence

from models import Question


def score_answers(
    shuffle_order: Sequence[int],
    questions: Sequence[Question],
    answers: Mapping[int, int],
) -> tuple[int, int]:
    """
    Compare answers against the correct options through the shuffle mapping.

    ``answers`` is keyed by presentation index; ``shuffle_order[i]`` gives the
    original index of the question shown at position ``i``. Unanswered
    questions never count as correct.

    Returns:
        Tuple of (score, total)
    """
    score = 0
    for presentation_index, original_index in enumerate(shuffle_order):
        selected = answers.get(presentation_index)
        if selected is None:
            continue
        if selected == questions[original_index].correct:
            score += 1
    return score, len(questions)


def original_answers(
    shuffle_order: Sequence[int],
    answers: Mapping[int, int],
) -> dict[int, int]:
    """Re-key answers from presentation index to original question index."""
    return {
        shuffle_order[presentation_index]: option
        for presentation_index, option in answers.items()
        if 0 <= presentation_index < len(shuffle_order)
    }
