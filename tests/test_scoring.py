import pytest

import models
from core.scoring import original_answers, score_answers


def _questions(correct: list[int]) -> list[models.Question]:
    return [
        models.Question(
            question=f"Question {index}",
            options=["a", "b", "c", "d"],
            correct=value,
        )
        for index, value in enumerate(correct)
    ]


def test_all_correct_through_shuffle() -> None:
    questions = _questions([1, 0, 2])
    score, total = score_answers([2, 0, 1], questions, {0: 2, 1: 1, 2: 0})
    assert (score, total) == (3, 3)


def test_unanswered_questions_count_as_incorrect() -> None:
    questions = _questions([1, 0, 2])
    score, total = score_answers([2, 0, 1], questions, {0: 2})
    assert (score, total) == (1, 3)


def test_answers_compared_by_original_index() -> None:
    questions = _questions([1, 0, 2])
    # Correct for the unshuffled order, wrong once shuffled
    score, _ = score_answers([2, 0, 1], questions, {0: 1, 1: 0, 2: 2})
    assert score == 0


def test_empty_answers_score_zero() -> None:
    assert score_answers([0, 1], _questions([0, 1]), {}) == (0, 2)


@pytest.mark.parametrize("answers", [{0: 2, 1: 1, 2: 0}, {1: 3}, {}])
def test_scoring_is_deterministic(answers: dict[int, int]) -> None:
    questions = _questions([1, 0, 2])
    results = {score_answers([2, 0, 1], questions, answers) for _ in range(5)}
    assert len(results) == 1


def test_original_answers_rekeys_by_shuffle_order() -> None:
    assert original_answers([2, 0, 1], {0: 2, 2: 0}) == {2: 2, 1: 0}
