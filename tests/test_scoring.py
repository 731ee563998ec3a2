from classquiz.domain.model import Answer
from classquiz.services.scoring import score

from fakes import make_quiz


def test_all_correct_scores_full_marks():
    quiz = make_quiz(correct=(1, 0))
    result = score(quiz, [Answer(0, 1), Answer(1, 0)])
    assert result.total_score == 2
    assert result.max_score == 2
    assert result.display_percentage == 100.00
    assert [r.is_correct for r in result.results] == [True, True]


def test_wrong_and_unanswered_score_zero():
    quiz = make_quiz(correct=(1, 0))
    result = score(quiz, [Answer(0, 0), Answer(1, None)])
    assert result.total_score == 0
    assert result.display_percentage == 0.00
    first, second = result.results
    assert (first.user_answer, first.correct_answer, first.is_correct) == (0, 1, False)
    assert (second.user_answer, second.correct_answer, second.is_correct) == (None, 0, False)


def test_points_weight_the_score():
    quiz = make_quiz(correct=(2, 0, 1), points=(1, 2, 3))
    result = score(quiz, [Answer(1, 0), Answer(2, 1)])
    assert result.max_score == 6
    assert result.total_score == 5
    assert result.percentage == 100 * 5 / 6
    assert result.display_percentage == 83.33


def test_answers_matched_by_index_not_position():
    quiz = make_quiz(correct=(1, 0))
    result = score(quiz, [Answer(1, 0), Answer(0, 1)])
    assert result.total_score == 2


def test_missing_answers_and_empty_input():
    quiz = make_quiz(correct=(1, 0))
    result = score(quiz, [])
    assert result.total_score == 0
    assert len(result.results) == 2
    assert all(r.user_answer is None for r in result.results)


def test_out_of_range_indices_are_incorrect_not_errors():
    quiz = make_quiz(correct=(1, 0))
    result = score(quiz, [Answer(0, 99), Answer(1, -1), Answer(7, 0)])
    assert result.total_score == 0
    assert [r.is_correct for r in result.results] == [False, False]


def test_first_answer_for_a_question_wins():
    quiz = make_quiz(correct=(1, 0))
    result = score(quiz, [Answer(0, 1), Answer(0, 2)])
    assert result.results[0].user_answer == 1
    assert result.results[0].is_correct


def test_malformed_selection_counts_as_unanswered():
    quiz = make_quiz(correct=(1, 0))
    result = score(quiz, [Answer(0, "1"), Answer(1, True)])
    assert result.total_score == 0
    assert result.results[0].user_answer is None


def test_results_carry_question_text_and_explanation():
    quiz = make_quiz(correct=(1,), points=(1,))
    (only,) = score(quiz, [Answer(0, 1)]).results
    assert only.question_index == 0
    assert only.question_text == "Q0"
    assert only.explanation == "because 0"


def test_scoring_is_repeatable_and_bounded():
    quiz = make_quiz(correct=(1, 0, 2), points=(2, 1, 4))
    answer_sets = [
        [],
        [Answer(0, 1)],
        [Answer(0, 0), Answer(1, 0), Answer(2, 2)],
        [Answer(0, 1), Answer(1, 0), Answer(2, 2)],
    ]
    for answers in answer_sets:
        first = score(quiz, answers)
        assert first == score(quiz, answers)
        assert 0 <= first.total_score <= first.max_score
        assert first.display_percentage == round(100 * first.total_score / first.max_score, 2)
