import pytest
from pydantic import ValidationError

from timed_quiz.models.question_model import Option, Question, QuestionType, QuizData
from timed_quiz.services.exam_service import (
    calculate_result, calculate_score, get_incorrect_questions, is_passed,
)

OPTIONS = [Option(id="a", text="A"), Option(id="b", text="B"), Option(id="c", text="C")]

QUESTIONS = [
    Question(id="q1", text="first", options=OPTIONS, correct_answer="a"),
    Question(id="q2", text="second", options=OPTIONS, correct_answer="b"),
    Question(id="q3", text="third", question_type=QuestionType.SHORT_ANSWER, correct_answer="Paris"),
    Question(id="q4", text="no key", options=OPTIONS),
]


def test_calculate_score():
    assert calculate_score(QUESTIONS, {"q1": "a", "q2": "b", "q3": "paris"}) == 75.0
    assert calculate_score(QUESTIONS, {}) == 0.0
    assert calculate_score([], {"q1": "a"}) == 0.0


def test_incorrect_questions_skip_unscorable():
    incorrect = get_incorrect_questions(QUESTIONS, {"q1": "a", "q2": "c"})
    assert [q.id for q in incorrect] == ["q2", "q3"]


def test_calculate_result_counts():
    result = calculate_result(QUESTIONS, {"q1": "a", "q2": "c", "q3": "", "q4": "a"}, time_taken=42.7)

    assert result.total_questions == 4
    assert result.correct == 1
    assert result.wrong == 2
    assert result.skipped == 1
    assert result.answered == 3
    assert result.time_taken == 42
    assert result.accuracy == 33.3
    assert result.score == 25.0
    assert result.passed is False


def test_calculate_result_nothing_answered():
    result = calculate_result(QUESTIONS, {})
    assert result.answered == 0
    assert result.accuracy == 0.0
    assert result.skipped == 4


def test_is_passed():
    assert is_passed(60.0)
    assert not is_passed(59.99)
    assert is_passed(50.0, pass_score=50.0)


def test_choice_question_needs_two_options():
    with pytest.raises(ValidationError):
        Question(id="x", text="?", options=[Option(id="a", text="A")])


def test_correct_answer_must_be_an_option():
    with pytest.raises(ValidationError):
        Question(id="x", text="?", options=OPTIONS, correct_answer="z")


def test_duplicate_option_ids():
    with pytest.raises(ValidationError):
        Question(id="x", text="?", options=[Option(id="a", text="A"), Option(id="a", text="B")])


def test_quiz_rejects_duplicate_question_ids():
    with pytest.raises(ValidationError):
        QuizData(id="z", title="dup", time_limit=10, questions=[QUESTIONS[0], QUESTIONS[0]])


def test_accepts():
    assert QUESTIONS[0].accepts("b")
    assert not QUESTIONS[0].accepts("z")
    assert not QUESTIONS[0].accepts("")
    assert QUESTIONS[2].accepts("anything")
