"""
services/exam_service.py

시험 채점 및 결과 분석 비즈니스 로직.
순수 Python 함수로 구성 — UI 코드, 전역 상태 변경 없음.
"""

from typing import Dict, List

from config import PASS_SCORE
from timed_quiz.models.question_model import Question
from timed_quiz.models.result_model import QuizResult


def calculate_score(
    questions: List[Question],
    answers: Dict[str, str],
) -> float:
    """
    답안을 채점하여 100점 만점 환산 점수를 반환한다.

    응답하지 않은 문제(키 없음)는 오답으로 처리.

    Args:
        questions: 채점 대상 Question 리스트.
        answers:   답안지. {question.id: 보기 id 또는 서술형 답}

    Returns:
        0.0 ~ 100.0 범위의 점수 (소수점 둘째 자리 반올림).
        questions가 빈 리스트이면 0.0 반환.
    """
    if not questions:
        return 0.0

    correct_count = sum(1 for q in questions if q.is_correct(answers.get(q.id)))
    return round(correct_count / len(questions) * 100, 2)


def get_incorrect_questions(
    questions: List[Question],
    answers: Dict[str, str],
) -> List[Question]:
    """
    오답 문제 리스트를 반환한다 (오답 노트용).

    - 선택한 답이 정답과 다른 경우, 미응답 포함
    - correct_answer가 빈 문자열인 문제는 정답 정보가 없으므로 제외

    Returns:
        오답 Question 리스트. 원본 순서 유지.
    """
    incorrect: List[Question] = []

    for q in questions:
        if not q.correct_answer:
            # 정답 정보 자체가 없는 문제는 채점 불가 → 제외
            continue
        if not q.is_correct(answers.get(q.id)):
            incorrect.append(q)

    return incorrect


def calculate_result(
    questions: List[Question],
    answers: Dict[str, str],
    time_taken: int = 0,
    pass_score: float = PASS_SCORE,
) -> QuizResult:
    """
    정답/오답/미응답 수와 점수를 한 번에 계산한다.

    answers에 있더라도 빈 값은 미응답으로 센다.
    """
    correct = wrong = skipped = 0
    for q in questions:
        ans = answers.get(q.id)
        if not ans:
            skipped += 1
        elif q.is_correct(ans):
            correct += 1
        else:
            wrong += 1

    answered = correct + wrong
    score = calculate_score(questions, answers)
    accuracy = round(correct / answered * 100, 1) if answered else 0.0

    return QuizResult(
        total_questions=len(questions),
        answered=answered,
        correct=correct,
        wrong=wrong,
        skipped=skipped,
        time_taken=max(0, int(time_taken)),
        score=score,
        accuracy=accuracy,
        passed=is_passed(score, pass_score),
    )


def is_passed(score: float, pass_score: float = PASS_SCORE) -> bool:
    """score >= pass_score 이면 합격."""
    return score >= pass_score
