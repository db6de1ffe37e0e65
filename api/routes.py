"""
api/routes.py — 응시(attempt) 엔드포인트
"""

import logging
import time
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from api.auth import require_student
from api.sample_questions import SAMPLE_QUIZ
import api.session as session

from timed_quiz.models.question_model import Question, QuizData
from timed_quiz.models.session_state import AttemptState
from timed_quiz.services.exam_service import calculate_result, get_incorrect_questions

logger = logging.getLogger(__name__)

router = APIRouter()

# ── Pydantic request bodies ──────────────────────────────────────────────────

class StartAttemptBody(BaseModel):
    quiz_id: str = SAMPLE_QUIZ.id

class SaveAnswerBody(BaseModel):
    question_id: str
    answer: Optional[str] = None

class NavigateBody(BaseModel):
    index: int = 0


# ── 헬퍼 ─────────────────────────────────────────────────────────────────────

def _question_to_dict(q: Question) -> dict:
    # 정답(correct_answer)은 응시 중에 내려보내지 않는다
    return {
        "id": q.id,
        "question_type": q.question_type.value,
        "text": q.text,
        "options": [o.model_dump() for o in q.options],
    }


def _load(attempt_id: str, student_id: str) -> tuple[AttemptState, QuizData]:
    attempt = session.get_attempt(attempt_id, student_id)
    if attempt is None:
        raise HTTPException(status_code=404, detail="Active test attempt not found")
    quiz = session.get_quiz(attempt.quiz_id)
    if quiz is None:
        raise HTTPException(status_code=404, detail="No questions found for this test")
    return attempt, quiz


def _ensure_writable(attempt: AttemptState) -> None:
    if attempt.is_submitted:
        raise HTTPException(status_code=400, detail="Attempt already submitted")
    if attempt.is_expired():
        raise HTTPException(status_code=400, detail="Time is up for this attempt")


def _finalize(attempt: AttemptState, quiz: QuizData) -> AttemptState:
    """채점 후 제출 확정. 이미 제출된 응시는 그대로 둔다."""
    if attempt.is_submitted:
        return attempt
    finished_at = min(time.time(), attempt.expires_at)
    result = calculate_result(quiz.questions, attempt.answers, finished_at - attempt.started_at)
    session.finalize_attempt(attempt, result)
    logger.info(
        f"응시 제출: attempt={attempt.id} score={attempt.result.score} "
        f"({attempt.result.correct}/{attempt.result.total_questions})"
    )
    return attempt


def _attempt_summary(attempt: AttemptState, quiz: QuizData) -> dict:
    return {
        "attempt_id": attempt.id,
        "quiz_id": quiz.id,
        "title": quiz.title,
        "time_limit": quiz.time_limit,
        "remaining_seconds": 0 if attempt.is_submitted else attempt.remaining_seconds(),
        "total_questions": len(quiz.questions),
        "question_ids": quiz.question_ids,
        "answered_ids": [qid for qid in quiz.question_ids if attempt.answers.get(qid)],
        "current_index": attempt.current_index,
        "is_submitted": attempt.is_submitted,
    }


# ── 엔드포인트 ───────────────────────────────────────────────────────────────

@router.get("/api/healthcheck")
async def healthcheck():
    return {"ok": True}


@router.post("/api/attempts")
async def start_attempt(body: StartAttemptBody, student_id: str = Depends(require_student)):
    quiz = session.get_quiz(body.quiz_id)
    if quiz is None:
        raise HTTPException(status_code=404, detail="Test not found")

    attempt, created = session.start_attempt(student_id, quiz)
    if created:
        logger.info(f"응시 시작: student={student_id} quiz={quiz.id} attempt={attempt.id}")
    d = _attempt_summary(attempt, quiz)
    d.update({"created": created, "ok": True})
    return d


@router.get("/api/attempts/{attempt_id}")
async def get_attempt(attempt_id: str, student_id: str = Depends(require_student)):
    attempt, quiz = _load(attempt_id, student_id)
    return _attempt_summary(attempt, quiz)


@router.get("/api/attempts/{attempt_id}/question/{index}")
async def get_question(attempt_id: str, index: int, student_id: str = Depends(require_student)):
    attempt, quiz = _load(attempt_id, student_id)
    if not (0 <= index < len(quiz.questions)):
        raise HTTPException(status_code=404, detail="문제를 찾을 수 없습니다.")

    q = quiz.questions[index]
    d = _question_to_dict(q)
    d.update({
        "saved_answer": attempt.answers.get(q.id, ""),
        "index": index,
        "total": len(quiz.questions),
    })
    return d


@router.post("/api/attempts/{attempt_id}/answer")
async def save_answer(attempt_id: str, body: SaveAnswerBody, student_id: str = Depends(require_student)):
    attempt, quiz = _load(attempt_id, student_id)
    _ensure_writable(attempt)

    question = next((q for q in quiz.questions if q.id == body.question_id), None)
    if question is None:
        raise HTTPException(status_code=404, detail="Question not found for this test")

    if body.answer:
        if not question.accepts(body.answer):
            raise HTTPException(status_code=400, detail="보기에 없는 답안입니다.")
        attempt.answers[question.id] = body.answer
    else:
        attempt.answers.pop(question.id, None)
    return {"ok": True, "answered_count": len(attempt.answers)}


@router.post("/api/attempts/{attempt_id}/navigate")
async def navigate(attempt_id: str, body: NavigateBody, student_id: str = Depends(require_student)):
    attempt, quiz = _load(attempt_id, student_id)
    _ensure_writable(attempt)

    if not (0 <= body.index < len(quiz.questions)):
        raise HTTPException(status_code=400, detail="문제 인덱스가 범위를 벗어났습니다.")
    attempt.current_index = body.index
    return {"index": body.index, "ok": True}


@router.put("/api/attempts/{attempt_id}/submit")
async def submit_attempt(attempt_id: str, student_id: str = Depends(require_student)):
    attempt, quiz = _load(attempt_id, student_id)
    already = attempt.is_submitted
    _finalize(attempt, quiz)
    return {"submitted": True, "already_submitted": already, **attempt.result.model_dump()}


@router.get("/api/attempts/{attempt_id}/result")
async def get_result(attempt_id: str, student_id: str = Depends(require_student)):
    attempt, quiz = _load(attempt_id, student_id)
    if not attempt.is_submitted:
        if not attempt.is_expired():
            raise HTTPException(status_code=400, detail="시험이 아직 제출되지 않았습니다.")
        # 시간이 끝난 응시는 서버 기준으로 확정
        _finalize(attempt, quiz)

    answers = attempt.answers
    incorrect_ids = [q.id for q in get_incorrect_questions(quiz.questions, answers)]
    review = [
        {
            **_question_to_dict(q),
            "correct_answer": q.correct_answer,
            "user_answer": answers.get(q.id, ""),
            "is_correct": q.is_correct(answers.get(q.id)),
        }
        for q in quiz.questions
    ]
    return {**attempt.result.model_dump(), "questions": review, "incorrect_ids": incorrect_ids}
