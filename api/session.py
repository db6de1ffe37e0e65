"""
api/session.py — 멀티유저 인메모리 저장소

학생 계정, 리프레시 토큰, 퀴즈, 응시 기록을 프로세스 메모리에 보관한다.
모든 접근은 하나의 락으로 직렬화된다.
제출/만료 후 ATTEMPT_TTL이 지난 응시 기록은 cleanup_expired()로 정리.
"""

import threading
import time
import uuid
from typing import Optional

from pydantic import BaseModel, Field

from config import ATTEMPT_TTL
from timed_quiz.models.question_model import QuizData
from timed_quiz.models.result_model import QuizResult
from timed_quiz.models.session_state import AttemptState

_lock = threading.Lock()
_students: dict[str, "Student"] = {}
_refresh_tokens: dict[str, str] = {}   # jti → student_id
_quizzes: dict[str, QuizData] = {}
_attempts: dict[str, AttemptState] = {}


class Student(BaseModel):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    email: str
    name: str = ""
    password_hash: str


# ── 학생 ─────────────────────────────────────────────────────────────────────

def add_student(student: Student) -> Student:
    with _lock:
        _students[student.id] = student
    return student


def get_student(student_id: str) -> Optional[Student]:
    with _lock:
        return _students.get(student_id)


def find_student_by_email(email: str) -> Optional[Student]:
    email = email.strip().lower()
    with _lock:
        for student in _students.values():
            if student.email.lower() == email:
                return student
    return None


def remove_student(student_id: str) -> bool:
    """학생 삭제. 해당 학생의 리프레시 토큰도 함께 폐기."""
    with _lock:
        removed = _students.pop(student_id, None) is not None
        for jti in [j for j, sid in _refresh_tokens.items() if sid == student_id]:
            del _refresh_tokens[jti]
    return removed


# ── 리프레시 토큰 ────────────────────────────────────────────────────────────

def remember_refresh_token(jti: str, student_id: str) -> None:
    with _lock:
        _refresh_tokens[jti] = student_id


def revoke_refresh_token(jti: str) -> Optional[str]:
    """토큰을 폐기하고 주인 student_id를 돌려준다. 이미 없던 토큰이면 None."""
    with _lock:
        return _refresh_tokens.pop(jti, None)


# ── 퀴즈 ─────────────────────────────────────────────────────────────────────

def register_quiz(quiz: QuizData) -> QuizData:
    with _lock:
        _quizzes[quiz.id] = quiz
    return quiz


def get_quiz(quiz_id: str) -> Optional[QuizData]:
    with _lock:
        return _quizzes.get(quiz_id)


# ── 응시 ─────────────────────────────────────────────────────────────────────

def start_attempt(student_id: str, quiz: QuizData) -> tuple[AttemptState, bool]:
    """
    진행 중인 응시가 있으면 이어서 반환하고, 없으면 새로 만든다.

    Returns:
        (응시 기록, 새로 만들었는지 여부)
    """
    now = time.time()
    with _lock:
        for attempt in _attempts.values():
            if (
                attempt.student_id == student_id
                and attempt.quiz_id == quiz.id
                and not attempt.is_submitted
                and not attempt.is_expired(now)
            ):
                return attempt, False

        attempt = AttemptState(
            student_id=student_id,
            quiz_id=quiz.id,
            started_at=now,
            expires_at=now + quiz.time_limit,
        )
        _attempts[attempt.id] = attempt
        return attempt, True


def get_attempt(attempt_id: str, student_id: str) -> Optional[AttemptState]:
    """본인 응시 기록만 반환. 없거나 남의 것이면 None."""
    with _lock:
        attempt = _attempts.get(attempt_id)
    if attempt is None or attempt.student_id != student_id:
        return None
    return attempt


def finalize_attempt(attempt: AttemptState, result: QuizResult) -> AttemptState:
    """
    응시를 제출 상태로 확정한다. 이미 제출된 응시는 기존 결과를 유지한다.
    """
    with _lock:
        if attempt.submitted_at is None:
            attempt.submitted_at = time.time()
            attempt.result = result
    return attempt


def cleanup_expired() -> int:
    """종료 후 ATTEMPT_TTL이 지난 응시 기록을 정리. 제거된 수 반환."""
    now = time.time()
    removed = 0
    with _lock:
        expired = [
            aid for aid, a in _attempts.items()
            if now - (a.submitted_at or a.expires_at) > ATTEMPT_TTL
        ]
        for aid in expired:
            del _attempts[aid]
            removed += 1
    return removed


def reset() -> None:
    """저장소 전체 초기화."""
    with _lock:
        _students.clear()
        _refresh_tokens.clear()
        _quizzes.clear()
        _attempts.clear()
