"""
models/session_state.py

서버가 보관하는 응시(attempt) 기록 모델.
Pydantic BaseModel 기반 — 직렬화/역직렬화 및 타입 안전성 확보.
UI 코드 없음.
"""

import time
import uuid
from typing import Dict, Optional

from pydantic import BaseModel, Field

from timed_quiz.models.result_model import QuizResult


class AttemptState(BaseModel):
    """
    학생 한 명의 시험 응시 상태.

    Attributes:
        id:                 응시 ID.
        student_id:         응시한 학생 ID.
        quiz_id:            응시 중인 퀴즈 ID.
        current_index:      마지막으로 보고된 문제 인덱스 (0-based).
        answers:            답안지. {question.id: 선택한 보기 id 또는 서술형 답}
        started_at:         응시 시작 시각 (Unix timestamp).
        expires_at:         제한 시간 종료 시각 (Unix timestamp).
        submitted_at:       제출 시각. None이면 진행 중.
        result:             제출 시 계산된 채점 결과.
    """

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    student_id: str
    quiz_id: str
    current_index: int = Field(default=0, ge=0)
    answers: Dict[str, str] = Field(default_factory=dict)
    started_at: float = Field(default_factory=time.time)
    expires_at: float
    submitted_at: Optional[float] = None
    result: Optional[QuizResult] = None

    @property
    def is_submitted(self) -> bool:
        return self.submitted_at is not None

    def remaining_seconds(self, now: Optional[float] = None) -> int:
        now = time.time() if now is None else now
        return max(0, int(self.expires_at - now))

    def is_expired(self, now: Optional[float] = None) -> bool:
        now = time.time() if now is None else now
        return now >= self.expires_at
