from pydantic import BaseModel, Field


class QuizResult(BaseModel):
    """채점 결과 요약."""

    total_questions: int = Field(..., ge=0)
    answered: int = Field(..., ge=0)
    correct: int = Field(..., ge=0)
    wrong: int = Field(..., ge=0)
    skipped: int = Field(..., ge=0)
    time_taken: int = Field(0, ge=0, description="소요 시간 (초)")
    score: float = Field(0.0, description="100점 만점 환산 점수")
    accuracy: float = Field(0.0, description="응답한 문제 중 정답 비율 (%)")
    passed: bool = False
