from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class QuestionType(str, Enum):
    MCQ = "MCQ"
    TRUE_FALSE = "TRUE_FALSE"
    SHORT_ANSWER = "SHORT_ANSWER"


CHOICE_TYPES = (QuestionType.MCQ, QuestionType.TRUE_FALSE)


class Option(BaseModel):
    id: str = Field(..., min_length=1, description="보기 식별자 (예: a, b, true)")
    text: str = Field(..., min_length=1, description="보기 내용")


class Question(BaseModel):
    """
    퀴즈 문제 모델
    Pydantic v2 적용
    """
    id: str = Field(
        ...,
        min_length=1,
        description="문제 ID (고유 식별자)"
    )
    question_type: QuestionType = Field(
        QuestionType.MCQ,
        description="문제 유형 (MCQ / TRUE_FALSE / SHORT_ANSWER)"
    )
    text: str = Field(
        ...,
        min_length=1,
        description="발문/문제 내용"
    )
    options: List[Option] = Field(
        default_factory=list,
        description="보기 리스트 (서술형은 빈 리스트)"
    )
    correct_answer: str = Field(
        "",
        description="정답. 객관식은 보기 id, 서술형은 정답 텍스트. 없으면 빈 문자열"
    )

    @field_validator('options')
    @classmethod
    def validate_unique_option_ids(cls, v: List[Option]) -> List[Option]:
        ids = [o.id for o in v]
        if len(ids) != len(set(ids)):
            raise ValueError("보기 id가 중복되었습니다.")
        return v

    @model_validator(mode='after')
    def validate_choice_question(self) -> 'Question':
        """
        객관식/OX 문제는 보기가 2개 이상이어야 하고,
        정답이 있으면 반드시 보기 id 중 하나여야 한다.
        """
        if self.question_type in CHOICE_TYPES:
            if len(self.options) < 2:
                raise ValueError("보기(options)는 최소 2개 이상의 항목이 필요합니다.")
            if self.correct_answer and self.correct_answer not in self.option_ids:
                raise ValueError(
                    f"정답('{self.correct_answer}')이 보기 id({self.option_ids})에 존재하지 않습니다."
                )
        return self

    @property
    def option_ids(self) -> List[str]:
        return [o.id for o in self.options]

    def accepts(self, answer: Optional[str]) -> bool:
        """주어진 답안이 이 문제에 제출 가능한 값인지."""
        if not answer:
            return False
        if self.question_type in CHOICE_TYPES:
            return answer in self.option_ids
        return True

    def is_correct(self, answer: Optional[str]) -> bool:
        if not self.correct_answer or not answer:
            return False
        if self.question_type in CHOICE_TYPES:
            return answer == self.correct_answer
        return answer.strip().lower() == self.correct_answer.strip().lower()


class QuizData(BaseModel):
    id: str
    title: str
    description: str = ""
    time_limit: int = Field(..., ge=1, description="제한 시간 (초)")
    questions: List[Question] = Field(..., min_length=1)

    @field_validator('questions')
    @classmethod
    def validate_unique_question_ids(cls, v: List[Question]) -> List[Question]:
        ids = [q.id for q in v]
        if len(ids) != len(set(ids)):
            raise ValueError("문제 id가 중복되었습니다.")
        return v

    @property
    def question_ids(self) -> List[str]:
        return [q.id for q in self.questions]
