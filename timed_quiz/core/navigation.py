"""
core/navigation.py

문제 번호 네비게이터 상태.
현재 문제 인덱스와 "답한 문제" 집합만 관리한다. 실제 답안 값은 서버가 보관한다.
"""

from enum import Enum
from typing import Iterable, List, Set

from timed_quiz.errors import OutOfRange, UnknownQuestion


class SlotState(str, Enum):
    """
    네비게이터 버튼 하나의 상태.

    색상 코딩:
      - current:    짙은 배경
      - answered:   파란색 배경
      - unanswered: 흰색 배경 + 테두리
    """
    CURRENT = "current"
    ANSWERED = "answered"
    UNANSWERED = "unanswered"


class QuizNavigation:
    def __init__(self, question_ids: Iterable[str], answered_ids: Iterable[str] = ()):
        self.question_ids: List[str] = list(question_ids)
        if not self.question_ids:
            raise ValueError("문제가 한 개 이상 필요합니다.")
        if len(set(self.question_ids)) != len(self.question_ids):
            raise ValueError("문제 ID가 중복되었습니다.")

        self._known = set(self.question_ids)
        self.current_index = 0
        self.answered_ids: Set[str] = set()
        for qid in answered_ids:
            self.record_answer(qid)

    @property
    def total_questions(self) -> int:
        return len(self.question_ids)

    @property
    def current_question_id(self) -> str:
        return self.question_ids[self.current_index]

    @property
    def answered_count(self) -> int:
        return len(self.answered_ids)

    @property
    def unanswered_count(self) -> int:
        return self.total_questions - len(self.answered_ids)

    def navigate(self, index: int) -> int:
        self.check_index(index)
        self.current_index = index
        return index

    def next(self) -> int:
        return self.navigate(self.current_index + 1)

    def previous(self) -> int:
        return self.navigate(self.current_index - 1)

    def record_answer(self, question_id: str) -> None:
        self.check_known(question_id)
        self.answered_ids.add(question_id)

    def clear_answer(self, question_id: str) -> None:
        self.check_known(question_id)
        self.answered_ids.discard(question_id)

    def is_answered(self, question_id: str) -> bool:
        return question_id in self.answered_ids

    def slot_states(self) -> List[SlotState]:
        """문제 순서대로 각 버튼의 상태. 현재 문제 표시가 답함 표시보다 우선한다."""
        states = []
        for i, qid in enumerate(self.question_ids):
            if i == self.current_index:
                states.append(SlotState.CURRENT)
            elif qid in self.answered_ids:
                states.append(SlotState.ANSWERED)
            else:
                states.append(SlotState.UNANSWERED)
        return states

    def check_known(self, question_id: str) -> None:
        if question_id not in self._known:
            raise UnknownQuestion(question_id)

    def check_index(self, index: int) -> None:
        if not 0 <= index < self.total_questions:
            raise OutOfRange(index, self.total_questions)
