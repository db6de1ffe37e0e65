"""
core/session.py

타이머 + 네비게이터를 묶어 응시 세션 하나의 상태 전이를 관리한다.

상태 전이:
  ACTIVE  ⇄ PAUSED      pause() / resume()
  ACTIVE  → EXPIRED     타이머 시간 종료 알림
  EXPIRED → SUBMITTED   자동 제출 1회
  *       → SUBMITTED   submit()

SUBMITTED는 종료 상태이다. 이후의 이동/답안 기록/타이머 조작은 SessionClosed를
던진다. EXPIRED도 답안 기록과 이동을 막는다 (자동 제출 전에 화면이 잠긴다).

제출은 세션당 한 번만 외부로 나간다. 첫 submit() 호출(수동이든 자동이든)이
제출 태스크를 만들고, 이후의 호출은 모두 같은 태스크의 결과를 기다린다.
"""

import asyncio
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Iterable, List, Optional

from config import TICK_INTERVAL
from timed_quiz.core.navigation import QuizNavigation, SlotState
from timed_quiz.core.timer import CountdownTimer, format_time
from timed_quiz.errors import SessionClosed

logger = logging.getLogger(__name__)

Submitter = Callable[[], Awaitable[Any]]


class SessionStatus(str, Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    EXPIRED = "expired"
    SUBMITTED = "submitted"


_LOCKED = (SessionStatus.EXPIRED, SessionStatus.SUBMITTED)


class QuizSessionController:
    """
    Attributes:
        status:          현재 상태.
        history:         거쳐 온 상태 목록 (생성 시 PAUSED부터).
        auto_submitted:  시간 종료로 자동 제출되었는지.
        submitted_elapsed: 제출 시점의 소요 시간 (초).
    """

    def __init__(
        self,
        question_ids: Iterable[str],
        total_seconds: int,
        submitter: Submitter,
        *,
        answered_ids: Iterable[str] = (),
        interval: float = TICK_INTERVAL,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        self.navigation = QuizNavigation(question_ids, answered_ids)
        self.timer = CountdownTimer(total_seconds, self._on_time_up, interval=interval, loop=loop)
        self._submitter = submitter
        self._loop = loop
        self._submission: Optional[asyncio.Task] = None

        self.status = SessionStatus.PAUSED
        self.history: List[SessionStatus] = [self.status]
        self.auto_submitted = False
        self.submitted_elapsed: Optional[int] = None

    # ── 조회 ────────────────────────────────────────────────────────────────

    @property
    def is_locked(self) -> bool:
        return self.status in _LOCKED

    @property
    def seconds_left(self) -> int:
        return self.timer.seconds_left

    @property
    def elapsed(self) -> int:
        return self.timer.elapsed

    @property
    def percentage(self) -> float:
        return self.timer.percentage

    @property
    def formatted_time(self) -> str:
        return format_time(self.timer.seconds_left)

    @property
    def tone(self) -> str:
        """남은 시간 경고 단계: normal / warning / danger."""
        return self.timer.tone

    @property
    def current_index(self) -> int:
        return self.navigation.current_index

    @property
    def answered_ids(self) -> frozenset:
        return frozenset(self.navigation.answered_ids)

    def slot_states(self) -> List[SlotState]:
        return self.navigation.slot_states()

    @property
    def submission(self) -> Optional[asyncio.Task]:
        return self._submission

    # ── 타이머 ──────────────────────────────────────────────────────────────

    def start(self) -> None:
        """
        응시 시작. 남은 시간이 이미 0이면 (서버에서 만료된 응시를 불러온 경우)
        바로 만료 처리 후 자동 제출한다.
        """
        self.ensure_open()
        if self.timer.seconds_left == 0:
            self._on_time_up()
            return
        self.timer.start()
        self._transition(SessionStatus.ACTIVE)

    def pause(self) -> None:
        self.ensure_open()
        if self.status is SessionStatus.ACTIVE:
            self.timer.pause()
            self._transition(SessionStatus.PAUSED)

    def resume(self) -> None:
        self.ensure_open()
        if self.status is SessionStatus.PAUSED:
            self.start()

    def reset_timer(self, new_total_seconds: Optional[int] = None, reset_key: object = None) -> None:
        self.ensure_open()
        self.timer.reset(new_total_seconds, reset_key)
        # 진행 중에 0초로 재설정되면 바로 시간 종료로 처리
        if self.status is SessionStatus.ACTIVE and self.timer.seconds_left == 0:
            self._on_time_up()

    # ── 네비게이션 / 답안 ───────────────────────────────────────────────────

    def navigate(self, index: int) -> int:
        self.ensure_open()
        return self.navigation.navigate(index)

    def next(self) -> int:
        self.ensure_open()
        return self.navigation.next()

    def previous(self) -> int:
        self.ensure_open()
        return self.navigation.previous()

    def record_answer(self, question_id: str) -> None:
        self.ensure_open()
        self.navigation.record_answer(question_id)

    def clear_answer(self, question_id: str) -> None:
        self.ensure_open()
        self.navigation.clear_answer(question_id)

    def is_answered(self, question_id: str) -> bool:
        return self.navigation.is_answered(question_id)

    # ── 제출 ────────────────────────────────────────────────────────────────

    async def submit(self) -> Any:
        """
        수동 제출. 이미 제출이 진행 중이거나 끝났다면 같은 결과를 돌려준다.
        제출 요청 자체가 실패하면 예외가 그대로 전달되며 세션은 잠긴 채로 남는다.
        """
        task = self._ensure_submission(auto=False)
        return await asyncio.shield(task)

    def _ensure_submission(self, auto: bool) -> asyncio.Task:
        if self._submission is None:
            self.timer.stop()
            self.auto_submitted = auto
            self.submitted_elapsed = self.timer.elapsed
            self._transition(SessionStatus.SUBMITTED)

            loop = self._loop or asyncio.get_running_loop()
            self._submission = loop.create_task(self._call_submitter())
            self._submission.add_done_callback(self._log_submission_outcome)
            logger.info(
                f"{'자동' if auto else '수동'} 제출 시작 "
                f"(답함 {self.navigation.answered_count}/{self.navigation.total_questions}, "
                f"소요 {format_time(self.submitted_elapsed)})"
            )
        return self._submission

    async def _call_submitter(self) -> Any:
        return await self._submitter()

    @staticmethod
    def _log_submission_outcome(task: asyncio.Task) -> None:
        if task.cancelled():
            logger.warning("제출 태스크가 취소되었습니다.")
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"제출 실패: {exc!r}")

    # ── 내부 ────────────────────────────────────────────────────────────────

    def _on_time_up(self) -> None:
        if self.status is SessionStatus.SUBMITTED:
            return
        self._transition(SessionStatus.EXPIRED)
        self._ensure_submission(auto=True)

    def ensure_open(self) -> None:
        if self.status in _LOCKED:
            raise SessionClosed(f"이미 종료된 시험입니다 (상태: {self.status.value}).")

    def _transition(self, status: SessionStatus) -> None:
        if status is self.status:
            return
        logger.debug(f"세션 상태 변경: {self.status.value} → {status.value}")
        self.status = status
        self.history.append(status)
