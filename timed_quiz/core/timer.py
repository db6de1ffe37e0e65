"""
core/timer.py

시험 남은 시간을 관리하는 카운트다운 타이머.

asyncio 이벤트 루프의 call_later로 1초(TICK_INTERVAL)마다 tick을 예약한다.
예약된 tick은 항상 최대 1개이며, start/pause/reset은 기존 예약을 먼저 취소한 뒤
새 예약을 건다. 예약마다 세대(generation) 번호를 붙여 reset 이전에 걸린 tick이
뒤늦게 실행되더라도 아무 일도 하지 않게 한다.
"""

import asyncio
import logging
from typing import Callable, List, Optional

from config import TICK_INTERVAL, TIMER_DANGER_SECONDS, TIMER_WARNING_SECONDS

logger = logging.getLogger(__name__)

TimeUpCallback = Callable[[], None]


def format_time(seconds: int) -> str:
    """초를 MM:SS 문자열로 변환한다. 분은 60에서 넘어가지 않는다 (3600 → "60:00")."""
    seconds = int(seconds)
    if seconds < 0:
        raise ValueError(f"음수 시간은 표시할 수 없습니다: {seconds}")
    minutes, secs = divmod(seconds, 60)
    return f"{minutes:02d}:{secs:02d}"


def timer_tone(seconds_left: int) -> str:
    """
    남은 시간에 따른 표시 단계.

    Returns:
        "danger"  — 10초 이하
        "warning" — 30초 이하
        "normal"  — 그 외
    """
    if seconds_left <= TIMER_DANGER_SECONDS:
        return "danger"
    if seconds_left <= TIMER_WARNING_SECONDS:
        return "warning"
    return "normal"


class CountdownTimer:
    """
    응시 세션 하나가 소유하는 카운트다운 타이머.

    Attributes:
        total_seconds: 전체 제한 시간 (초).
        seconds_left:  남은 시간 (초). 항상 0 ~ total_seconds.
        running:       진행 중 여부.
        reset_key:     reset 할 때마다 바뀌는 토큰.
    """

    def __init__(
        self,
        total_seconds: int,
        on_time_up: Optional[TimeUpCallback] = None,
        *,
        interval: float = TICK_INTERVAL,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        self.total_seconds = self._validate_total(total_seconds)
        self.seconds_left = self.total_seconds
        self.running = False
        self.reset_key: object = 0
        self.interval = interval

        self._loop = loop
        self._handle: Optional[asyncio.TimerHandle] = None
        self._generation = 0
        self._time_up_fired = False
        self._listeners: List[TimeUpCallback] = []
        if on_time_up is not None:
            self._listeners.append(on_time_up)

    # ── 파생 값 ─────────────────────────────────────────────────────────────

    @property
    def elapsed(self) -> int:
        return self.total_seconds - self.seconds_left

    @property
    def percentage(self) -> float:
        if self.total_seconds == 0:
            return 0.0
        return 100 * self.seconds_left / self.total_seconds

    @property
    def formatted(self) -> str:
        return format_time(self.seconds_left)

    @property
    def tone(self) -> str:
        return timer_tone(self.seconds_left)

    @property
    def has_pending_tick(self) -> bool:
        return self._handle is not None

    # ── 조작 ────────────────────────────────────────────────────────────────

    def subscribe(self, callback: TimeUpCallback) -> None:
        """시간 종료 알림을 받을 콜백 등록."""
        self._listeners.append(callback)

    def start(self) -> None:
        """
        타이머 시작/재개.

        남은 시간이 0이면 아무것도 하지 않는다. 0초짜리 타이머가 곧바로
        시간 종료를 알리는 일은 없다.
        """
        if self.running:
            return
        if self.seconds_left <= 0:
            logger.debug("남은 시간이 없어 타이머를 시작하지 않습니다.")
            return
        self.running = True
        self._reschedule()

    resume = start

    def pause(self) -> None:
        if not self.running:
            return
        self._cancel()
        self.running = False

    def reset(self, new_total_seconds: Optional[int] = None, reset_key: object = None) -> None:
        """
        남은 시간을 (새) 전체 시간으로 되돌린다.

        진행 중이었다면 새 시간 기준으로 계속 진행한다.
        """
        self._cancel()
        if new_total_seconds is not None:
            self.total_seconds = self._validate_total(new_total_seconds)
        self.seconds_left = self.total_seconds
        self._time_up_fired = False
        self.reset_key = reset_key if reset_key is not None else self._next_reset_key()

        if self.running:
            if self.seconds_left > 0:
                self._reschedule()
            else:
                self.running = False

    def stop(self) -> None:
        """예약된 tick을 취소하고 더 이상 진행하지 않는다 (세션 종료용)."""
        self._cancel()
        self.running = False

    def tick(self) -> int:
        """
        1초 감소 (0에서 멈춤).

        진행 중에 0에 도달하면 타이머를 멈추고 시간 종료를 알린다.
        일시정지 상태에서는 값을 바꾸지 않는다.
        """
        if not self.running:
            return self.seconds_left

        if self.seconds_left > 0:
            self.seconds_left -= 1

        if self.seconds_left == 0:
            self._cancel()
            self.running = False
            self._notify_time_up()

        return self.seconds_left

    # ── 내부 ────────────────────────────────────────────────────────────────

    @staticmethod
    def _validate_total(total_seconds: int) -> int:
        if isinstance(total_seconds, bool) or not isinstance(total_seconds, int):
            raise TypeError(f"total_seconds는 정수여야 합니다: {total_seconds!r}")
        if total_seconds < 0:
            raise ValueError(f"total_seconds는 0 이상이어야 합니다: {total_seconds}")
        return total_seconds

    def _next_reset_key(self) -> object:
        if isinstance(self.reset_key, int):
            return self.reset_key + 1
        return object()

    def _cancel(self) -> None:
        self._generation += 1
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _reschedule(self) -> None:
        self._cancel()
        loop = self._loop or asyncio.get_running_loop()
        generation = self._generation
        self._handle = loop.call_later(self.interval, self._on_scheduled_tick, generation)

    def _on_scheduled_tick(self, generation: int) -> None:
        if generation != self._generation:
            # reset/pause 이전에 예약된 tick
            return
        self._handle = None
        self.tick()
        if self.running:
            self._reschedule()

    def _notify_time_up(self) -> None:
        if self._time_up_fired:
            return
        self._time_up_fired = True
        logger.info(f"시험 시간이 종료되었습니다 (제한 {format_time(self.total_seconds)}).")
        for callback in list(self._listeners):
            callback()
