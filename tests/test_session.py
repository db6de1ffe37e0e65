import asyncio

import pytest

from timed_quiz.core.navigation import SlotState
from timed_quiz.core.session import QuizSessionController, SessionStatus
from timed_quiz.errors import OutOfRange, SessionClosed

IDS = ["q1", "q2", "q3"]
MANUAL = 3600.0


class RecordingSubmitter:
    """제출 호출 횟수를 세는 가짜 제출기."""

    def __init__(self, delay: float = 0.0, error: Exception = None):
        self.calls = 0
        self.delay = delay
        self.error = error

    async def __call__(self):
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return {"score": 100.0, "call": self.calls}


def make_session(total=5, submitter=None, **kwargs):
    submitter = submitter or RecordingSubmitter()
    kwargs.setdefault("interval", MANUAL)
    return QuizSessionController(IDS, total, submitter, **kwargs), submitter


@pytest.mark.asyncio
async def test_start_pause_resume():
    session, _ = make_session()
    assert session.status is SessionStatus.PAUSED

    session.start()
    assert session.status is SessionStatus.ACTIVE
    session.timer.tick()

    session.pause()
    assert session.status is SessionStatus.PAUSED
    session.timer.tick()
    assert session.seconds_left == 4

    session.resume()
    assert session.status is SessionStatus.ACTIVE
    assert session.history == [
        SessionStatus.PAUSED, SessionStatus.ACTIVE, SessionStatus.PAUSED, SessionStatus.ACTIVE,
    ]


@pytest.mark.asyncio
async def test_navigation_and_answers_through_session():
    session, _ = make_session()
    session.start()
    session.record_answer("q1")
    session.record_answer("q1")
    session.navigate(1)

    assert session.answered_ids == {"q1"}
    assert session.current_index == 1
    assert session.slot_states() == [SlotState.ANSWERED, SlotState.CURRENT, SlotState.UNANSWERED]

    with pytest.raises(OutOfRange):
        session.navigate(3)
    assert session.current_index == 1


@pytest.mark.asyncio
async def test_expiry_transitions_and_auto_submits_once():
    session, submitter = make_session(total=2)
    session.start()
    session.timer.tick()
    session.timer.tick()

    assert session.history[-2:] == [SessionStatus.EXPIRED, SessionStatus.SUBMITTED]
    assert session.status is SessionStatus.SUBMITTED
    assert session.auto_submitted
    assert session.submitted_elapsed == 2

    result = await session.submission
    assert result == {"score": 100.0, "call": 1}
    assert submitter.calls == 1


@pytest.mark.asyncio
async def test_manual_submit_racing_expiry_reaches_submitter_once():
    submitter = RecordingSubmitter(delay=0.05)
    session, _ = make_session(total=1, submitter=submitter)
    session.start()

    manual = asyncio.ensure_future(session.submit())
    await asyncio.sleep(0)        # 수동 제출이 먼저 시작됨
    session.timer.tick()          # 같은 순간에 시간 종료
    again = await session.submit()

    assert await manual == again
    assert submitter.calls == 1
    assert not session.auto_submitted


@pytest.mark.asyncio
async def test_expiry_then_manual_submit_returns_same_result():
    submitter = RecordingSubmitter(delay=0.02)
    session, _ = make_session(total=1, submitter=submitter)
    session.start()
    session.timer.tick()

    result = await session.submit()
    assert result["call"] == 1
    assert submitter.calls == 1
    assert session.auto_submitted


@pytest.mark.asyncio
async def test_real_countdown_auto_submits():
    session, submitter = make_session(total=3, interval=0.01)
    session.start()

    await asyncio.sleep(0.2)

    assert session.status is SessionStatus.SUBMITTED
    assert session.seconds_left == 0
    await session.submission
    assert submitter.calls == 1


@pytest.mark.asyncio
async def test_submitted_session_is_closed():
    session, _ = make_session()
    session.start()
    await session.submit()

    for op in (
        lambda: session.navigate(0),
        lambda: session.record_answer("q1"),
        lambda: session.clear_answer("q1"),
        session.pause,
        session.resume,
        session.start,
        lambda: session.reset_timer(10),
    ):
        with pytest.raises(SessionClosed):
            op()

    assert not session.timer.running
    assert not session.timer.has_pending_tick


@pytest.mark.asyncio
async def test_start_with_no_time_left_expires_immediately():
    session, submitter = make_session(total=0)
    session.start()

    assert SessionStatus.EXPIRED in session.history
    assert session.status is SessionStatus.SUBMITTED
    await session.submission
    assert submitter.calls == 1


@pytest.mark.asyncio
async def test_failed_submission_keeps_session_locked():
    submitter = RecordingSubmitter(error=RuntimeError("server down"))
    session, _ = make_session(submitter=submitter)
    session.start()

    with pytest.raises(RuntimeError):
        await session.submit()
    with pytest.raises(RuntimeError):
        await session.submit()

    assert submitter.calls == 1
    assert session.is_locked


@pytest.mark.asyncio
async def test_reset_timer_while_active():
    session, _ = make_session(total=10)
    session.start()
    session.timer.tick()
    session.reset_timer(20)
    assert session.seconds_left == 20
    assert session.formatted_time == "00:20"
    assert session.percentage == 100.0


@pytest.mark.asyncio
async def test_reset_timer_to_zero_while_active_expires_and_submits():
    session, submitter = make_session(total=10)
    session.start()

    session.reset_timer(0)

    assert SessionStatus.EXPIRED in session.history
    assert session.status is SessionStatus.SUBMITTED
    assert session.auto_submitted
    await session.submission
    assert submitter.calls == 1


@pytest.mark.asyncio
async def test_reset_timer_to_zero_while_paused_waits_for_start():
    session, submitter = make_session(total=10)
    session.reset_timer(0)
    assert session.status is SessionStatus.PAUSED

    session.start()
    await session.submission
    assert session.auto_submitted
    assert submitter.calls == 1


@pytest.mark.asyncio
async def test_tone_follows_seconds_left():
    session, _ = make_session(total=40)
    assert session.tone == "normal"
    session.reset_timer(30)
    assert session.tone == "warning"
    session.reset_timer(10)
    assert session.tone == "danger"
