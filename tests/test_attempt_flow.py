import asyncio

import httpx
import pytest
from httpx import AsyncClient

from api.sample_questions import SAMPLE_QUIZ
import api.session as session
from timed_quiz.client.attempt_client import AttemptClient
from timed_quiz.client.fetch import FetchStage, ResilientClient
from timed_quiz.core.navigation import SlotState
from timed_quiz.core.session import SessionStatus
from timed_quiz.errors import AccountNotFound, AuthExpired, OutOfRange, SessionClosed
from timed_quiz.models.question_model import Option, Question, QuizData

MANUAL = 3600.0


@pytest.fixture
def requests_log(logged_in_client: AsyncClient):
    log = []

    async def _record(request):
        log.append((request.method, request.url.path))

    logged_in_client.event_hooks["request"].append(_record)
    return log


@pytest.mark.asyncio
async def test_expired_access_cookie_is_refreshed_transparently(logged_in_client, requests_log):
    logged_in_client.cookies.delete("accessToken")
    client = ResilientClient(logged_in_client)

    response = await client.get("/api/auth/me")

    assert response.status_code == 200
    assert client.last_stages == [FetchStage.PRIMARY, FetchStage.REFRESH, FetchStage.RETRY]
    assert requests_log == [
        ("GET", "/api/auth/me"),
        ("POST", "/api/auth/refresh"),
        ("GET", "/api/auth/me"),
    ]


@pytest.mark.asyncio
async def test_lost_credentials_raise_auth_expired(logged_in_client, requests_log):
    logged_in_client.cookies.clear()
    client = ResilientClient(logged_in_client)

    with pytest.raises(AuthExpired):
        await client.get("/api/auth/me")
    assert len(requests_log) == 2


@pytest.mark.asyncio
async def test_deleted_account_logs_out(logged_in_client, sample_student):
    session.remove_student(sample_student.id)
    client = ResilientClient(logged_in_client, logout_path="/api/auth/logout")

    with pytest.raises(AccountNotFound):
        await client.get("/api/auth/me")
    assert logged_in_client.cookies.get("accessToken") is None


@pytest.mark.asyncio
async def test_answer_navigate_and_manual_submit(logged_in_client):
    attempt = AttemptClient(ResilientClient(logged_in_client), interval=MANUAL)
    quiz_session = await attempt.start()

    assert quiz_session.status is SessionStatus.ACTIVE
    assert quiz_session.navigation.total_questions == len(SAMPLE_QUIZ.questions)

    question = await attempt.question()
    assert question["id"] == "q1"

    await attempt.answer("q1", "b")
    await attempt.navigate(2)
    await attempt.answer("q3", "c")

    assert quiz_session.slot_states()[:3] == [
        SlotState.ANSWERED, SlotState.UNANSWERED, SlotState.CURRENT,
    ]

    result = await attempt.submit()
    assert result.correct == 2
    assert result.skipped == len(SAMPLE_QUIZ.questions) - 2
    assert attempt.submit_calls == 1

    again = await attempt.submit()
    assert again == result
    assert attempt.submit_calls == 1

    with pytest.raises(SessionClosed):
        await attempt.answer("q2", "false")


@pytest.mark.asyncio
async def test_reload_restores_answers_and_position(logged_in_client):
    first = AttemptClient(ResilientClient(logged_in_client), interval=MANUAL)
    await first.start()
    await first.answer("q2", "false")
    await first.navigate(4)
    first.session.pause()

    second = AttemptClient(ResilientClient(logged_in_client), interval=MANUAL)
    restored = await second.load(first.attempt_id)

    assert restored.answered_ids == {"q2"}
    assert restored.current_index == 4


@pytest.mark.asyncio
async def test_time_up_auto_submits_exactly_once(logged_in_client):
    session.register_quiz(QuizData(
        id="quiz-short",
        title="Short",
        time_limit=30,
        questions=[
            Question(
                id="s1",
                text="1 + 1 = 2?",
                options=[Option(id="true", text="True"), Option(id="false", text="False")],
                correct_answer="true",
            ),
        ],
    ))
    attempt = AttemptClient(ResilientClient(logged_in_client), interval=0.005)
    quiz_session = await attempt.start("quiz-short")
    await attempt.answer("s1", "true")

    while quiz_session.status is not SessionStatus.SUBMITTED:
        await asyncio.sleep(0.01)
    # 자동 제출 직후 수동 제출이 겹쳐도 서버로는 한 번만 나간다
    manual = await attempt.submit()
    auto = await quiz_session.submission

    assert SessionStatus.EXPIRED in quiz_session.history
    assert quiz_session.auto_submitted
    assert manual == auto
    assert auto.correct == 1
    assert attempt.submit_calls == 1


def _stub_attempt_server(navigate_status: int):
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append((request.method, request.url.path))
        if request.url.path == "/api/attempts/a1":
            return httpx.Response(200, json={
                "attempt_id": "a1",
                "question_ids": ["q1", "q2", "q3"],
                "answered_ids": [],
                "remaining_seconds": 60,
                "current_index": 0,
                "total_questions": 3,
                "is_submitted": False,
            })
        if request.url.path == "/api/attempts/a1/navigate":
            return httpx.Response(navigate_status, json={"detail": "Time is up for this attempt"})
        return httpx.Response(404, json={"detail": "Not Found"})

    http = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://test")
    return AttemptClient(ResilientClient(http), interval=MANUAL), calls


@pytest.mark.asyncio
async def test_rejected_navigate_keeps_local_position():
    attempt, _ = _stub_attempt_server(navigate_status=400)
    quiz_session = await attempt.load("a1")

    with pytest.raises(httpx.HTTPStatusError):
        await attempt.navigate(2)

    assert quiz_session.current_index == 0
    assert quiz_session.slot_states()[0] is SlotState.CURRENT
    quiz_session.pause()


@pytest.mark.asyncio
async def test_out_of_range_navigate_is_not_sent():
    attempt, calls = _stub_attempt_server(navigate_status=200)
    quiz_session = await attempt.load("a1")

    with pytest.raises(OutOfRange):
        await attempt.navigate(3)

    assert ("POST", "/api/attempts/a1/navigate") not in calls
    assert quiz_session.current_index == 0

    assert await attempt.navigate(1) == 1
    assert quiz_session.current_index == 1
    quiz_session.pause()
