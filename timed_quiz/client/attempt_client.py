"""
client/attempt_client.py

응시 화면 하나의 흐름: 서버에서 응시 정보를 불러와 세션 컨트롤러를 만들고,
답안 저장/이동/제출을 ResilientClient를 통해 서버에 반영한다.
시간 종료 시 컨트롤러가 자동 제출을 한 번 호출한다.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from config import TICK_INTERVAL
from timed_quiz.client.fetch import ResilientClient
from timed_quiz.core.session import QuizSessionController
from timed_quiz.models.result_model import QuizResult

logger = logging.getLogger(__name__)


class AttemptClient:
    def __init__(self, client: ResilientClient, *, interval: float = TICK_INTERVAL):
        self.client = client
        self.interval = interval
        self.attempt_id: Optional[str] = None
        self.session: Optional[QuizSessionController] = None
        self.submit_calls = 0

    async def start(self, quiz_id: Optional[str] = None) -> QuizSessionController:
        """새 응시를 시작(또는 진행 중인 응시를 이어서)하고 타이머를 돌린다."""
        body = {"quiz_id": quiz_id} if quiz_id else {}
        data = self._json(await self.client.post("/api/attempts", json=body))
        return await self.load(data["attempt_id"])

    async def load(self, attempt_id: str) -> QuizSessionController:
        data = self._json(await self.client.get(f"/api/attempts/{attempt_id}"))

        self.attempt_id = attempt_id
        self.session = QuizSessionController(
            data["question_ids"],
            data["remaining_seconds"],
            self._submit_to_server,
            answered_ids=data["answered_ids"],
            interval=self.interval,
        )
        if data["is_submitted"]:
            # 이미 제출된 응시는 결과만 조회 가능
            await self.session.submit()
            return self.session

        if 0 < data["current_index"] < len(data["question_ids"]):
            self.session.navigate(data["current_index"])
        self.session.start()
        logger.info(
            f"응시 불러옴: attempt={attempt_id} 남은 시간 {self.session.formatted_time}, "
            f"답함 {len(data['answered_ids'])}/{data['total_questions']}"
        )
        return self.session

    async def question(self, index: Optional[int] = None) -> Dict[str, Any]:
        session = self._require_session()
        index = session.current_index if index is None else index
        return self._json(await self.client.get(f"/api/attempts/{self.attempt_id}/question/{index}"))

    async def answer(self, question_id: str, answer: Optional[str]) -> None:
        """서버에 답안을 저장한 뒤 네비게이터에 반영. 빈 답은 답안 삭제."""
        session = self._require_session()
        # 잠긴 세션이나 모르는 문제는 서버에 보내기 전에 막는다
        session.ensure_open()
        session.navigation.check_known(question_id)

        self._json(await self.client.post(
            f"/api/attempts/{self.attempt_id}/answer",
            json={"question_id": question_id, "answer": answer},
        ))
        if answer:
            session.record_answer(question_id)
        else:
            session.clear_answer(question_id)

    async def navigate(self, index: int) -> int:
        """서버가 이동을 받아들인 뒤에만 로컬 위치를 바꾼다."""
        session = self._require_session()
        session.ensure_open()
        session.navigation.check_index(index)

        self._json(await self.client.post(
            f"/api/attempts/{self.attempt_id}/navigate", json={"index": index},
        ))
        return session.navigate(index)

    async def submit(self) -> QuizResult:
        return await self._require_session().submit()

    async def result(self) -> Dict[str, Any]:
        return self._json(await self.client.get(f"/api/attempts/{self.attempt_id}/result"))

    # ── 내부 ────────────────────────────────────────────────────────────────

    async def _submit_to_server(self) -> QuizResult:
        self.submit_calls += 1
        data = self._json(await self.client.put(f"/api/attempts/{self.attempt_id}/submit"))
        result = QuizResult.model_validate(data)
        logger.info(f"제출 완료: attempt={self.attempt_id} score={result.score}")
        return result

    def _require_session(self) -> QuizSessionController:
        if self.session is None:
            raise RuntimeError("응시를 먼저 불러와야 합니다 (start/load).")
        return self.session

    @staticmethod
    def _json(response: httpx.Response) -> Dict[str, Any]:
        response.raise_for_status()
        return response.json()
