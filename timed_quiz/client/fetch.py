"""
client/fetch.py

인증 쿠키를 자동으로 싣고, 401을 받으면 토큰을 한 번만 갱신한 뒤 재시도하는
HTTP 클라이언트.

요청 단계:
  PRIMARY  원래 요청
  REFRESH  PRIMARY가 401일 때만, 갱신 엔드포인트에 POST 1회
  RETRY    REFRESH가 성공했을 때만, 원래 요청 1회 재전송 (결과가 무엇이든 최종)

쿠키(자격 증명)는 httpx.AsyncClient의 쿠키 저장소가 들고 있으며, 이 클라이언트는
쿠키를 직접 고치지 않는다. 갱신/로그아웃 엔드포인트의 응답이 쿠키를 바꾼다.
"""

import logging
from enum import Enum
from typing import Any, List, Optional

import httpx

from config import REFRESH_PATH
from timed_quiz.errors import AccountNotFound, AuthExpired

logger = logging.getLogger(__name__)

_ACCOUNT_GONE_MARKERS = (
    "student not found",
    "student does not exist",
    "account not found",
    "user not found",
)


class FetchStage(str, Enum):
    PRIMARY = "primary"
    REFRESH = "refresh"
    RETRY = "retry"


class ResilientClient:
    """
    Args:
        http:          쿠키 저장소를 가진 httpx.AsyncClient (소유권은 호출자).
        refresh_path:  토큰 갱신 엔드포인트.
        logout_path:   인증 실패 시 호출할 로그아웃 엔드포인트 (예: "/api/auth/logout").
                       기본값 None이면 호출하지 않는다.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        refresh_path: str = REFRESH_PATH,
        logout_path: Optional[str] = None,
    ):
        self.http = http
        self.refresh_path = refresh_path
        self.logout_path = logout_path
        self.last_stages: List[FetchStage] = []

    async def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """
        요청을 보내고 최종 응답을 반환한다.

        Raises:
            AuthExpired:     토큰 갱신 실패.
            AccountNotFound: 서버에서 학생 계정을 찾을 수 없음.
            httpx.HTTPError: 전송 오류는 가공하지 않고 그대로 전달.
        """
        self.last_stages = []

        response = await self._send(FetchStage.PRIMARY, method, url, **kwargs)

        if response.status_code == 404 and self._is_account_gone(response):
            logger.warning(f"계정을 찾을 수 없어 로그아웃합니다: {method} {url}")
            await self._logout()
            raise AccountNotFound(self._message_of(response))

        if response.status_code != 401:
            return response

        refresh = await self._send(FetchStage.REFRESH, "POST", self.refresh_path)
        if not refresh.is_success:
            logger.warning(f"토큰 갱신 실패 (HTTP {refresh.status_code}) → 세션 만료 처리")
            await self._logout()
            raise AuthExpired(refresh.status_code)

        logger.info(f"토큰 갱신 완료, 요청 재시도: {method} {url}")
        return await self._send(FetchStage.RETRY, method, url, **kwargs)

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("POST", url, **kwargs)

    async def put(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("PUT", url, **kwargs)

    # ── 내부 ────────────────────────────────────────────────────────────────

    async def _send(self, stage: FetchStage, method: str, url: str, **kwargs: Any) -> httpx.Response:
        self.last_stages.append(stage)
        return await self.http.request(method, url, **kwargs)

    async def _logout(self) -> None:
        if not self.logout_path:
            return
        try:
            await self.http.post(self.logout_path)
        except httpx.HTTPError as e:
            # 원래 오류(AuthExpired 등)를 가리지 않도록 로그만 남긴다
            logger.warning(f"로그아웃 요청 실패: {e!r}")

    @staticmethod
    def _message_of(response: httpx.Response) -> str:
        try:
            data = response.json()
        except ValueError:
            return ""
        if not isinstance(data, dict):
            return ""
        for key in ("message", "error", "detail"):
            value = data.get(key)
            if isinstance(value, str) and value:
                return value
        return ""

    @classmethod
    def _is_account_gone(cls, response: httpx.Response) -> bool:
        message = cls._message_of(response).lower()
        return any(marker in message for marker in _ACCOUNT_GONE_MARKERS)
