"""
api/app.py — FastAPI 앱 인스턴스 + 인증 쿠키 미들웨어 + 기본 데이터 시드
"""

import logging
import threading
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

import config
from api.auth import decode_token, hash_password, router as auth_router
from api.routes import router
from api.sample_questions import (
    SAMPLE_QUIZ, SAMPLE_STUDENT_EMAIL, SAMPLE_STUDENT_NAME, SAMPLE_STUDENT_PASSWORD,
)
import api.session as session

logger = logging.getLogger(__name__)


def seed_defaults() -> None:
    """샘플 퀴즈와 기본 학생 계정을 등록 (이미 있으면 건너뜀)."""
    if session.get_quiz(SAMPLE_QUIZ.id) is None:
        session.register_quiz(SAMPLE_QUIZ)
    if session.find_student_by_email(SAMPLE_STUDENT_EMAIL) is None:
        session.add_student(session.Student(
            email=SAMPLE_STUDENT_EMAIL,
            name=SAMPLE_STUDENT_NAME,
            password_hash=hash_password(SAMPLE_STUDENT_PASSWORD),
        ))
        logger.info(f"기본 학생 계정 생성: {SAMPLE_STUDENT_EMAIL}")


def create_app(start_cleanup: bool = True) -> FastAPI:
    app = FastAPI(title="Timed Quiz", docs_url=None, redoc_url=None)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # 인증 미들웨어: accessToken 쿠키를 검증해 학생 ID를 request.state에 넣는다.
    # 거절 여부는 각 엔드포인트의 require_student 의존성이 판단.
    @app.middleware("http")
    async def auth_middleware(request: Request, call_next):
        token = request.cookies.get(config.ACCESS_COOKIE)
        payload = decode_token(token, "access") if token else None
        request.state.student_id = payload["sub"] if payload else None
        return await call_next(request)

    app.include_router(auth_router)
    app.include_router(router)

    seed_defaults()

    # 종료된 응시 기록 주기적 정리 (5분마다)
    def _cleanup_loop():
        while True:
            time.sleep(300)
            removed = session.cleanup_expired()
            if removed:
                logger.info(f"종료된 응시 기록 {removed}개 정리")

    if start_cleanup:
        t = threading.Thread(target=_cleanup_loop, daemon=True)
        t.start()

    return app
