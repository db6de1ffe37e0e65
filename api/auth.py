"""
api/auth.py — JWT 쿠키 인증

로그인 시 accessToken(짧은 수명)과 refreshToken(긴 수명)을 httponly 쿠키로 발급한다.
갱신 엔드포인트는 리프레시 토큰을 검증하고 두 토큰을 모두 새로 발급한다 (회전).
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from jose import JWTError, jwt
from pydantic import BaseModel, Field

import config
import api.session as session

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth")


class LoginBody(BaseModel):
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=8)


# ── 비밀번호 ─────────────────────────────────────────────────────────────────

def hash_password(password: str) -> str:
    # bcrypt는 72바이트까지만 사용
    password_bytes = password.encode("utf-8")[:72]
    return bcrypt.hashpw(password_bytes, bcrypt.gensalt(rounds=config.BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    return bcrypt.checkpw(password.encode("utf-8")[:72], password_hash.encode("utf-8"))


# ── 토큰 ─────────────────────────────────────────────────────────────────────

def _encode(student_id: str, token_type: str, ttl_seconds: int, secret: str) -> tuple[str, str]:
    jti = uuid.uuid4().hex
    payload = {
        "sub": student_id,
        "role": "student",
        "type": token_type,
        "jti": jti,
        "exp": datetime.now(timezone.utc) + timedelta(seconds=ttl_seconds),
    }
    return jwt.encode(payload, secret, algorithm=config.JWT_ALGORITHM), jti


def create_access_token(student_id: str, ttl_seconds: Optional[int] = None) -> str:
    ttl = config.ACCESS_TOKEN_TTL if ttl_seconds is None else ttl_seconds
    token, _ = _encode(student_id, "access", ttl, config.ACCESS_TOKEN_SECRET)
    return token


def create_refresh_token(student_id: str) -> str:
    token, jti = _encode(student_id, "refresh", config.REFRESH_TOKEN_TTL, config.REFRESH_TOKEN_SECRET)
    session.remember_refresh_token(jti, student_id)
    return token


def decode_token(token: str, token_type: str) -> Optional[Dict[str, Any]]:
    """토큰이 유효하면 payload, 아니면 None."""
    secret = config.ACCESS_TOKEN_SECRET if token_type == "access" else config.REFRESH_TOKEN_SECRET
    try:
        payload = jwt.decode(token, secret, algorithms=[config.JWT_ALGORITHM])
    except JWTError:
        return None
    if payload.get("type") != token_type or not payload.get("sub"):
        return None
    return payload


def _set_auth_cookies(response: Response, student_id: str) -> None:
    response.set_cookie(
        key=config.ACCESS_COOKIE,
        value=create_access_token(student_id),
        httponly=True,
        secure=config.COOKIE_SECURE,
        samesite="lax",
        max_age=config.ACCESS_TOKEN_TTL,
    )
    response.set_cookie(
        key=config.REFRESH_COOKIE,
        value=create_refresh_token(student_id),
        httponly=True,
        secure=config.COOKIE_SECURE,
        samesite="lax",
        max_age=config.REFRESH_TOKEN_TTL,
    )


def _clear_auth_cookies(response: Response) -> None:
    response.delete_cookie(config.ACCESS_COOKIE)
    response.delete_cookie(config.REFRESH_COOKIE)


# ── 의존성 ───────────────────────────────────────────────────────────────────

def require_student(request: Request) -> str:
    """
    인증 미들웨어가 넣어 둔 학생 ID를 꺼낸다.

    토큰이 없거나 만료되면 401, 토큰은 유효하지만 계정이 삭제되었으면 404.
    """
    student_id = getattr(request.state, "student_id", None)
    if not student_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")
    if session.get_student(student_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found")
    return student_id


# ── 엔드포인트 ───────────────────────────────────────────────────────────────

@router.post("/login")
async def login(body: LoginBody, response: Response):
    student = session.find_student_by_email(body.email)
    if student is None or not verify_password(body.password, student.password_hash):
        logger.info(f"로그인 실패: {body.email}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    _set_auth_cookies(response, student.id)
    logger.info(f"로그인 성공: {student.email}")
    return {"ok": True, "student": {"id": student.id, "email": student.email, "name": student.name}}


@router.post("/refresh")
async def refresh(request: Request, response: Response):
    token = request.cookies.get(config.REFRESH_COOKIE)
    payload = decode_token(token, "refresh") if token else None
    if payload is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired refresh token")

    # 폐기와 확인을 한 번에: 이미 회전되었거나 로그아웃된 토큰은 owner가 None
    owner = session.revoke_refresh_token(payload.get("jti", ""))
    if owner is None or owner != payload["sub"] or session.get_student(owner) is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Refresh token revoked")

    _set_auth_cookies(response, owner)
    logger.info(f"토큰 갱신: student={owner}")
    return {"ok": True}


@router.post("/logout")
async def logout(request: Request, response: Response):
    token = request.cookies.get(config.REFRESH_COOKIE)
    payload = decode_token(token, "refresh") if token else None
    if payload is not None:
        session.revoke_refresh_token(payload.get("jti", ""))
    _clear_auth_cookies(response)
    return {"ok": True}


@router.get("/me")
async def me(student_id: str = Depends(require_student)):
    student = session.get_student(student_id)
    return {"id": student.id, "email": student.email, "name": student.name}
