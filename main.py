"""
main.py — 퀴즈 응시 서버 진입점
"""

import os
import socket
import sys
import time
import logging
import traceback

from config import BASE_DIR, LOG_FILE, DEFAULT_HOST, DEFAULT_PORT

# ── 로깅 설정 ────────────────────────────────────────────────────────────────
try:
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        handlers=[
            logging.FileHandler(LOG_FILE, encoding='utf-8'),
            logging.StreamHandler(sys.stdout)
        ]
    )
except PermissionError:
    # 로그 파일 점유 시 콘솔 출력만 사용
    logging.basicConfig(level=logging.INFO)

logger = logging.getLogger(__name__)

# ── 서버 및 네트워크 유틸 ───────────────────────────────────────────────────

def _port_available(port: int) -> bool:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        try:
            s.bind((DEFAULT_HOST, port))
        except OSError:
            return False
        return True


def _find_free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind((DEFAULT_HOST, 0))
        return s.getsockname()[1]


def _start_server(port: int) -> None:
    import uvicorn
    from api.app import create_app
    logger.info(f"Uvicorn 서버 시작 - http://{DEFAULT_HOST}:{port}")
    app = create_app()
    uvicorn.run(app, host=DEFAULT_HOST, port=port, log_level="info")

# ── 메인 실행 ────────────────────────────────────────────────────────────────

if __name__ == "__main__":
    logger.info("=== Timed Quiz Server Started ===")
    os.chdir(BASE_DIR)

    port = DEFAULT_PORT
    if not _port_available(port):
        port = _find_free_port()
        logger.warning(f"포트 {DEFAULT_PORT} 사용 중 → {port} 사용")

    started = time.time()
    try:
        _start_server(port)
    except KeyboardInterrupt:
        logger.info("사용자에 의해 종료되었습니다.")
    except Exception:
        logger.error(f"서버 오류 발생:\n{traceback.format_exc()}")
        sys.exit(1)
    finally:
        logger.info(f"서버 종료 (가동 {int(time.time() - started)}초)")
