import os

# 기본 디렉토리 설정
BASE_DIR = os.path.dirname(os.path.abspath(__file__))

# 경로 설정
LOG_FILE = os.path.join(BASE_DIR, "launch.log")

# 서버 설정
DEFAULT_HOST = os.getenv("HOST", "127.0.0.1")
DEFAULT_PORT = int(os.getenv("PORT", "8000"))

# 타이머 설정
TICK_INTERVAL = float(os.getenv("TICK_INTERVAL", "1.0"))  # 초 단위 틱 간격
TIMER_WARNING_SECONDS = 30
TIMER_DANGER_SECONDS = 10

# 인증(JWT) 설정
ACCESS_TOKEN_SECRET = os.getenv("ACCESS_TOKEN_SECRET", "this_is_default_secret_access")
REFRESH_TOKEN_SECRET = os.getenv("REFRESH_TOKEN_SECRET", "this_is_default_secret_refresh")
JWT_ALGORITHM = "HS256"
ACCESS_TOKEN_TTL = int(os.getenv("ACCESS_TOKEN_TTL", "900"))        # 15분
REFRESH_TOKEN_TTL = int(os.getenv("REFRESH_TOKEN_TTL", "604800"))   # 7일
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "10"))

# 쿠키 설정
ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"
COOKIE_SECURE = os.getenv("COOKIE_SECURE", "false").lower() == "true"

# 클라이언트 엔드포인트
REFRESH_PATH = "/api/auth/refresh"

# 시험 설정
ATTEMPT_TTL = 3600 * 6      # 응시 기록 보관 시간 (6시간)
PASS_SCORE = 60.0
