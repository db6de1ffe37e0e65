"""
errors.py

퀴즈 응시 코어의 예외 분류.
UI/API 계층은 이 예외들을 잡아 사용자 메시지나 HTTP 상태로 변환한다.
"""


class QuizError(Exception):
    """퀴즈 코어 예외의 공통 부모."""


class OutOfRange(QuizError, IndexError):
    """문제 인덱스가 [0, total-1] 범위를 벗어남."""

    def __init__(self, index: int, total: int):
        self.index = index
        self.total = total
        super().__init__(f"문제 인덱스 {index}가 범위를 벗어났습니다 (0 ~ {total - 1}).")


class UnknownQuestion(QuizError, KeyError):
    """이번 응시에 포함되지 않은 문제 ID."""

    def __init__(self, question_id: str):
        self.question_id = question_id
        super().__init__(question_id)

    def __str__(self) -> str:
        return f"이번 시험에 없는 문제입니다: {self.question_id}"


class SessionClosed(QuizError):
    """제출(또는 시간 종료)로 잠긴 세션에 대한 조작."""


class AuthExpired(QuizError):
    """토큰 갱신 실패. 호출자는 로그아웃 후 로그인 화면으로 보내야 한다."""

    def __init__(self, status_code: int | None = None):
        self.status_code = status_code
        super().__init__("세션이 만료되었습니다. 다시 로그인해 주세요.")


class AccountNotFound(QuizError):
    """서버에서 학생 계정이 더 이상 존재하지 않음."""

    def __init__(self, message: str = ""):
        self.server_message = message
        super().__init__("계정이 더 이상 존재하지 않습니다. 로그아웃합니다.")
