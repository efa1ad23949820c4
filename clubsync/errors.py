"""
오류 정의 모듈
==============
CLI가 보고하고 종료 코드 1로 끝내는 예외 계층

    ClubSyncError
    ├── ConfigurationError   필수 환경변수 누락 (I/O 이전에 발생)
    ├── NotFoundError        주기간/시트 없음 (대안 목록 포함)
    ├── ValidationError      주기간 형식 오류, 숫자 파싱 실패
    └── StoreOperationError  Notion / 원장(Sheets, SQL) 호출 실패
        ├── NotionAPIError
        └── LedgerError
"""
from typing import List, Optional


class ClubSyncError(Exception):
    """clubsync 공통 오류"""
    code = "ERROR"

    def __init__(self, message: str, code: Optional[str] = None):
        self.message = message
        if code:
            self.code = code
        super().__init__(message)


class ConfigurationError(ClubSyncError):
    """설정 누락"""
    code = "CONFIGURATION"

    def __init__(self, message: str, missing: Optional[List[str]] = None):
        self.missing = list(missing or [])
        super().__init__(message)


class NotFoundError(ClubSyncError):
    """대상 주기간 또는 시트를 찾을 수 없음"""
    code = "NOT_FOUND"

    def __init__(self, message: str, available: Optional[List[str]] = None):
        self.available = list(available or [])
        super().__init__(message)


class ValidationError(ClubSyncError):
    """입력값 형식 오류"""
    code = "VALIDATION"


class StoreOperationError(ClubSyncError):
    """외부 저장소 호출 실패"""
    code = "STORE_ERROR"

    def __init__(self, code: str, message: str, status_code: int = 0):
        self.status_code = status_code
        super().__init__(f"[{code}] {message}", code=code)


class NotionAPIError(StoreOperationError):
    """Notion API 오류"""


class LedgerError(StoreOperationError):
    """원장(Google Sheets / SQL) 오류"""
