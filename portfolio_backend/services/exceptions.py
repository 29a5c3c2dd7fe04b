# portfolio_backend/services/exceptions.py
from enum import Enum


class ErrorKind(Enum):
    """오류의 종류. HTTP 계층은 메시지가 아니라 이 값으로 응답 상태를 결정합니다."""
    VALIDATION = "validation"
    AUTH = "auth"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    PERSISTENCE = "persistence"
    FILE_SYSTEM = "file_system"


class ServiceError(Exception):
    """서비스 계층에서 발생하는 모든 예외의 기반 클래스"""
    kind = ErrorKind.PERSISTENCE

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# --- Validation Exceptions ---
class ValidationError(ServiceError):
    """필수 입력값이 없거나 형식이 잘못되었을 때"""
    kind = ErrorKind.VALIDATION


class ConflictError(ServiceError):
    """이미 존재하는 값(예: 이메일)과 충돌할 때"""
    kind = ErrorKind.CONFLICT


# --- Auth Exceptions ---
class AuthError(ServiceError):
    """토큰이 없거나, 유효하지 않거나, 자격 증명이 틀렸을 때"""
    kind = ErrorKind.AUTH


# --- General Exceptions ---
class NotFoundError(ServiceError):
    """요청한 엔티티를 찾을 수 없을 때"""
    kind = ErrorKind.NOT_FOUND


class PersistenceError(ServiceError):
    """DB 작업이나 트랜잭션이 실패했을 때"""
    kind = ErrorKind.PERSISTENCE


class FileSystemError(ServiceError):
    """업로드 이미지의 저장 또는 삭제에 실패했을 때"""
    kind = ErrorKind.FILE_SYSTEM
