"""
{success, message, data} 형태의 JSON 응답 봉투(envelope)를 만드는 함수 모음.
모든 함수는 (상태 줄, JSON 문자열) 튜플을 반환합니다.
"""
import json
from typing import Any, Tuple

from portfolio_backend.services.exceptions import ErrorKind

STATUS_BY_KIND = {
    ErrorKind.VALIDATION: "400 Bad Request",
    ErrorKind.AUTH: "401 Unauthorized",
    ErrorKind.NOT_FOUND: "404 Not Found",
    ErrorKind.CONFLICT: "409 Conflict",
    ErrorKind.PERSISTENCE: "500 Internal Server Error",
    ErrorKind.FILE_SYSTEM: "500 Internal Server Error",
}


def _envelope(success: bool, message: str, data: Any = None) -> str:
    return json.dumps({"success": success, "message": message, "data": data})


def success_response(data: Any = None, message: str = "Success") -> Tuple[str, str]:
    return "200 OK", _envelope(True, message, data)


def created_response(data: Any = None, message: str = "Created") -> Tuple[str, str]:
    return "201 Created", _envelope(True, message, data)


def bad_request_response(message: str) -> Tuple[str, str]:
    return STATUS_BY_KIND[ErrorKind.VALIDATION], _envelope(False, message)


def unauthorized_response(message: str) -> Tuple[str, str]:
    return STATUS_BY_KIND[ErrorKind.AUTH], _envelope(False, message)


def not_found_response(message: str) -> Tuple[str, str]:
    return STATUS_BY_KIND[ErrorKind.NOT_FOUND], _envelope(False, message)


def conflict_response(message: str) -> Tuple[str, str]:
    return STATUS_BY_KIND[ErrorKind.CONFLICT], _envelope(False, message)


def internal_server_error_response(message: str = "Internal Server Error") -> Tuple[str, str]:
    return STATUS_BY_KIND[ErrorKind.PERSISTENCE], _envelope(False, message)


def error_response(kind: ErrorKind, message: str) -> Tuple[str, str]:
    """오류 종류에 맞는 상태 줄과 실패 봉투를 만듭니다."""
    constructors = {
        ErrorKind.VALIDATION: bad_request_response,
        ErrorKind.AUTH: unauthorized_response,
        ErrorKind.NOT_FOUND: not_found_response,
        ErrorKind.CONFLICT: conflict_response,
    }
    return constructors.get(kind, internal_server_error_response)(message)
