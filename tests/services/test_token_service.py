# tests/services/test_token_service.py
import base64
import json
from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from portfolio_backend.services.token_service import TokenService
from portfolio_backend.services.exceptions import AuthError

SECRET = "test-secret"


def _b64(data: dict) -> str:
    raw = json.dumps(data).encode("utf-8")
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _future_exp() -> int:
    return int((datetime.now(timezone.utc) + timedelta(hours=1)).timestamp())


@pytest.fixture
def token_service() -> TokenService:
    return TokenService(SECRET)


class TestIssueAndDecode:
    def test_decode_returns_issued_user_id(self, token_service: TokenService):
        """발급한 토큰을 바로 검증하면 같은 사용자 ID가 나와야 합니다."""
        token = token_service.issue("user-1")

        assert token_service.decode(token) == "user-1"

    def test_issued_token_expires_after_72_hours(self, token_service: TokenService):
        token = token_service.issue("user-1")

        claims = jwt.get_unverified_claims(token)
        expected = datetime.now(timezone.utc) + timedelta(hours=72)
        assert abs(claims["exp"] - expected.timestamp()) < 60
        assert jwt.get_unverified_header(token)["alg"] == "HS256"

    def test_tokens_issued_back_to_back_differ(self, token_service: TokenService):
        """같은 사용자에게 연달아 발급한 토큰도 서로 달라야 합니다."""
        first = token_service.issue("user-1")
        second = token_service.issue("user-1")

        assert first != second
        assert jwt.get_unverified_claims(first)["jti"] != jwt.get_unverified_claims(second)["jti"]
        assert token_service.decode(second) == "user-1"

    def test_expired_token_is_rejected(self):
        expired_service = TokenService(SECRET, expires_delta=timedelta(seconds=-30))
        token = expired_service.issue("user-1")

        with pytest.raises(AuthError):
            expired_service.decode(token)

    def test_token_signed_with_other_secret_is_rejected(self, token_service: TokenService):
        token = TokenService("another-secret").issue("user-1")

        with pytest.raises(AuthError):
            token_service.decode(token)


class TestRejectsMalformedTokens:
    @pytest.mark.parametrize("token", ["", "not-a-token", "a.b", "a.b.c"])
    def test_garbage_is_rejected(self, token_service: TokenService, token: str):
        with pytest.raises(AuthError):
            token_service.decode(token)

    def test_unsigned_none_algorithm_is_rejected(self, token_service: TokenService):
        """서명 없는('none') 토큰은 형식이 맞아도 거부되어야 합니다."""
        token = _b64({"alg": "none", "typ": "JWT"}) + "." + _b64({"user_id": "user-1", "exp": _future_exp()}) + "."

        with pytest.raises(AuthError):
            token_service.decode(token)

    def test_other_hmac_algorithm_is_rejected(self, token_service: TokenService):
        token = jwt.encode({"user_id": "user-1", "exp": _future_exp()}, SECRET, algorithm="HS512")

        with pytest.raises(AuthError):
            token_service.decode(token)

    def test_non_string_user_id_claim_is_rejected(self, token_service: TokenService):
        token = jwt.encode({"user_id": 42, "exp": _future_exp()}, SECRET, algorithm="HS256")

        with pytest.raises(AuthError, match="Invalid token claims"):
            token_service.decode(token)

    def test_missing_user_id_claim_is_rejected(self, token_service: TokenService):
        token = jwt.encode({"sub": "user-1", "exp": _future_exp()}, SECRET, algorithm="HS256")

        with pytest.raises(AuthError):
            token_service.decode(token)


def test_asymmetric_algorithm_cannot_be_configured():
    with pytest.raises(ValueError):
        TokenService(SECRET, algorithm="RS256")
