import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from portfolio_backend.services.exceptions import AuthError

logger = logging.getLogger(__name__)


class TokenService:
    """사용자 ID에 묶인, 서명되고 만료 시간이 있는 세션 토큰(JWT)을 발급하고 검증합니다."""

    def __init__(self, secret_key: str, algorithm: str = "HS256", expires_delta: Optional[timedelta] = None):
        """
        TokenService를 초기화합니다.

        Args:
            secret_key: HMAC 서명에 사용할 서버 비밀 키.
            algorithm: 허용할 유일한 서명 알고리즘. 대칭키(HS*) 방식만 사용할 수 있습니다.
            expires_delta: 토큰 유효 기간. 기본값은 72시간입니다.
        """
        if not algorithm.startswith("HS"):
            raise ValueError(f"Only HMAC signing algorithms are supported, got '{algorithm}'.")
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expires_delta = expires_delta if expires_delta is not None else timedelta(hours=72)

    def issue(self, user_id: str) -> str:
        """
        user_id와 만료 시각(exp)을 클레임으로 담은 토큰을 발급합니다.

        토큰을 저장하지는 않습니다. 호출하는 쪽(로그인 흐름)이 발급된 토큰을
        사용자의 현재 토큰으로 저장해야 인증에 사용할 수 있습니다.
        """
        issued_at = datetime.now(timezone.utc)
        # jti: 같은 초에 여러 번 발급해도 토큰 문자열이 매번 달라지도록
        claims = {
            "user_id": user_id,
            "iat": issued_at,
            "exp": issued_at + self.expires_delta,
            "jti": str(uuid.uuid4()),
        }
        return jwt.encode(claims, self.secret_key, algorithm=self.algorithm)

    def decode(self, token: str) -> str:
        """
        토큰의 서명, 알고리즘, 만료 시각을 검증하고 user_id 클레임을 반환합니다.

        Raises:
            AuthError: 형식이 잘못되었거나, 허용되지 않은 알고리즘이거나,
                서명이 맞지 않거나, 만료되었거나, user_id가 문자열이 아닐 때.
        """
        try:
            claims = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError as e:
            logger.warning("Token verification failed: %s", e)
            raise AuthError("Invalid token") from e

        user_id = claims.get("user_id")
        if not isinstance(user_id, str) or not user_id:
            logger.warning("Token claims do not contain a string user_id")
            raise AuthError("Invalid token claims")
        return user_id
