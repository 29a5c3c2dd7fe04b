import logging
import uuid
from typing import Any, Dict, Optional

import bcrypt

from portfolio_backend.database import models
from portfolio_backend.repositories.interfaces import IUserRepository
from portfolio_backend.services.image_service import ImageService
from portfolio_backend.services.schemas import ImageUpload, require
from portfolio_backend.services.token_service import TokenService
from portfolio_backend.services.exceptions import (
    AuthError, ConflictError, NotFoundError, ServiceError, ValidationError
)
from portfolio_backend.utils.serializers import user_to_dict

logger = logging.getLogger(__name__)

BEARER_SCHEME = "Bearer"
USER_IMAGE_FOLDER = "users"


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # 저장된 값이 bcrypt 해시 형식이 아님
        return False


def parse_bearer_token(authorization_header: Optional[str]) -> str:
    """
    'Authorization: Bearer <token>' 헤더에서 토큰 문자열을 꺼냅니다.

    헤더 없음, 형식 오류(Bearer가 아닌 스킴), 빈 토큰 값은 서로 다른 메시지의
    AuthError로 구분되며, 토큰 서명 검증 전에 확인됩니다.
    스킴과 토큰 사이는 정확히 공백 한 칸이어야 하고, 앞뒤 공백은 허용하지 않습니다.
    """
    if not authorization_header or not authorization_header.strip():
        raise AuthError("Authorization header not provided")

    scheme, _, token = authorization_header.partition(" ")
    if scheme != BEARER_SCHEME:
        raise AuthError("Invalid Authorization token format")

    if not token.strip():
        raise AuthError("Token not provided")
    if " " in token:
        raise AuthError("Invalid Authorization token format")
    return token


class IdentityService:
    """사용자 등록, 로그인, 토큰 검증 등 인증과 계정 관리 기능을 제공합니다."""

    def __init__(self, user_repo: IUserRepository, token_service: TokenService, image_service: ImageService):
        """
        IdentityService를 초기화합니다.

        Args:
            user_repo: 사용자 정보와 현재 토큰을 저장하는 리포지토리.
            token_service: 토큰 발급과 서명 검증을 담당하는 서비스.
            image_service: 프로필 이미지 저장/삭제를 담당하는 서비스.
        """
        self.user_repo = user_repo
        self.token_service = token_service
        self.image_service = image_service

    def register(self, name: str, email: str, password: str, image: Optional[ImageUpload] = None) -> Dict[str, Any]:
        """
        새로운 사용자를 등록합니다. 비밀번호는 bcrypt로 해시하여 저장합니다.

        Raises:
            ValidationError: 이름, 이메일, 비밀번호 중 하나가 비어 있을 때.
            ConflictError: 같은 이메일로 등록된 사용자가 이미 있을 때.
        """
        require({"name": name, "email": email, "password": password}, "name", "email", "password")

        if self.user_repo.find_by_email(email):
            logger.info("Email already registered: %s", email)
            raise ConflictError("Email already registered")

        image_name = None
        if image is not None:
            image_name = self.image_service.save(USER_IMAGE_FOLDER, image.filename, image.stream)

        new_user = models.User(
            id=str(uuid.uuid4()),
            name=name,
            email=email,
            password=hash_password(password),
            image=image_name,
        )
        try:
            created_user = self.user_repo.create(new_user)
        except ServiceError:
            # DB 저장에 실패하면 방금 저장한 이미지를 정리합니다.
            if image_name:
                self.image_service.delete(USER_IMAGE_FOLDER, image_name)
            raise

        logger.info("Created user %s", created_user.id)
        return user_to_dict(created_user)

    def login(self, email: str, password: str) -> Dict[str, Any]:
        """
        자격 증명을 검증하고, 성공 시 새 토큰을 발급해 사용자의 현재 토큰으로 저장합니다.

        새 토큰이 저장되는 순간 이전에 발급된 토큰은 모두 무효가 됩니다.
        존재하지 않는 이메일과 틀린 비밀번호는 같은 오류로 응답하여
        어떤 이메일이 등록되어 있는지 드러내지 않습니다.

        Raises:
            ValidationError: 이메일이나 비밀번호가 비어 있을 때.
            AuthError: 이메일 또는 비밀번호가 일치하지 않을 때.
        """
        if not email or not password:
            raise ValidationError("Email and password are required")

        user = self.user_repo.find_by_email(email)
        if not user:
            logger.info("Login failed: unknown email")
            raise AuthError("Invalid email or password")

        if not verify_password(password, user.password):
            logger.info("Login failed: password mismatch for user %s", user.id)
            raise AuthError("Invalid email or password")

        token = self.token_service.issue(user.id)
        user = self.user_repo.update_token(user, token)
        logger.info("User %s logged in", user.id)
        return user_to_dict(user, include_token=True)

    def validate_token(self, token: str) -> str:
        """
        토큰을 검증하고 토큰에 담긴 사용자 ID를 반환합니다.

        서명과 만료 검증을 통과하더라도, 해당 사용자의 현재 토큰으로 저장된 값과
        정확히 일치하지 않으면 거부합니다. 저장소는 읽기만 합니다.

        Raises:
            AuthError: 토큰이 유효하지 않거나, 사용자가 없거나, 저장된 토큰과 다를 때.
        """
        user_id = self.token_service.decode(token)

        user = self.user_repo.find_by_id(user_id)
        if not user:
            logger.warning("Token refers to unknown user %s", user_id)
            raise AuthError("Invalid token")

        if user.token is None or user.token != token:
            logger.warning("Token mismatch for user %s", user_id)
            raise AuthError("Token mismatch")

        return user_id

    def authorize(self, authorization_header: Optional[str]) -> str:
        """Authorization 헤더를 해석하고 검증하여 요청한 사용자의 ID를 반환합니다."""
        return self.validate_token(parse_bearer_token(authorization_header))

    def get_user(self, user_id: str) -> Dict[str, Any]:
        """
        ID로 사용자 프로필을 조회합니다. (비밀번호, 토큰 제외)

        Raises:
            NotFoundError: 해당 ID의 사용자를 찾을 수 없을 때.
        """
        user = self.user_repo.find_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user_to_dict(user)

    def delete_user(self, user_id: str) -> bool:
        """
        사용자를 삭제하고 프로필 이미지 파일도 함께 지웁니다.

        Raises:
            ValidationError: 삭제할 사용자 ID가 비어 있을 때.
            NotFoundError: 해당 ID의 사용자를 찾을 수 없을 때.
            FileSystemError: 이미지 파일 삭제에 실패했을 때.
        """
        if not user_id:
            raise ValidationError("User ID to delete is required")

        user = self.user_repo.find_by_id(user_id)
        if not user:
            raise NotFoundError(f"User with id '{user_id}' not found.")

        image_name = user.image
        self.user_repo.delete(user)
        logger.info("Deleted user %s", user_id)

        if image_name:
            self.image_service.delete(USER_IMAGE_FOLDER, image_name)
        return True
