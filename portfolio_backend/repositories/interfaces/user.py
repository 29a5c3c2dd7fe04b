from abc import ABC, abstractmethod
from typing import Optional
from portfolio_backend.database import models


class IUserRepository(ABC):
    @abstractmethod
    def create(self, user_model: models.User) -> models.User:
        """
        새로운 사용자를 데이터베이스에 생성합니다.

        Raises:
            ConflictError: 같은 이메일의 사용자가 이미 저장되어 있을 때.
            PersistenceError: 그 밖의 이유로 저장에 실패했을 때.
        """
        pass

    @abstractmethod
    def find_by_id(self, user_id: str) -> Optional[models.User]:
        """고유 ID로 특정 사용자를 조회합니다."""
        pass

    @abstractmethod
    def find_by_email(self, email: str) -> Optional[models.User]:
        """이메일로 특정 사용자를 조회합니다."""
        pass

    @abstractmethod
    def update_token(self, user: models.User, token: Optional[str]) -> models.User:
        """
        사용자의 현재 토큰을 교체합니다.

        사용자당 유효한 토큰은 하나뿐이므로, 새 토큰을 저장하면
        이전에 발급된 토큰은 더 이상 인증에 사용할 수 없습니다.
        """
        pass

    @abstractmethod
    def delete(self, user: models.User) -> bool:
        """특정 사용자를 데이터베이스에서 삭제합니다."""
        pass
