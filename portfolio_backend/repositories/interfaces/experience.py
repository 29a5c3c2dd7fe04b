from abc import ABC, abstractmethod
from typing import List, Optional
from portfolio_backend.database import models


class IExperienceRepository(ABC):
    @abstractmethod
    def create(self, experience_model: models.Experience) -> models.Experience:
        """새로운 경력을 데이터베이스에 생성합니다."""
        pass

    @abstractmethod
    def find_by_id(self, experience_id: str) -> Optional[models.Experience]:
        """고유 ID로 특정 경력을 조회합니다."""
        pass

    @abstractmethod
    def list_paginated(self, offset: int, limit: int) -> List[models.Experience]:
        """경력 목록을 offset/limit 단위로 조회합니다."""
        pass

    @abstractmethod
    def update(self, experience: models.Experience) -> models.Experience:
        """변경된 경력 정보를 저장합니다."""
        pass
