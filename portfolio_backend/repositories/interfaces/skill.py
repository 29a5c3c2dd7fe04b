from abc import ABC, abstractmethod
from typing import List, Optional
from portfolio_backend.database import models


class ISkillRepository(ABC):
    @abstractmethod
    def create(self, skill_model: models.Skill) -> models.Skill:
        """새로운 기술을 데이터베이스에 생성합니다."""
        pass

    @abstractmethod
    def find_by_id(self, skill_id: str) -> Optional[models.Skill]:
        """고유 ID로 특정 기술을 조회합니다."""
        pass

    @abstractmethod
    def list_paginated(self, offset: int, limit: int) -> List[models.Skill]:
        """기술 목록을 offset/limit 단위로 조회합니다."""
        pass

    @abstractmethod
    def update(self, skill: models.Skill) -> models.Skill:
        """변경된 기술 정보를 저장합니다."""
        pass

    @abstractmethod
    def delete_with_relations(self, skill: models.Skill) -> bool:
        """
        기술과 이를 참조하는 모든 연관 행(portfolio_skills, experience_skills)을
        하나의 트랜잭션 안에서 함께 삭제합니다.
        """
        pass
