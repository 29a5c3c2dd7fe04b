from abc import ABC, abstractmethod
from typing import List, Optional
from portfolio_backend.database import models


class IPortfolioRepository(ABC):
    @abstractmethod
    def create(self, portfolio_model: models.Portfolio) -> models.Portfolio:
        """새로운 포트폴리오 항목을 데이터베이스에 생성합니다."""
        pass

    @abstractmethod
    def find_by_id(self, portfolio_id: str) -> Optional[models.Portfolio]:
        """고유 ID로 특정 포트폴리오 항목을 조회합니다."""
        pass

    @abstractmethod
    def list_paginated(self, offset: int, limit: int) -> List[models.Portfolio]:
        """포트폴리오 항목 목록을 offset/limit 단위로 조회합니다."""
        pass

    @abstractmethod
    def update(self, portfolio: models.Portfolio, experience_id: Optional[str] = None) -> models.Portfolio:
        """
        변경된 포트폴리오 항목을 저장합니다.

        experience_id가 주어지면 연결된 경력 교체까지 같은 트랜잭션에서 수행하므로,
        어느 한쪽이 실패하면 항목 변경도 함께 rollback됩니다.
        """
        pass

    @abstractmethod
    def set_experience(self, portfolio_id: str, experience_id: str):
        """
        포트폴리오 항목에 연결된 경력을 교체합니다.

        항목당 경력은 최대 하나이므로 기존 연결을 지우고 새 연결을 넣는 작업을
        하나의 트랜잭션으로 수행합니다.
        """
        pass

    @abstractmethod
    def get_experience(self, portfolio_id: str) -> Optional[models.Experience]:
        """포트폴리오 항목에 연결된 경력을 조회합니다. 없으면 None을 반환합니다."""
        pass
