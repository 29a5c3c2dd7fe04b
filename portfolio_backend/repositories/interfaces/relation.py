from abc import ABC, abstractmethod
from typing import List, Sequence
from portfolio_backend.database import models


class ISkillRelationRepository(ABC):
    """
    상위 엔티티(포트폴리오 항목 또는 경력)와 기술 사이의 연결을 관리합니다.

    여러 행을 변경하는 작업은 모두 하나의 트랜잭션으로 수행되며,
    도중에 실패하면 전체가 rollback되고 PersistenceError가 발생합니다.
    """

    @abstractmethod
    def link_skills(self, parent_id: str, skill_ids: Sequence[str]):
        """
        주어진 순서대로 기술 ID마다 연관 행을 하나씩 추가합니다.

        중복 연결, 존재하지 않는 기술 ID 등으로 한 건이라도 실패하면
        이번 요청의 연결은 하나도 남지 않습니다.
        """
        pass

    @abstractmethod
    def unlink_skill(self, parent_id: str, skill_id: str):
        """
        하나의 연관 행을 삭제합니다.
        삭제할 행이 없어도 오류가 아니며, 여러 번 호출해도 안전합니다.
        """
        pass

    @abstractmethod
    def list_skills(self, parent_id: str) -> List[models.Skill]:
        """상위 엔티티에 연결된 기술 목록을 조회합니다."""
        pass

    @abstractmethod
    def cascade_delete_parent(self, parent_id: str):
        """
        상위 엔티티를 참조하는 모든 연관 행을 지운 뒤 상위 엔티티 자체를 삭제합니다.
        모든 단계가 하나의 트랜잭션 안에서 수행됩니다.
        """
        pass
