from typing import List, Sequence, Tuple
from sqlalchemy.orm import Session
from portfolio_backend.database import models
from portfolio_backend.database.database import transaction
from portfolio_backend.repositories.interfaces import ISkillRelationRepository
from portfolio_backend.services.exceptions import PersistenceError


class SqlalchemySkillRelationRepository(ISkillRelationRepository):
    """
    연관 테이블 하나를 대상으로 기술 연결을 관리하는 공통 구현입니다.
    하위 클래스는 연관 모델, 상위 모델, 상위 ID 컬럼 이름만 지정합니다.
    """
    junction_model = None
    parent_model = None
    parent_column = ""
    # 상위 엔티티를 참조하는 그 밖의 연관 테이블: (모델, 컬럼 이름)
    extra_junctions: Tuple = ()

    def __init__(self, db_session: Session):
        self.db = db_session

    @property
    def _parent_name(self) -> str:
        return self.parent_model.__tablename__

    def _junction_parent(self):
        return getattr(self.junction_model, self.parent_column)

    def link_skills(self, parent_id: str, skill_ids: Sequence[str]):
        with transaction(self.db, f"link skills to {self._parent_name} '{parent_id}'"):
            for skill_id in skill_ids:
                if not self.db.query(models.Skill).filter(models.Skill.id == skill_id).first():
                    raise PersistenceError(f"Skill '{skill_id}' does not exist.")
                self.db.add(self.junction_model(**{self.parent_column: parent_id, "skill_id": skill_id}))
                self.db.flush()

    def unlink_skill(self, parent_id: str, skill_id: str):
        with transaction(self.db, f"unlink skill '{skill_id}' from {self._parent_name} '{parent_id}'"):
            self.db.query(self.junction_model).filter(
                self._junction_parent() == parent_id,
                self.junction_model.skill_id == skill_id,
            ).delete()

    def list_skills(self, parent_id: str) -> List[models.Skill]:
        return (
            self.db.query(models.Skill)
            .join(self.junction_model, self.junction_model.skill_id == models.Skill.id)
            .filter(self._junction_parent() == parent_id)
            .order_by(models.Skill.name.asc())
            .all()
        )

    def cascade_delete_parent(self, parent_id: str):
        with transaction(self.db, f"delete {self._parent_name} '{parent_id}' and its relations"):
            self._delete_links(parent_id)
            self._delete_parent_row(parent_id)

    def _delete_links(self, parent_id: str):
        self.db.query(self.junction_model).filter(self._junction_parent() == parent_id).delete()
        for model, column in self.extra_junctions:
            self.db.query(model).filter(getattr(model, column) == parent_id).delete()

    def _delete_parent_row(self, parent_id: str):
        self.db.query(self.parent_model).filter(self.parent_model.id == parent_id).delete()


class SqlalchemyPortfolioSkillRepository(SqlalchemySkillRelationRepository):
    junction_model = models.PortfolioSkill
    parent_model = models.Portfolio
    parent_column = "portfolio_id"
    extra_junctions = ((models.PortfolioExperience, "portfolio_id"),)


class SqlalchemyExperienceSkillRepository(SqlalchemySkillRelationRepository):
    junction_model = models.ExperienceSkill
    parent_model = models.Experience
    parent_column = "experience_id"
    extra_junctions = ((models.PortfolioExperience, "experience_id"),)
