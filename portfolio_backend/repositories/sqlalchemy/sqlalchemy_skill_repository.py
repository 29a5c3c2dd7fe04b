from typing import List, Optional
from sqlalchemy.orm import Session
from portfolio_backend.database import models
from portfolio_backend.database.database import transaction
from portfolio_backend.repositories.interfaces import ISkillRepository


class SqlalchemySkillRepository(ISkillRepository):
    def __init__(self, db_session: Session):
        self.db = db_session

    def create(self, skill_model: models.Skill) -> models.Skill:
        with transaction(self.db, "insert skill"):
            self.db.add(skill_model)
        self.db.refresh(skill_model)
        return skill_model

    def find_by_id(self, skill_id: str) -> Optional[models.Skill]:
        return self.db.query(models.Skill).filter(models.Skill.id == skill_id).first()

    def list_paginated(self, offset: int, limit: int) -> List[models.Skill]:
        return (
            self.db.query(models.Skill)
            .order_by(models.Skill.name.asc(), models.Skill.id.asc())
            .offset(offset)
            .limit(limit)
            .all()
        )

    def update(self, skill: models.Skill) -> models.Skill:
        with transaction(self.db, "update skill"):
            self.db.add(skill)
        self.db.refresh(skill)
        return skill

    def delete_with_relations(self, skill: models.Skill) -> bool:
        if not skill:
            return False
        skill_id = skill.id
        with transaction(self.db, f"delete skill '{skill_id}'"):
            self.db.query(models.PortfolioSkill).filter(models.PortfolioSkill.skill_id == skill_id).delete()
            self.db.query(models.ExperienceSkill).filter(models.ExperienceSkill.skill_id == skill_id).delete()
            self.db.delete(skill)
        return True
