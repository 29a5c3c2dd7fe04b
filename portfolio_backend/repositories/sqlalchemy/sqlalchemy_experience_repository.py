from typing import List, Optional
from sqlalchemy.orm import Session
from portfolio_backend.database import models
from portfolio_backend.database.database import transaction
from portfolio_backend.repositories.interfaces import IExperienceRepository


class SqlalchemyExperienceRepository(IExperienceRepository):
    def __init__(self, db_session: Session):
        self.db = db_session

    def create(self, experience_model: models.Experience) -> models.Experience:
        with transaction(self.db, "insert experience"):
            self.db.add(experience_model)
        self.db.refresh(experience_model)
        return experience_model

    def find_by_id(self, experience_id: str) -> Optional[models.Experience]:
        return self.db.query(models.Experience).filter(models.Experience.id == experience_id).first()

    def list_paginated(self, offset: int, limit: int) -> List[models.Experience]:
        return (
            self.db.query(models.Experience)
            .order_by(models.Experience.start_date.desc(), models.Experience.id.asc())
            .offset(offset)
            .limit(limit)
            .all()
        )

    def update(self, experience: models.Experience) -> models.Experience:
        with transaction(self.db, "update experience"):
            self.db.add(experience)
        self.db.refresh(experience)
        return experience
