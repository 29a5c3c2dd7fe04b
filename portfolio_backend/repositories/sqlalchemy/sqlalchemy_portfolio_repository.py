from typing import List, Optional
from sqlalchemy.orm import Session
from portfolio_backend.database import models
from portfolio_backend.database.database import transaction
from portfolio_backend.repositories.interfaces import IPortfolioRepository


class SqlalchemyPortfolioRepository(IPortfolioRepository):
    def __init__(self, db_session: Session):
        self.db = db_session

    def create(self, portfolio_model: models.Portfolio) -> models.Portfolio:
        with transaction(self.db, "insert portfolio"):
            self.db.add(portfolio_model)
        self.db.refresh(portfolio_model)
        return portfolio_model

    def find_by_id(self, portfolio_id: str) -> Optional[models.Portfolio]:
        return self.db.query(models.Portfolio).filter(models.Portfolio.id == portfolio_id).first()

    def list_paginated(self, offset: int, limit: int) -> List[models.Portfolio]:
        return (
            self.db.query(models.Portfolio)
            .order_by(models.Portfolio.date_project.desc(), models.Portfolio.id.asc())
            .offset(offset)
            .limit(limit)
            .all()
        )

    def update(self, portfolio: models.Portfolio, experience_id: Optional[str] = None) -> models.Portfolio:
        with transaction(self.db, "update portfolio"):
            self.db.add(portfolio)
            if experience_id:
                self._replace_experience(portfolio.id, experience_id)
        self.db.refresh(portfolio)
        return portfolio

    def set_experience(self, portfolio_id: str, experience_id: str):
        with transaction(self.db, f"set experience of portfolio '{portfolio_id}'"):
            self._replace_experience(portfolio_id, experience_id)

    def _replace_experience(self, portfolio_id: str, experience_id: str):
        self.db.query(models.PortfolioExperience).filter(
            models.PortfolioExperience.portfolio_id == portfolio_id
        ).delete()
        self.db.add(models.PortfolioExperience(portfolio_id=portfolio_id, experience_id=experience_id))
        self.db.flush()

    def get_experience(self, portfolio_id: str) -> Optional[models.Experience]:
        return (
            self.db.query(models.Experience)
            .join(models.PortfolioExperience, models.PortfolioExperience.experience_id == models.Experience.id)
            .filter(models.PortfolioExperience.portfolio_id == portfolio_id)
            .first()
        )
