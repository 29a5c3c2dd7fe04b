from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from portfolio_backend.database import models
from portfolio_backend.database.database import transaction
from portfolio_backend.repositories.interfaces import IUserRepository
from portfolio_backend.services.exceptions import ConflictError, PersistenceError


class SqlalchemyUserRepository(IUserRepository):
    def __init__(self, db_session: Session):
        self.db = db_session

    def create(self, user_model: models.User) -> models.User:
        try:
            with transaction(self.db, "insert user"):
                self.db.add(user_model)
        except PersistenceError as e:
            # 동시에 같은 이메일로 가입하면 먼저 확인했더라도 유니크 제약에서 실패함
            if isinstance(e.__cause__, IntegrityError) and self.find_by_email(user_model.email):
                raise ConflictError("Email already registered") from e
            raise
        self.db.refresh(user_model)
        return user_model

    def find_by_id(self, user_id: str) -> Optional[models.User]:
        return self.db.query(models.User).filter(models.User.id == user_id).first()

    def find_by_email(self, email: str) -> Optional[models.User]:
        return self.db.query(models.User).filter(models.User.email == email).first()

    def update_token(self, user: models.User, token: Optional[str]) -> models.User:
        with transaction(self.db, "update user token"):
            user.token = token
        self.db.refresh(user)
        return user

    def delete(self, user: models.User) -> bool:
        if user:
            with transaction(self.db, "delete user"):
                self.db.delete(user)
            return True
        return False
