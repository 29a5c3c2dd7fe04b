from sqlalchemy import Column, String, Text
from ..database import Base


class User(Base):
    """
    포트폴리오 사이트를 관리하는 사용자를 나타냅니다.
    로그인할 때마다 발급된 토큰이 token 컬럼에 저장되며,
    저장된 토큰과 정확히 일치하는 토큰만 인증에 사용할 수 있습니다.
    """
    __tablename__ = "users"
    id = Column(String(36), primary_key=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password = Column(String(255), nullable=False)
    image = Column(Text)
    token = Column(Text)
