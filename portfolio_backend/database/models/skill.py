from sqlalchemy import Column, String, Text
from ..database import Base


class Skill(Base):
    """
    포트폴리오 항목과 경력에 연결되는 기술 스택(예: 'Python', 'PostgreSQL')입니다.
    다른 엔티티와는 연관 테이블(portfolio_skills, experience_skills)로만 연결됩니다.
    """
    __tablename__ = "skills"
    id = Column(String(36), primary_key=True)
    name = Column(String(255), nullable=False)
    image = Column(Text)
