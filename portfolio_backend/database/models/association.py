from sqlalchemy import Column, String, ForeignKey
from ..database import Base


class PortfolioSkill(Base):
    """
    포트폴리오 항목(Portfolio)과 기술(Skill) 사이의 다대다 관계를 연결하는 연관 테이블입니다.
    복합 기본 키로 같은 기술이 같은 항목에 두 번 연결되지 않도록 합니다.
    """
    __tablename__ = 'portfolio_skills'
    portfolio_id = Column(String(36), ForeignKey('portfolio.id'), primary_key=True)
    skill_id = Column(String(36), ForeignKey('skills.id'), primary_key=True)


class ExperienceSkill(Base):
    """경력(Experience)과 기술(Skill) 사이의 다대다 연관 테이블입니다."""
    __tablename__ = 'experience_skills'
    experience_id = Column(String(36), ForeignKey('experience.id'), primary_key=True)
    skill_id = Column(String(36), ForeignKey('skills.id'), primary_key=True)


class PortfolioExperience(Base):
    """
    포트폴리오 항목과 경력을 연결합니다.
    portfolio_id 하나가 기본 키이므로 항목 하나에는 경력이 최대 하나만 연결됩니다.
    """
    __tablename__ = 'portfolio_experience'
    portfolio_id = Column(String(36), ForeignKey('portfolio.id'), primary_key=True)
    experience_id = Column(String(36), ForeignKey('experience.id'), nullable=False)
