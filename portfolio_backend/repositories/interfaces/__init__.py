from .user import IUserRepository
from .skill import ISkillRepository
from .portfolio import IPortfolioRepository
from .experience import IExperienceRepository
from .relation import ISkillRelationRepository

__all__ = [
    "IUserRepository",
    "ISkillRepository",
    "IPortfolioRepository",
    "IExperienceRepository",
    "ISkillRelationRepository",
]
