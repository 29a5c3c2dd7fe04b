from .user import User
from .skill import Skill
from .portfolio import Portfolio
from .experience import Experience
from .association import PortfolioSkill, ExperienceSkill, PortfolioExperience

__all__ = [
    "User",
    "Skill",
    "Portfolio",
    "Experience",
    "PortfolioSkill",
    "ExperienceSkill",
    "PortfolioExperience",
]
