"""모델 객체를 JSON 응답용 딕셔너리로 변환하는 함수 모음."""
from typing import Any, Dict, Iterable, Optional

from portfolio_backend.database import models


def _iso(value) -> Optional[str]:
    return value.isoformat() if value else None


def user_to_dict(user: models.User, include_token: bool = False) -> Dict[str, Any]:
    # 비밀번호 해시는 어떤 응답에도 포함하지 않습니다.
    data = {"id": user.id, "name": user.name, "email": user.email, "image": user.image}
    if include_token:
        data["token"] = user.token
    return data


def skill_to_dict(skill: models.Skill) -> Dict[str, Any]:
    return {"id": skill.id, "name": skill.name, "image": skill.image}


def experience_to_dict(experience: models.Experience, skills: Optional[Iterable[models.Skill]] = None) -> Dict[str, Any]:
    data = {
        "id": experience.id,
        "company_name": experience.company_name,
        "position": experience.position,
        "location": experience.location,
        "start_date": _iso(experience.start_date),
        "end_date": _iso(experience.end_date),
        "image": experience.image,
    }
    if skills is not None:
        data["skills"] = [skill_to_dict(s) for s in skills]
    return data


def portfolio_to_dict(
    portfolio: models.Portfolio,
    skills: Optional[Iterable[models.Skill]] = None,
    experience: Optional[models.Experience] = None,
    include_experience: bool = False,
) -> Dict[str, Any]:
    data = {
        "id": portfolio.id,
        "title": portfolio.title,
        "subtitle": portfolio.subtitle,
        "content": portfolio.content,
        "status": portfolio.status,
        "date_project": _iso(portfolio.date_project),
        "image": portfolio.image,
    }
    if skills is not None:
        data["skills"] = [skill_to_dict(s) for s in skills]
    if include_experience:
        data["experience"] = experience_to_dict(experience) if experience else None
    return data


def with_image_urls(kind: str, data: Dict[str, Any], base_url: str) -> Dict[str, Any]:
    """
    응답 딕셔너리의 이미지 파일 이름을 '<base_url>/uploads/<folder>/<name>' 형태의 URL로 바꿉니다.
    중첩된 skills, experience 항목도 함께 변환합니다.
    """
    folders = {"user": "users", "skill": "skills", "portfolio": "portfolio", "experience": "experience"}
    converted = dict(data)
    if converted.get("image"):
        converted["image"] = f"{base_url}/uploads/{folders[kind]}/{converted['image']}"
    if converted.get("skills"):
        converted["skills"] = [with_image_urls("skill", s, base_url) for s in converted["skills"]]
    if converted.get("experience"):
        converted["experience"] = with_image_urls("experience", converted["experience"], base_url)
    return converted
