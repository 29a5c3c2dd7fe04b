import logging
import uuid
from typing import Any, Dict, List, Optional, Sequence

from portfolio_backend.database import models
from portfolio_backend.repositories.interfaces import IExperienceRepository, ISkillRelationRepository
from portfolio_backend.services.image_service import ImageService
from portfolio_backend.services.schemas import (
    ImageUpload, UpdateRequest, check_pagination, parse_date, require
)
from portfolio_backend.services.exceptions import (
    FileSystemError, NotFoundError, ServiceError, ValidationError
)
from portfolio_backend.utils.serializers import experience_to_dict

logger = logging.getLogger(__name__)

EXPERIENCE_IMAGE_FOLDER = "experience"
UPDATABLE_FIELDS = ("company_name", "position", "location", "start_date", "end_date")


class ExperienceService:
    """경력 사항과 경력에 연결된 기술을 관리합니다."""

    def __init__(self, experience_repo: IExperienceRepository, skill_relation_repo: ISkillRelationRepository,
                 image_service: ImageService):
        self.experience_repo = experience_repo
        self.skill_relation_repo = skill_relation_repo
        self.image_service = image_service

    def create_experience(
        self,
        company_name: str,
        position: str,
        start_date: str,
        end_date: str,
        image: Optional[ImageUpload],
        skill_ids: Sequence[str],
        location: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        새로운 경력을 만들고 기술들을 연결합니다.

        경력 저장에 실패하면 저장해 둔 이미지를 지우고, 기술 연결에 실패하면
        방금 만든 경력과 이미지를 함께 정리합니다.

        Raises:
            ValidationError: 필수 값이 없거나 날짜 형식이 잘못되었을 때.
            PersistenceError: 저장이나 기술 연결에 실패했을 때.
        """
        require({"company_name": company_name, "position": position,
                 "start_date": start_date, "end_date": end_date},
                "company_name", "position", "start_date", "end_date")
        if image is None:
            raise ValidationError("Image file is required")
        if not skill_ids:
            raise ValidationError("At least one skill ID is required")
        started = parse_date(start_date, "start date")
        ended = parse_date(end_date, "end date")

        image_name = self.image_service.save(EXPERIENCE_IMAGE_FOLDER, image.filename, image.stream)
        experience = models.Experience(
            id=str(uuid.uuid4()),
            company_name=company_name,
            position=position,
            location=location or None,
            start_date=started,
            end_date=ended,
            image=image_name,
        )
        try:
            experience = self.experience_repo.create(experience)
        except ServiceError:
            self.image_service.delete(EXPERIENCE_IMAGE_FOLDER, image_name)
            raise

        try:
            self.skill_relation_repo.link_skills(experience.id, skill_ids)
        except ServiceError as e:
            logger.error("Experience '%s' creation failed: %s. Starting rollback...", experience.id, e)
            self._rollback_experience_creation(experience.id, image_name)
            raise

        return self._to_dict(experience)

    def _rollback_experience_creation(self, experience_id: str, image_name: str):
        try:
            self.skill_relation_repo.cascade_delete_parent(experience_id)
        except ServiceError as e:
            logger.warning("Rollback Warning: Failed to delete experience '%s': %s", experience_id, e)
        try:
            self.image_service.delete(EXPERIENCE_IMAGE_FOLDER, image_name)
        except FileSystemError as e:
            logger.warning("Rollback Warning: Failed to delete image '%s': %s", image_name, e)

    def list_experiences(self, offset: int = 0, limit: int = 10) -> List[Dict[str, Any]]:
        """경력 목록을 연결된 기술과 함께 조회합니다."""
        check_pagination(offset, limit)
        return [self._to_dict(e) for e in self.experience_repo.list_paginated(offset, limit)]

    def get_experience(self, experience_id: str) -> Dict[str, Any]:
        return self._to_dict(self._get_or_raise(experience_id))

    def update_experience(self, experience_id: str, update: UpdateRequest) -> Dict[str, Any]:
        """
        요청에 포함된 필드만 기존 경력에 반영합니다.
        이미지 교체 시 이전 이미지 삭제 실패는 FileSystemError로 전달됩니다.

        Raises:
            NotFoundError: 해당 ID의 경력을 찾을 수 없을 때.
            ValidationError: 날짜 형식이 잘못되었을 때.
        """
        experience = self._get_or_raise(experience_id)
        if update.is_empty():
            return self._to_dict(experience)

        dates = {}
        if update.has("start_date"):
            dates["start_date"] = parse_date(update.fields["start_date"], "start date")
        if update.has("end_date"):
            dates["end_date"] = parse_date(update.fields["end_date"], "end date")

        for name in ("company_name", "position", "location"):
            if update.has(name):
                setattr(experience, name, update.fields[name])
        for name, value in dates.items():
            setattr(experience, name, value)

        old_image, new_image = None, None
        if update.image is not None:
            old_image = experience.image
            new_image = self.image_service.save(EXPERIENCE_IMAGE_FOLDER, update.image.filename, update.image.stream)
            experience.image = new_image

        try:
            experience = self.experience_repo.update(experience)
        except ServiceError:
            if new_image:
                self.image_service.delete(EXPERIENCE_IMAGE_FOLDER, new_image)
            raise

        if old_image:
            self.image_service.delete(EXPERIENCE_IMAGE_FOLDER, old_image)
        return self._to_dict(experience)

    def delete_experience(self, experience_id: str) -> bool:
        """
        경력과 그 연결(기술, 포트폴리오 항목과의 연결)을 하나의 트랜잭션으로 삭제한 뒤 이미지를 지웁니다.

        Raises:
            NotFoundError: 해당 ID의 경력을 찾을 수 없을 때.
            PersistenceError: 삭제 트랜잭션이 실패했을 때.
            FileSystemError: 이미지 파일 삭제에 실패했을 때.
        """
        experience = self._get_or_raise(experience_id)
        image_name = experience.image
        self.skill_relation_repo.cascade_delete_parent(experience_id)
        self.image_service.delete(EXPERIENCE_IMAGE_FOLDER, image_name)
        return True

    def add_skills(self, experience_id: str, skill_ids: Sequence[str]) -> bool:
        if not skill_ids:
            raise ValidationError("Skill IDs are required")
        self._get_or_raise(experience_id)
        self.skill_relation_repo.link_skills(experience_id, skill_ids)
        return True

    def remove_skill(self, experience_id: str, skill_id: str) -> bool:
        if not skill_id:
            raise ValidationError("Skill ID is required")
        self._get_or_raise(experience_id)
        self.skill_relation_repo.unlink_skill(experience_id, skill_id)
        return True

    def _get_or_raise(self, experience_id: str) -> models.Experience:
        experience = self.experience_repo.find_by_id(experience_id)
        if not experience:
            raise NotFoundError(f"Experience with id '{experience_id}' not found.")
        return experience

    def _to_dict(self, experience: models.Experience) -> Dict[str, Any]:
        return experience_to_dict(experience, skills=self.skill_relation_repo.list_skills(experience.id))
