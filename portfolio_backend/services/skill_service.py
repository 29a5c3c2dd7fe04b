import logging
import uuid
from typing import Any, Dict, List, Optional

from portfolio_backend.database import models
from portfolio_backend.repositories.interfaces import ISkillRepository
from portfolio_backend.services.image_service import ImageService
from portfolio_backend.services.schemas import ImageUpload, UpdateRequest, check_pagination, require
from portfolio_backend.services.exceptions import (
    FileSystemError, NotFoundError, ServiceError, ValidationError
)
from portfolio_backend.utils.serializers import skill_to_dict

logger = logging.getLogger(__name__)

SKILL_IMAGE_FOLDER = "skills"


class SkillService:
    def __init__(self, skill_repo: ISkillRepository, image_service: ImageService):
        self.skill_repo = skill_repo
        self.image_service = image_service

    def create_skill(self, name: str, image: Optional[ImageUpload]) -> Dict[str, Any]:
        """
        새로운 기술을 생성합니다. 아이콘 이미지는 필수입니다.

        Raises:
            ValidationError: 이름이나 이미지가 없을 때.
        """
        require({"name": name}, "name")
        if image is None:
            raise ValidationError("Failed to get uploaded file")

        image_name = self.image_service.save(SKILL_IMAGE_FOLDER, image.filename, image.stream)
        new_skill = models.Skill(id=str(uuid.uuid4()), name=name, image=image_name)
        try:
            created_skill = self.skill_repo.create(new_skill)
        except ServiceError:
            self.image_service.delete(SKILL_IMAGE_FOLDER, image_name)
            raise
        return skill_to_dict(created_skill)

    def list_skills(self, offset: int = 0, limit: int = 10) -> List[Dict[str, Any]]:
        """기술 목록을 offset/limit 단위로 조회합니다."""
        check_pagination(offset, limit)
        return [skill_to_dict(s) for s in self.skill_repo.list_paginated(offset, limit)]

    def get_skill(self, skill_id: str) -> Dict[str, Any]:
        return skill_to_dict(self._get_or_raise(skill_id))

    def update_skill(self, skill_id: str, update: UpdateRequest) -> Dict[str, Any]:
        """
        요청에 포함된 필드만 기존 기술에 반영합니다.

        새 이미지가 있으면 새 이름으로 저장하고 레코드를 갱신한 뒤 이전 이미지를 지웁니다.
        이전 이미지 삭제에 실패해도 수정은 그대로 완료됩니다.

        Raises:
            NotFoundError: 해당 ID의 기술을 찾을 수 없을 때.
        """
        skill = self._get_or_raise(skill_id)
        if update.has("name"):
            skill.name = update.fields["name"]

        old_image, new_image = None, None
        if update.image is not None:
            old_image = skill.image
            new_image = self.image_service.save(SKILL_IMAGE_FOLDER, update.image.filename, update.image.stream)
            skill.image = new_image

        try:
            updated_skill = self.skill_repo.update(skill)
        except ServiceError:
            if new_image:
                self.image_service.delete(SKILL_IMAGE_FOLDER, new_image)
            raise

        if old_image:
            try:
                self.image_service.delete(SKILL_IMAGE_FOLDER, old_image)
            except FileSystemError as e:
                logger.warning("Skill %s updated but old image '%s' was not removed: %s", skill_id, old_image, e)
        return skill_to_dict(updated_skill)

    def delete_skill(self, skill_id: str) -> bool:
        """
        기술과 이를 참조하는 모든 연결(포트폴리오, 경력)을 삭제하고 이미지도 지웁니다.

        Raises:
            NotFoundError: 해당 ID의 기술을 찾을 수 없을 때.
            FileSystemError: 이미지 파일 삭제에 실패했을 때.
        """
        skill = self._get_or_raise(skill_id)
        image_name = skill.image
        self.skill_repo.delete_with_relations(skill)
        self.image_service.delete(SKILL_IMAGE_FOLDER, image_name)
        return True

    def _get_or_raise(self, skill_id: str) -> models.Skill:
        skill = self.skill_repo.find_by_id(skill_id)
        if not skill:
            raise NotFoundError(f"Skill with id '{skill_id}' not found.")
        return skill
