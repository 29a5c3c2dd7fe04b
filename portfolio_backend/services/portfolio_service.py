import logging
import uuid
from typing import Any, Dict, List, Optional, Sequence

from portfolio_backend.database import models
from portfolio_backend.repositories.interfaces import (
    IExperienceRepository, IPortfolioRepository, ISkillRelationRepository
)
from portfolio_backend.services.image_service import ImageService
from portfolio_backend.services.schemas import (
    ImageUpload, UpdateRequest, check_pagination, parse_date, require
)
from portfolio_backend.services.exceptions import (
    FileSystemError, NotFoundError, ServiceError, ValidationError
)
from portfolio_backend.utils.serializers import portfolio_to_dict

logger = logging.getLogger(__name__)

PORTFOLIO_IMAGE_FOLDER = "portfolio"
UPDATABLE_FIELDS = ("title", "subtitle", "content", "status", "date_project", "experience_id")


class PortfolioService:
    """포트폴리오 항목과 그 항목에 연결된 기술, 경력을 관리합니다."""

    def __init__(
        self,
        portfolio_repo: IPortfolioRepository,
        skill_relation_repo: ISkillRelationRepository,
        experience_repo: IExperienceRepository,
        image_service: ImageService,
    ):
        """
        PortfolioService를 초기화합니다.

        Args:
            portfolio_repo: 포트폴리오 항목 데이터에 접근하기 위한 리포지토리.
            skill_relation_repo: 포트폴리오 항목과 기술의 연결을 관리하는 리포지토리.
            experience_repo: 연결할 경력의 존재 여부를 확인하기 위한 리포지토리.
            image_service: 항목 이미지 저장/삭제를 담당하는 서비스.
        """
        self.portfolio_repo = portfolio_repo
        self.skill_relation_repo = skill_relation_repo
        self.experience_repo = experience_repo
        self.image_service = image_service

    def create_portfolio(
        self,
        title: str,
        content: str,
        date_project: str,
        image: Optional[ImageUpload],
        skill_ids: Sequence[str],
        subtitle: Optional[str] = None,
        status: Optional[str] = None,
        experience_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        새로운 포트폴리오 항목을 만들고 기술(및 선택적으로 경력)을 연결합니다.

        항목 저장 후 연결 단계에서 실패하면, 방금 만든 항목과 이미지를 정리하는
        롤백 로직이 동작한 뒤 원래 예외를 다시 던집니다.

        Args:
            title: 항목 제목.
            content: 본문.
            date_project: 프로젝트 날짜 ('YYYY-MM-DD').
            image: 대표 이미지. 필수입니다.
            skill_ids: 연결할 기술 ID 목록. 최소 하나가 필요합니다.
            subtitle: 부제목.
            status: 진행 상태 라벨.
            experience_id: 연결할 경력 ID.

        Returns:
            생성된 항목의 정보와 연결된 기술, 경력을 담은 딕셔너리.

        Raises:
            ValidationError: 필수 값이 없거나 날짜 형식이 잘못되었을 때.
            NotFoundError: experience_id에 해당하는 경력이 없을 때.
            PersistenceError: 항목 저장이나 기술 연결에 실패했을 때.
        """
        require({"title": title, "content": content, "date_project": date_project},
                "title", "content", "date_project")
        if image is None:
            raise ValidationError("Image file is required")
        if not skill_ids:
            raise ValidationError("At least one skill ID is required")
        project_date = parse_date(date_project, "date_project")
        if experience_id:
            self._get_experience_or_raise(experience_id)

        image_name = self.image_service.save(PORTFOLIO_IMAGE_FOLDER, image.filename, image.stream)
        portfolio = models.Portfolio(
            id=str(uuid.uuid4()),
            title=title,
            subtitle=subtitle or None,
            content=content,
            status=status or None,
            date_project=project_date,
            image=image_name,
        )
        try:
            portfolio = self.portfolio_repo.create(portfolio)
        except ServiceError:
            self.image_service.delete(PORTFOLIO_IMAGE_FOLDER, image_name)
            raise

        try:
            self.skill_relation_repo.link_skills(portfolio.id, skill_ids)
            if experience_id:
                self.portfolio_repo.set_experience(portfolio.id, experience_id)
        except ServiceError as e:
            logger.error("Portfolio '%s' creation failed: %s. Starting rollback...", portfolio.id, e)
            self._rollback_portfolio_creation(portfolio.id, image_name)
            raise

        logger.info("Created portfolio %s with %d skills", portfolio.id, len(skill_ids))
        return self._to_dict(portfolio)

    def _rollback_portfolio_creation(self, portfolio_id: str, image_name: str):
        try:
            self.skill_relation_repo.cascade_delete_parent(portfolio_id)
        except ServiceError as e:
            logger.warning("Rollback Warning: Failed to delete portfolio '%s': %s", portfolio_id, e)
        try:
            self.image_service.delete(PORTFOLIO_IMAGE_FOLDER, image_name)
        except FileSystemError as e:
            logger.warning("Rollback Warning: Failed to delete image '%s': %s", image_name, e)

    def list_portfolios(self, offset: int = 0, limit: int = 10) -> List[Dict[str, Any]]:
        """포트폴리오 항목 목록을 연결된 기술과 함께 조회합니다."""
        check_pagination(offset, limit)
        portfolios = self.portfolio_repo.list_paginated(offset, limit)
        return [
            portfolio_to_dict(p, skills=self.skill_relation_repo.list_skills(p.id))
            for p in portfolios
        ]

    def get_portfolio(self, portfolio_id: str) -> Dict[str, Any]:
        """
        ID로 포트폴리오 항목을 조회합니다. 연결된 기술과 경력을 포함합니다.

        Raises:
            NotFoundError: 해당 ID의 항목을 찾을 수 없을 때.
        """
        return self._to_dict(self._get_or_raise(portfolio_id))

    def update_portfolio(self, portfolio_id: str, update: UpdateRequest) -> Dict[str, Any]:
        """
        요청에 포함된 필드만 기존 항목에 반영합니다.

        새 이미지가 있으면 새 이름으로 저장하고 레코드를 갱신한 뒤 이전 이미지를 지웁니다.
        이전 이미지 삭제 실패는 FileSystemError로 호출한 쪽에 전달됩니다.

        Raises:
            NotFoundError: 항목이나 연결할 경력을 찾을 수 없을 때.
            ValidationError: 날짜 형식이 잘못되었을 때.
            FileSystemError: 새 이미지 저장이나 이전 이미지 삭제에 실패했을 때.
        """
        portfolio = self._get_or_raise(portfolio_id)
        if update.is_empty():
            return self._to_dict(portfolio)

        # 값 검증을 먼저 끝낸 뒤에 레코드를 변경합니다.
        project_date = None
        if update.has("date_project"):
            project_date = parse_date(update.fields["date_project"], "date_project")
        experience_id = update.fields.get("experience_id")
        if experience_id:
            self._get_experience_or_raise(experience_id)

        for name in ("title", "subtitle", "content", "status"):
            if update.has(name):
                setattr(portfolio, name, update.fields[name])
        if project_date is not None:
            portfolio.date_project = project_date

        old_image, new_image = None, None
        if update.image is not None:
            old_image = portfolio.image
            new_image = self.image_service.save(PORTFOLIO_IMAGE_FOLDER, update.image.filename, update.image.stream)
            portfolio.image = new_image

        # 필드 변경과 경력 교체는 하나의 트랜잭션이므로, 실패하면 레코드는 이전 이미지를 그대로 가리킵니다.
        try:
            portfolio = self.portfolio_repo.update(portfolio, experience_id=experience_id or None)
        except ServiceError:
            if new_image:
                self.image_service.delete(PORTFOLIO_IMAGE_FOLDER, new_image)
            raise

        if old_image:
            self.image_service.delete(PORTFOLIO_IMAGE_FOLDER, old_image)
        return self._to_dict(portfolio)

    def delete_portfolio(self, portfolio_id: str) -> bool:
        """
        항목과 그 연결(기술, 경력)을 하나의 트랜잭션으로 삭제한 뒤 이미지를 지웁니다.
        기술과 경력 자체는 삭제하지 않습니다.

        Raises:
            NotFoundError: 해당 ID의 항목을 찾을 수 없을 때.
            PersistenceError: 삭제 트랜잭션이 실패했을 때.
            FileSystemError: 이미지 파일 삭제에 실패했을 때.
        """
        portfolio = self._get_or_raise(portfolio_id)
        image_name = portfolio.image
        self.skill_relation_repo.cascade_delete_parent(portfolio_id)
        self.image_service.delete(PORTFOLIO_IMAGE_FOLDER, image_name)
        return True

    def add_skills(self, portfolio_id: str, skill_ids: Sequence[str]) -> bool:
        """항목에 기술들을 연결합니다. 한 건이라도 실패하면 아무것도 연결되지 않습니다."""
        if not skill_ids:
            raise ValidationError("Skill IDs are required")
        self._get_or_raise(portfolio_id)
        self.skill_relation_repo.link_skills(portfolio_id, skill_ids)
        return True

    def remove_skill(self, portfolio_id: str, skill_id: str) -> bool:
        """항목에서 기술 연결 하나를 제거합니다. 연결이 없어도 성공으로 처리합니다."""
        if not skill_id:
            raise ValidationError("Skill ID is required")
        self._get_or_raise(portfolio_id)
        self.skill_relation_repo.unlink_skill(portfolio_id, skill_id)
        return True

    def _get_or_raise(self, portfolio_id: str) -> models.Portfolio:
        portfolio = self.portfolio_repo.find_by_id(portfolio_id)
        if not portfolio:
            raise NotFoundError(f"Portfolio with id '{portfolio_id}' not found.")
        return portfolio

    def _get_experience_or_raise(self, experience_id: str) -> models.Experience:
        experience = self.experience_repo.find_by_id(experience_id)
        if not experience:
            raise NotFoundError(f"Experience with id '{experience_id}' not found.")
        return experience

    def _to_dict(self, portfolio: models.Portfolio) -> Dict[str, Any]:
        return portfolio_to_dict(
            portfolio,
            skills=self.skill_relation_repo.list_skills(portfolio.id),
            experience=self.portfolio_repo.get_experience(portfolio.id),
            include_experience=True,
        )
