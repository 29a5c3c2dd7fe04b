# tests/services/test_experience_service.py
import io
from datetime import date

import pytest
from unittest.mock import MagicMock, ANY

from portfolio_backend.services.experience_service import ExperienceService
from portfolio_backend.services.image_service import ImageService
from portfolio_backend.services.schemas import ImageUpload, UpdateRequest
from portfolio_backend.services.exceptions import *
from portfolio_backend.repositories.interfaces import IExperienceRepository, ISkillRelationRepository
from portfolio_backend.database import models


@pytest.fixture
def mock_experience_repo() -> MagicMock:
    repo = MagicMock(spec=IExperienceRepository)
    repo.create.side_effect = lambda e: e
    repo.update.side_effect = lambda e: e
    return repo

@pytest.fixture
def mock_relation_repo() -> MagicMock:
    repo = MagicMock(spec=ISkillRelationRepository)
    repo.list_skills.return_value = []
    return repo

@pytest.fixture
def mock_image_service() -> MagicMock:
    service = MagicMock(spec=ImageService)
    service.save.return_value = "new-logo.png"
    return service

@pytest.fixture
def experience_service(mock_experience_repo, mock_relation_repo, mock_image_service) -> ExperienceService:
    return ExperienceService(mock_experience_repo, mock_relation_repo, mock_image_service)

@pytest.fixture
def acme() -> models.Experience:
    return models.Experience(id="exp-1", company_name="Acme", position="Engineer", location=None,
                             start_date=date(2020, 1, 1), end_date=date(2022, 1, 1), image="acme.png")

def _upload() -> ImageUpload:
    return ImageUpload(filename="logo.jpg", stream=io.BytesIO(b"logo"))


class TestCreateExperience:
    def test_create_success(self, experience_service: ExperienceService, mock_relation_repo: MagicMock,
                            mock_image_service: MagicMock):
        result = experience_service.create_experience("Acme", "Engineer", "2020-01-01", "2022-01-01",
                                                      _upload(), ["s1"], location="Seoul")

        assert result["company_name"] == "Acme"
        assert result["location"] == "Seoul"
        assert result["start_date"] == "2020-01-01"
        assert result["skills"] == []
        mock_image_service.save.assert_called_once_with("experience", "logo.jpg", ANY)
        mock_relation_repo.link_skills.assert_called_once_with(result["id"], ["s1"])

    @pytest.mark.parametrize("start,end,message", [
        ("2020/01/01", "2022-01-01", "Invalid start date format"),
        ("2020-01-01", "tomorrow", "Invalid end date format"),
    ])
    def test_create_rejects_bad_dates(self, experience_service: ExperienceService, mock_image_service: MagicMock,
                                      start, end, message):
        with pytest.raises(ValidationError, match=message):
            experience_service.create_experience("Acme", "Engineer", start, end, _upload(), ["s1"])
        mock_image_service.save.assert_not_called()

    def test_create_requires_skills(self, experience_service: ExperienceService):
        with pytest.raises(ValidationError, match="At least one skill ID is required"):
            experience_service.create_experience("Acme", "Engineer", "2020-01-01", "2022-01-01", _upload(), [])

    def test_create_rolls_back_when_linking_fails(self, experience_service: ExperienceService,
                                                  mock_relation_repo: MagicMock, mock_image_service: MagicMock):
        """기술 연결 실패 시 경력과 이미지가 함께 정리되어야 합니다."""
        mock_relation_repo.link_skills.side_effect = PersistenceError("Failed to link skills.")

        with pytest.raises(PersistenceError):
            experience_service.create_experience("Acme", "Engineer", "2020-01-01", "2022-01-01", _upload(), ["s1"])

        mock_relation_repo.cascade_delete_parent.assert_called_once()
        mock_image_service.delete.assert_called_once_with("experience", "new-logo.png")


class TestUpdateExperience:
    def test_sparse_update(self, experience_service: ExperienceService, mock_experience_repo: MagicMock,
                           acme: models.Experience):
        mock_experience_repo.find_by_id.return_value = acme

        result = experience_service.update_experience("exp-1", UpdateRequest(fields={"end_date": "2023-06-30"}))

        assert result["end_date"] == "2023-06-30"
        assert result["start_date"] == "2020-01-01"
        assert result["position"] == "Engineer"

    def test_bad_date_is_rejected_before_changes(self, experience_service: ExperienceService,
                                                 mock_experience_repo: MagicMock, acme: models.Experience):
        mock_experience_repo.find_by_id.return_value = acme

        with pytest.raises(ValidationError, match="Invalid start date format"):
            experience_service.update_experience("exp-1", UpdateRequest(fields={"position": "CTO",
                                                                                "start_date": "x"}))
        assert acme.position == "Engineer"

    def test_update_surfaces_old_image_removal_failure(self, experience_service: ExperienceService,
                                                       mock_experience_repo: MagicMock, mock_image_service: MagicMock,
                                                       acme: models.Experience):
        mock_experience_repo.find_by_id.return_value = acme
        mock_image_service.delete.side_effect = FileSystemError("Failed to delete image file")

        with pytest.raises(FileSystemError):
            experience_service.update_experience("exp-1", UpdateRequest(image=_upload()))


class TestDeleteAndSkillLinks:
    def test_delete_experience(self, experience_service: ExperienceService, mock_experience_repo: MagicMock,
                               mock_relation_repo: MagicMock, mock_image_service: MagicMock,
                               acme: models.Experience):
        mock_experience_repo.find_by_id.return_value = acme

        assert experience_service.delete_experience("exp-1") is True
        mock_relation_repo.cascade_delete_parent.assert_called_once_with("exp-1")
        mock_image_service.delete.assert_called_once_with("experience", "acme.png")

    def test_delete_unknown_experience(self, experience_service: ExperienceService, mock_experience_repo: MagicMock,
                                       mock_relation_repo: MagicMock):
        mock_experience_repo.find_by_id.return_value = None

        with pytest.raises(NotFoundError):
            experience_service.delete_experience("missing")
        mock_relation_repo.cascade_delete_parent.assert_not_called()

    def test_remove_skill_requires_id(self, experience_service: ExperienceService):
        with pytest.raises(ValidationError, match="Skill ID is required"):
            experience_service.remove_skill("exp-1", "")

    def test_add_skills_propagates_batch_failure(self, experience_service: ExperienceService,
                                                 mock_experience_repo: MagicMock, mock_relation_repo: MagicMock,
                                                 acme: models.Experience):
        mock_experience_repo.find_by_id.return_value = acme
        mock_relation_repo.link_skills.side_effect = PersistenceError("Failed to link skills.")

        with pytest.raises(PersistenceError):
            experience_service.add_skills("exp-1", ["s1", "s1"])
