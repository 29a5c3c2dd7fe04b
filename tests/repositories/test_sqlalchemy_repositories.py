# tests/repositories/test_sqlalchemy_repositories.py
from datetime import date

import pytest

from portfolio_backend.database import models
from portfolio_backend.repositories.sqlalchemy.sqlalchemy_experience_repository import SqlalchemyExperienceRepository
from portfolio_backend.repositories.sqlalchemy.sqlalchemy_portfolio_repository import SqlalchemyPortfolioRepository
from portfolio_backend.repositories.sqlalchemy.sqlalchemy_skill_repository import SqlalchemySkillRepository
from portfolio_backend.repositories.sqlalchemy.sqlalchemy_user_repository import SqlalchemyUserRepository
from portfolio_backend.services.exceptions import ConflictError, PersistenceError


def _experience(experience_id: str, company: str) -> models.Experience:
    return models.Experience(id=experience_id, company_name=company, position="Engineer",
                             start_date=date(2020, 1, 1), end_date=date(2021, 1, 1))


class TestUserRepository:
    def test_duplicate_email_is_conflict(self, db_session):
        """사전 확인을 지나친 중복 이메일도 유니크 제약에서 ConflictError로 바뀌어야 합니다."""
        repo = SqlalchemyUserRepository(db_session)
        repo.create(models.User(id="u1", name="A", email="a@x.com", password="h"))

        with pytest.raises(ConflictError, match="Email already registered"):
            repo.create(models.User(id="u2", name="B", email="a@x.com", password="h"))

        assert repo.find_by_email("a@x.com").id == "u1"

    def test_duplicate_id_stays_persistence_error(self, db_session):
        repo = SqlalchemyUserRepository(db_session)
        repo.create(models.User(id="u1", name="A", email="a@x.com", password="h"))
        db_session.expunge_all()

        with pytest.raises(PersistenceError):
            repo.create(models.User(id="u1", name="B", email="b@x.com", password="h"))

    def test_update_token_overwrites(self, db_session):
        repo = SqlalchemyUserRepository(db_session)
        user = repo.create(models.User(id="u1", name="A", email="a@x.com", password="h"))

        repo.update_token(user, "first")
        repo.update_token(user, "second")

        assert repo.find_by_id("u1").token == "second"


class TestSkillRepository:
    def test_list_paginated_is_ordered_by_name(self, db_session):
        repo = SqlalchemySkillRepository(db_session)
        for skill_id, name in (("s1", "Python"), ("s2", "Go"), ("s3", "Rust")):
            repo.create(models.Skill(id=skill_id, name=name))

        assert [s.name for s in repo.list_paginated(0, 2)] == ["Go", "Python"]
        assert [s.name for s in repo.list_paginated(2, 2)] == ["Rust"]
        assert repo.list_paginated(10, 2) == []

    def test_delete_with_relations_removes_links_only(self, db_session):
        """기술 삭제 시 이를 참조하는 연결 행만 지워지고 상위 항목은 남아야 합니다."""
        # === Arrange ===
        repo = SqlalchemySkillRepository(db_session)
        skill = repo.create(models.Skill(id="s1", name="Python"))
        db_session.add(models.Portfolio(id="pf-1", title="Blog", date_project=date(2023, 1, 1)))
        db_session.add(_experience("exp-1", "Acme"))
        db_session.flush()
        db_session.add(models.PortfolioSkill(portfolio_id="pf-1", skill_id="s1"))
        db_session.add(models.ExperienceSkill(experience_id="exp-1", skill_id="s1"))
        db_session.commit()

        # === Act ===
        assert repo.delete_with_relations(skill) is True

        # === Assert ===
        assert repo.find_by_id("s1") is None
        assert db_session.query(models.PortfolioSkill).count() == 0
        assert db_session.query(models.ExperienceSkill).count() == 0
        assert db_session.query(models.Portfolio).count() == 1


class TestPortfolioRepository:
    def test_set_experience_replaces_link(self, db_session):
        repo = SqlalchemyPortfolioRepository(db_session)
        repo.create(models.Portfolio(id="pf-1", title="Blog", date_project=date(2023, 1, 1)))
        db_session.add_all([_experience("exp-1", "Acme"), _experience("exp-2", "Globex")])
        db_session.commit()

        repo.set_experience("pf-1", "exp-1")
        repo.set_experience("pf-1", "exp-2")

        assert repo.get_experience("pf-1").company_name == "Globex"
        assert db_session.query(models.PortfolioExperience).count() == 1

    def test_set_unknown_experience_keeps_previous(self, db_session):
        repo = SqlalchemyPortfolioRepository(db_session)
        repo.create(models.Portfolio(id="pf-1", title="Blog", date_project=date(2023, 1, 1)))
        db_session.add(_experience("exp-1", "Acme"))
        db_session.commit()
        repo.set_experience("pf-1", "exp-1")

        with pytest.raises(PersistenceError):
            repo.set_experience("pf-1", "missing")

        assert repo.get_experience("pf-1").id == "exp-1"

    def test_update_with_unknown_experience_rolls_back_field_changes(self, db_session):
        """경력 교체가 실패하면 같은 요청의 이미지 변경도 반영되지 않아야 합니다."""
        # === Arrange ===
        repo = SqlalchemyPortfolioRepository(db_session)
        portfolio = repo.create(models.Portfolio(id="pf-1", title="Blog", date_project=date(2023, 1, 1),
                                                 image="old.png"))
        db_session.add(_experience("exp-1", "Acme"))
        db_session.commit()
        repo.set_experience("pf-1", "exp-1")

        # === Act ===
        portfolio.image = "new.png"
        with pytest.raises(PersistenceError):
            repo.update(portfolio, experience_id="missing")

        # === Assert ===
        assert repo.find_by_id("pf-1").image == "old.png"
        assert repo.get_experience("pf-1").id == "exp-1"

    def test_update_with_experience_commits_both(self, db_session):
        repo = SqlalchemyPortfolioRepository(db_session)
        portfolio = repo.create(models.Portfolio(id="pf-1", title="Blog", date_project=date(2023, 1, 1)))
        db_session.add(_experience("exp-1", "Acme"))
        db_session.commit()

        portfolio.title = "Blog v2"
        repo.update(portfolio, experience_id="exp-1")

        assert repo.find_by_id("pf-1").title == "Blog v2"
        assert repo.get_experience("pf-1").company_name == "Acme"

    def test_get_experience_without_link(self, db_session):
        repo = SqlalchemyPortfolioRepository(db_session)
        repo.create(models.Portfolio(id="pf-1", title="Blog", date_project=date(2023, 1, 1)))

        assert repo.get_experience("pf-1") is None


class TestExperienceRepository:
    def test_update_persists_changes(self, db_session):
        repo = SqlalchemyExperienceRepository(db_session)
        experience = repo.create(_experience("exp-1", "Acme"))

        experience.position = "Lead"
        repo.update(experience)

        assert repo.find_by_id("exp-1").position == "Lead"
