# tests/conftest.py
import pytest
from sqlalchemy.pool import StaticPool

from portfolio_backend.database import models  # noqa: F401  Base.metadata에 모델 등록
from portfolio_backend.database.database import Base, build_engine, build_session_factory
from portfolio_backend.services.image_service import ImageService


@pytest.fixture
def engine():
    """테스트마다 새로 만드는 인메모리 SQLite 엔진 (외래 키 검사 활성화)"""
    engine = build_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def image_service(tmp_path) -> ImageService:
    """임시 디렉터리에 이미지를 저장하는 실제 ImageService"""
    return ImageService(str(tmp_path / "uploads"))
