import logging

from portfolio_backend import config
from .database import Base, build_engine
from . import models  # noqa: F401  Base.metadata에 모델 등록

logger = logging.getLogger(__name__)


def initialize_db(engine):
    """
    SQLAlchemy 모델을 기준으로 모든 테이블을 생성합니다.
    이미 존재하는 테이블은 다시 생성하지 않습니다.
    """
    logger.info("DB 초기화 중 (SQLAlchemy 사용)...")
    Base.metadata.create_all(bind=engine)
    logger.info("테이블 생성 완료.")


if __name__ == '__main__':
    logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    initialize_db(build_engine(config.DATABASE_URL))
