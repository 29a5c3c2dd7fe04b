import logging
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from portfolio_backend.services.exceptions import PersistenceError

logger = logging.getLogger(__name__)

# 모든 모델 클래스가 상속받을 Base 클래스
Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite는 연결마다 외래 키 검사를 켜 주어야 합니다.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(database_url: str, **kwargs):
    """
    SQLAlchemy 엔진을 생성합니다.

    SQLite를 사용하는 경우 thread-safe 설정과 외래 키 강제를 함께 적용합니다.
    연결 문자열은 호출하는 쪽(설정 계층)에서 명시적으로 전달합니다.
    """
    if database_url.startswith("sqlite"):
        connect_args = kwargs.pop("connect_args", {})
        connect_args.setdefault("check_same_thread", False)
        engine = create_engine(database_url, connect_args=connect_args, **kwargs)
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine
    return create_engine(database_url, pool_pre_ping=True, **kwargs)


def build_session_factory(engine) -> sessionmaker:
    # autocommit=False, autoflush=False: 명시적으로 commit을 호출해야 DB에 반영됩니다.
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@contextmanager
def transaction(db: Session, description: str):
    """
    여러 쓰기 작업을 하나의 원자적 단위로 묶습니다.

    블록 안의 모든 작업이 성공하면 commit하고, 어느 한 단계라도 실패하면
    전체를 rollback합니다. DB 오류는 PersistenceError로 변환되며,
    그 외의 예외는 rollback 후 그대로 다시 던집니다.

    Args:
        db: 작업을 수행할 세션.
        description: 로그와 오류 메시지에 사용할 작업 설명.
    """
    try:
        yield db
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Transaction '%s' rolled back: %s", description, e)
        raise PersistenceError(f"Failed to {description}.") from e
    except Exception:
        db.rollback()
        logger.error("Transaction '%s' rolled back.", description)
        raise
