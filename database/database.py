import contextlib
import logging

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from core.config_loader import load_config

logger = logging.getLogger(__name__)


def _enable_sqlite_savepoints(engine: Engine) -> None:
    # pysqlite starts transactions lazily, which breaks SAVEPOINT; let
    # SQLAlchemy emit BEGIN itself.
    @event.listens_for(engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")


def make_engine(url: str, **kwargs) -> Engine:
    """Engine for url; SQLite connections may be shared across threads."""
    is_sqlite = url.startswith("sqlite")
    if is_sqlite:
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    engine = create_engine(url, pool_pre_ping=True, **kwargs)
    if is_sqlite:
        _enable_sqlite_savepoints(engine)
    return engine


# DATABASE_URL in the environment overrides config.yaml (see load_config)
DATABASE_URL = load_config().database.url

engine = make_engine(DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def configure(url: str) -> Engine:
    """Point the module engine and SessionLocal at url.

    SessionLocal keeps its identity, so code that imported it earlier
    picks up the new bind.
    """
    global engine, DATABASE_URL
    if url == DATABASE_URL:
        return engine

    previous = engine
    engine = make_engine(url)
    DATABASE_URL = url
    SessionLocal.configure(bind=engine)
    previous.dispose()
    logger.info(f"Database engine rebound to {engine.url!r}")
    return engine


@contextlib.contextmanager
def db_session_scope():
    """Provide a transactional scope around a series of operations."""
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
