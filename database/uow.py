import contextlib
import logging
from typing import Optional

from sqlalchemy.orm import Session, sessionmaker

from database.database import SessionLocal

logger = logging.getLogger(__name__)


@contextlib.contextmanager
def deck_uow(session_factory: Optional[sessionmaker] = None):
    """Per-request transaction scope for deck generation.

    Yields a fresh Session. Commits on success, rolls back on exception,
    always closes.

    Usage:
        with deck_uow() as session:
            orchestrator = DailyDeckOrchestrator.build(session, config)
            result = orchestrator.get_or_create_deck(user_id, today)
        # commit happens automatically on successful exit
    """
    session: Session = (session_factory or SessionLocal)()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
