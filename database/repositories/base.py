from sqlalchemy.orm import Session


class BaseRepository:
    """Thin wrapper over a Session. Repositories flush; the caller's unit of work commits."""

    def __init__(self, db: Session):
        self.db = db

    def flush(self) -> None:
        self.db.flush()
