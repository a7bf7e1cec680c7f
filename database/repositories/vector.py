import logging
from typing import Dict, Iterable, Optional

from sqlalchemy import select, func

from database.models import UserVector
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class VectorRepository(BaseRepository):
    def get_latest(self, user_id: int) -> Optional[UserVector]:
        stmt = (
            select(UserVector)
            .where(UserVector.user_id == user_id)
            .order_by(UserVector.version.desc())
            .limit(1)
        )
        return self.db.execute(stmt).scalars().first()

    def get_latest_for_users(self, user_ids: Iterable[int]) -> Dict[int, UserVector]:
        """Latest vector per user in a single query."""
        ids = set(user_ids)
        if not ids:
            return {}

        latest = (
            select(UserVector.user_id, func.max(UserVector.version).label('max_version'))
            .where(UserVector.user_id.in_(ids))
            .group_by(UserVector.user_id)
            .subquery()
        )
        stmt = select(UserVector).join(
            latest,
            (UserVector.user_id == latest.c.user_id) & (UserVector.version == latest.c.max_version)
        )
        return {v.user_id: v for v in self.db.execute(stmt).scalars().all()}

    def save_new_version(
        self,
        user_id: int,
        vector_json: str,
        pillar_scores_json: str
    ) -> UserVector:
        current = self.get_latest(user_id)
        version = (current.version + 1) if current else 1

        record = UserVector(
            user_id=user_id,
            version=version,
            vector_json=vector_json,
            pillar_scores_json=pillar_scores_json
        )
        self.db.add(record)
        self.flush()
        logger.info(f"Saved vector v{version} for user {user_id}")
        return record

    def update_vector_json(self, record: UserVector, vector_json: str) -> UserVector:
        """Rewrite the blob of an existing version in place."""
        record.vector_json = vector_json
        self.flush()
        return record
