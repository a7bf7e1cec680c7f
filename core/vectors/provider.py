import json
import logging
from typing import Any, Dict, Iterable, Optional

from sqlalchemy.orm import Session

from database.repositories import VectorRepository, ProfileRepository
from core.vectors.models import UserVector, parse_vector

logger = logging.getLogger(__name__)


class VectorProvider:
    """
    Read side of the feature store.

    Returns the latest vector per user with the lifestyle map overlaid by the
    user's non-private optional profile fields.
    """

    def __init__(self, db: Session):
        self.vector_repo = VectorRepository(db)
        self.profile_repo = ProfileRepository(db)

    def get_latest(self, user_id: int) -> Optional[UserVector]:
        return self.get_latest_many([user_id]).get(user_id)

    def get_latest_many(self, user_ids: Iterable[int]) -> Dict[int, UserVector]:
        ids = set(user_ids)
        if not ids:
            return {}

        records = self.vector_repo.get_latest_for_users(ids)
        fields = self.profile_repo.get_lifestyle_fields(records.keys())

        vectors = {}
        for user_id, record in records.items():
            vector = parse_vector(user_id, record.version, record.vector_json, record.pillar_scores_json)
            for key, value in fields.get(user_id, {}).items():
                if value and value.strip():
                    vector.lifestyle[key] = value
            vectors[user_id] = vector
        return vectors

    def update_pulse(self, user_id: int, features: Dict[str, Any]) -> bool:
        """Merge pulse features into the latest vector version in place.

        Returns False when the user has no vector yet.
        """
        record = self.vector_repo.get_latest(user_id)
        if record is None:
            logger.warning(f"No vector for user {user_id}; pulse update skipped")
            return False

        try:
            data = json.loads(record.vector_json or "{}")
        except (json.JSONDecodeError, TypeError, ValueError) as e:
            logger.warning(f"Replacing malformed vector_json for user {user_id}: {e}")
            data = {}
        if not isinstance(data, dict):
            data = {}

        pulse = data.get("pulse") if isinstance(data.get("pulse"), dict) else {}
        pulse.update(features)
        data["pulse"] = pulse

        self.vector_repo.update_vector_json(record, json.dumps(data))
        logger.debug(f"Updated pulse for user {user_id} (v{record.version})")
        return True
