import logging
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import select, func

from database.models import UserProfile, UserPreference, UserOptionalField, Visibility
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class ProfileRepository(BaseRepository):
    def get_profile(self, user_id: int) -> Optional[UserProfile]:
        stmt = select(UserProfile).where(UserProfile.user_id == user_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_preference(self, user_id: int) -> Optional[UserPreference]:
        stmt = select(UserPreference).where(UserPreference.user_id == user_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def find_candidates(
        self,
        viewer_id: int,
        excluded_ids: Iterable[int],
        genders: Optional[Iterable[str]],
        age_min: int,
        age_max: int
    ) -> List[Tuple[UserProfile, UserPreference]]:
        """Profiles (with their preferences) passing the viewer-side filters.

        Users without a preference row are not matchable and are skipped.
        genders=None means the viewer declared no gender preference.
        """
        stmt = (
            select(UserProfile, UserPreference)
            .join(UserPreference, UserPreference.user_id == UserProfile.user_id)
            .where(
                UserProfile.user_id != viewer_id,
                UserProfile.age >= age_min,
                UserProfile.age <= age_max,
            )
        )

        excluded = set(excluded_ids)
        if excluded:
            stmt = stmt.where(UserProfile.user_id.not_in(excluded))

        if genders is not None:
            lowered = sorted({g.strip().lower() for g in genders})
            stmt = stmt.where(func.lower(UserProfile.gender).in_(lowered))

        stmt = stmt.order_by(UserProfile.user_id)
        return [(row[0], row[1]) for row in self.db.execute(stmt).all()]

    def get_lifestyle_fields(self, user_ids: Iterable[int]) -> Dict[int, Dict[str, str]]:
        """Matchable optional fields per user, PRIVATE fields excluded."""
        ids = set(user_ids)
        if not ids:
            return {}

        stmt = select(UserOptionalField).where(
            UserOptionalField.user_id.in_(ids),
            UserOptionalField.visibility != Visibility.PRIVATE.value
        )
        result: Dict[int, Dict[str, str]] = {uid: {} for uid in ids}
        for field in self.db.execute(stmt).scalars().all():
            result[field.user_id][field.key] = field.value
        return result

    def list_user_ids(self) -> List[int]:
        """Users who can receive a deck: profile and preferences both present."""
        stmt = (
            select(UserProfile.user_id)
            .join(UserPreference, UserPreference.user_id == UserProfile.user_id)
            .order_by(UserProfile.user_id)
        )
        return list(self.db.execute(stmt).scalars().all())
