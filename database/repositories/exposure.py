import logging
from datetime import date
from typing import Dict, Iterable, List, Optional, Set

from sqlalchemy import select, func

from database.models import CandidateExposure
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class ExposureRepository(BaseRepository):
    """Append-only exposure log. Rows are inserted, never updated or deleted."""

    def get_shown_ids(
        self,
        viewer_id: int,
        on_date: date,
        surfaces: Optional[Iterable[str]] = None
    ) -> Set[int]:
        stmt = select(CandidateExposure.shown_user_id).where(
            CandidateExposure.viewer_user_id == viewer_id,
            CandidateExposure.date_utc == on_date
        )
        if surfaces is not None:
            stmt = stmt.where(CandidateExposure.surface.in_(list(surfaces)))
        return set(self.db.execute(stmt.distinct()).scalars().all())

    def has_exposure(
        self,
        viewer_id: int,
        shown_id: int,
        on_date: date,
        surface: Optional[str] = None
    ) -> bool:
        stmt = select(CandidateExposure.id).where(
            CandidateExposure.viewer_user_id == viewer_id,
            CandidateExposure.shown_user_id == shown_id,
            CandidateExposure.date_utc == on_date
        )
        if surface is not None:
            stmt = stmt.where(CandidateExposure.surface == surface)
        return self.db.execute(stmt.limit(1)).first() is not None

    def get_viewers_who_saw(
        self,
        shown_id: int,
        viewer_ids: Iterable[int],
        since_date: date
    ) -> Set[int]:
        """Which of viewer_ids were shown `shown_id` on or after since_date."""
        ids = set(viewer_ids)
        if not ids:
            return set()
        stmt = select(CandidateExposure.viewer_user_id).where(
            CandidateExposure.viewer_user_id.in_(ids),
            CandidateExposure.shown_user_id == shown_id,
            CandidateExposure.date_utc >= since_date
        ).distinct()
        return set(self.db.execute(stmt).scalars().all())

    def count_exposures(
        self,
        viewer_id: int,
        shown_ids: Iterable[int],
        since_date: date
    ) -> Dict[int, int]:
        """How many times viewer_id was shown each of shown_ids since since_date."""
        ids = set(shown_ids)
        if not ids:
            return {}
        stmt = (
            select(CandidateExposure.shown_user_id, func.count(CandidateExposure.id))
            .where(
                CandidateExposure.viewer_user_id == viewer_id,
                CandidateExposure.shown_user_id.in_(ids),
                CandidateExposure.date_utc >= since_date
            )
            .group_by(CandidateExposure.shown_user_id)
        )
        return {shown_id: count for shown_id, count in self.db.execute(stmt).all()}

    def add_exposures(self, exposures: List[CandidateExposure]) -> int:
        if not exposures:
            return 0
        self.db.add_all(exposures)
        self.flush()
        return len(exposures)
