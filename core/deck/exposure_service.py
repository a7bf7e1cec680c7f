import logging
from datetime import date, datetime, timezone
from typing import Dict, Iterable, Optional, Set

from sqlalchemy.orm import Session

from database.models import CandidateExposure
from database.repositories import ExposureRepository

logger = logging.getLogger(__name__)


def _today() -> date:
    return datetime.now(timezone.utc).date()


class ExposureService:
    """Queries and appends to the exposure log for any surface."""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ExposureRepository(db)

    def has_seen(
        self,
        viewer_id: int,
        candidate_id: int,
        on_date: Optional[date] = None,
        surface: Optional[str] = None
    ) -> bool:
        return self.repo.has_exposure(viewer_id, candidate_id, on_date or _today(), surface)

    def shown_on(
        self,
        viewer_id: int,
        on_date: Optional[date] = None,
        surface: Optional[str] = None
    ) -> Set[int]:
        surfaces = [surface] if surface else None
        return self.repo.get_shown_ids(viewer_id, on_date or _today(), surfaces)

    def record(
        self,
        viewer_id: int,
        shown_ids: Iterable[int],
        on_date: date,
        surface: str,
        buckets: Optional[Dict[int, str]] = None,
        scores: Optional[Dict[int, float]] = None
    ) -> int:
        """
        Append one exposure per id not already recorded for this
        (viewer, date, surface). Returns the number of rows written.
        """
        already = self.repo.get_shown_ids(viewer_id, on_date, [surface])
        buckets = buckets or {}
        scores = scores or {}

        rows = []
        for shown_id in dict.fromkeys(shown_ids):
            if shown_id in already:
                continue
            rows.append(CandidateExposure(
                viewer_user_id=viewer_id,
                shown_user_id=shown_id,
                surface=surface,
                bucket=buckets.get(shown_id),
                score_snapshot=scores.get(shown_id),
                date_utc=on_date,
            ))

        written = self.repo.add_exposures(rows)
        if written:
            logger.info(f"Recorded {written} {surface} exposures for user {viewer_id} on {on_date}")
        return written
