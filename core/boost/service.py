import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Dict, Iterable, Optional

from sqlalchemy.orm import Session

from core.config_loader import BoostConfig
from database.repositories import ExposureRepository, InteractionRepository

logger = logging.getLogger(__name__)


def end_of_day_utc(on_date: date) -> datetime:
    """Midnight UTC at the end of on_date; all timestamp windows are anchored here."""
    return datetime.combine(on_date + timedelta(days=1), time.min, tzinfo=timezone.utc)


class DeliveryBoostService:
    """
    Additive ranking deltas from recent interaction history.

    Positive signals (the candidate saw, saved or said yes to the viewer) push
    a candidate up; fatigue from repeated exposure and recently closed matches
    push it down. Deltas are unclamped and every requested id gets an entry.
    """

    def __init__(self, db: Session, config: Optional[BoostConfig] = None):
        self.config = config or BoostConfig()
        self.exposure_repo = ExposureRepository(db)
        self.interaction_repo = InteractionRepository(db)

    def get_boost_map(self, viewer_id: int, candidate_ids: Iterable[int], on_date: date) -> Dict[int, float]:
        cfg = self.config
        boost = {cid: 0.0 for cid in candidate_ids}
        if not boost:
            return boost

        ids = list(boost.keys())
        as_of = end_of_day_utc(on_date)
        since_date = on_date - timedelta(days=cfg.lookback_days)
        since = as_of - timedelta(days=cfg.lookback_days)

        # Candidate saw the viewer recently
        for cid in self.exposure_repo.get_viewers_who_saw(viewer_id, ids, since_date):
            boost[cid] += cfg.reciprocal_exposure_boost

        # Candidate saved the viewer as a pending interest
        for cid in self.interaction_repo.get_pending_interest_from(ids, viewer_id, since):
            boost[cid] += cfg.pending_interest_boost

        # Candidate answered YES to the viewer
        for cid in self.interaction_repo.get_positive_responses_from(ids, viewer_id, since_date):
            boost[cid] += cfg.positive_response_boost

        # Viewer has already seen the candidate too often
        for cid, count in self.exposure_repo.count_exposures(viewer_id, ids, since_date).items():
            if count >= cfg.fatigue_high_min_count:
                boost[cid] -= cfg.fatigue_high_penalty
            elif count >= cfg.fatigue_medium_min_count:
                boost[cid] -= cfg.fatigue_medium_penalty

        # Recently closed matches; each closed match counts
        for reason, lookback_days, penalty in (
            (cfg.disengagement_reason, cfg.disengagement_lookback_days, cfg.disengagement_penalty),
            (cfg.hard_negative_reason, cfg.hard_negative_lookback_days, cfg.hard_negative_penalty),
        ):
            cutoff = as_of - timedelta(days=lookback_days)
            for cid in self.interaction_repo.get_closed_match_partners(viewer_id, ids, reason, cutoff):
                if cid in boost:
                    boost[cid] -= penalty

        adjusted = sum(1 for v in boost.values() if v != 0.0)
        logger.info(f"Computed delivery boosts for user {viewer_id} on {on_date}: {adjusted}/{len(boost)} adjusted")
        return boost
