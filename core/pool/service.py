import logging
from collections import Counter
from datetime import date, datetime, timezone
from typing import Optional, Set

from sqlalchemy.orm import Session

from core.config_loader import PoolConfig
from core.pool.filters import parse_interested_in, structures_compatible, within_distance
from database.repositories import ProfileRepository, InteractionRepository, ExposureRepository

logger = logging.getLogger(__name__)


class CandidatePoolService:
    """
    Computes the set of users eligible to appear in a viewer's deck.

    Hard exclusions (self, blocks, active matches, already shown today) and the
    viewer-side gender/age filters are pushed into SQL. Reciprocal age/gender,
    distance and relationship structure are checked per candidate.
    """

    def __init__(self, db: Session, config: Optional[PoolConfig] = None):
        self.config = config or PoolConfig()
        self.profile_repo = ProfileRepository(db)
        self.interaction_repo = InteractionRepository(db)
        self.exposure_repo = ExposureRepository(db)

    def get_eligible_candidates(self, viewer_id: int, on_date: Optional[date] = None) -> Set[int]:
        on_date = on_date or datetime.now(timezone.utc).date()

        viewer_profile = self.profile_repo.get_profile(viewer_id)
        viewer_pref = self.profile_repo.get_preference(viewer_id)
        if viewer_profile is None or viewer_pref is None:
            logger.warning(f"User {viewer_id} has no profile or preferences; empty candidate pool")
            return set()

        excluded = {viewer_id}
        excluded |= self.interaction_repo.get_blocked_ids(viewer_id)
        excluded |= self.interaction_repo.get_active_match_partner_ids(viewer_id)
        excluded |= self.exposure_repo.get_shown_ids(
            viewer_id, on_date, surfaces=self.config.exclude_shown_surfaces
        )

        viewer_wants = parse_interested_in(viewer_pref.interested_in_json, viewer_id)
        rows = self.profile_repo.find_candidates(
            viewer_id,
            excluded_ids=excluded,
            genders=viewer_wants,
            age_min=viewer_pref.age_min,
            age_max=viewer_pref.age_max,
        )

        viewer_gender = (viewer_profile.gender or "").strip().lower()
        rejected = Counter()
        eligible: Set[int] = set()

        for cand_profile, cand_pref in rows:
            if not (cand_pref.age_min <= viewer_profile.age <= cand_pref.age_max):
                rejected["reciprocal_age"] += 1
                continue

            cand_wants = parse_interested_in(cand_pref.interested_in_json, cand_profile.user_id)
            if cand_wants is not None and viewer_gender not in cand_wants:
                rejected["reciprocal_gender"] += 1
                continue

            if not within_distance(viewer_profile, viewer_pref, cand_profile, cand_pref,
                                   self.config.earth_radius_miles):
                rejected["distance"] += 1
                continue

            if not structures_compatible(viewer_pref.relationship_structure, cand_pref.relationship_structure):
                rejected["relationship_structure"] += 1
                continue

            eligible.add(cand_profile.user_id)

        logger.info(
            f"Candidate pool for user {viewer_id} on {on_date}: {len(eligible)} eligible "
            f"of {len(rows)} after hard exclusions ({len(excluded) - 1} excluded); "
            f"rejected {dict(rejected)}"
        )
        return eligible
