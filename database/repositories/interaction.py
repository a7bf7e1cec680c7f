import logging
from datetime import date, datetime
from typing import Iterable, List, Set

from sqlalchemy import select, or_, and_

from database.models import (
    Block, Match, PendingMatch, MomentResponse,
    BalloonState, MomentChoice
)
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class InteractionRepository(BaseRepository):
    """Read-only queries over blocks, matches and responses between users."""

    def get_blocked_ids(self, user_id: int) -> Set[int]:
        """Users blocked by, or blocking, user_id."""
        blocked = select(Block.blocked_id).where(Block.blocker_id == user_id)
        blockers = select(Block.blocker_id).where(Block.blocked_id == user_id)
        ids = set(self.db.execute(blocked).scalars().all())
        ids.update(self.db.execute(blockers).scalars().all())
        return ids

    def get_active_match_partner_ids(self, user_id: int) -> Set[int]:
        stmt = select(Match.user_a_id, Match.user_b_id).where(
            Match.balloon_state == BalloonState.ACTIVE.value,
            or_(Match.user_a_id == user_id, Match.user_b_id == user_id)
        )
        partners = set()
        for user_a_id, user_b_id in self.db.execute(stmt).all():
            partners.add(user_b_id if user_a_id == user_id else user_a_id)
        return partners

    def get_pending_interest_from(
        self,
        candidate_ids: Iterable[int],
        target_id: int,
        since: datetime
    ) -> Set[int]:
        """Candidates who saved target_id as a pending interest since `since`."""
        ids = set(candidate_ids)
        if not ids:
            return set()
        stmt = select(PendingMatch.user_id).where(
            PendingMatch.user_id.in_(ids),
            PendingMatch.target_user_id == target_id,
            PendingMatch.created_at >= since
        ).distinct()
        return set(self.db.execute(stmt).scalars().all())

    def get_positive_responses_from(
        self,
        candidate_ids: Iterable[int],
        target_id: int,
        since_date: date
    ) -> Set[int]:
        """Candidates who answered YES to target_id on or after since_date."""
        ids = set(candidate_ids)
        if not ids:
            return set()
        stmt = select(MomentResponse.from_user_id).where(
            MomentResponse.from_user_id.in_(ids),
            MomentResponse.to_user_id == target_id,
            MomentResponse.choice == MomentChoice.YES.value,
            MomentResponse.date_utc >= since_date
        ).distinct()
        return set(self.db.execute(stmt).scalars().all())

    def get_closed_match_partners(
        self,
        user_id: int,
        candidate_ids: Iterable[int],
        reason: str,
        since: datetime
    ) -> List[int]:
        """Partner id per closed match with `reason` closed since `since`.

        One entry per match row, so repeated outcomes with the same partner
        appear repeatedly.
        """
        ids = set(candidate_ids)
        if not ids:
            return []
        stmt = select(Match.user_a_id, Match.user_b_id).where(
            Match.balloon_state == BalloonState.CLOSED.value,
            Match.closed_reason == reason,
            Match.closed_at.is_not(None),
            Match.closed_at >= since,
            or_(
                and_(Match.user_a_id == user_id, Match.user_b_id.in_(ids)),
                and_(Match.user_b_id == user_id, Match.user_a_id.in_(ids)),
            )
        )
        return [
            user_b_id if user_a_id == user_id else user_a_id
            for user_a_id, user_b_id in self.db.execute(stmt).all()
        ]
