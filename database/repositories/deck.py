import logging
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy import select

from database.models import DailyDeck, MatchExplanation
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class DeckRepository(BaseRepository):
    def get_deck(self, user_id: int, on_date: date) -> Optional[DailyDeck]:
        stmt = select(DailyDeck).where(
            DailyDeck.user_id == user_id,
            DailyDeck.date_utc == on_date
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def add_deck(self, user_id: int, on_date: date, items: List[Dict[str, Any]]) -> DailyDeck:
        """Insert a deck and flush so the (user_id, date_utc) constraint is checked now."""
        deck = DailyDeck(user_id=user_id, date_utc=on_date, items=items)
        self.db.add(deck)
        self.flush()
        return deck

    def add_explanation(
        self,
        user_id: int,
        candidate_id: int,
        on_date: date,
        headline: str,
        bullets: List[str],
        tone: str,
        date_idea: Optional[str] = None
    ) -> MatchExplanation:
        explanation = MatchExplanation(
            user_id=user_id,
            candidate_id=candidate_id,
            date_utc=on_date,
            headline=headline,
            bullets=bullets,
            tone=tone,
            date_idea=date_idea
        )
        self.db.add(explanation)
        self.flush()
        return explanation
