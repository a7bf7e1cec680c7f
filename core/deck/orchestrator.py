#!/usr/bin/env python3
"""
Daily Deck Orchestrator - One immutable deck per user per UTC day.

Flow on a cache miss:
1. Candidate pool
2. Compatibility scores
3. Delivery boosts
4. Diversity selection
5. Explanations (never drop a candidate on failure)
6. Persist the deck under the (user_id, date_utc) unique constraint
7. Record DECK exposures (best effort)

A concurrent request that loses the insert race returns the winner's deck.
"""

import logging
from datetime import date
from typing import Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.config_loader import MatchmakingConfig
from core.boost import DeliveryBoostService
from core.deck.exposure_service import ExposureService
from core.deck.models import DailyDeckResult, DeckItem
from core.explanation import (
    ExplanationComposer,
    ExplanationGenerator,
    GuardedExplanationGenerator,
)
from core.pool import CandidatePoolService
from core.scorer import ScoringService, CandidateScore
from core.selector import DeckSelectionService
from database.repositories import DeckRepository

logger = logging.getLogger(__name__)


class DailyDeckOrchestrator:

    def __init__(
        self,
        db: Session,
        pool: CandidatePoolService,
        scorer: ScoringService,
        boost: DeliveryBoostService,
        selector: DeckSelectionService,
        explainer: ExplanationGenerator,
        config: Optional[MatchmakingConfig] = None
    ):
        self.db = db
        self.pool = pool
        self.scorer = scorer
        self.boost = boost
        self.selector = selector
        self.explainer = explainer
        self.config = config or MatchmakingConfig()
        self.deck_repo = DeckRepository(db)
        self.exposures = ExposureService(db)

    @classmethod
    def build(
        cls,
        db: Session,
        config: Optional[MatchmakingConfig] = None,
        composer: Optional[ExplanationComposer] = None
    ) -> 'DailyDeckOrchestrator':
        """Wire the default services onto one session."""
        config = config or MatchmakingConfig()
        return cls(
            db=db,
            pool=CandidatePoolService(db, config.pool),
            scorer=ScoringService(db, config.scorer),
            boost=DeliveryBoostService(db, config.boost),
            selector=DeckSelectionService(config.selection),
            explainer=GuardedExplanationGenerator(db, primary=composer, config=config.explanation),
            config=config,
        )

    def get_or_create_deck(self, user_id: int, on_date: date) -> DailyDeckResult:
        existing = self.deck_repo.get_deck(user_id, on_date)
        if existing is not None:
            logger.info(f"Returning cached deck for user {user_id} on {on_date}")
            return self._to_result(existing, fresh=False)

        logger.info(f"Generating deck for user {user_id} on {on_date}")

        candidate_ids = self.pool.get_eligible_candidates(user_id, on_date)
        if not candidate_ids:
            logger.warning(f"No eligible candidates for user {user_id}")
            return DailyDeckResult(items=[], was_freshly_generated=True)

        scores = self.scorer.score_candidates(user_id, candidate_ids)
        if not scores:
            logger.warning(f"No candidates could be scored for user {user_id}")
            return DailyDeckResult(items=[], was_freshly_generated=True)

        boosts = self.boost.get_boost_map(user_id, [s.candidate_id for s in scores], on_date)
        selected = self.selector.select_top_n(scores, boosts)
        score_map: Dict[int, CandidateScore] = {s.candidate_id: s for s in scores}

        try:
            with self.db.begin_nested():
                items = self._build_items(user_id, on_date, selected, score_map)
                self.deck_repo.add_deck(user_id, on_date, [item.to_dict() for item in items])
        except IntegrityError:
            logger.info(f"Deck for user {user_id} on {on_date} was created concurrently; using stored deck")
            winner = self.deck_repo.get_deck(user_id, on_date)
            if winner is None:
                raise
            return self._to_result(winner, fresh=False)

        self._record_exposures(user_id, on_date, items)

        logger.info(f"Generated deck with {len(items)} items for user {user_id}")
        return DailyDeckResult(items=items, was_freshly_generated=True)

    def close(self) -> None:
        self.explainer.close()

    def _build_items(self, user_id, on_date, selected, score_map) -> List[DeckItem]:
        items = []
        for candidate_id, bucket in selected:
            score = score_map.get(candidate_id)
            if score is None:
                continue

            explanation_id = None
            try:
                with self.db.begin_nested():
                    explanation_id = self.explainer.generate(user_id, candidate_id, score, bucket, on_date)
            except Exception as e:
                logger.error(f"Explanation failed for {user_id}->{candidate_id}: {e}")

            items.append(DeckItem(
                candidate_id=candidate_id,
                score=score.total,
                bucket=bucket.value,
                explanation_id=explanation_id,
            ))
        return items

    def _record_exposures(self, user_id: int, on_date: date, items: List[DeckItem]) -> None:
        surface = self.config.deck.surface
        try:
            with self.db.begin_nested():
                self.exposures.record(
                    user_id,
                    [item.candidate_id for item in items],
                    on_date,
                    surface,
                    buckets={item.candidate_id: item.bucket for item in items},
                    scores={item.candidate_id: item.score for item in items},
                )
        except Exception as e:
            logger.error(f"Failed to record exposures for user {user_id}: {e}")

    @staticmethod
    def _to_result(deck, fresh: bool) -> DailyDeckResult:
        return DailyDeckResult(
            items=[DeckItem.from_dict(item) for item in (deck.items or [])],
            was_freshly_generated=fresh,
        )
