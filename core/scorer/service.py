#!/usr/bin/env python3
"""
Scoring Service - Compatibility scoring of pool candidates.

Computes four sub-scores per candidate and a weighted total:
- Intent: what each user wants right now
- Foundational: long-term values (pillar similarity, damped by signal strength)
- Lifestyle: rule-based compatibility of optional profile fields
- Pulse: short-term engagement fit

Scoring is pure computation over vectors fetched in one batch; it never writes.
"""

from typing import Iterable, List, Optional
import logging

from sqlalchemy.orm import Session

from core.config_loader import ScorerConfig
from core.vectors import VectorProvider, UserVector
from core.scorer.models import CandidateScore, clamp
from core.scorer.intent import calculate_intent_score
from core.scorer.foundational import calculate_foundational_score
from core.scorer.lifestyle import calculate_lifestyle_score
from core.scorer.pulse import calculate_pulse_score

logger = logging.getLogger(__name__)


class ScoringService:

    def __init__(
        self,
        db: Optional[Session] = None,
        config: Optional[ScorerConfig] = None,
        vector_provider: Optional[VectorProvider] = None
    ):
        self.config = config or ScorerConfig()
        if vector_provider is None and db is None:
            raise ValueError("ScoringService needs a session or a vector provider")
        self.vectors = vector_provider or VectorProvider(db)

    def score_candidates(self, viewer_id: int, candidate_ids: Iterable[int]) -> List[CandidateScore]:
        """
        Score every candidate that has a vector.

        Returns an empty list when the viewer has no vector. Candidates without
        a vector are skipped.
        """
        ids = sorted(set(candidate_ids))
        if not ids:
            return []

        vectors = self.vectors.get_latest_many([viewer_id, *ids])
        viewer = vectors.get(viewer_id)
        if viewer is None:
            logger.warning(f"User {viewer_id} has no vector; nothing scored")
            return []

        scores = []
        for candidate_id in ids:
            candidate = vectors.get(candidate_id)
            if candidate is None:
                logger.debug(f"Skipping candidate {candidate_id}: no vector")
                continue
            scores.append(self.score_pair(viewer, candidate))

        if scores:
            avg = sum(s.total for s in scores) / len(scores)
            logger.info(f"Scored {len(scores)}/{len(ids)} candidates for user {viewer_id}, avg total {avg:.2f}")
        return scores

    def score_pair(self, viewer: UserVector, candidate: UserVector) -> CandidateScore:
        cfg = self.config
        score = CandidateScore(candidate_id=candidate.user_id)

        score.intent = calculate_intent_score(viewer.intent, candidate.intent, cfg)
        score.foundational = calculate_foundational_score(
            viewer.pillars, candidate.pillars,
            viewer.foundational_tags, candidate.foundational_tags,
            cfg
        )
        score.lifestyle = calculate_lifestyle_score(viewer.lifestyle, candidate.lifestyle, cfg)
        score.pulse = calculate_pulse_score(viewer.pulse, candidate.pulse, cfg)

        w = cfg.weights
        score.total = clamp(
            score.intent * w.intent
            + score.foundational * w.foundational
            + score.lifestyle * w.lifestyle
            + score.pulse * w.pulse
        )
        return score
