#!/usr/bin/env python3
"""
Deck Selection Service - Diversity-constrained top-N selection.

Fills bucket quotas in a fixed order, each from the candidates not yet
picked, using a bucket-specific ranking key:

- CORE_FIT: intent + foundational + boost
- LIFESTYLE_FIT: lifestyle + boost * secondary factor
- CONVERSATION_FIT: pulse + boost * secondary factor
- EXPLORER: total - foundational * explorer factor + boost * secondary factor

Remaining slots are filled by total + boost and labelled with static
thresholds. Ties always resolve to the lower candidate id.
"""

import logging
from collections import Counter
from typing import Callable, Dict, List, Optional, Set, Tuple

from core.config_loader import SelectionConfig
from core.scorer.models import CandidateScore
from core.selector.models import MatchBucket

logger = logging.getLogger(__name__)

Selection = List[Tuple[int, MatchBucket]]


class DeckSelectionService:

    def __init__(self, config: Optional[SelectionConfig] = None):
        self.config = config or SelectionConfig()

    def select_top_n(
        self,
        scores: List[CandidateScore],
        boosts: Optional[Dict[int, float]] = None
    ) -> Selection:
        if not scores:
            return []

        scores = self._unique(scores)
        cfg = self.config
        boosts = boosts or {}
        secondary = cfg.secondary_boost_factor

        def boost(s: CandidateScore) -> float:
            return boosts.get(s.candidate_id, 0.0)

        quotas: List[Tuple[MatchBucket, int, Callable[[CandidateScore], float]]] = [
            (MatchBucket.CORE_FIT, cfg.core_fit_slots,
             lambda s: s.intent + s.foundational + boost(s)),
            (MatchBucket.LIFESTYLE_FIT, cfg.lifestyle_fit_slots,
             lambda s: s.lifestyle + boost(s) * secondary),
            (MatchBucket.CONVERSATION_FIT, cfg.conversation_fit_slots,
             lambda s: s.pulse + boost(s) * secondary),
            (MatchBucket.EXPLORER, cfg.explorer_slots,
             lambda s: s.total - s.foundational * cfg.explorer_foundational_factor + boost(s) * secondary),
        ]

        selection: Selection = []
        selected: Set[int] = set()

        for bucket, slots, key in quotas:
            room = min(slots, cfg.deck_size - len(selection))
            for s in self._top(scores, selected, key, room):
                selection.append((s.candidate_id, bucket))
                selected.add(s.candidate_id)
                logger.debug(f"{bucket.value}: candidate {s.candidate_id} (total={s.total:.1f})")

        room = cfg.deck_size - len(selection)
        for s in self._top(scores, selected, lambda s: s.total + boost(s), room):
            selection.append((s.candidate_id, self.determine_bucket(s)))
            selected.add(s.candidate_id)

        counts = Counter(bucket.value for _, bucket in selection)
        logger.info(f"Selected {len(selection)} of {len(scores)} scored candidates: {dict(counts)}")
        return selection

    @staticmethod
    def _unique(scores: List[CandidateScore]) -> List[CandidateScore]:
        """First entry wins when a candidate id repeats."""
        seen: Set[int] = set()
        unique = []
        for s in scores:
            if s.candidate_id in seen:
                logger.warning(f"Ignoring duplicate score for candidate {s.candidate_id}")
                continue
            seen.add(s.candidate_id)
            unique.append(s)
        return unique

    @staticmethod
    def _top(
        scores: List[CandidateScore],
        exclude: Set[int],
        key: Callable[[CandidateScore], float],
        count: int
    ) -> List[CandidateScore]:
        if count <= 0:
            return []
        remaining = [s for s in scores if s.candidate_id not in exclude]
        remaining.sort(key=lambda s: (-key(s), s.candidate_id))
        return remaining[:count]

    def determine_bucket(self, score: CandidateScore) -> MatchBucket:
        t = self.config.thresholds
        if score.intent >= t.core_fit_intent and score.foundational >= t.core_fit_foundational:
            return MatchBucket.CORE_FIT
        if score.lifestyle >= t.lifestyle_fit:
            return MatchBucket.LIFESTYLE_FIT
        if score.pulse >= t.conversation_fit:
            return MatchBucket.CONVERSATION_FIT
        if score.total >= t.explorer_total:
            return MatchBucket.EXPLORER
        return MatchBucket.WILDCARD
