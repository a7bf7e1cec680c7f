from __future__ import annotations

import logging
from typing import Dict, List, Optional

import numpy as np

from core.config_loader import ScorerConfig
from core.scorer.models import clamp
from core.vectors import PillarScores, PILLAR_NAMES

logger = logging.getLogger(__name__)


def _pillar_array(pillars: Optional[PillarScores], neutral: float) -> np.ndarray:
    if pillars is None:
        return np.full(len(PILLAR_NAMES), neutral, dtype=np.float64)
    return np.asarray(pillars.as_list(), dtype=np.float64)


def pillar_variance(values: np.ndarray, neutral: float = 0.5) -> float:
    """Mean squared distance of the pillars from neutral; low means little signal."""
    return float(np.mean((values - neutral) ** 2))


def cosine_similarity(a: np.ndarray, b: np.ndarray) -> float:
    denom = float(np.linalg.norm(a) * np.linalg.norm(b))
    if denom == 0.0:
        return 0.0
    return float(np.dot(a, b) / denom)


def categorical_tag_overlap(a: Dict[str, List[str]], b: Dict[str, List[str]]) -> int:
    """Case-insensitive tag overlap counted within each shared category."""
    overlap = 0
    for category, tags in a.items():
        if category not in b:
            continue
        overlap += len({t.lower() for t in tags} & {t.lower() for t in b[category]})
    return overlap


def calculate_foundational_score(
    viewer_pillars: Optional[PillarScores],
    candidate_pillars: Optional[PillarScores],
    viewer_tags: Dict[str, List[str]],
    candidate_tags: Dict[str, List[str]],
    config: ScorerConfig
) -> float:
    """
    Long-term values compatibility.

    Profiles whose pillars barely move off neutral score exactly neutral, so
    sparse answers cannot produce near-perfect cosine matches. Otherwise the
    cosine similarity is damped by the weaker profile's signal strength and a
    capped bonus is added for shared foundational tags.
    """
    a = _pillar_array(viewer_pillars, config.pillar_neutral)
    b = _pillar_array(candidate_pillars, config.pillar_neutral)

    var_a = pillar_variance(a, config.pillar_neutral)
    var_b = pillar_variance(b, config.pillar_neutral)
    if var_a < config.low_signal_variance or var_b < config.low_signal_variance:
        logger.debug(f"Low pillar signal (viewer {var_a:.4f}, candidate {var_b:.4f}); neutral foundational score")
        return config.neutral_score

    signal_strength = min(1.0, min(var_a, var_b) / config.reference_variance)
    pillar_score = cosine_similarity(a, b) * 100.0 * signal_strength

    overlap = categorical_tag_overlap(viewer_tags, candidate_tags)
    tag_bonus = min(config.foundational_tag_bonus_cap, overlap * config.foundational_tag_bonus_per_overlap)

    return clamp(pillar_score + tag_bonus)
