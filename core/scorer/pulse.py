from typing import Optional

from core.config_loader import ScorerConfig
from core.scorer.models import clamp
from core.vectors import PulseFeatures


def calculate_pulse_score(
    viewer: Optional[PulseFeatures],
    candidate: Optional[PulseFeatures],
    config: ScorerConfig
) -> float:
    """Short-term engagement fit. Each feature contributes only when both sides report it."""
    if viewer is None or candidate is None:
        return config.neutral_score

    score = config.neutral_score

    if viewer.social_capacity is not None and candidate.social_capacity is not None:
        diff = abs(viewer.social_capacity - candidate.social_capacity)
        score += config.social_capacity_weight * (1.0 - diff)

    if viewer.initiative is not None and candidate.initiative is not None:
        # A leader and a follower pair well; near-identical initiative helps a little
        diff = abs(viewer.initiative - candidate.initiative)
        if diff > config.initiative_divergent_threshold:
            score += config.initiative_divergent_bonus
        elif diff < config.initiative_close_threshold:
            score += config.initiative_close_bonus

    if candidate.ghost_risk is not None and candidate.ghost_risk > config.ghost_risk_threshold:
        score -= config.ghost_risk_penalty

    return clamp(score)
