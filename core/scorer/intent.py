from typing import Optional

from core.config_loader import ScorerConfig
from core.scorer.models import clamp
from core.vectors import IntentMetadata


def calculate_intent_score(
    viewer: Optional[IntentMetadata],
    candidate: Optional[IntentMetadata],
    config: ScorerConfig
) -> float:
    """How closely two users want the same kind of relationship right now."""
    if viewer is None or candidate is None:
        return config.neutral_score

    seriousness = 100.0 * (1.0 - abs(viewer.seriousness - candidate.seriousness))
    commitment = 100.0 * (1.0 - abs(viewer.commitment_readiness - candidate.commitment_readiness))

    overlap = len({t.lower() for t in viewer.tags} & {t.lower() for t in candidate.tags})
    tag_bonus = min(config.intent_tag_bonus_cap, overlap * config.intent_tag_bonus_per_overlap)

    score = (
        seriousness * config.intent_seriousness_weight
        + commitment * config.intent_commitment_weight
        + tag_bonus
    )
    return clamp(score)
