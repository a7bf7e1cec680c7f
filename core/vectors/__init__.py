from core.vectors.models import (
    UserVector,
    IntentMetadata,
    PillarScores,
    PulseFeatures,
    PILLAR_NAMES,
    parse_vector,
)
from core.vectors.provider import VectorProvider

__all__ = [
    'UserVector',
    'IntentMetadata',
    'PillarScores',
    'PulseFeatures',
    'PILLAR_NAMES',
    'parse_vector',
    'VectorProvider',
]
