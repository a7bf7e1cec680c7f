"""
Vector Models - Typed views over the raw user_vector blobs.

The blobs are written by an external tagging service. Parsing never raises:
any sub-structure that cannot be read is left absent and logged.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

CURRENT_SCHEMA_VERSION = 1

PILLAR_NAMES = [
    "Lifestyle",
    "Energy",
    "Values",
    "Communication",
    "Ambition",
    "Stability",
    "Curiosity",
    "Affection",
]

PILLAR_DEFAULT = 0.5


def _as_float(value: Any, default: Optional[float]) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _as_str_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(v) for v in value if v is not None and str(v).strip()]


@dataclass
class IntentMetadata:
    """What a user is looking for right now. Scalars on a 0.0-1.0 scale."""
    seriousness: float = 0.5
    flexibility: float = 0.5
    commitment_readiness: float = 0.5
    tags: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'IntentMetadata':
        return cls(
            seriousness=_as_float(data.get("seriousness"), 0.5),
            flexibility=_as_float(data.get("flexibility"), 0.5),
            commitment_readiness=_as_float(data.get("commitmentReadiness"), 0.5),
            tags=_as_str_list(data.get("tags")),
        )


@dataclass
class PillarScores:
    """The eight foundational pillars, always in PILLAR_NAMES order."""
    values: Dict[str, float] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PillarScores':
        return cls(values={
            name: _as_float(data.get(name), PILLAR_DEFAULT) for name in PILLAR_NAMES
        })

    def as_list(self) -> List[float]:
        return [self.values.get(name, PILLAR_DEFAULT) for name in PILLAR_NAMES]


@dataclass
class PulseFeatures:
    """Short-lived engagement signals. A feature is None when not reported."""
    social_capacity: Optional[float] = None
    initiative: Optional[float] = None
    ghost_risk: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PulseFeatures':
        return cls(
            social_capacity=_as_float(data.get("socialCapacity"), None),
            initiative=_as_float(data.get("initiative"), None),
            ghost_risk=_as_float(data.get("ghostRisk"), None),
        )


@dataclass
class UserVector:
    user_id: int
    version: int
    schema_version: int = CURRENT_SCHEMA_VERSION
    intent: Optional[IntentMetadata] = None
    pillars: Optional[PillarScores] = None
    foundational_tags: Dict[str, List[str]] = field(default_factory=dict)
    lifestyle: Dict[str, str] = field(default_factory=dict)
    pulse: Optional[PulseFeatures] = None


def _load_object(raw: Optional[str], label: str, user_id: int) -> Dict[str, Any]:
    if not raw:
        return {}
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, TypeError, ValueError) as e:
        logger.warning(f"Malformed {label} for user {user_id}: {e}")
        return {}
    if not isinstance(data, dict):
        logger.warning(f"Malformed {label} for user {user_id}: expected an object")
        return {}
    return data


def _sub_map(data: Dict[str, Any], key: str, user_id: int) -> Optional[Dict[str, Any]]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, dict):
        logger.warning(f"Ignoring malformed '{key}' section for user {user_id}")
        return None
    return value


def parse_vector(
    user_id: int,
    version: int,
    vector_json: Optional[str],
    pillar_scores_json: Optional[str]
) -> UserVector:
    """Build a typed UserVector from the stored blobs."""
    data = _load_object(vector_json, "vector_json", user_id)

    schema_version = data.get("schema_version", CURRENT_SCHEMA_VERSION)
    if not isinstance(schema_version, int):
        schema_version = CURRENT_SCHEMA_VERSION

    intent_data = _sub_map(data, "intent", user_id)
    intent = IntentMetadata.from_dict(intent_data) if intent_data else None

    pulse_data = _sub_map(data, "pulse", user_id)
    pulse = PulseFeatures.from_dict(pulse_data) if pulse_data else None

    foundational_tags: Dict[str, List[str]] = {}
    foundational = _sub_map(data, "foundational", user_id) or {}
    raw_tags = foundational.get("tags")
    if isinstance(raw_tags, dict):
        for category, tags in raw_tags.items():
            cleaned = _as_str_list(tags)
            if cleaned:
                foundational_tags[str(category)] = cleaned

    pillar_data = _load_object(pillar_scores_json, "pillar_scores_json", user_id)
    if not pillar_data and isinstance(foundational.get("pillars"), dict):
        pillar_data = foundational["pillars"]
    pillars = PillarScores.from_dict(pillar_data) if pillar_data else None

    lifestyle: Dict[str, str] = {}
    for key, value in (_sub_map(data, "lifestyle", user_id) or {}).items():
        if value is not None and str(value).strip():
            lifestyle[str(key)] = str(value)

    return UserVector(
        user_id=user_id,
        version=version,
        schema_version=schema_version,
        intent=intent,
        pillars=pillars,
        foundational_tags=foundational_tags,
        lifestyle=lifestyle,
        pulse=pulse,
    )
