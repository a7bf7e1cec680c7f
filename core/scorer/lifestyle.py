from typing import Dict, List, Optional

from core.config_loader import LifestyleRule, ScorerConfig
from core.scorer.models import clamp


def _normalize(value: str) -> str:
    return value.strip().lower()


def _first_value(fields: Dict[str, str], keys: List[str]) -> Optional[str]:
    for key in keys:
        value = fields.get(key)
        if value is not None and value.strip():
            return value
    return None


def is_incompatible(rule: LifestyleRule, a: str, b: str) -> bool:
    """Whether two differing values count as a hard incompatibility under `rule`."""
    a, b = _normalize(a), _normalize(b)
    if a == b:
        return False
    if rule.penalize_any_mismatch:
        return True
    if rule.exclusive_values:
        exclusive = {_normalize(v) for v in rule.exclusive_values}
        if (a in exclusive) != (b in exclusive):
            return True
    for pair in rule.incompatible_pairs:
        if {a, b} == {_normalize(v) for v in pair}:
            return True
    return False


def calculate_lifestyle_score(
    viewer_fields: Dict[str, str],
    candidate_fields: Dict[str, str],
    config: ScorerConfig
) -> float:
    """Neutral baseline adjusted by each rule where both sides answered."""
    score = config.neutral_score

    for rule in config.lifestyle_rules:
        mine = _first_value(viewer_fields, rule.keys)
        theirs = _first_value(candidate_fields, rule.keys)
        if mine is None or theirs is None:
            continue

        if is_incompatible(rule, mine, theirs):
            score -= rule.mismatch_penalty
        elif _normalize(mine) == _normalize(theirs):
            score += rule.match_bonus

    return clamp(score)
