#!/usr/bin/env python3
"""
Scoring Models - Data structures for scoring results.
"""

from dataclasses import dataclass, asdict
from typing import Dict, Any


@dataclass
class CandidateScore:
    """Compatibility of one candidate with the viewer. All fields on a 0-100 scale."""
    candidate_id: int
    intent: float = 50.0
    foundational: float = 50.0
    lifestyle: float = 50.0
    pulse: float = 50.0
    total: float = 50.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))
