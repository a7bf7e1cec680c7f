#!/usr/bin/env python3
"""
Scoring Module - Compatibility scoring.

Public API:
- ScoringService: batch scorer for a viewer and a candidate set
- CandidateScore: per-candidate result

One module per sub-score:

- intent.py: seriousness/commitment closeness plus shared intent tags
- foundational.py: pillar cosine similarity with a low-signal guard
- lifestyle.py: configurable rule table over optional profile fields
- pulse.py: social capacity, initiative and ghost risk
"""

from core.scorer.models import CandidateScore
from core.scorer.service import ScoringService

__all__ = ['ScoringService', 'CandidateScore']
