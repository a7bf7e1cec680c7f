"""
Explanation Interfaces - "Why you match" rationale for deck items.

A composer only produces text (it may call a slow external writer);
a generator persists an explanation and returns its id.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from core.scorer.models import CandidateScore
from core.selector.models import MatchBucket


@dataclass
class ExplanationContent:
    headline: str
    bullets: List[str] = field(default_factory=list)
    date_idea: Optional[str] = None
    tone: Optional[str] = None


class ExplanationComposer(ABC):
    """
    Abstract interface for rationale writers (AI services, copy templates, ...).
    Implementations must not touch the database session.
    """

    @abstractmethod
    def compose(
        self,
        viewer_id: int,
        candidate_id: int,
        score: CandidateScore,
        bucket: MatchBucket
    ) -> ExplanationContent:
        pass


class ExplanationGenerator(ABC):

    @abstractmethod
    def generate(
        self,
        viewer_id: int,
        candidate_id: int,
        score: CandidateScore,
        bucket: MatchBucket,
        on_date: date
    ) -> int:
        """Persist an explanation for one deck item and return its id."""
        pass

    def close(self) -> None:
        """Release any worker resources. The default holds none."""
