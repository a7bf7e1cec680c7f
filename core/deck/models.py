from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional


@dataclass
class DeckItem:
    candidate_id: int
    score: float
    bucket: str
    explanation_id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DeckItem':
        return cls(
            candidate_id=int(data["candidate_id"]),
            score=float(data.get("score", 0.0)),
            bucket=str(data.get("bucket", "")),
            explanation_id=data.get("explanation_id"),
        )


@dataclass
class DailyDeckResult:
    items: List[DeckItem] = field(default_factory=list)
    was_freshly_generated: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "items": [item.to_dict() for item in self.items],
            "was_freshly_generated": self.was_freshly_generated,
        }
