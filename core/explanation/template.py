import logging
from datetime import date
from typing import Dict, Optional

from sqlalchemy.orm import Session

from core.config_loader import ExplanationConfig
from core.explanation.interfaces import ExplanationComposer, ExplanationContent, ExplanationGenerator
from core.scorer.models import CandidateScore
from core.selector.models import MatchBucket
from database.repositories import DeckRepository

logger = logging.getLogger(__name__)

_TEMPLATES: Dict[MatchBucket, ExplanationContent] = {
    MatchBucket.CORE_FIT: ExplanationContent(
        headline="You both want something meaningful.",
        bullets=["Shared: similar values and relationship goals"],
        date_idea="Have a deep conversation over dinner",
    ),
    MatchBucket.LIFESTYLE_FIT: ExplanationContent(
        headline="Your lifestyles align in key ways.",
        bullets=["Lifestyle: compatible daily routines and priorities"],
        date_idea="Try a new activity you both enjoy",
    ),
    MatchBucket.CONVERSATION_FIT: ExplanationContent(
        headline="You're on the same wavelength right now.",
        bullets=["Energy: good match for today's vibe"],
        date_idea="Grab coffee and see where the conversation goes",
    ),
    MatchBucket.EXPLORER: ExplanationContent(
        headline="There's potential here worth exploring.",
        bullets=["Shared: some interesting common ground"],
        date_idea="Meet for a casual walk and chat",
    ),
}

_DEFAULT_TEMPLATE = ExplanationContent(
    headline="This could be an interesting match.",
    bullets=["Worth a conversation"],
    date_idea="Start with a coffee and see how it feels",
)


class TemplateComposer(ExplanationComposer):
    """Static copy keyed only by bucket."""

    def compose(self, viewer_id, candidate_id, score, bucket) -> ExplanationContent:
        template = _TEMPLATES.get(MatchBucket(bucket), _DEFAULT_TEMPLATE)
        return ExplanationContent(
            headline=template.headline,
            bullets=list(template.bullets),
            date_idea=template.date_idea,
        )


def save_explanation(
    repo: DeckRepository,
    viewer_id: int,
    candidate_id: int,
    on_date: date,
    content: ExplanationContent,
    default_tone: str
) -> int:
    explanation = repo.add_explanation(
        user_id=viewer_id,
        candidate_id=candidate_id,
        on_date=on_date,
        headline=content.headline,
        bullets=content.bullets,
        tone=content.tone or default_tone,
        date_idea=content.date_idea,
    )
    return explanation.id


class TemplateExplanationGenerator(ExplanationGenerator):

    def __init__(self, db: Session, config: Optional[ExplanationConfig] = None):
        self.config = config or ExplanationConfig()
        self.repo = DeckRepository(db)
        self.composer = TemplateComposer()

    def generate(
        self,
        viewer_id: int,
        candidate_id: int,
        score: CandidateScore,
        bucket: MatchBucket,
        on_date: date
    ) -> int:
        content = self.composer.compose(viewer_id, candidate_id, score, bucket)
        explanation_id = save_explanation(
            self.repo, viewer_id, candidate_id, on_date, content, self.config.default_tone
        )
        logger.debug(f"Saved template explanation {explanation_id} for {viewer_id}->{candidate_id}")
        return explanation_id
