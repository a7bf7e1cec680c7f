import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from core.config_loader import ExplanationConfig
from core.explanation.interfaces import ExplanationComposer, ExplanationContent, ExplanationGenerator
from core.explanation.template import TemplateComposer, save_explanation
from core.scorer.models import CandidateScore
from core.selector.models import MatchBucket
from database.repositories import DeckRepository

logger = logging.getLogger(__name__)


def _usable(content) -> bool:
    return (
        isinstance(content, ExplanationContent)
        and isinstance(content.headline, str)
        and bool(content.headline.strip())
        and isinstance(content.bullets, list)
    )


class GuardedExplanationGenerator(ExplanationGenerator):
    """
    Runs the primary composer under a timeout and falls back to the static
    template when it fails, times out, or returns nothing usable.

    Composition runs on a worker thread; persistence always happens on the
    caller's thread and session.
    """

    def __init__(
        self,
        db: Session,
        primary: Optional[ExplanationComposer] = None,
        config: Optional[ExplanationConfig] = None,
        max_workers: int = 4
    ):
        self.config = config or ExplanationConfig()
        self.repo = DeckRepository(db)
        self.primary = primary
        self.fallback = TemplateComposer()
        self._executor = ThreadPoolExecutor(max_workers=max_workers) if primary else None

    def generate(
        self,
        viewer_id: int,
        candidate_id: int,
        score: CandidateScore,
        bucket: MatchBucket,
        on_date: date
    ) -> int:
        content = self._compose_primary(viewer_id, candidate_id, score, bucket)
        if content is None:
            content = self.fallback.compose(viewer_id, candidate_id, score, bucket)
        return save_explanation(
            self.repo, viewer_id, candidate_id, on_date, content, self.config.default_tone
        )

    def _compose_primary(
        self,
        viewer_id: int,
        candidate_id: int,
        score: CandidateScore,
        bucket: MatchBucket
    ) -> Optional[ExplanationContent]:
        if self.primary is None or self._executor is None:
            return None

        future = self._executor.submit(self.primary.compose, viewer_id, candidate_id, score, bucket)
        try:
            content = future.result(timeout=self.config.timeout_seconds)
        except FutureTimeoutError:
            future.cancel()
            logger.warning(
                f"Explanation for {viewer_id}->{candidate_id} timed out after "
                f"{self.config.timeout_seconds}s; using template"
            )
            return None
        except Exception as e:
            logger.warning(f"Explanation for {viewer_id}->{candidate_id} failed: {e}; using template")
            return None

        if not _usable(content):
            logger.warning(f"Unusable explanation for {viewer_id}->{candidate_id}: {content!r}; using template")
            return None
        return content

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=False)
            self._executor = None
