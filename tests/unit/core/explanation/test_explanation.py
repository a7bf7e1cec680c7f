#!/usr/bin/env python3
"""
Tests for explanation generators: static templates and the timeout guard.
"""

import threading
import unittest
from datetime import date

import pytest

from core.config_loader import ExplanationConfig
from core.explanation import (
    ExplanationComposer,
    ExplanationContent,
    GuardedExplanationGenerator,
    TemplateComposer,
    TemplateExplanationGenerator,
)
from core.scorer import CandidateScore
from core.selector import MatchBucket
from database.models import MatchExplanation
from tests import make_test_session

ON_DATE = date(2026, 3, 10)


class FixedComposer(ExplanationComposer):
    def compose(self, viewer_id, candidate_id, score, bucket):
        return ExplanationContent(
            headline="You both love night markets.",
            bullets=["Shared: street food"],
            date_idea="Dumplings at the night market",
            tone="playful",
        )


class FailingComposer(ExplanationComposer):
    def compose(self, viewer_id, candidate_id, score, bucket):
        raise RuntimeError("upstream unavailable")


class EmptyComposer(ExplanationComposer):
    def compose(self, viewer_id, candidate_id, score, bucket):
        return None


class DictComposer(ExplanationComposer):
    def compose(self, viewer_id, candidate_id, score, bucket):
        return {"headline": "not a content object"}


class BlockingComposer(ExplanationComposer):
    def __init__(self):
        self.release = threading.Event()

    def compose(self, viewer_id, candidate_id, score, bucket):
        self.release.wait(timeout=5)
        return ExplanationContent(headline="too late")


class TestTemplateComposer(unittest.TestCase):

    def test_01_templates_keyed_by_bucket(self):
        composer = TemplateComposer()
        score = CandidateScore(candidate_id=2)

        core = composer.compose(1, 2, score, MatchBucket.CORE_FIT)
        self.assertEqual(core.headline, "You both want something meaningful.")
        self.assertEqual(core.bullets, ["Shared: similar values and relationship goals"])
        self.assertEqual(core.date_idea, "Have a deep conversation over dinner")

        lifestyle = composer.compose(1, 2, score, MatchBucket.LIFESTYLE_FIT)
        self.assertEqual(lifestyle.headline, "Your lifestyles align in key ways.")

        conversation = composer.compose(1, 2, score, MatchBucket.CONVERSATION_FIT)
        self.assertEqual(conversation.date_idea, "Grab coffee and see where the conversation goes")

        explorer = composer.compose(1, 2, score, MatchBucket.EXPLORER)
        self.assertEqual(explorer.bullets, ["Shared: some interesting common ground"])

    def test_02_wildcard_uses_default(self):
        content = TemplateComposer().compose(1, 2, CandidateScore(candidate_id=2), MatchBucket.WILDCARD)
        self.assertEqual(content.headline, "This could be an interesting match.")
        self.assertEqual(content.bullets, ["Worth a conversation"])
        self.assertEqual(content.date_idea, "Start with a coffee and see how it feels")


@pytest.mark.db
class TestExplanationGenerators(unittest.TestCase):

    def setUp(self):
        self.session = make_test_session()
        self.score = CandidateScore(candidate_id=2, total=72.0)
        self.config = ExplanationConfig(timeout_seconds=0.2)

    def tearDown(self):
        self.session.close()

    def stored(self, explanation_id):
        return self.session.get(MatchExplanation, explanation_id)

    def test_01_template_generator_persists(self):
        generator = TemplateExplanationGenerator(self.session, self.config)
        explanation_id = generator.generate(1, 2, self.score, MatchBucket.CORE_FIT, ON_DATE)

        row = self.stored(explanation_id)
        self.assertEqual(row.user_id, 1)
        self.assertEqual(row.candidate_id, 2)
        self.assertEqual(row.date_utc, ON_DATE)
        self.assertEqual(row.headline, "You both want something meaningful.")
        self.assertEqual(row.tone, "calm")

    def test_02_guard_without_primary_uses_template(self):
        generator = GuardedExplanationGenerator(self.session, primary=None, config=self.config)
        row = self.stored(generator.generate(1, 2, self.score, MatchBucket.EXPLORER, ON_DATE))
        self.assertEqual(row.headline, "There's potential here worth exploring.")

    def test_03_guard_uses_primary_content(self):
        generator = GuardedExplanationGenerator(self.session, primary=FixedComposer(), config=self.config)
        try:
            row = self.stored(generator.generate(1, 2, self.score, MatchBucket.CORE_FIT, ON_DATE))
        finally:
            generator.close()
        self.assertEqual(row.headline, "You both love night markets.")
        self.assertEqual(row.bullets, ["Shared: street food"])
        self.assertEqual(row.tone, "playful")

    def test_04_guard_falls_back_on_error(self):
        generator = GuardedExplanationGenerator(self.session, primary=FailingComposer(), config=self.config)
        try:
            row = self.stored(generator.generate(1, 2, self.score, MatchBucket.LIFESTYLE_FIT, ON_DATE))
        finally:
            generator.close()
        self.assertEqual(row.headline, "Your lifestyles align in key ways.")

    def test_05_guard_falls_back_on_empty_result(self):
        generator = GuardedExplanationGenerator(self.session, primary=EmptyComposer(), config=self.config)
        try:
            row = self.stored(generator.generate(1, 2, self.score, MatchBucket.WILDCARD, ON_DATE))
        finally:
            generator.close()
        self.assertEqual(row.headline, "This could be an interesting match.")

    def test_06_guard_falls_back_on_timeout(self):
        composer = BlockingComposer()
        generator = GuardedExplanationGenerator(self.session, primary=composer, config=self.config)
        try:
            row = self.stored(generator.generate(1, 2, self.score, MatchBucket.CONVERSATION_FIT, ON_DATE))
        finally:
            composer.release.set()
            generator.close()
        self.assertEqual(row.headline, "You're on the same wavelength right now.")

    def test_07_guard_falls_back_on_wrong_result_type(self):
        generator = GuardedExplanationGenerator(self.session, primary=DictComposer(), config=self.config)
        try:
            row = self.stored(generator.generate(1, 2, self.score, MatchBucket.CORE_FIT, ON_DATE))
        finally:
            generator.close()
        self.assertEqual(row.headline, "You both want something meaningful.")

    def test_08_closed_guard_uses_template(self):
        generator = GuardedExplanationGenerator(self.session, primary=FixedComposer(), config=self.config)
        executor = generator._executor
        generator.close()
        generator.close()

        with self.assertRaises(RuntimeError):
            executor.submit(lambda: None)
        row = self.stored(generator.generate(1, 2, self.score, MatchBucket.CORE_FIT, ON_DATE))
        self.assertEqual(row.headline, "You both want something meaningful.")


if __name__ == '__main__':
    unittest.main(verbosity=2)
