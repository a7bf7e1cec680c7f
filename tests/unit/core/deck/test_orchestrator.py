#!/usr/bin/env python3
"""
Tests for DailyDeckOrchestrator against an in-memory SQLite session.

Covers caching, empty pools, exposure bookkeeping, explanation failures and
the concurrent first-request race.
"""

import unittest
from datetime import date
from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy import select, func

from core.config_loader import MatchmakingConfig
from core.deck import DailyDeckOrchestrator, DailyDeckResult
from core.selector import MatchBucket
from database.models import DailyDeck, CandidateExposure, MatchExplanation
from tests import make_test_session, add_user, add_vector, STRONG_PILLARS

ON_DATE = date(2026, 3, 10)
VIEWER = 1


def count(session, model):
    return session.execute(select(func.count()).select_from(model)).scalar()


@pytest.mark.db
class TestDailyDeckOrchestrator(unittest.TestCase):

    def setUp(self):
        self.session = make_test_session()
        self.config = MatchmakingConfig()
        self.orchestrator = DailyDeckOrchestrator.build(self.session, self.config)

    def tearDown(self):
        self.session.close()

    def seed(self, candidates=range(2, 9)):
        add_user(self.session, VIEWER, gender="female")
        add_vector(self.session, VIEWER,
                   intent={"seriousness": 0.8, "commitmentReadiness": 0.7, "tags": ["travel"]},
                   pillars=STRONG_PILLARS,
                   pulse={"socialCapacity": 0.6, "initiative": 0.5})
        for cid in candidates:
            add_user(self.session, cid, gender="male")
            add_vector(self.session, cid,
                       intent={"seriousness": cid / 10.0, "commitmentReadiness": 0.5, "tags": ["travel"]},
                       pillars=STRONG_PILLARS,
                       lifestyle={"diet": "vegan" if cid % 2 else "omnivore"},
                       pulse={"socialCapacity": cid / 10.0, "initiative": 0.1 * (cid % 3)})

    def test_01_empty_pool(self):
        """No candidates: empty fresh deck and nothing persisted."""
        add_user(self.session, VIEWER)
        result = self.orchestrator.get_or_create_deck(VIEWER, ON_DATE)

        self.assertIsInstance(result, DailyDeckResult)
        self.assertEqual(result.items, [])
        self.assertTrue(result.was_freshly_generated)
        self.assertEqual(count(self.session, DailyDeck), 0)
        self.assertEqual(count(self.session, CandidateExposure), 0)

    def test_02_viewer_without_vector(self):
        add_user(self.session, VIEWER)
        add_user(self.session, 2)
        add_vector(self.session, 2)

        result = self.orchestrator.get_or_create_deck(VIEWER, ON_DATE)

        self.assertEqual(result.items, [])
        self.assertTrue(result.was_freshly_generated)
        self.assertEqual(count(self.session, DailyDeck), 0)

    def test_03_generates_diverse_deck(self):
        self.seed()
        result = self.orchestrator.get_or_create_deck(VIEWER, ON_DATE)

        self.assertTrue(result.was_freshly_generated)
        self.assertEqual(len(result.items), 5)
        buckets = [item.bucket for item in result.items]
        self.assertEqual(buckets.count(MatchBucket.CORE_FIT.value), 2)
        self.assertEqual(buckets.count(MatchBucket.LIFESTYLE_FIT.value), 1)
        self.assertEqual(buckets.count(MatchBucket.CONVERSATION_FIT.value), 1)
        self.assertEqual(buckets.count(MatchBucket.EXPLORER.value), 1)
        self.assertEqual(len({item.candidate_id for item in result.items}), 5)
        for item in result.items:
            self.assertIsNotNone(item.explanation_id)
            self.assertGreaterEqual(item.score, 0.0)
            self.assertLessEqual(item.score, 100.0)

        self.assertEqual(count(self.session, DailyDeck), 1)
        self.assertEqual(count(self.session, MatchExplanation), 5)

        exposures = self.session.execute(select(CandidateExposure)).scalars().all()
        self.assertEqual(
            sorted(e.shown_user_id for e in exposures),
            sorted(item.candidate_id for item in result.items)
        )
        for e in exposures:
            self.assertEqual(e.surface, "DECK")
            self.assertEqual(e.date_utc, ON_DATE)
            self.assertEqual(e.viewer_user_id, VIEWER)

    def test_04_second_call_returns_cached_deck(self):
        """Same (user, date) twice: identical items, flag False, no new exposures."""
        self.seed()
        first = self.orchestrator.get_or_create_deck(VIEWER, ON_DATE)
        second = self.orchestrator.get_or_create_deck(VIEWER, ON_DATE)

        self.assertTrue(first.was_freshly_generated)
        self.assertFalse(second.was_freshly_generated)
        self.assertEqual(first.items, second.items)
        self.assertEqual(count(self.session, CandidateExposure), 5)
        self.assertEqual(count(self.session, DailyDeck), 1)

    def test_05_new_day_generates_new_deck(self):
        """Yesterday's exposures only feed fatigue; nobody is hard-excluded."""
        self.seed()
        self.orchestrator.get_or_create_deck(VIEWER, ON_DATE)
        tomorrow = self.orchestrator.get_or_create_deck(VIEWER, date(2026, 3, 11))

        self.assertTrue(tomorrow.was_freshly_generated)
        self.assertEqual(len(tomorrow.items), 5)
        self.assertEqual(count(self.session, DailyDeck), 2)

    def test_06_small_pool_not_padded(self):
        self.seed(candidates=[2, 3])
        result = self.orchestrator.get_or_create_deck(VIEWER, ON_DATE)
        self.assertEqual([item.bucket for item in result.items], ["CORE_FIT", "CORE_FIT"])

    def test_07_explanation_failure_keeps_candidate(self):
        self.seed()
        self.orchestrator.explainer = MagicMock()
        self.orchestrator.explainer.generate.side_effect = RuntimeError("writer down")

        result = self.orchestrator.get_or_create_deck(VIEWER, ON_DATE)

        self.assertEqual(len(result.items), 5)
        self.assertTrue(all(item.explanation_id is None for item in result.items))
        self.assertEqual(count(self.session, DailyDeck), 1)

    def test_08_exposure_failure_is_swallowed(self):
        self.seed()
        with patch.object(self.orchestrator.exposures, "record", side_effect=RuntimeError("disk full")):
            result = self.orchestrator.get_or_create_deck(VIEWER, ON_DATE)

        self.assertTrue(result.was_freshly_generated)
        self.assertEqual(len(result.items), 5)
        self.assertEqual(count(self.session, DailyDeck), 1)
        self.assertEqual(count(self.session, CandidateExposure), 0)

    def test_09_concurrent_writer_wins(self):
        """Losing the insert race returns the stored deck and writes no exposures."""
        self.seed()
        self.session.add(DailyDeck(
            user_id=VIEWER, date_utc=ON_DATE,
            items=[{"candidate_id": 42, "score": 88.0, "bucket": "CORE_FIT", "explanation_id": None}]
        ))
        self.session.flush()

        real_get_deck = self.orchestrator.deck_repo.get_deck
        calls = []

        def get_deck_missing_first(user_id, on_date):
            calls.append(on_date)
            if len(calls) == 1:
                return None
            return real_get_deck(user_id, on_date)

        with patch.object(self.orchestrator.deck_repo, "get_deck", side_effect=get_deck_missing_first):
            result = self.orchestrator.get_or_create_deck(VIEWER, ON_DATE)

        self.assertFalse(result.was_freshly_generated)
        self.assertEqual([item.candidate_id for item in result.items], [42])
        self.assertEqual(count(self.session, DailyDeck), 1)
        self.assertEqual(count(self.session, CandidateExposure), 0)
        self.assertEqual(count(self.session, MatchExplanation), 0)

    def test_10_stored_items_match_result(self):
        self.seed()
        result = self.orchestrator.get_or_create_deck(VIEWER, ON_DATE)

        deck = self.session.execute(select(DailyDeck)).scalar_one()
        self.assertEqual(deck.items, [item.to_dict() for item in result.items])

    def test_11_close_releases_explanation_worker(self):
        orchestrator = DailyDeckOrchestrator.build(self.session, self.config, composer=MagicMock())
        executor = orchestrator.explainer._executor
        self.assertIsNotNone(executor)

        orchestrator.close()

        self.assertIsNone(orchestrator.explainer._executor)
        with self.assertRaises(RuntimeError):
            executor.submit(lambda: None)


if __name__ == '__main__':
    unittest.main(verbosity=2)
