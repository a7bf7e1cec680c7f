#!/usr/bin/env python3
"""
Test suite configuration and utilities.

All tests can be run with standard Python tools:

    # Run all tests
    python -m pytest tests/ -v

    # Run only pure unit tests (no database session)
    python -m pytest tests/ -v -m "not db"

    # Using unittest
    python -m unittest discover tests -v

Database tests run against an in-memory SQLite database built from the ORM
metadata, so no external server is needed.
"""

import json
from datetime import date, datetime, timezone
from typing import Dict, List, Optional

from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from database.database import make_engine
from database.models import (
    Base, UserProfile, UserPreference, UserOptionalField, UserVector,
    Block, Match, PendingMatch, MomentResponse, CandidateExposure,
)

NEUTRAL_PILLARS = {name: 0.5 for name in [
    "Lifestyle", "Energy", "Values", "Communication",
    "Ambition", "Stability", "Curiosity", "Affection",
]}

# High-variance pillar profile (variance 0.16 around 0.5)
STRONG_PILLARS = {name: (0.9 if i % 2 == 0 else 0.1) for i, name in enumerate(NEUTRAL_PILLARS)}


def make_test_engine():
    """In-memory SQLite engine with working SAVEPOINT support."""
    engine = make_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(engine)
    return engine


def make_test_session() -> Session:
    return sessionmaker(bind=make_test_engine(), autoflush=False)()


def add_user(
    session: Session,
    user_id: int,
    age: int = 30,
    gender: str = "female",
    interested_in: Optional[List[str]] = None,
    age_min: int = 18,
    age_max: int = 99,
    distance_miles: int = 25,
    lat: Optional[float] = None,
    lng: Optional[float] = None,
    structure: str = "OPEN",
    interested_in_json: Optional[str] = None,
):
    """Insert a profile plus preferences."""
    session.add(UserProfile(user_id=user_id, age=age, gender=gender, lat=lat, lng=lng))
    session.add(UserPreference(
        user_id=user_id,
        age_min=age_min,
        age_max=age_max,
        distance_miles=distance_miles,
        interested_in_json=interested_in_json if interested_in_json is not None else json.dumps(interested_in or []),
        relationship_structure=structure,
    ))
    session.flush()


def add_vector(
    session: Session,
    user_id: int,
    version: int = 1,
    intent: Optional[Dict] = None,
    pillars: Optional[Dict[str, float]] = None,
    tags: Optional[Dict[str, List[str]]] = None,
    lifestyle: Optional[Dict[str, str]] = None,
    pulse: Optional[Dict[str, float]] = None,
):
    blob = {"schema_version": 1}
    if intent is not None:
        blob["intent"] = intent
    if tags is not None:
        blob["foundational"] = {"tags": tags}
    if lifestyle is not None:
        blob["lifestyle"] = lifestyle
    if pulse is not None:
        blob["pulse"] = pulse
    record = UserVector(
        user_id=user_id,
        version=version,
        vector_json=json.dumps(blob),
        pillar_scores_json=json.dumps(pillars or NEUTRAL_PILLARS),
    )
    session.add(record)
    session.flush()
    return record


def add_field(session: Session, user_id: int, key: str, value: str, visibility: str = "MATCHING_ONLY"):
    session.add(UserOptionalField(user_id=user_id, key=key, value=value, visibility=visibility))
    session.flush()


def add_exposure(session: Session, viewer_id: int, shown_id: int, on_date: date, surface: str = "DECK"):
    session.add(CandidateExposure(
        viewer_user_id=viewer_id, shown_user_id=shown_id, date_utc=on_date, surface=surface
    ))
    session.flush()


def add_block(session: Session, blocker_id: int, blocked_id: int):
    session.add(Block(blocker_id=blocker_id, blocked_id=blocked_id))
    session.flush()


def add_match(
    session: Session,
    user_a_id: int,
    user_b_id: int,
    state: str = "ACTIVE",
    reason: Optional[str] = None,
    closed_at: Optional[datetime] = None,
):
    session.add(Match(
        user_a_id=user_a_id, user_b_id=user_b_id,
        balloon_state=state, closed_reason=reason, closed_at=closed_at
    ))
    session.flush()


def add_pending(session: Session, user_id: int, target_id: int, created_at: Optional[datetime] = None):
    session.add(PendingMatch(
        user_id=user_id, target_user_id=target_id,
        created_at=created_at or datetime.now(timezone.utc)
    ))
    session.flush()


def add_response(session: Session, from_id: int, to_id: int, on_date: date, choice: str = "YES"):
    session.add(MomentResponse(from_user_id=from_id, to_user_id=to_id, date_utc=on_date, choice=choice))
    session.flush()
