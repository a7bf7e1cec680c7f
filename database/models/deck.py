from sqlalchemy import Column, Integer, Text, Float, Date, DateTime, UniqueConstraint, Index

from .base import Base, JSONType, utcnow


class DailyDeck(Base):
    """
    The deck delivered to a user for one UTC day.

    items is an ordered JSON list:
      [{"candidate_id": 456, "score": 87.5, "bucket": "CORE_FIT", "explanation_id": 123}, ...]

    At most one deck exists per (user_id, date_utc); a deck is never
    regenerated or mutated once written.
    """
    __tablename__ = 'daily_deck'

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=False)
    date_utc = Column(Date, nullable=False)

    items = Column(JSONType, nullable=False, default=list)
    generated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        UniqueConstraint('user_id', 'date_utc', name='uq_daily_deck_user_date'),
    )


class CandidateExposure(Base):
    """
    Append-only record that shown_user_id was shown to viewer_user_id on
    date_utc via a surface (DECK / MOMENTS / PENDING).
    """
    __tablename__ = 'candidate_exposure'

    id = Column(Integer, primary_key=True, autoincrement=True)
    viewer_user_id = Column(Integer, nullable=False)
    shown_user_id = Column(Integer, nullable=False)
    surface = Column(Text, nullable=False, default='DECK')

    bucket = Column(Text, nullable=True)
    score_snapshot = Column(Float, nullable=True)

    date_utc = Column(Date, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        UniqueConstraint('viewer_user_id', 'shown_user_id', 'date_utc', 'surface', name='uq_exposure_viewer_shown_date_surface'),
        Index('idx_exposure_viewer_date', 'viewer_user_id', 'date_utc'),
        Index('idx_exposure_shown_date', 'shown_user_id', 'date_utc'),
    )


class MatchExplanation(Base):
    """
    Persisted "why you match" rationale referenced from deck items.
    """
    __tablename__ = 'match_explanation'

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=False)
    candidate_id = Column(Integer, nullable=False)
    date_utc = Column(Date, nullable=False)

    headline = Column(Text, nullable=False, default='')
    bullets = Column(JSONType, nullable=False, default=list)
    tone = Column(Text, nullable=False, default='calm')
    date_idea = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        Index('idx_match_explanation_user_date', 'user_id', 'date_utc'),
    )
