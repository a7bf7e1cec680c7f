from sqlalchemy import Column, Integer, Text, DateTime, UniqueConstraint, Index

from .base import Base, utcnow


class UserVector(Base):
    """
    Versioned snapshot of a user's matchable state.

    vector_json holds the sub-model blobs:
      {
        "schema_version": 1,
        "intent": {"seriousness": .., "flexibility": .., "commitmentReadiness": .., "tags": [..]},
        "foundational": {"pillars": {..}, "tags": {"category": [..]}},
        "lifestyle": {"diet": "Vegan", ..},
        "pulse": {"socialCapacity": .., "initiative": .., "ghostRisk": ..}
      }
    pillar_scores_json holds the eight pillar scores (0.0-1.0).

    Both are stored as raw text: they are produced by an external tagging
    service and may be malformed.
    """
    __tablename__ = 'user_vector'

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=False)
    version = Column(Integer, nullable=False, default=1)

    vector_json = Column(Text, nullable=False, default='{}')
    pillar_scores_json = Column(Text, nullable=False, default='{}')

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        UniqueConstraint('user_id', 'version', name='uq_user_vector_user_version'),
        Index('idx_user_vector_user', 'user_id'),
    )
