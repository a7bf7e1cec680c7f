import enum
import uuid

from sqlalchemy import Column, Integer, Text, Date, DateTime, Index, String

from .base import Base, utcnow


class BalloonState(str, enum.Enum):
    ACTIVE = 'ACTIVE'
    CLOSED = 'CLOSED'


class ClosedReason(str, enum.Enum):
    POP = 'POP'
    EXPIRE = 'EXPIRE'
    UNMATCH = 'UNMATCH'
    BLOCK = 'BLOCK'


class MomentChoice(str, enum.Enum):
    YES = 'YES'
    NO = 'NO'
    PENDING = 'PENDING'


def _new_id() -> str:
    return str(uuid.uuid4())


class Block(Base):
    __tablename__ = 'user_block'

    id = Column(Integer, primary_key=True, autoincrement=True)
    blocker_id = Column(Integer, nullable=False)
    blocked_id = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        Index('idx_block_blocker', 'blocker_id'),
        Index('idx_block_blocked', 'blocked_id'),
    )


class Match(Base):
    """
    A mutual match between two users ("balloon").

    ACTIVE matches exclude the pair from each other's pool; CLOSED matches
    carry a closed_reason used for delivery penalties.
    """
    __tablename__ = 'user_match'

    id = Column(String(36), primary_key=True, default=_new_id)
    user_a_id = Column(Integer, nullable=False)
    user_b_id = Column(Integer, nullable=False)

    balloon_state = Column(Text, nullable=False, default=BalloonState.ACTIVE.value)
    closed_reason = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    closed_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index('idx_match_user_a', 'user_a_id'),
        Index('idx_match_user_b', 'user_b_id'),
        Index('idx_match_state', 'balloon_state'),
    )


class PendingMatch(Base):
    """user_id saved target_user_id as a pending interest."""
    __tablename__ = 'pending_match'

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(Integer, nullable=False)
    target_user_id = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        Index('idx_pending_match_target', 'target_user_id'),
    )


class MomentResponse(Base):
    """One daily YES/NO/PENDING response from one user to another."""
    __tablename__ = 'moment_response'

    id = Column(String(36), primary_key=True, default=_new_id)
    date_utc = Column(Date, nullable=False)
    from_user_id = Column(Integer, nullable=False)
    to_user_id = Column(Integer, nullable=False)
    choice = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        Index('idx_moment_response_to_date', 'to_user_id', 'date_utc'),
    )
