import enum

from sqlalchemy import Column, Integer, Text, Float, DateTime, Index, UniqueConstraint

from .base import Base, utcnow


class RelationshipStructure(str, enum.Enum):
    MONO_ONLY = 'MONO_ONLY'
    NONMONO_ONLY = 'NONMONO_ONLY'
    OPEN = 'OPEN'


class Visibility(str, enum.Enum):
    PUBLIC = 'PUBLIC'
    MATCHING_ONLY = 'MATCHING_ONLY'
    PRIVATE = 'PRIVATE'


class UserProfile(Base):
    """
    Basic matchable profile: age, gender and optional coordinates.
    """
    __tablename__ = 'user_profile'

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=False, unique=True)

    age = Column(Integer, nullable=False)
    gender = Column(Text, nullable=False, default='')

    city = Column(Text)
    state = Column(Text)
    lat = Column(Float)
    lng = Column(Float)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index('idx_user_profile_age', 'age'),
    )


class UserPreference(Base):
    """
    Who a user wants to see: age range, distance and genders of interest.

    interested_in_json is a JSON array of genders, e.g. '["female","male"]'.
    An empty array means no declared preference.
    """
    __tablename__ = 'user_preference'

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=False, unique=True)

    distance_miles = Column(Integer, nullable=False, default=25)
    age_min = Column(Integer, nullable=False, default=18)
    age_max = Column(Integer, nullable=False, default=99)
    interested_in_json = Column(Text, nullable=False, default='[]')
    relationship_structure = Column(Text, nullable=False, default=RelationshipStructure.OPEN.value)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)


class UserOptionalField(Base):
    """
    Free-text lifestyle attribute (e.g. 'diet' -> 'Vegan') with a visibility level.
    """
    __tablename__ = 'user_optional_field'

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=False)

    key = Column(Text, nullable=False)
    value = Column(Text, nullable=False, default='')
    visibility = Column(Text, nullable=False, default=Visibility.MATCHING_ONLY.value)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        UniqueConstraint('user_id', 'key', name='uq_user_optional_field_user_key'),
        Index('idx_user_optional_field_user', 'user_id'),
    )
