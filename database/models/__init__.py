from .base import Base, JSONType, utcnow
from .user import UserProfile, UserPreference, UserOptionalField, RelationshipStructure, Visibility
from .vector import UserVector
from .interaction import Block, Match, PendingMatch, MomentResponse, BalloonState, ClosedReason, MomentChoice
from .deck import DailyDeck, CandidateExposure, MatchExplanation

__all__ = [
    'Base',
    'JSONType',
    'utcnow',
    'UserProfile',
    'UserPreference',
    'UserOptionalField',
    'RelationshipStructure',
    'Visibility',
    'UserVector',
    'Block',
    'Match',
    'PendingMatch',
    'MomentResponse',
    'BalloonState',
    'ClosedReason',
    'MomentChoice',
    'DailyDeck',
    'CandidateExposure',
    'MatchExplanation',
]
