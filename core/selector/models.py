import enum


class MatchBucket(str, enum.Enum):
    """Why a candidate earned a deck slot."""
    CORE_FIT = 'CORE_FIT'
    LIFESTYLE_FIT = 'LIFESTYLE_FIT'
    CONVERSATION_FIT = 'CONVERSATION_FIT'
    EXPLORER = 'EXPLORER'
    WILDCARD = 'WILDCARD'
