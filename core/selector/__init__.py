from core.selector.models import MatchBucket
from core.selector.service import DeckSelectionService

__all__ = ['MatchBucket', 'DeckSelectionService']
