from core.deck.models import DeckItem, DailyDeckResult
from core.deck.exposure_service import ExposureService
from core.deck.orchestrator import DailyDeckOrchestrator

__all__ = ['DeckItem', 'DailyDeckResult', 'ExposureService', 'DailyDeckOrchestrator']
