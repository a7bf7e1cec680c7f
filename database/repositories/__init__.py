from database.repositories.base import BaseRepository
from database.repositories.profile import ProfileRepository
from database.repositories.interaction import InteractionRepository
from database.repositories.vector import VectorRepository
from database.repositories.exposure import ExposureRepository
from database.repositories.deck import DeckRepository

__all__ = [
    'BaseRepository',
    'ProfileRepository',
    'InteractionRepository',
    'VectorRepository',
    'ExposureRepository',
    'DeckRepository',
]
