from core.pool.service import CandidatePoolService
from core.pool.filters import haversine_miles, parse_interested_in, structures_compatible

__all__ = [
    'CandidatePoolService',
    'haversine_miles',
    'parse_interested_in',
    'structures_compatible',
]
