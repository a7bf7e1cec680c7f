import json
import logging
import math
from typing import Optional, Set

from database.models import RelationshipStructure

logger = logging.getLogger(__name__)


def haversine_miles(lat1: float, lng1: float, lat2: float, lng2: float, radius: float = 3959.0) -> float:
    """Great-circle distance between two coordinates, in miles."""
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    return radius * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def parse_interested_in(raw: Optional[str], user_id: Optional[int] = None) -> Optional[Set[str]]:
    """Lower-cased genders a user is interested in.

    None means no declared preference: empty, missing or malformed input.
    """
    if not raw:
        return None
    try:
        values = json.loads(raw)
    except (json.JSONDecodeError, TypeError, ValueError) as e:
        logger.warning(f"Malformed interested_in_json for user {user_id}: {e}")
        return None
    if not isinstance(values, list):
        logger.warning(f"Malformed interested_in_json for user {user_id}: expected a list")
        return None

    genders = {str(v).strip().lower() for v in values if v is not None and str(v).strip()}
    return genders or None


def structures_compatible(a: Optional[str], b: Optional[str]) -> bool:
    """MONO_ONLY and NONMONO_ONLY exclude each other; anything else is compatible."""
    pair = {
        (a or RelationshipStructure.OPEN.value).upper(),
        (b or RelationshipStructure.OPEN.value).upper(),
    }
    return pair != {RelationshipStructure.MONO_ONLY.value, RelationshipStructure.NONMONO_ONLY.value}


def within_distance(viewer_profile, viewer_pref, cand_profile, cand_pref, radius: float) -> bool:
    """Distance must satisfy both parties. Skipped when either side lacks coordinates."""
    if None in (viewer_profile.lat, viewer_profile.lng, cand_profile.lat, cand_profile.lng):
        return True
    distance = haversine_miles(
        viewer_profile.lat, viewer_profile.lng,
        cand_profile.lat, cand_profile.lng,
        radius=radius
    )
    return distance <= viewer_pref.distance_miles and distance <= cand_pref.distance_miles
