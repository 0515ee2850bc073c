from numbers import Real
from typing import Any, Iterable, List, NamedTuple, Optional

from .constants import KAKAO_MAP_LINK_URL, MIDPOINT_LABEL


class Coordinate(NamedTuple):
    lat: float
    lng: float


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def eligible_coordinates(participants: Iterable[Any]) -> List[Coordinate]:
    coords = []
    for participant in participants:
        lat = getattr(participant, "location_lat", None)
        lng = getattr(participant, "location_lng", None)
        if _is_number(lat) and _is_number(lng):
            coords.append(Coordinate(float(lat), float(lng)))
    return coords


def calculate_midpoint(coords: Iterable[Coordinate]) -> Optional[Coordinate]:
    # Planar mean; good enough at city scale.
    points = list(coords)
    if not points:
        return None
    lat = sum(point[0] for point in points) / len(points)
    lng = sum(point[1] for point in points) / len(points)
    return Coordinate(lat, lng)


def midpoint_map_url(midpoint: Optional[Coordinate]) -> str:
    if midpoint is None:
        return ""
    return f"{KAKAO_MAP_LINK_URL}/{MIDPOINT_LABEL},{midpoint.lat},{midpoint.lng}"
