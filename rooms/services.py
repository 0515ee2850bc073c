import logging
import threading
from typing import Iterable, List, NamedTuple, Optional, Tuple

from django.db import IntegrityError, transaction
from django.utils import timezone

from realtime.notify import notify_room_changed

from .constants import GEOCODE_MISS_WARNING, GPS_LOCATION_NAME
from .geo import calculate_midpoint, eligible_coordinates, midpoint_map_url
from .geocoding import geocode
from .models import Participant, Room
from .roulette import Frame, SelectionInProgress, TreasurerSelection
from .voting import leaders, tally

logger = logging.getLogger(__name__)

_spinning_rooms = set()
_spinning_lock = threading.Lock()


class RoomError(Exception):
    pass


class InvalidVote(RoomError):
    pass


class NotEnoughParticipants(RoomError):
    pass


class TreasurerAlreadySet(RoomError):
    def __init__(self, treasurer: Optional[str]):
        super().__init__(f"treasurer already chosen: {treasurer}")
        self.treasurer = treasurer


class SpinResult(NamedTuple):
    winner: str
    winner_index: int
    participants: List[str]
    frames: List[Frame]


def normalize_dates(dates: Iterable[str]) -> List[str]:
    return sorted({str(date) for date in dates})


def create_room(name: str, candidate_dates: Iterable[str]) -> Room:
    name = (name or "").strip()
    dates = normalize_dates(candidate_dates)
    if not name:
        raise RoomError("name is required")
    if not dates:
        raise RoomError("at least one candidate date is required")
    return Room.objects.create(name=name, candidate_dates=dates)


def join_room(room: Room, nickname: str) -> Tuple[Participant, bool]:
    """Create a participant, or adopt the existing one holding the nickname."""
    nickname = (nickname or "").strip()
    if not nickname:
        raise RoomError("nickname is required")

    try:
        with transaction.atomic():
            participant = Participant.objects.create(room=room, nickname=nickname, voted_dates=[])
    except IntegrityError:
        existing = Participant.objects.filter(room=room, nickname=nickname).first()
        if existing is None:
            raise
        logger.info("Nickname %s rejoined room %s", nickname, room.id)
        return existing, False

    notify_room_changed(room.id, "participant-joined")
    return participant, True


def toggle_vote(participant: Participant, date: str) -> Participant:
    room = participant.room
    if date not in room.candidate_dates:
        raise InvalidVote(f"{date} is not a candidate date")

    voted = list(participant.voted_dates or [])
    if date in voted:
        voted = [item for item in voted if item != date]
    else:
        voted.append(date)

    participant.voted_dates = voted
    participant.save(update_fields=["voted_dates"])
    notify_room_changed(room.id, "vote")
    return participant


def _save_location(participant: Participant, lat, lng, name, reason: str) -> Participant:
    participant.location_lat = lat
    participant.location_lng = lng
    participant.location_name = name
    participant.save(update_fields=["location_lat", "location_lng", "location_name"])
    notify_room_changed(participant.room_id, reason)
    return participant


def set_gps_location(participant: Participant, lat: float, lng: float) -> Participant:
    return _save_location(participant, lat, lng, GPS_LOCATION_NAME, "location")


def set_manual_location(participant: Participant, query: str) -> Tuple[Participant, str]:
    """Geocode ``query`` and store it. Returns the participant and a warning.

    A query that does not resolve is still stored by name, without
    coordinates, so it stays visible but drops out of the midpoint.
    Transport failures raise ``GeocodingError`` and write nothing.
    """
    query = (query or "").strip()
    if not query:
        raise RoomError("query is required")

    coordinate = geocode(query)
    if coordinate is None:
        logger.warning("No geocoding match for %r in room %s", query, participant.room_id)
        return _save_location(participant, None, None, query, "location"), GEOCODE_MISS_WARNING
    return _save_location(participant, coordinate.lat, coordinate.lng, query, "location"), ""


def clear_location(participant: Participant) -> Participant:
    return _save_location(participant, None, None, None, "location-cleared")


def set_roulette_title(room: Room, title: str) -> bool:
    title = (title or "").strip()
    if not title or title == room.roulette_title:
        return False
    room.roulette_title = title
    room.save(update_fields=["roulette_title", "updated_at"])
    notify_room_changed(room.id, "roulette-title")
    return True


def _acquire_spin(room_id) -> None:
    with _spinning_lock:
        if room_id in _spinning_rooms:
            raise SelectionInProgress(f"selection already running for room {room_id}")
        _spinning_rooms.add(room_id)


def _release_spin(room_id) -> None:
    with _spinning_lock:
        _spinning_rooms.discard(room_id)


def spin_treasurer(room: Room, rng=None) -> SpinResult:
    if room.treasurer:
        raise TreasurerAlreadySet(room.treasurer)

    nicknames = list(room.participants.order_by("created_at").values_list("nickname", flat=True))
    selection = TreasurerSelection(nicknames, treasurer=room.treasurer, rng=rng)
    if not selection.can_start:
        raise NotEnoughParticipants("at least two participants are needed")

    _acquire_spin(room.id)
    try:
        frames = selection.start()
        winner = selection.settle()

        # Only the first completed selection is kept.
        updated = Room.objects.filter(id=room.id, treasurer__isnull=True).update(
            treasurer=winner, updated_at=timezone.now()
        )
        if not updated:
            room.refresh_from_db(fields=["treasurer"])
            raise TreasurerAlreadySet(room.treasurer)
    finally:
        _release_spin(room.id)

    room.treasurer = winner
    logger.info("Room %s treasurer selected: %s", room.id, winner)
    notify_room_changed(room.id, "treasurer")
    return SpinResult(
        winner=winner,
        winner_index=selection.winner_index,
        participants=nicknames,
        frames=frames,
    )


def load_room_state(room: Room) -> dict:
    participants = list(room.participants.all())
    midpoint = calculate_midpoint(eligible_coordinates(participants))
    counts = tally(participants, room.candidate_dates)
    selection = TreasurerSelection([p.nickname for p in participants], treasurer=room.treasurer)
    return {
        "room": room,
        "participants": participants,
        "tally": counts,
        "leading_dates": leaders(counts),
        "midpoint": midpoint,
        "midpoint_map_url": midpoint_map_url(midpoint),
        "roulette": {
            "state": selection.state.value,
            "can_spin": selection.can_start,
            "treasurer": room.treasurer,
        },
    }
