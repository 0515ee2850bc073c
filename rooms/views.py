import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from . import identity
from .constants import HOST_TOKEN_HEADER, LOCATION_SOURCE_GPS
from .geocoding import GeocodingError
from .models import Participant, Room
from .roulette import SelectionInProgress
from .serializers import (
    JoinSerializer,
    LocationSerializer,
    ParticipantSerializer,
    RoomCreateSerializer,
    RoomSerializer,
    RouletteTitleSerializer,
    VoteSerializer,
)
from .services import (
    InvalidVote,
    NotEnoughParticipants,
    RoomError,
    TreasurerAlreadySet,
    clear_location,
    create_room,
    join_room,
    load_room_state,
    set_gps_location,
    set_manual_location,
    set_roulette_title,
    spin_treasurer,
    toggle_vote,
)

logger = logging.getLogger(__name__)

ROOM_NOT_FOUND = {"detail": "Room not found"}
PARTICIPANT_NOT_FOUND = {"detail": "Participant not found"}


def _get_room(room_id):
    try:
        return Room.objects.get(id=room_id)
    except Room.DoesNotExist:
        return None


def _get_participant(room_id, participant_id):
    try:
        return Participant.objects.select_related("room").get(id=participant_id, room_id=room_id)
    except Participant.DoesNotExist:
        return None


def _room_payload(request, room):
    state = load_room_state(room)
    me = identity.current_participant(request.session, room, state["participants"])
    midpoint = state["midpoint"]
    return {
        "room": RoomSerializer(room).data,
        "participants": ParticipantSerializer(state["participants"], many=True).data,
        "me": ParticipantSerializer(me).data if me else None,
        "is_host": identity.is_host(request.session, room),
        "tally": state["tally"],
        "leading_dates": state["leading_dates"],
        "midpoint": {"lat": midpoint.lat, "lng": midpoint.lng} if midpoint else None,
        "midpoint_map_url": state["midpoint_map_url"],
        "roulette": state["roulette"],
    }


class RoomCreateView(APIView):
    def post(self, request):
        s = RoomCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        room = create_room(s.validated_data["name"], s.validated_data["candidate_dates"])
        identity.remember_host_token(request.session, room.id, room.host_token)

        data = RoomSerializer(room).data
        data["host_token"] = str(room.host_token)
        return Response(data, status=status.HTTP_201_CREATED)


class RoomDetailView(APIView):
    def get(self, request, room_id):
        room = _get_room(room_id)
        if room is None:
            return Response(ROOM_NOT_FOUND, status=status.HTTP_404_NOT_FOUND)

        presented = request.headers.get(HOST_TOKEN_HEADER)
        if presented:
            identity.claim_host(request.session, room, presented)

        return Response(_room_payload(request, room))


class RouletteTitleView(APIView):
    def patch(self, request, room_id):
        room = _get_room(room_id)
        if room is None:
            return Response(ROOM_NOT_FOUND, status=status.HTTP_404_NOT_FOUND)

        s = RouletteTitleSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        set_roulette_title(room, s.validated_data["roulette_title"])
        return Response(RoomSerializer(room).data)


class RoomJoinView(APIView):
    def post(self, request, room_id):
        room = _get_room(room_id)
        if room is None:
            return Response(ROOM_NOT_FOUND, status=status.HTTP_404_NOT_FOUND)

        s = JoinSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        try:
            participant, created = join_room(room, s.validated_data["nickname"])
        except RoomError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        identity.remember_nickname(request.session, room.id, participant.nickname)
        return Response(
            ParticipantSerializer(participant).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )


class VoteToggleView(APIView):
    def post(self, request, room_id, participant_id):
        participant = _get_participant(room_id, participant_id)
        if participant is None:
            return Response(PARTICIPANT_NOT_FOUND, status=status.HTTP_404_NOT_FOUND)

        s = VoteSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        try:
            toggle_vote(participant, s.validated_data["date"].isoformat())
        except InvalidVote as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(ParticipantSerializer(participant).data)


class LocationView(APIView):
    def put(self, request, room_id, participant_id):
        participant = _get_participant(room_id, participant_id)
        if participant is None:
            return Response(PARTICIPANT_NOT_FOUND, status=status.HTTP_404_NOT_FOUND)

        s = LocationSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        warning = ""
        if data["source"] == LOCATION_SOURCE_GPS:
            set_gps_location(participant, data["lat"], data["lng"])
        else:
            try:
                participant, warning = set_manual_location(participant, data["query"])
            except GeocodingError as exc:
                logger.exception("Geocoding failed for participant %s", participant.id)
                return Response(
                    {"detail": "Location lookup failed", "error": str(exc)},
                    status=status.HTTP_502_BAD_GATEWAY,
                )

        payload = ParticipantSerializer(participant).data
        payload["warning"] = warning
        return Response(payload)

    def delete(self, request, room_id, participant_id):
        participant = _get_participant(room_id, participant_id)
        if participant is None:
            return Response(PARTICIPANT_NOT_FOUND, status=status.HTTP_404_NOT_FOUND)

        clear_location(participant)
        return Response(ParticipantSerializer(participant).data)


class TreasurerSpinView(APIView):
    def post(self, request, room_id):
        room = _get_room(room_id)
        if room is None:
            return Response(ROOM_NOT_FOUND, status=status.HTTP_404_NOT_FOUND)

        try:
            result = spin_treasurer(room)
        except TreasurerAlreadySet as exc:
            return Response(
                {"detail": "Treasurer already selected", "treasurer": exc.treasurer},
                status=status.HTTP_409_CONFLICT,
            )
        except SelectionInProgress:
            return Response(
                {"detail": "Selection already running"},
                status=status.HTTP_409_CONFLICT,
            )
        except NotEnoughParticipants as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(
            {
                "treasurer": result.winner,
                "winner_index": result.winner_index,
                "participants": result.participants,
                "frames": [
                    {"index": frame.index, "delay_ms": frame.delay_ms}
                    for frame in result.frames
                ],
            }
        )
