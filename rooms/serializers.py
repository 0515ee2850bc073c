from rest_framework import serializers

from .constants import LOCATION_SOURCE_CHOICES, LOCATION_SOURCE_GPS, LOCATION_SOURCE_MANUAL
from .models import Participant, Room


class RoomCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    candidate_dates = serializers.ListField(child=serializers.DateField(), allow_empty=False)

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("name is required")
        return value

    def validate_candidate_dates(self, value):
        return sorted({date.isoformat() for date in value})


class RoomSerializer(serializers.ModelSerializer):
    class Meta:
        model = Room
        fields = [
            "id",
            "name",
            "candidate_dates",
            "confirmed_date",
            "confirmed_location",
            "treasurer",
            "roulette_title",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ParticipantSerializer(serializers.ModelSerializer):
    room_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = Participant
        fields = [
            "id",
            "room_id",
            "nickname",
            "voted_dates",
            "location_lat",
            "location_lng",
            "location_name",
            "created_at",
        ]
        read_only_fields = fields


class JoinSerializer(serializers.Serializer):
    nickname = serializers.CharField(max_length=50)


class VoteSerializer(serializers.Serializer):
    date = serializers.DateField()


class LocationSerializer(serializers.Serializer):
    source = serializers.ChoiceField(choices=LOCATION_SOURCE_CHOICES)
    lat = serializers.FloatField(required=False, min_value=-90, max_value=90)
    lng = serializers.FloatField(required=False, min_value=-180, max_value=180)
    query = serializers.CharField(required=False, allow_blank=True, max_length=200)

    def validate(self, attrs):
        source = attrs["source"]
        if source == LOCATION_SOURCE_GPS:
            if attrs.get("lat") is None or attrs.get("lng") is None:
                raise serializers.ValidationError("lat and lng are required for gps")
        if source == LOCATION_SOURCE_MANUAL:
            query = (attrs.get("query") or "").strip()
            if not query:
                raise serializers.ValidationError("query is required for manual")
            attrs["query"] = query
        return attrs


class RouletteTitleSerializer(serializers.Serializer):
    roulette_title = serializers.CharField(max_length=50, allow_blank=True, trim_whitespace=True)
