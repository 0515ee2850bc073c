import uuid
from django.db import models

from .constants import DEFAULT_ROULETTE_TITLE


class Room(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=100)
    candidate_dates = models.JSONField(default=list)
    confirmed_date = models.DateField(null=True, blank=True)
    confirmed_location = models.CharField(max_length=200, null=True, blank=True)
    treasurer = models.CharField(max_length=50, null=True, blank=True)
    roulette_title = models.CharField(max_length=50, default=DEFAULT_ROULETTE_TITLE)

    # Possession of this token marks the creating client as host.
    host_token = models.UUIDField(default=uuid.uuid4, editable=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.id} {self.name}"


class Participant(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    room = models.ForeignKey(Room, on_delete=models.CASCADE, related_name="participants")
    nickname = models.CharField(max_length=50)
    voted_dates = models.JSONField(default=list, blank=True)
    location_lat = models.FloatField(null=True, blank=True)
    location_lng = models.FloatField(null=True, blank=True)
    location_name = models.CharField(max_length=200, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["room", "nickname"], name="uniq_participant_nickname_per_room"),
        ]
        ordering = ["created_at"]

    def __str__(self):
        return f"{self.nickname} ({self.room_id})"

    @property
    def has_coordinates(self):
        return self.location_lat is not None and self.location_lng is not None
