from django.contrib import admin

from .models import Participant, Room


@admin.register(Room)
class RoomAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "treasurer", "roulette_title", "created_at")
    search_fields = ("name", "treasurer")
    readonly_fields = ("host_token",)


@admin.register(Participant)
class ParticipantAdmin(admin.ModelAdmin):
    list_display = ("id", "room", "nickname", "location_name")
    search_fields = ("nickname",)
