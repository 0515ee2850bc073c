from django.urls import path
from .views import (
    LocationView,
    RoomCreateView,
    RoomDetailView,
    RoomJoinView,
    RouletteTitleView,
    TreasurerSpinView,
    VoteToggleView,
)

urlpatterns = [
    path("", RoomCreateView.as_view()),
    path("<uuid:room_id>/", RoomDetailView.as_view()),
    path("<uuid:room_id>/roulette-title/", RouletteTitleView.as_view()),
    path("<uuid:room_id>/join/", RoomJoinView.as_view()),
    path("<uuid:room_id>/participants/<uuid:participant_id>/votes/", VoteToggleView.as_view()),
    path("<uuid:room_id>/participants/<uuid:participant_id>/location/", LocationView.as_view()),
    path("<uuid:room_id>/treasurer/spin/", TreasurerSpinView.as_view()),
]
