import uuid
from unittest.mock import patch

from django.test import TestCase

from rooms.geo import Coordinate
from rooms.geocoding import GeocodingError
from rooms.models import Participant, Room


class RoomApiTests(TestCase):
    def _create_room(self, client=None):
        client = client or self.client
        response = client.post(
            "/api/rooms/",
            {"name": "금요일 모임", "candidate_dates": ["2025-06-07", "2025-06-06"]},
            content_type="application/json",
        )
        self.assertEqual(response.status_code, 201)
        return response.json()

    def _join(self, room_id, nickname, client=None):
        client = client or self.client
        return client.post(
            f"/api/rooms/{room_id}/join/",
            {"nickname": nickname},
            content_type="application/json",
        )

    def test_create_room_returns_host_token_and_marks_creator_as_host(self):
        data = self._create_room()

        room = Room.objects.get(id=data["id"])
        self.assertEqual(data["host_token"], str(room.host_token))
        self.assertEqual(data["candidate_dates"], ["2025-06-06", "2025-06-07"])
        self.assertEqual(self.client.session[f"moyeora_host_{room.id}"], str(room.host_token))

        detail = self.client.get(f"/api/rooms/{room.id}/").json()
        self.assertTrue(detail["is_host"])
        self.assertNotIn("host_token", detail["room"])

    def test_create_room_requires_name_and_dates(self):
        response = self.client.post(
            "/api/rooms/",
            {"name": "  ", "candidate_dates": []},
            content_type="application/json",
        )

        self.assertEqual(response.status_code, 400)
        self.assertIn("name", response.json())
        self.assertIn("candidate_dates", response.json())
        self.assertEqual(Room.objects.count(), 0)

    def test_unknown_room_is_not_found(self):
        response = self.client.get(f"/api/rooms/{uuid.uuid4()}/")

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"detail": "Room not found"})

    def test_other_client_is_not_host_until_presenting_token(self):
        data = self._create_room()
        other = self.client_class()

        detail = other.get(f"/api/rooms/{data['id']}/").json()
        self.assertFalse(detail["is_host"])

        detail = other.get(
            f"/api/rooms/{data['id']}/", HTTP_X_HOST_TOKEN=data["host_token"]
        ).json()
        self.assertTrue(detail["is_host"])

        detail = other.get(f"/api/rooms/{data['id']}/").json()
        self.assertTrue(detail["is_host"])

    def test_join_then_rejoin_returns_same_participant(self):
        room_id = self._create_room()["id"]

        first = self._join(room_id, "민수")
        second = self._join(room_id, "민수", client=self.client_class())

        self.assertEqual(first.status_code, 201)
        self.assertEqual(second.status_code, 200)
        self.assertEqual(first.json()["id"], second.json()["id"])
        self.assertEqual(Participant.objects.filter(room_id=room_id).count(), 1)

    def test_room_state_reattaches_remembered_participant(self):
        room_id = self._create_room()["id"]
        joined = self._join(room_id, "민수").json()

        detail = self.client.get(f"/api/rooms/{room_id}/").json()

        self.assertEqual(detail["me"]["id"], joined["id"])
        self.assertIsNone(self.client_class().get(f"/api/rooms/{room_id}/").json()["me"])

    def test_vote_toggle_updates_tally(self):
        room_id = self._create_room()["id"]
        participant = self._join(room_id, "민수").json()
        url = f"/api/rooms/{room_id}/participants/{participant['id']}/votes/"

        response = self.client.post(url, {"date": "2025-06-06"}, content_type="application/json")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["voted_dates"], ["2025-06-06"])
        detail = self.client.get(f"/api/rooms/{room_id}/").json()
        self.assertEqual(detail["tally"], {"2025-06-06": 1, "2025-06-07": 0})
        self.assertEqual(detail["leading_dates"], ["2025-06-06"])

        bad = self.client.post(url, {"date": "2025-07-01"}, content_type="application/json")
        self.assertEqual(bad.status_code, 400)

    def test_vote_for_participant_of_another_room_is_not_found(self):
        room_id = self._create_room()["id"]
        other_room_id = self._create_room()["id"]
        participant = self._join(other_room_id, "민수").json()

        response = self.client.post(
            f"/api/rooms/{room_id}/participants/{participant['id']}/votes/",
            {"date": "2025-06-06"},
            content_type="application/json",
        )

        self.assertEqual(response.status_code, 404)

    def test_gps_location_and_midpoint(self):
        room_id = self._create_room()["id"]
        a = self._join(room_id, "A").json()
        b = self._join(room_id, "B").json()

        for person, (lat, lng) in [(a, (37.50, 127.03)), (b, (37.56, 126.97))]:
            response = self.client.put(
                f"/api/rooms/{room_id}/participants/{person['id']}/location/",
                {"source": "gps", "lat": lat, "lng": lng},
                content_type="application/json",
            )
            self.assertEqual(response.status_code, 200)
            self.assertEqual(response.json()["location_name"], "현재 위치")

        midpoint = self.client.get(f"/api/rooms/{room_id}/").json()["midpoint"]
        self.assertAlmostEqual(midpoint["lat"], 37.53)
        self.assertAlmostEqual(midpoint["lng"], 127.00)

    def test_gps_location_requires_coordinates_in_range(self):
        room_id = self._create_room()["id"]
        person = self._join(room_id, "A").json()
        url = f"/api/rooms/{room_id}/participants/{person['id']}/location/"

        missing = self.client.put(url, {"source": "gps"}, content_type="application/json")
        out_of_range = self.client.put(
            url, {"source": "gps", "lat": 91, "lng": 0}, content_type="application/json"
        )

        self.assertEqual(missing.status_code, 400)
        self.assertEqual(out_of_range.status_code, 400)

    @patch("rooms.services.geocode", return_value=Coordinate(37.4979, 127.0276))
    def test_manual_location_resolved(self, _geocode):
        room_id = self._create_room()["id"]
        person = self._join(room_id, "A").json()

        response = self.client.put(
            f"/api/rooms/{room_id}/participants/{person['id']}/location/",
            {"source": "manual", "query": "강남역"},
            content_type="application/json",
        )

        data = response.json()
        self.assertEqual(response.status_code, 200)
        self.assertEqual(data["warning"], "")
        self.assertEqual(data["location_name"], "강남역")
        self.assertEqual(data["location_lat"], 37.4979)

    @patch("rooms.services.geocode", return_value=None)
    def test_manual_location_miss_is_a_warning(self, _geocode):
        room_id = self._create_room()["id"]
        person = self._join(room_id, "A").json()

        response = self.client.put(
            f"/api/rooms/{room_id}/participants/{person['id']}/location/",
            {"source": "manual", "query": "우리집"},
            content_type="application/json",
        )

        data = response.json()
        self.assertEqual(response.status_code, 200)
        self.assertTrue(data["warning"])
        self.assertEqual(data["location_name"], "우리집")
        self.assertIsNone(data["location_lat"])
        self.assertIsNone(self.client.get(f"/api/rooms/{room_id}/").json()["midpoint"])

    @patch("rooms.services.geocode", side_effect=GeocodingError("offline"))
    def test_manual_location_lookup_failure(self, _geocode):
        room_id = self._create_room()["id"]
        person = self._join(room_id, "A").json()

        response = self.client.put(
            f"/api/rooms/{room_id}/participants/{person['id']}/location/",
            {"source": "manual", "query": "강남역"},
            content_type="application/json",
        )

        self.assertEqual(response.status_code, 502)
        self.assertIsNone(Participant.objects.get(id=person["id"]).location_name)

    def test_clear_location(self):
        room_id = self._create_room()["id"]
        person = self._join(room_id, "A").json()
        url = f"/api/rooms/{room_id}/participants/{person['id']}/location/"
        self.client.put(url, {"source": "gps", "lat": 37.5, "lng": 127.0}, content_type="application/json")

        response = self.client.delete(url)

        self.assertEqual(response.status_code, 200)
        self.assertIsNone(response.json()["location_name"])
        self.assertIsNone(response.json()["location_lat"])

    def test_roulette_title_patch(self):
        room_id = self._create_room()["id"]
        url = f"/api/rooms/{room_id}/roulette-title/"

        response = self.client.patch(url, {"roulette_title": "커피 내기"}, content_type="application/json")
        self.assertEqual(response.json()["roulette_title"], "커피 내기")

        response = self.client.patch(url, {"roulette_title": "  "}, content_type="application/json")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["roulette_title"], "커피 내기")

    def test_spin_commits_once(self):
        room_id = self._create_room()["id"]
        for name in ["A", "B", "C"]:
            self._join(room_id, name)

        response = self.client.post(f"/api/rooms/{room_id}/treasurer/spin/")

        data = response.json()
        self.assertEqual(response.status_code, 200)
        self.assertIn(data["treasurer"], ["A", "B", "C"])
        self.assertEqual(data["participants"][data["frames"][-1]["index"]], data["treasurer"])
        self.assertEqual(len(data["frames"]), 20 + data["winner_index"])
        self.assertEqual(Room.objects.get(id=room_id).treasurer, data["treasurer"])

        again = self.client.post(f"/api/rooms/{room_id}/treasurer/spin/")
        self.assertEqual(again.status_code, 409)
        self.assertEqual(again.json()["treasurer"], data["treasurer"])

        roulette = self.client_class().get(f"/api/rooms/{room_id}/").json()["roulette"]
        self.assertEqual(roulette["state"], "settled")
        self.assertFalse(roulette["can_spin"])

    def test_spin_with_one_participant_is_rejected(self):
        room_id = self._create_room()["id"]
        self._join(room_id, "A")

        response = self.client.post(f"/api/rooms/{room_id}/treasurer/spin/")

        self.assertEqual(response.status_code, 400)
        self.assertIsNone(Room.objects.get(id=room_id).treasurer)
