"""Trip CRUD endpoint tests."""

from datetime import datetime
from pathlib import Path

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from link_server.config import MEDIA_ROOT
from link_server.models import Trip

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


def _form(**overrides) -> dict:
    data = {
        "title": "제주도 힐링 여행",
        "description": "3박 4일",
        "destination": "제주도",
        "startDate": "2024-11-01",
        "endDate": "2024-11-04",
    }
    data.update(overrides)
    return data


class TestListTrips:
    def test_requires_session(self, client):
        assert client.get("/api/trips").status_code == 401

    def test_lists_only_own_trips_newest_start_first(self, client, make_user, make_trip, headers_for):
        user = make_user()
        make_trip(user, title="old", start_date=datetime(2024, 1, 1), end_date=datetime(2024, 1, 2))
        make_trip(user, title="new", start_date=datetime(2024, 6, 1), end_date=datetime(2024, 6, 2))
        make_trip(make_user(), title="someone else's")

        resp = client.get("/api/trips", headers=headers_for(user))

        assert resp.status_code == 200
        assert [t["title"] for t in resp.json()["trips"]] == ["new", "old"]


class TestCreateTrip:
    def test_creates_trip(self, client, db, make_user, headers_for):
        user = make_user()

        resp = client.post(
            "/api/trips",
            data=_form(members='["김우현", "박민수"]', color="purple"),
            headers=headers_for(user),
        )

        assert resp.status_code == 201
        trip = resp.json()["trip"]
        assert trip["userId"] == user.id
        assert trip["status"] == "planning"
        assert trip["isBookmarked"] is False
        assert trip["members"] == ["김우현", "박민수"]
        assert trip["startDate"].startswith("2024-11-01")
        assert db.query(Trip).count() == 1

    def test_missing_required_field(self, client, make_user, headers_for):
        resp = client.post("/api/trips", data=_form(destination=""), headers=headers_for(make_user()))
        assert resp.status_code == 400
        assert resp.json() == {"error": "필수 필드를 모두 입력해주세요."}

    def test_end_before_start_rejected(self, client, make_user, headers_for):
        resp = client.post(
            "/api/trips",
            data=_form(startDate="2024-11-04", endDate="2024-11-01"),
            headers=headers_for(make_user()),
        )
        assert resp.status_code == 400

    def test_invalid_date_rejected(self, client, make_user, headers_for):
        resp = client.post("/api/trips", data=_form(startDate="soon"), headers=headers_for(make_user()))
        assert resp.status_code == 400

    def test_invalid_status_rejected(self, client, make_user, headers_for):
        resp = client.post("/api/trips", data=_form(status="cancelled"), headers=headers_for(make_user()))
        assert resp.status_code == 400

    def test_cover_image_is_stored(self, client, make_user, headers_for):
        resp = client.post(
            "/api/trips",
            data=_form(),
            files={"coverImage": ("cover.png", PNG_BYTES, "image/png")},
            headers=headers_for(make_user()),
        )

        assert resp.status_code == 201
        url = resp.json()["trip"]["coverImage"]
        assert url.startswith("/media/") and url.endswith(".png")
        assert (Path(MEDIA_ROOT) / url.removeprefix("/media/")).read_bytes() == PNG_BYTES

        assert client.get(url).content == PNG_BYTES

    def test_cover_image_wrong_type(self, client, make_user, headers_for):
        resp = client.post(
            "/api/trips",
            data=_form(),
            files={"coverImage": ("notes.pdf", b"%PDF-1.4", "application/pdf")},
            headers=headers_for(make_user()),
        )
        assert resp.status_code == 400


class TestGetAndUpdateTrip:
    def test_get_own_trip(self, client, make_user, make_trip, headers_for):
        user = make_user()
        trip = make_trip(user, title="mine")
        resp = client.get(f"/api/trips/{trip.id}", headers=headers_for(user))
        assert resp.status_code == 200
        assert resp.json()["trip"]["title"] == "mine"

    def test_get_foreign_trip_forbidden(self, client, make_user, make_trip, headers_for):
        trip = make_trip(make_user())
        resp = client.get(f"/api/trips/{trip.id}", headers=headers_for(make_user()))
        assert resp.status_code == 403

    def test_update_fields(self, client, make_user, make_trip, headers_for):
        user = make_user()
        trip = make_trip(user, color="blue")

        resp = client.patch(
            f"/api/trips/{trip.id}",
            json={"title": "renamed", "status": "ongoing", "color": None},
            headers=headers_for(user),
        )

        assert resp.status_code == 200
        body = resp.json()["trip"]
        assert body["title"] == "renamed"
        assert body["status"] == "ongoing"
        assert body["color"] is None
        assert body["destination"] == "Jeju"

    def test_update_cannot_change_bookmark(self, client, db, make_user, make_trip, headers_for):
        user = make_user()
        trip = make_trip(user)

        resp = client.patch(f"/api/trips/{trip.id}", json={"isBookmarked": True}, headers=headers_for(user))

        assert resp.status_code == 422
        db.expire_all()
        assert db.get(Trip, trip.id).is_bookmarked is False

    def test_update_end_before_existing_start(self, client, make_user, make_trip, headers_for):
        user = make_user()
        trip = make_trip(user)
        resp = client.patch(
            f"/api/trips/{trip.id}",
            json={"endDate": "2024-10-01T00:00:00"},
            headers=headers_for(user),
        )
        assert resp.status_code == 400

    def test_update_foreign_trip_forbidden(self, client, db, make_user, make_trip, headers_for):
        trip = make_trip(make_user(), title="original")
        resp = client.patch(f"/api/trips/{trip.id}", json={"title": "hijacked"}, headers=headers_for(make_user()))
        assert resp.status_code == 403
        db.expire_all()
        assert db.get(Trip, trip.id).title == "original"


class TestDeleteTrip:
    def test_delete_own_trip(self, client, db, make_user, make_trip, headers_for):
        user = make_user()
        trip_id = make_trip(user).id

        resp = client.delete(f"/api/trips/{trip_id}", headers=headers_for(user))

        assert resp.status_code == 200
        assert resp.json() == {"message": "Trip deleted successfully"}
        db.expire_all()
        assert db.get(Trip, trip_id) is None

    def test_delete_database_failure(self, client, db, make_user, make_trip, headers_for, monkeypatch):
        user = make_user()
        trip_id = make_trip(user).id
        headers = headers_for(user)

        def failing_commit(self):
            raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

        monkeypatch.setattr(Session, "commit", failing_commit)
        resp = client.delete(f"/api/trips/{trip_id}", headers=headers)

        assert resp.status_code == 500
        assert resp.json() == {"error": "Failed to delete trip"}
        db.expire_all()
        assert db.get(Trip, trip_id) is not None

    def test_delete_foreign_trip_forbidden(self, client, db, make_user, make_trip, headers_for):
        trip = make_trip(make_user())
        resp = client.delete(f"/api/trips/{trip.id}", headers=headers_for(make_user()))
        assert resp.status_code == 403
        assert resp.json() == {"error": "Forbidden"}
        db.expire_all()
        assert db.get(Trip, trip.id) is not None

    def test_delete_unknown_trip(self, client, make_user, headers_for):
        resp = client.delete("/api/trips/missing", headers=headers_for(make_user()))
        assert resp.status_code == 404

    def test_delete_requires_session(self, client, make_user, make_trip):
        trip = make_trip(make_user())
        assert client.delete(f"/api/trips/{trip.id}").status_code == 401
