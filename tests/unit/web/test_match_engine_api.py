#!/usr/bin/env python3
"""
Unit tests for the Match Engine HTTP API.
Runs the real app against the in-memory SQLite database.
"""

from datetime import date

import pytest
from fastapi.testclient import TestClient

from database.models import MatchScore, RecomputeQueueItem, ScheduleEntry
from web.backend.app import app
from web.backend.dependencies import get_db
from web.backend.routers.admin import limiter

pytestmark = pytest.mark.db

API = "/api/match-engine"


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    # Disable rate limiting for tests
    limiter.enabled = False
    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()
    limiter.enabled = True


@pytest.fixture
def campus(seed):
    tenant = seed.tenant()
    listing = seed.listing(tenant, title="Data Intern", skills_required=["Python", "SQL", "React"], hours_per_week=10)
    ada = seed.student(tenant, first_name="Ada", skills=["Python", "SQL"], university="Holy Cross")
    alan = seed.student(tenant, first_name="Alan", skills=["Python"])
    grace = seed.student(tenant, first_name="Grace")
    season = seed.season()
    seed.score(ada, listing, composite=82)
    seed.score(alan, listing, composite=64, is_stale=True)
    seed.commit()
    return {"tenant": tenant, "listing": listing, "ada": ada, "alan": alan, "grace": grace, "season": season}


def as_student(student):
    return {"X-Student-Id": str(student.id)}


class TestHealth:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestMatchesEndpoints:

    def test_listing_matches_ranked_and_camel_cased(self, client, campus, db_session):
        response = client.get(f"{API}/matches/listing/{campus['listing'].id}")

        assert response.status_code == 200
        data = response.json()
        assert [m["firstName"] for m in data] == ["Ada", "Alan"]
        assert data[0]["compositeScore"] == 82
        assert data[0]["isStale"] is False
        assert data[1]["isStale"] is True
        assert data[0]["studentId"] == str(campus["ada"].id)
        assert "computedAt" in data[0]

    def test_unscored_candidates_are_enqueued(self, client, campus, db_session):
        client.get(f"{API}/matches/listing/{campus['listing'].id}")

        queued = db_session.query(RecomputeQueueItem).filter_by(status="pending").all()
        assert [i.student_id for i in queued] == [campus["grace"].id]
        assert queued[0].reason == "manual"

    def test_limit(self, client, campus):
        response = client.get(f"{API}/matches/listing/{campus['listing'].id}", params={"limit": 1})
        assert len(response.json()) == 1

    def test_unknown_listing_is_404(self, client, campus):
        response = client.get(f"{API}/matches/listing/00000000-0000-0000-0000-000000000000")
        assert response.status_code == 404
        assert response.json()["success"] is False
        assert response.json()["type"] == "ListingNotFoundException"

    def test_student_matches(self, client, campus):
        response = client.get(f"{API}/matches/student/{campus['ada'].id}")

        assert response.status_code == 200
        data = response.json()
        assert len(data) == 1
        assert data[0]["title"] == "Data Intern"
        assert data[0]["compositeScore"] == 82


class TestScheduleEndpoints:

    def test_missing_identity_is_401(self, client, campus):
        response = client.get(f"{API}/schedules")
        assert response.status_code == 401

    def test_create_sport_schedule_marks_scores_stale(self, client, campus, db_session):
        payload = {
            "scheduleType": "sport",
            "sportSeasonId": str(campus["season"].id),
            "travelConflicts": [{"startDate": "2026-10-01", "endDate": "2026-10-03", "reason": "Away game"}],
        }

        response = client.post(f"{API}/schedules", json=payload, headers=as_student(campus["ada"]))

        assert response.status_code == 201
        body = response.json()
        assert body["scheduleType"] == "sport"
        assert body["sportSeason"]["sportName"] == "Soccer"
        assert body["travelConflicts"][0]["startDate"] == "2026-10-01"

        db_session.expire_all()
        score = db_session.query(MatchScore).filter_by(student_id=campus["ada"].id).one()
        assert score.is_stale is True
        queued = db_session.query(RecomputeQueueItem).filter_by(student_id=campus["ada"].id).all()
        assert [i.reason for i in queued] == ["schedule-change"]

    def test_list_only_own_schedules(self, client, campus, seed):
        seed.schedule(campus["ada"], season=campus["season"])
        seed.schedule(campus["alan"], schedule_type="custom", available_hours_per_week=20)
        seed.commit()

        response = client.get(f"{API}/schedules", headers=as_student(campus["ada"]))

        assert response.status_code == 200
        assert [s["studentId"] for s in response.json()] == [str(campus["ada"].id)]

    def test_overlapping_blocks_rejected(self, client, campus):
        payload = {
            "scheduleType": "custom",
            "customBlocks": [
                {"day": "monday", "startTime": "09:00", "endTime": "11:00"},
                {"day": "monday", "startTime": "10:30", "endTime": "12:00"},
            ],
        }
        response = client.post(f"{API}/schedules", json=payload, headers=as_student(campus["ada"]))
        assert response.status_code == 422

    @pytest.mark.parametrize("block", [
        {"day": "funday", "startTime": "09:00", "endTime": "11:00"},
        {"day": "monday", "startTime": "9am", "endTime": "11:00"},
        {"day": "monday", "startTime": "11:00", "endTime": "11:00"},
    ])
    def test_malformed_blocks_rejected(self, client, campus, block):
        payload = {"scheduleType": "custom", "customBlocks": [block]}
        response = client.post(f"{API}/schedules", json=payload, headers=as_student(campus["ada"]))
        assert response.status_code == 422

    def test_sport_schedule_requires_season(self, client, campus):
        response = client.post(f"{API}/schedules", json={"scheduleType": "sport"}, headers=as_student(campus["ada"]))
        assert response.status_code == 422

    def test_unknown_season_is_400(self, client, campus):
        payload = {"scheduleType": "sport", "sportSeasonId": "00000000-0000-0000-0000-000000000000"}
        response = client.post(f"{API}/schedules", json=payload, headers=as_student(campus["ada"]))
        assert response.status_code == 400
        assert response.json()["type"] == "SportSeasonNotFoundException"

    def test_delete_requires_ownership(self, client, campus, seed, db_session):
        entry = seed.schedule(campus["ada"], season=campus["season"])
        seed.commit()
        entry_id = entry.id

        response = client.delete(f"{API}/schedules/{entry_id}", headers=as_student(campus["alan"]))
        assert response.status_code == 404

        response = client.delete(f"{API}/schedules/{entry_id}", headers=as_student(campus["ada"]))
        assert response.status_code == 200
        assert response.json()["success"] is True
        db_session.expire_all()
        assert db_session.query(ScheduleEntry).count() == 0

    def test_sport_seasons(self, client, campus):
        response = client.get(f"{API}/sport-seasons")
        assert response.status_code == 200
        assert response.json()[0]["practiceHoursPerWeek"] == 10.0

    def test_availability(self, client, campus, seed):
        seed.schedule(campus["ada"], season=campus["season"])
        seed.commit()

        response = client.get(
            f"{API}/schedules/availability",
            params={"startDate": "2026-09-07", "endDate": "2026-09-13"},
            headers=as_student(campus["ada"]),
        )

        assert response.status_code == 200
        (window,) = response.json()
        assert window["weekStart"] == "2026-09-07"
        assert window["availableHours"] == 25.0
        assert window["overallAvailability"] == "medium"
        assert window["sportConflicts"] == ["Soccer in-season"]

    def test_availability_defaults_to_six_months(self, client, campus):
        response = client.get(f"{API}/schedules/availability", headers=as_student(campus["ada"]))
        assert response.status_code == 200
        weeks = response.json()
        assert 26 <= len(weeks) <= 28
        assert date.fromisoformat(weeks[0]["weekStart"]) <= date.today()

    def test_inverted_availability_range_is_400(self, client, campus):
        response = client.get(
            f"{API}/schedules/availability",
            params={"startDate": "2026-09-30", "endDate": "2026-09-01"},
            headers=as_student(campus["ada"]),
        )
        assert response.status_code == 400

    def test_availability_range_longer_than_two_years_is_400(self, client, campus):
        response = client.get(
            f"{API}/schedules/availability",
            params={"startDate": "2026-09-01", "endDate": "2046-09-01"},
            headers=as_student(campus["ada"]),
        )
        assert response.status_code == 400
        assert "731 days" in response.json()["error"]

    def test_two_year_availability_range_is_allowed(self, client, campus):
        response = client.get(
            f"{API}/schedules/availability",
            params={"startDate": "2026-09-01", "endDate": "2028-09-01"},
            headers=as_student(campus["ada"]),
        )
        assert response.status_code == 200


class TestAdminEndpoints:

    def test_stats(self, client, campus):
        response = client.get(f"{API}/admin/stats")

        assert response.status_code == 200
        data = response.json()
        assert data["scores"]["total_scores"] == 2
        assert data["scores"]["stale_scores"] == 1
        assert data["scores"]["max_score"] == 82
        assert data["queue"] == {"pending": 0, "processed": 0, "failed": 0, "total": 0}

    def test_recompute(self, client, campus):
        response = client.post(f"{API}/admin/recompute")

        assert response.status_code == 200
        assert response.json() == {"scoresMarkedStale": 1}
        stats = client.get(f"{API}/admin/stats").json()
        assert stats["queue"]["pending"] == 1

    def test_recompute_scoped_to_other_tenant(self, client, campus):
        response = client.post(
            f"{API}/admin/recompute", params={"tenant_id": "00000000-0000-0000-0000-000000000000"}
        )
        assert response.json() == {"scoresMarkedStale": 0}

    def test_recompute_is_rate_limited(self, client, campus):
        limiter.enabled = True
        limiter.reset()

        codes = [client.post(f"{API}/admin/recompute").status_code for _ in range(6)]

        assert codes[:5] == [200] * 5
        assert codes[5] == 429
        limiter.reset()

    def test_config(self, client):
        response = client.get(f"{API}/admin/config")

        assert response.status_code == 200
        data = response.json()
        assert abs(sum(data["signalWeights"].values()) - 1.0) < 1e-6
        assert data["ttlHours"] == 24
        assert data["weightsVersion"] == 1


class TestChangeNotifications:

    def test_student_change_rescores_candidates(self, client, campus, db_session):
        ada = campus["ada"]

        response = client.post(f"{API}/admin/notify/student/{ada.id}")

        assert response.status_code == 200
        assert response.json() == {"scoresMarkedStale": 1, "enqueued": 1, "cancelled": 0}
        db_session.expire_all()
        (item,) = db_session.query(RecomputeQueueItem).filter_by(status="pending").all()
        assert item.student_id == ada.id
        assert item.reason == "profile-change"
        score = db_session.query(MatchScore).filter_by(student_id=ada.id).one()
        assert score.is_stale is True

    def test_listing_change_rescores_tenant_students(self, client, campus, db_session):
        listing = campus["listing"]

        response = client.post(f"{API}/admin/notify/listing/{listing.id}")

        assert response.status_code == 200
        assert response.json() == {"scoresMarkedStale": 1, "enqueued": 3, "cancelled": 0}
        db_session.expire_all()
        reasons = {i.reason for i in db_session.query(RecomputeQueueItem).all()}
        assert reasons == {"listing-change"}

    def test_unknown_entities_are_404(self, client, campus):
        missing = "00000000-0000-0000-0000-000000000000"

        assert client.post(f"{API}/admin/notify/student/{missing}").status_code == 404
        assert client.post(f"{API}/admin/notify/listing/{missing}").status_code == 404

    def test_listing_deletion_cancels_pending_recomputes(self, client, campus, db_session):
        listing = campus["listing"]
        client.post(f"{API}/admin/notify/listing/{listing.id}")

        response = client.delete(f"{API}/admin/notify/listing/{listing.id}")

        assert response.status_code == 200
        assert response.json()["cancelled"] == 3
        db_session.expire_all()
        assert {i.status for i in db_session.query(RecomputeQueueItem).all()} == {"cancelled"}

    def test_student_deletion_cancels_only_that_student(self, client, campus, db_session):
        client.post(f"{API}/admin/notify/listing/{campus['listing'].id}")

        response = client.delete(f"{API}/admin/notify/student/{campus['grace'].id}")

        assert response.json()["cancelled"] == 1
        stats = client.get(f"{API}/admin/stats").json()
        assert stats["queue"]["pending"] == 2
