"""ICT admin time log management."""
import pytest

from datravel.models.account import Role
from tests.helpers import auth_headers

API = "/api/v1/ict-admin/time-logs"


@pytest.fixture
def headers(admin):
    return auth_headers(admin, Role.ADMIN)


@pytest.fixture
def create_log(client, headers):
    def _create(**fields):
        payload = {"log_date": "2026-03-02", "time_in": "08:00:00"}
        payload.update(fields)
        response = client.post(API, json=payload, headers=headers)
        assert response.status_code == 201, response.json()
        return response.json()["data"]
    return _create


class TestTimeLogCrud:

    def test_create_for_personnel(self, client, headers, personnel):
        response = client.post(
            API,
            json={"personnel_id": personnel.id, "log_date": "2026-03-02", "time_in": "08:00", "time_out": "17:00"},
            headers=headers,
        )
        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Time log created."
        assert body["data"]["personnel"]["full_name"] == "Juan P Cruz1"
        assert body["data"]["time_out"] == "17:00:00"

    def test_requires_one_owner(self, client, headers, personnel, recommender):
        missing = client.post(API, json={"log_date": "2026-03-02", "time_in": "08:00"}, headers=headers)
        assert missing.status_code == 422
        assert missing.json()["errors"] == {"personnel_id": ["Personnel or director is required."]}

        both = client.post(
            API,
            json={
                "personnel_id": personnel.id, "director_id": recommender.id,
                "log_date": "2026-03-02", "time_in": "08:00",
            },
            headers=headers,
        )
        assert both.status_code == 422
        assert both.json()["message"] == "Only one user type can be selected per time log."

    def test_unknown_director(self, client, headers):
        response = client.post(
            API, json={"director_id": 999, "log_date": "2026-03-02", "time_in": "08:00"}, headers=headers
        )
        assert response.status_code == 422
        assert "director_id" in response.json()["errors"]

    def test_time_out_before_time_in(self, client, headers, personnel):
        response = client.post(
            API,
            json={"personnel_id": personnel.id, "log_date": "2026-03-02", "time_in": "09:00", "time_out": "08:00"},
            headers=headers,
        )
        assert response.status_code == 422
        assert response.json()["errors"] == {"time_out": ["Time out must be after time in."]}

    def test_update_closes_open_log(self, client, headers, personnel, create_log):
        log = create_log(personnel_id=personnel.id)
        response = client.put(f"{API}/{log['id']}", json={"time_out": "16:30"}, headers=headers)
        assert response.status_code == 200
        assert response.json()["data"]["time_out"] == "16:30:00"
        assert response.json()["data"]["personnel_id"] == personnel.id

    def test_update_checks_merged_times(self, client, headers, personnel, create_log):
        log = create_log(personnel_id=personnel.id, time_out="17:00")
        response = client.put(f"{API}/{log['id']}", json={"time_in": "18:00"}, headers=headers)
        assert response.status_code == 422

    def test_delete(self, client, headers, personnel, create_log):
        log = create_log(personnel_id=personnel.id)
        assert client.delete(f"{API}/{log['id']}", headers=headers).json()["message"] == "Time log deleted."
        assert client.delete(f"{API}/{log['id']}", headers=headers).status_code == 404

    def test_admin_only(self, client, personnel, recommender):
        assert client.get(API, headers=auth_headers(personnel, Role.PERSONNEL)).status_code == 403
        assert client.get(API, headers=auth_headers(recommender, Role.DIRECTOR)).status_code == 403


class TestTimeLogListing:

    def test_search_status_and_stats(self, client, headers, make_personnel, recommender, create_log):
        ana = make_personnel(first_name="Ana", department="Planning")
        create_log(personnel_id=ana.id, time_out="17:00")
        create_log(personnel_id=make_personnel(first_name="Ben").id)
        create_log(director_id=recommender.id, remarks="Field inspection")

        data = client.get(API, headers=headers).json()["data"]
        assert data["stats"] == {"total": 3, "open": 2, "closed": 1}
        assert data["pagination"]["total"] == 3

        by_name = client.get(API, params={"search": "ana"}, headers=headers).json()["data"]
        assert [log["personnel_id"] for log in by_name["items"]] == [ana.id]

        by_remarks = client.get(API, params={"search": "inspection"}, headers=headers).json()["data"]
        assert [log["director_id"] for log in by_remarks["items"]] == [recommender.id]

        closed = client.get(API, params={"status": "closed"}, headers=headers).json()["data"]
        assert [log["personnel_id"] for log in closed["items"]] == [ana.id]

    def test_sort_direction(self, client, headers, personnel, create_log):
        create_log(personnel_id=personnel.id, log_date="2026-03-01")
        create_log(personnel_id=personnel.id, log_date="2026-03-03")
        dates = [
            log["log_date"]
            for log in client.get(API, params={"direction": "asc"}, headers=headers).json()["data"]["items"]
        ]
        assert dates == ["2026-03-01", "2026-03-03"]

    def test_invalid_status_filter(self, client, headers):
        assert client.get(API, params={"status": "everything"}, headers=headers).status_code == 422
