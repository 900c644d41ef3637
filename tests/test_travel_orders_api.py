"""Personnel travel order endpoints."""
from datetime import date

import pytest

from datravel.models.account import Role
from datravel.models.travel_order import TravelOrder, TravelOrderAttachment, TravelOrderStatus
from tests.helpers import auth_headers

API = "/api/v1"

DRAFT_PAYLOAD = {
    "travel_purpose": "Field visit",
    "destination": "Baguio City",
    "official_station": "Regional Office",
    "start_date": "2026-03-10",
    "end_date": "2026-03-12",
    "per_diems_expenses": "800.00",
    "appropriation": "Regular fund",
}


@pytest.fixture
def headers(personnel):
    return auth_headers(personnel, Role.PERSONNEL)


@pytest.fixture
def draft_id(client, headers):
    response = client.post(f"{API}/travel-orders", json=DRAFT_PAYLOAD, headers=headers)
    assert response.status_code == 201
    return response.json()["data"]["id"]


class TestAuthentication:

    def test_missing_token(self, client):
        response = client.get(f"{API}/travel-orders")
        assert response.status_code in (401, 403)

    def test_invalid_token(self, client):
        response = client.get(f"{API}/travel-orders", headers={"Authorization": "Bearer not-a-token"})
        assert response.status_code == 401
        assert response.json()["success"] is False

    def test_inactive_account_rejected(self, client, make_personnel):
        inactive = make_personnel(is_active=False)
        response = client.get(f"{API}/travel-orders", headers=auth_headers(inactive, Role.PERSONNEL))
        assert response.status_code == 401


class TestDrafts:

    def test_create_draft(self, client, headers, personnel):
        response = client.post(f"{API}/travel-orders", json=DRAFT_PAYLOAD, headers=headers)
        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["data"]["status"] == "draft"
        assert body["data"]["personnel_id"] == personnel.id
        assert body["data"]["approvals"] == []

    def test_create_rejects_end_before_start(self, client, headers):
        payload = dict(DRAFT_PAYLOAD, start_date="2026-03-12", end_date="2026-03-10")
        response = client.post(f"{API}/travel-orders", json=payload, headers=headers)
        assert response.status_code == 422
        assert response.json()["success"] is False

    def test_create_requires_destination(self, client, headers):
        payload = {k: v for k, v in DRAFT_PAYLOAD.items() if k != "destination"}
        response = client.post(f"{API}/travel-orders", json=payload, headers=headers)
        assert response.status_code == 422
        assert "destination" in response.json()["errors"]

    def test_director_cannot_create(self, client, recommender):
        response = client.post(
            f"{API}/travel-orders", json=DRAFT_PAYLOAD, headers=auth_headers(recommender, Role.DIRECTOR)
        )
        assert response.status_code == 403
        assert response.json()["success"] is False

    def test_update_draft(self, client, headers, draft_id):
        response = client.put(
            f"{API}/travel-orders/{draft_id}",
            json={"destination": "Davao City", "per_diems_note": "800/diem"},
            headers=headers,
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["destination"] == "Davao City"
        assert data["per_diems_note"] == "800/diem"
        assert data["travel_purpose"] == "Field visit"

    def test_update_checks_merged_dates(self, client, headers, draft_id):
        response = client.put(f"{API}/travel-orders/{draft_id}", json={"end_date": "2026-03-01"}, headers=headers)
        assert response.status_code == 422
        assert "end_date" in response.json()["errors"]

    def test_other_personnel_gets_404(self, client, make_personnel, draft_id):
        stranger = auth_headers(make_personnel(), Role.PERSONNEL)
        assert client.get(f"{API}/travel-orders/{draft_id}", headers=stranger).status_code == 404
        assert client.put(
            f"{API}/travel-orders/{draft_id}", json={"destination": "X"}, headers=stranger
        ).status_code == 404
        assert client.delete(f"{API}/travel-orders/{draft_id}", headers=stranger).status_code == 404

    def test_delete_draft(self, client, db, headers, draft_id):
        response = client.delete(f"{API}/travel-orders/{draft_id}", headers=headers)
        assert response.status_code == 200
        db.expire_all()
        assert db.query(TravelOrder).filter(TravelOrder.id == draft_id).first() is None


class TestSubmitEndpoint:

    def test_submit(self, client, headers, draft_id, recommender, approver):
        response = client.post(
            f"{API}/travel-orders/{draft_id}/submit",
            json={"recommending_director_id": recommender.id, "approving_director_id": approver.id},
            headers=headers,
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "pending"
        assert data["approval_chain_length"] == 2
        assert [(a["step_order"], a["status"]) for a in data["approvals"]] == [(1, "pending"), (2, "pending")]

    def test_submit_same_director_twice(self, client, headers, draft_id, approver):
        response = client.post(
            f"{API}/travel-orders/{draft_id}/submit",
            json={"recommending_director_id": approver.id, "approving_director_id": approver.id},
            headers=headers,
        )
        assert response.status_code == 422
        assert "recommending_director_id" in response.json()["errors"]

    def test_submitted_order_is_locked(self, client, db, headers, draft_id, recommender, approver, admin):
        client.post(
            f"{API}/travel-orders/{draft_id}/submit",
            json={"recommending_director_id": recommender.id, "approving_director_id": approver.id},
            headers=headers,
        )
        assert client.put(
            f"{API}/travel-orders/{draft_id}", json={"destination": "X"}, headers=headers
        ).status_code == 422
        assert client.delete(f"{API}/travel-orders/{draft_id}", headers=headers).status_code == 422
        assert client.delete(
            f"{API}/travel-orders/{draft_id}", headers=auth_headers(admin, Role.ADMIN)
        ).status_code == 403
        assert client.post(
            f"{API}/travel-orders/{draft_id}/submit",
            json={"recommending_director_id": recommender.id, "approving_director_id": approver.id},
            headers=headers,
        ).status_code == 422
        db.expire_all()
        assert db.query(TravelOrder).filter(TravelOrder.id == draft_id).one().status == TravelOrderStatus.PENDING


class TestListing:

    def test_list_is_paginated_and_scoped(self, client, headers, make_order, make_personnel, personnel):
        for _ in range(3):
            make_order(personnel)
        make_order(make_personnel())

        response = client.get(f"{API}/travel-orders", params={"per_page": 2}, headers=headers)
        assert response.status_code == 200
        data = response.json()["data"]
        assert len(data["items"]) == 2
        assert data["pagination"] == {
            "current_page": 1, "last_page": 2, "total": 3, "from": 1, "to": 2, "per_page": 2,
        }

    def test_admin_lists_everything(self, client, admin, make_order, make_personnel, personnel):
        make_order(personnel)
        make_order(make_personnel())
        response = client.get(f"{API}/travel-orders", headers=auth_headers(admin, Role.ADMIN))
        assert response.json()["data"]["pagination"]["total"] == 2

    def test_search_and_status_filter(self, client, headers, make_order, personnel):
        make_order(personnel, destination="Cebu City")
        make_order(personnel, destination="Iloilo City", status=TravelOrderStatus.APPROVED)

        found = client.get(f"{API}/travel-orders", params={"search": "cebu"}, headers=headers).json()
        assert [o["destination"] for o in found["data"]["items"]] == ["Cebu City"]

        approved = client.get(f"{API}/travel-orders", params={"status": "approved"}, headers=headers).json()
        assert [o["destination"] for o in approved["data"]["items"]] == ["Iloilo City"]

    def test_history_lists_decided_orders(self, client, headers, make_order, personnel):
        make_order(personnel)
        make_order(personnel, status=TravelOrderStatus.APPROVED)
        make_order(personnel, status=TravelOrderStatus.REJECTED)
        data = client.get(f"{API}/travel-orders/history", headers=headers).json()["data"]
        assert sorted(o["status"] for o in data["items"]) == ["approved", "rejected"]

    def test_calendar_month_overlap(self, client, headers, make_order, personnel):
        make_order(personnel, status=TravelOrderStatus.PENDING,
                   start_date=date(2026, 2, 27), end_date=date(2026, 3, 2))
        make_order(personnel, status=TravelOrderStatus.APPROVED,
                   start_date=date(2026, 4, 1), end_date=date(2026, 4, 3))
        make_order(personnel, start_date=date(2026, 3, 5), end_date=date(2026, 3, 6))

        response = client.get(f"{API}/travel-orders/calendar", params={"year": 2026, "month": 3}, headers=headers)
        assert response.status_code == 200
        assert [o["start_date"] for o in response.json()["data"]] == ["2026-02-27"]

    def test_available_directors_excludes_inactive(self, client, headers, make_director, recommender):
        make_director(is_active=False)
        data = client.get(f"{API}/directors/available", headers=headers).json()["data"]
        assert [d["id"] for d in data] == [recommender.id]


class TestAttachments:

    def test_upload_download_and_remove(self, client, db, headers, draft_id, storage):
        response = client.post(
            f"{API}/travel-orders/{draft_id}/attachments",
            files=[("files", ("itinerary.pdf", b"%PDF-1.4 test", "application/pdf"))],
            data={"types": "itinerary"},
            headers=headers,
        )
        assert response.status_code == 201
        attachment = response.json()["data"]["attachments"][0]
        assert attachment["type"] == "itinerary"
        assert attachment["file_size"] == len(b"%PDF-1.4 test")

        download = client.get(
            f"{API}/travel-orders/{draft_id}/attachments/{attachment['id']}/download", headers=headers
        )
        assert download.status_code == 200
        assert download.content == b"%PDF-1.4 test"

        db.expire_all()
        path = db.query(TravelOrderAttachment).one().file_path
        assert path.startswith("travel-order-attachments/to_")
        assert storage.exists(path)

        removed = client.delete(f"{API}/travel-orders/{draft_id}/attachments/{attachment['id']}", headers=headers)
        assert removed.status_code == 200
        assert not storage.exists(path)

    def test_unknown_type_becomes_other(self, client, headers, draft_id):
        response = client.post(
            f"{API}/travel-orders/{draft_id}/attachments",
            files=[("files", ("notes.txt", b"notes", "text/plain"))],
            data={"types": "receipt"},
            headers=headers,
        )
        assert response.json()["data"]["attachments"][0]["type"] == "other"

    def test_deleting_draft_removes_files(self, client, db, headers, draft_id, storage):
        client.post(
            f"{API}/travel-orders/{draft_id}/attachments",
            files=[("files", ("memo.pdf", b"memo", "application/pdf"))],
            headers=headers,
        )
        db.expire_all()
        path = db.query(TravelOrderAttachment).one().file_path
        client.delete(f"{API}/travel-orders/{draft_id}", headers=headers)
        assert not storage.exists(path)
        db.expire_all()
        assert db.query(TravelOrderAttachment).count() == 0
