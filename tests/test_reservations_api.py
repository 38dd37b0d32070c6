from datetime import date, timedelta

from parking_service.app.models.parking.reservation_claims import ReservationClaim
from parking_service.app.models.parking.reservations import Reservation
from shared.utils.document_storage import document_storage
from conftest import pdf_file

TOMORROW = date.today() + timedelta(days=1)


def reservation_body(space_id="space-1", days=0, shift="8:00-14:00", start=TOMORROW):
    return {
        "space_id": space_id,
        "start_date": start.isoformat(),
        "end_date": (start + timedelta(days=days)).isoformat(),
        "shift_type": shift,
    }


def create(client, headers, **kwargs):
    return client.post("/api/parking/reservations", json=reservation_body(**kwargs), headers=headers)


def test_requires_bearer_token(parking_client, spaces):
    response = parking_client.post("/api/parking/reservations", json=reservation_body())

    assert response.status_code == 401
    assert response.json()["success"] is False


def test_create_json_reservation(parking_client, user_headers, user, spaces, db):
    response = create(parking_client, user_headers)

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["status"] == "Success"
    data = body["data"]
    assert data["status"] == "pending"
    assert data["space_id"] == "space-1"
    assert data["shift_type"] == "8:00-14:00"
    assert data["user_id"] == str(user.uid)
    assert data["space"]["space_number"] == 1
    assert db.query(ReservationClaim).count() == 1


def test_numeric_space_id_and_symbolic_shift(parking_client, user_headers, spaces):
    response = create(parking_client, user_headers, space_id="3", shift="FULL_DAY")

    assert response.status_code == 201
    assert response.json()["data"]["space_id"] == "space-3"
    assert response.json()["data"]["shift_type"] == "9:30-18:30"


def test_missing_fields(parking_client, user_headers, spaces):
    response = parking_client.post("/api/parking/reservations",
                                   json={"space_id": "space-1"}, headers=user_headers)

    assert response.status_code == 400
    assert response.json()["message"] == "Missing required fields: start_date, end_date, shift_type"


def test_invalid_shift(parking_client, user_headers, spaces):
    response = create(parking_client, user_headers, shift="EVENING")

    assert response.status_code == 400
    assert response.json()["message"].startswith("Invalid shift type. Must be one of:")


def test_invalid_period(parking_client, user_headers, spaces):
    response = parking_client.post("/api/parking/reservations", json={
        "space_id": "space-1",
        "start_date": (TOMORROW + timedelta(days=2)).isoformat(),
        "end_date": TOMORROW.isoformat(),
        "shift_type": "8:00-14:00",
    }, headers=user_headers)

    assert response.status_code == 400
    assert "End date" in response.json()["message"]


def test_past_start_date(parking_client, user_headers, spaces):
    response = create(parking_client, user_headers, start=date.today() - timedelta(days=1))

    assert response.status_code == 400


def test_unknown_space(parking_client, user_headers, spaces):
    response = create(parking_client, user_headers, space_id="space-99")

    assert response.status_code == 404


def test_long_reservation_requires_document(parking_client, user_headers, spaces):
    response = create(parking_client, user_headers, days=3)

    assert response.status_code == 400
    assert response.json()["message"] == \
        "Schedule document (PDF) is required for reservations longer than 2 days"


def test_two_day_span_needs_no_document(parking_client, user_headers, spaces):
    response = create(parking_client, user_headers, days=2)

    assert response.status_code == 201


def test_long_reservation_with_document(parking_client, user_headers, spaces):
    response = parking_client.post("/api/parking/reservations",
                                   data=reservation_body(days=3),
                                   files=pdf_file(), headers=user_headers)

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["status"] == "pending"
    assert data["schedule_document"]["filename"] == "schedule.pdf"
    assert data["schedule_document"]["size"] == 1024


def test_invalid_document_is_rejected(parking_client, user_headers, spaces):
    response = parking_client.post(
        "/api/parking/reservations",
        data=reservation_body(days=3),
        files={"schedule_document": ("notes.pdf", b"hello", "application/pdf")},
        headers=user_headers)

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid PDF file format"


def test_conflicting_reservation(parking_client, user_headers, spaces, make_user, token_for):
    assert create(parking_client, user_headers, shift="MORNING").status_code == 201
    other = {"Authorization": f"Bearer {token_for(make_user())}"}

    conflict = create(parking_client, other, shift="FULL_DAY")
    afternoon = create(parking_client, other, shift="AFTERNOON")

    assert conflict.status_code == 409
    assert conflict.json()["message"] == "Parking space is not available for the selected period and shift"
    assert afternoon.status_code == 201


def test_list_own_reservations(parking_client, user_headers, spaces, make_user, token_for):
    create(parking_client, user_headers, space_id="space-1")
    create(parking_client, user_headers, space_id="space-2")
    other = {"Authorization": f"Bearer {token_for(make_user())}"}
    create(parking_client, other, space_id="space-3")

    response = parking_client.get("/api/parking/reservations", headers=user_headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["total"] == 2
    assert {r["space_id"] for r in data["reservations"]} == {"space-1", "space-2"}


def test_update_reservation_shift(parking_client, user_headers, spaces, db):
    reservation_id = create(parking_client, user_headers, shift="MORNING").json()["data"]["id"]

    response = parking_client.put(f"/api/parking/reservations/{reservation_id}",
                                  json={"shift_type": "FULL_DAY"}, headers=user_headers)

    assert response.status_code == 200
    assert response.json()["data"]["shift_type"] == "9:30-18:30"
    assert db.query(ReservationClaim).count() == 2


def test_update_excludes_itself_but_not_others(parking_client, user_headers, spaces, make_user, token_for):
    own_id = create(parking_client, user_headers, shift="MORNING", days=1).json()["data"]["id"]
    other = {"Authorization": f"Bearer {token_for(make_user())}"}
    create(parking_client, other, shift="AFTERNOON", start=TOMORROW + timedelta(days=1))

    # extending the own morning booking does not collide with itself
    extended = parking_client.put(f"/api/parking/reservations/{own_id}", json={
        "end_date": (TOMORROW + timedelta(days=2)).isoformat()}, headers=user_headers)
    assert extended.status_code == 200

    # switching to full day would collide with the other user's afternoon
    blocked = parking_client.put(f"/api/parking/reservations/{own_id}",
                                 json={"shift_type": "FULL_DAY"}, headers=user_headers)
    assert blocked.status_code == 409


def test_update_to_long_period_requires_document(parking_client, user_headers, spaces):
    reservation_id = create(parking_client, user_headers).json()["data"]["id"]

    response = parking_client.put(f"/api/parking/reservations/{reservation_id}", json={
        "end_date": (TOMORROW + timedelta(days=3)).isoformat()}, headers=user_headers)

    assert response.status_code == 400


def test_update_requires_ownership(parking_client, user_headers, spaces, make_user, token_for):
    reservation_id = create(parking_client, user_headers).json()["data"]["id"]
    other = {"Authorization": f"Bearer {token_for(make_user())}"}

    response = parking_client.put(f"/api/parking/reservations/{reservation_id}",
                                  json={"shift_type": "AFTERNOON"}, headers=other)

    assert response.status_code == 403


def test_cancel_reservation_frees_space(parking_client, user_headers, spaces, db):
    reservation_id = parking_client.post(
        "/api/parking/reservations", data=reservation_body(days=3, shift="FULL_DAY"),
        files=pdf_file(), headers=user_headers).json()["data"]["id"]

    response = parking_client.delete(f"/api/parking/reservations/{reservation_id}",
                                     headers=user_headers)

    assert response.status_code == 200
    assert response.json()["data"]["status"] == "cancelled"
    reservation = db.query(Reservation).first()
    assert reservation.cancelled_at is not None
    assert reservation.schedule_document is None
    assert db.query(ReservationClaim).count() == 0
    assert create(parking_client, user_headers, shift="FULL_DAY").status_code == 201


def test_cancel_twice_is_rejected(parking_client, user_headers, spaces):
    reservation_id = create(parking_client, user_headers).json()["data"]["id"]
    parking_client.delete(f"/api/parking/reservations/{reservation_id}", headers=user_headers)

    response = parking_client.delete(f"/api/parking/reservations/{reservation_id}",
                                     headers=user_headers)

    assert response.status_code == 400


def test_unknown_reservation(parking_client, user_headers, spaces):
    response = parking_client.delete("/api/parking/reservations/not-a-uuid", headers=user_headers)

    assert response.status_code == 404


def test_document_link_and_download(parking_client, user_headers, spaces):
    reservation_id = parking_client.post(
        "/api/parking/reservations", data=reservation_body(days=3),
        files=pdf_file(), headers=user_headers).json()["data"]["id"]

    link = parking_client.get(f"/api/parking/reservations/{reservation_id}/document",
                              headers=user_headers)

    assert link.status_code == 200
    data = link.json()["data"]
    assert data["filename"] == "schedule.pdf"
    download = parking_client.get(data["download_url"].split("8002", 1)[1])
    assert download.status_code == 200
    assert download.content.startswith(b"%PDF")


def test_download_with_bad_token(parking_client):
    response = parking_client.get("/api/parking/documents/download", params={"token": "garbage"})

    assert response.status_code == 401


def test_document_link_without_document(parking_client, user_headers, spaces):
    reservation_id = create(parking_client, user_headers).json()["data"]["id"]

    response = parking_client.get(f"/api/parking/reservations/{reservation_id}/document",
                                  headers=user_headers)

    assert response.status_code == 404


def test_delete_document(parking_client, user_headers, spaces, db):
    reservation_id = parking_client.post(
        "/api/parking/reservations", data=reservation_body(days=3),
        files=pdf_file(), headers=user_headers).json()["data"]["id"]

    response = parking_client.delete(f"/api/parking/reservations/{reservation_id}/document",
                                     headers=user_headers)

    assert response.status_code == 200
    assert db.query(Reservation).first().schedule_document is None


def test_standalone_upload(parking_client, user_headers):
    response = parking_client.post(
        "/api/parking/upload",
        files={"file": ("plan.pdf", b"%PDF-1.7 body", "application/pdf")},
        headers=user_headers)

    assert response.status_code == 201
    assert response.json()["data"]["document"]["filename"] == "plan.pdf"
    assert response.json()["data"]["reservation_id"] is None


def test_spaces_dashboard_and_availability(parking_client, user_headers, spaces):
    create(parking_client, user_headers, space_id="space-3", shift="MORNING")

    listing = parking_client.get("/api/parking/spaces", headers=user_headers)
    assert [s["id"] for s in listing.json()["data"]["spaces"]] == spaces

    dashboard = parking_client.get("/api/parking/dashboard",
                                   params={"date": TOMORROW.isoformat()}, headers=user_headers)
    space_3 = next(s for s in dashboard.json()["data"]["spaces"] if s["id"] == "space-3")
    assert space_3["is_available"] == {"morning": False, "afternoon": True, "full_day": False}

    availability = parking_client.get("/api/parking/availability", params={
        "space_id": "3", "start_date": TOMORROW.isoformat(), "shift_type": "AFTERNOON"},
        headers=user_headers)
    assert availability.status_code == 200
    assert availability.json()["data"]["is_available"] is True


def test_update_replaces_document(parking_client, user_headers, spaces):
    created = parking_client.post(
        "/api/parking/reservations", data=reservation_body(days=4),
        files=pdf_file("a.pdf"), headers=user_headers).json()["data"]
    old_path = created["schedule_document"]["path"]

    response = parking_client.put(f"/api/parking/reservations/{created['id']}",
                                  files=pdf_file("b.pdf"), headers=user_headers)

    assert response.status_code == 200
    document = response.json()["data"]["schedule_document"]
    assert document["filename"] == "b.pdf"
    assert document_storage.exists(document["path"])
    assert not document_storage.exists(old_path)


def test_empty_file_input_is_not_an_attachment(parking_client, user_headers, spaces):
    response = parking_client.post(
        "/api/parking/reservations", data=reservation_body(days=1),
        files={"schedule_document": ("blank.pdf", b"", "application/pdf")},
        headers=user_headers)

    assert response.status_code == 201
    assert response.json()["data"]["schedule_document"] is None
