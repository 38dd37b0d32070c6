from datetime import date, timedelta

from parking_service.app.models.parking.reservation_claims import ReservationClaim
from parking_service.app.models.parking.reservations import Reservation
from shared.models.user_profiles import UserProfile
from shared.models.users import Users
from conftest import pdf_file

TOMORROW = date.today() + timedelta(days=1)


def book(client, headers, space_id="space-1", shift="MORNING", days=0, files=None):
    body = {
        "space_id": space_id,
        "start_date": TOMORROW.isoformat(),
        "end_date": (TOMORROW + timedelta(days=days)).isoformat(),
        "shift_type": shift,
    }
    if files:
        response = client.post("/api/parking/reservations", data=body, files=files, headers=headers)
    else:
        response = client.post("/api/parking/reservations", json=body, headers=headers)
    assert response.status_code == 201
    return response.json()["data"]["id"]


def act(client, headers, reservation_id, action, data=None):
    return client.put("/api/admin/reservations", json={
        "reservation_id": reservation_id, "action": action, "data": data}, headers=headers)


# ---------------------------------------------------------------- access


def test_admin_routes_reject_regular_users(parking_client, user_headers):
    for path in ("/api/admin/users", "/api/admin/reservations", "/api/admin/stats"):
        assert parking_client.get(path, headers=user_headers).status_code == 403


# ---------------------------------------------------------------- users


def test_list_users_with_filters(parking_client, admin_headers, user, make_user):
    make_user(email="qa@company.com", username="qa_person", department="qa")

    everyone = parking_client.get("/api/admin/users", headers=admin_headers).json()["data"]
    assert everyone["total"] == 3
    assert everyone["has_more"] is False

    qa = parking_client.get("/api/admin/users", params={"department": "qa"},
                            headers=admin_headers).json()["data"]
    assert [u["username"] for u in qa["users"]] == ["qa_person"]

    searched = parking_client.get("/api/admin/users", params={"search": "driver"},
                                  headers=admin_headers).json()["data"]
    assert searched["total"] == 1

    paged = parking_client.get("/api/admin/users", params={"limit": 2, "sort_by": "email",
                                                           "sort_order": "asc"},
                               headers=admin_headers).json()["data"]
    assert [u["email"] for u in paged["users"]] == ["admin@company.com", "driver@company.com"]
    assert paged["has_more"] is True


def test_create_user(parking_client, admin_headers, db, auth_db):
    response = parking_client.post("/api/admin/users", json={
        "email": "New.Person@company.com",
        "username": "newperson",
        "first_name": "New",
        "last_name": "Person",
        "department": "mobile",
    }, headers=admin_headers)

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["email"] == "new.person@company.com"
    assert data["role"] == "user"
    assert data["password_reset"] is True
    assert auth_db.query(Users).filter(Users.email == "new.person@company.com").count() == 1


def test_create_user_field_errors(parking_client, admin_headers, user):
    response = parking_client.post("/api/admin/users", json={
        "email": "driver@company.com",
        "username": "driver",
        "first_name": "",
        "department": "sales",
    }, headers=admin_headers)

    assert response.status_code == 400
    field_errors = response.json()["data"]["field_errors"]
    assert field_errors["email"] == "Email already exists"
    assert field_errors["username"] == "Username already exists"
    assert "first_name" in field_errors
    assert "last_name" in field_errors
    assert "department" in field_errors


def test_create_user_invalid_email(parking_client, admin_headers):
    response = parking_client.post("/api/admin/users", json={
        "email": "broken@", "username": "b", "first_name": "B", "last_name": "B"},
        headers=admin_headers)

    assert response.json()["data"]["field_errors"]["email"] == "Invalid email format"


def test_update_user_role_and_email(parking_client, admin_headers, user, auth_db):
    response = parking_client.put("/api/admin/users", json={
        "user_id": str(user.uid), "role": "admin", "email": "moved@company.com"},
        headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["data"]["role"] == "admin"
    auth_db.expire_all()
    assert auth_db.query(Users).filter(Users.id == user.uid).one().email == "moved@company.com"


def test_update_unknown_user(parking_client, admin_headers):
    response = parking_client.put("/api/admin/users", json={
        "user_id": "00000000-0000-0000-0000-000000000001", "role": "admin"},
        headers=admin_headers)

    assert response.status_code == 404


def test_delete_user(parking_client, admin_headers, user, db, auth_db):
    response = parking_client.delete(f"/api/admin/users/{user.uid}", headers=admin_headers)

    assert response.status_code == 200
    db.expire_all()
    auth_db.expire_all()
    assert db.query(UserProfile).filter(UserProfile.uid == user.uid).one().is_active is False
    assert auth_db.query(Users).filter(Users.id == user.uid).one().is_disabled is True


def test_cannot_delete_self(parking_client, admin_headers, admin):
    response = parking_client.delete(f"/api/admin/users/{admin.uid}", headers=admin_headers)

    assert response.status_code == 400


def test_cannot_delete_user_with_active_reservations(
        parking_client, admin_headers, user, user_headers, spaces):
    reservation_id = book(parking_client, user_headers)
    act(parking_client, admin_headers, reservation_id, "approve")

    response = parking_client.delete(f"/api/admin/users/{user.uid}", headers=admin_headers)

    assert response.status_code == 400


def test_bulk_actions(parking_client, admin_headers, make_user, db):
    first = make_user()
    second = make_user()

    response = parking_client.put("/api/admin/users/bulk", json={
        "user_ids": [str(first.uid), str(second.uid), "00000000-0000-0000-0000-000000000001"],
        "action": "updateDepartment",
        "data": {"department": "frontend"},
    }, headers=admin_headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["processed"] == 2
    assert data["failed"] == 1
    assert data["errors"][0]["message"] == "User not found"
    db.expire_all()
    assert {p.department for p in db.query(UserProfile).filter(
        UserProfile.uid.in_([first.uid, second.uid]))} == {"frontend"}


def test_bulk_reset_password(parking_client, admin_headers, make_user, db):
    target = make_user()

    response = parking_client.put("/api/admin/users/bulk", json={
        "user_ids": [str(target.uid)], "action": "resetPassword"}, headers=admin_headers)

    assert response.json()["data"]["processed"] == 1
    db.expire_all()
    assert db.query(UserProfile).filter(UserProfile.uid == target.uid).one().password_reset is True


def test_bulk_rejects_own_id_and_large_batches(parking_client, admin_headers, admin):
    own = parking_client.put("/api/admin/users/bulk", json={
        "user_ids": [str(admin.uid)], "action": "deactivate"}, headers=admin_headers)
    too_many = parking_client.put("/api/admin/users/bulk", json={
        "user_ids": [f"00000000-0000-0000-0000-{n:012d}" for n in range(101)],
        "action": "activate"}, headers=admin_headers)

    assert own.status_code == 400
    assert too_many.status_code == 400


def test_lookups(parking_client, admin_headers):
    departments = parking_client.get("/api/admin/users/department-lookup",
                                      headers=admin_headers).json()["data"]
    assert [d["id"] for d in departments] == ["frontend", "backend", "mobile", "qa"]


# ---------------------------------------------------------------- reservations


def test_list_reservations_with_owner(parking_client, admin_headers, user_headers, spaces):
    book(parking_client, user_headers, space_id="space-1")
    book(parking_client, user_headers, space_id="space-2")

    response = parking_client.get("/api/admin/reservations", params={"space_id": "2"},
                                  headers=admin_headers)

    data = response.json()["data"]
    assert data["total"] == 1
    assert data["reservations"][0]["user"]["username"] == "driver"
    assert data["reservations"][0]["space"]["id"] == "space-2"


def test_approve_then_reject_is_invalid(parking_client, admin_headers, user_headers, spaces, db):
    reservation_id = book(parking_client, user_headers)

    approved = act(parking_client, admin_headers, reservation_id, "approve")
    assert approved.status_code == 200
    assert approved.json()["data"]["status"] == "active"
    assert approved.json()["data"]["approved_at"] is not None

    rejected = act(parking_client, admin_headers, reservation_id, "reject")
    assert rejected.status_code == 400


def test_reject_releases_space(parking_client, admin_headers, user_headers, spaces, db):
    reservation_id = book(parking_client, user_headers, shift="FULL_DAY")

    response = act(parking_client, admin_headers, reservation_id, "reject")

    assert response.status_code == 200
    assert response.json()["data"]["rejection_reason"] == "No reason provided"
    assert db.query(ReservationClaim).count() == 0
    book(parking_client, user_headers, shift="MORNING")


def test_cancel_with_reason(parking_client, admin_headers, user_headers, spaces):
    reservation_id = book(parking_client, user_headers)
    act(parking_client, admin_headers, reservation_id, "approve")

    response = act(parking_client, admin_headers, reservation_id, "cancel",
                   {"reason": "Maintenance"})

    assert response.json()["data"]["status"] == "cancelled"
    assert response.json()["data"]["cancellation_reason"] == "Maintenance"


def test_admin_update_checks_availability(parking_client, admin_headers, user_headers, spaces):
    first = book(parking_client, user_headers, shift="MORNING")
    book(parking_client, user_headers, shift="AFTERNOON")

    blocked = act(parking_client, admin_headers, first, "update", {"shift_type": "FULL_DAY"})
    noted = act(parking_client, admin_headers, first, "update", {"admin_notes": "VIP"})

    assert blocked.status_code == 409
    assert noted.status_code == 200
    assert noted.json()["data"]["admin_notes"] == "VIP"


def test_hard_delete_reservation(parking_client, admin_headers, user_headers, spaces, db):
    reservation_id = book(parking_client, user_headers, days=3, files=pdf_file())

    response = parking_client.delete(f"/api/admin/reservations/{reservation_id}",
                                     headers=admin_headers)

    assert response.status_code == 200
    assert db.query(Reservation).count() == 0
    assert db.query(ReservationClaim).count() == 0


def test_admin_document_access(parking_client, admin_headers, user_headers, spaces):
    reservation_id = book(parking_client, user_headers, days=3, files=pdf_file())

    response = parking_client.get(f"/api/admin/documents/{reservation_id}", headers=admin_headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["document"]["filename"] == "schedule.pdf"
    assert data["reservation"]["id"] == reservation_id
    assert data["user"]["email"] == "driver@company.com"


# ---------------------------------------------------------------- stats


def test_stats(parking_client, admin_headers, user_headers, spaces):
    first = book(parking_client, user_headers, space_id="space-1", days=3, files=pdf_file())
    book(parking_client, user_headers, space_id="space-2", shift="AFTERNOON")
    act(parking_client, admin_headers, first, "approve")

    response = parking_client.get("/api/admin/stats", headers=admin_headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["totals"]["reservations"] == 2
    assert data["totals"]["spaces"] == 5
    assert data["by_status"]["active"] == 1
    assert data["by_status"]["pending"] == 1
    assert data["with_documents"] == 1
    assert data["by_shift_type"]["14:00-21:00"] == 1
    assert data["space_utilization"][0]["space_id"] == "space-1"
    assert data["user_activity"][0]["reservations"] == 2
    assert len(data["recent_reservations"]) == 2


def test_stats_skip_removed_documents(parking_client, admin_headers, user_headers, spaces):
    book(parking_client, user_headers, space_id="space-1", days=3, files=pdf_file())
    removed = book(parking_client, user_headers, space_id="space-2", days=3, files=pdf_file())
    deleted = parking_client.delete(f"/api/parking/reservations/{removed}/document",
                                    headers=user_headers)
    assert deleted.status_code == 200

    data = parking_client.get("/api/admin/stats", headers=admin_headers).json()["data"]

    assert data["with_documents"] == 1
