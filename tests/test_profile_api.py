from datetime import date, timedelta

from shared.models.user_login_session import UserLoginSession


def test_get_profile_with_reservations(parking_client, user_headers, spaces):
    start = date.today() + timedelta(days=1)
    parking_client.post("/api/parking/reservations", json={
        "space_id": "space-1", "start_date": start.isoformat(),
        "end_date": start.isoformat(), "shift_type": "MORNING"}, headers=user_headers)

    response = parking_client.get("/api/user/profile", headers=user_headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["profile"]["email"] == "driver@company.com"
    assert data["profile"]["full_name"] == "Test User"
    assert len(data["reservations"]) == 1


def test_update_profile(parking_client, user_headers):
    response = parking_client.put("/api/user/profile", json={
        "first_name": "Dana", "department": "qa"}, headers=user_headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["first_name"] == "Dana"
    assert data["department"] == "qa"


def test_update_profile_without_fields(parking_client, user_headers):
    response = parking_client.put("/api/user/profile", json={"email": "x@company.com"},
                                  headers=user_headers)

    assert response.status_code == 400
    assert response.json()["message"] == "No valid fields to update"


def test_update_profile_duplicate_username(parking_client, user_headers, make_user):
    make_user(username="taken")

    response = parking_client.put("/api/user/profile", json={"username": "taken"},
                                  headers=user_headers)

    assert response.status_code == 400


def test_update_profile_invalid_department(parking_client, user_headers):
    response = parking_client.put("/api/user/profile", json={"department": "sales"},
                                  headers=user_headers)

    assert response.status_code == 400


def test_deactivate_profile(parking_client, user_headers, user, auth_db):
    response = parking_client.delete("/api/user/profile", headers=user_headers)

    assert response.status_code == 200
    assert auth_db.query(UserLoginSession).filter(
        UserLoginSession.user_id == user.uid,
        UserLoginSession.is_active == True).count() == 0
    assert parking_client.get("/api/user/profile", headers=user_headers).status_code == 401
