import os
import shutil
import tempfile
import uuid

# Settings are read at import time, so the environment must be ready first.
UPLOAD_ROOT = tempfile.mkdtemp(prefix="parking-tests-")
os.environ["AUTH_DATABASE_URL"] = "sqlite://"
os.environ["PARKING_DATABASE_URL"] = "sqlite://"
os.environ["UPLOAD_DIR"] = UPLOAD_ROOT
os.environ["JWT_SECRET"] = "test-secret"
os.environ["SMTP_HOST"] = ""
os.environ.pop("MAX_RESERVATION_DAYS", None)

import pytest
from fastapi.testclient import TestClient

from shared.core.auth import create_access_token
from shared.core.database import (
    AuthBase, AuthSessionLocal, Base, FacilitySessionLocal, auth_engine, facility_engine)
from shared.models.user_login_session import UserLoginSession
from shared.models.user_profiles import UserProfile
from shared.models.users import Users
from shared.utils.document_storage import document_storage
from auth_service.app.main import app as auth_app
from parking_service.app.main import app as parking_app
from parking_service.seed import seed_spaces

DEFAULT_PASSWORD = "Secret123!"


@pytest.fixture(autouse=True)
def reset_state():
    AuthBase.metadata.drop_all(bind=auth_engine)
    Base.metadata.drop_all(bind=facility_engine)
    AuthBase.metadata.create_all(bind=auth_engine)
    Base.metadata.create_all(bind=facility_engine)
    shutil.rmtree(document_storage.root, ignore_errors=True)
    yield
    shutil.rmtree(document_storage.root, ignore_errors=True)


@pytest.fixture
def db():
    session = FacilitySessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def auth_db():
    session = AuthSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def parking_client():
    return TestClient(parking_app)


@pytest.fixture
def auth_client():
    return TestClient(auth_app)


@pytest.fixture
def spaces(db):
    seed_spaces(db, 5)
    return [f"space-{n}" for n in range(1, 6)]


@pytest.fixture
def make_user(db, auth_db):
    def _make_user(email=None, role="user", username=None, department="backend",
                   password=DEFAULT_PASSWORD, is_active=True, is_disabled=False):
        email = email or f"{uuid.uuid4().hex[:8]}@company.com"
        identity = Users(email=email, display_name=email, is_disabled=is_disabled)
        identity.set_password(password)
        auth_db.add(identity)
        auth_db.commit()
        auth_db.refresh(identity)

        profile = UserProfile(
            uid=identity.id,
            email=email,
            username=username or email.split("@")[0],
            first_name="Test",
            last_name=role.capitalize(),
            department=department,
            role=role,
            is_active=is_active,
        )
        db.add(profile)
        db.commit()
        db.refresh(profile)
        return profile

    return _make_user


@pytest.fixture
def token_for(auth_db):
    def _token_for(profile: UserProfile) -> str:
        session = UserLoginSession(user_id=profile.uid, ip_address="127.0.0.1")
        auth_db.add(session)
        auth_db.commit()
        auth_db.refresh(session)
        return create_access_token({
            "user_id": str(profile.uid),
            "session_id": str(session.id),
            "email": profile.email,
            "role": profile.role,
        })

    return _token_for


@pytest.fixture
def user(make_user):
    return make_user(email="driver@company.com", username="driver")


@pytest.fixture
def admin(make_user):
    return make_user(email="admin@company.com", username="admin", role="admin")


@pytest.fixture
def user_headers(user, token_for):
    return {"Authorization": f"Bearer {token_for(user)}"}


@pytest.fixture
def admin_headers(admin, token_for):
    return {"Authorization": f"Bearer {token_for(admin)}"}


def pdf_bytes(size: int = 1024) -> bytes:
    header = b"%PDF-1.4\n"
    return header + b"0" * max(size - len(header), 0)


def pdf_file(name: str = "schedule.pdf", size: int = 1024):
    return {"schedule_document": (name, pdf_bytes(size), "application/pdf")}


def pytest_sessionfinish(session, exitstatus):
    shutil.rmtree(UPLOAD_ROOT, ignore_errors=True)
