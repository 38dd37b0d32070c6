from sqlalchemy.exc import SQLAlchemyError

from shared.core.config import settings
from shared.core.database import (
    AuthBase, AuthSessionLocal, Base, FacilitySessionLocal, auth_engine, facility_engine)
from shared.models.users import Users
from shared.models.user_profiles import UserProfile
from shared.utils.enums import UserRole

if not settings.ADMIN_EMAIL or not settings.ADMIN_PASSWORD:
    raise SystemExit("Set ADMIN_EMAIL and ADMIN_PASSWORD in .env first")

AuthBase.metadata.create_all(bind=auth_engine)
Base.metadata.create_all(bind=facility_engine)

auth_db = AuthSessionLocal()
db = FacilitySessionLocal()

try:
    email = settings.ADMIN_EMAIL.lower()

    # Check if the admin already exists
    admin = auth_db.query(Users).filter(Users.email == email).first()
    if admin:
        print("Admin account already exists:", admin.email)
    else:
        admin = Users(email=email, display_name="Parking Admin")
        admin.set_password(settings.ADMIN_PASSWORD)
        auth_db.add(admin)
        auth_db.commit()
        auth_db.refresh(admin)
        print("Admin account created:", admin.email)

    profile = db.query(UserProfile).filter(UserProfile.uid == admin.id).first()
    if profile:
        print("Admin profile already exists")
    else:
        db.add(UserProfile(
            uid=admin.id,
            email=email,
            username=email.split("@")[0],
            first_name="Parking",
            last_name="Admin",
            role=UserRole.ADMIN.value,
            is_active=True,
        ))
        db.commit()
        print("Admin profile created")

except SQLAlchemyError as e:
    auth_db.rollback()
    db.rollback()
    print("Error creating admin:", str(e))

finally:
    auth_db.close()
    db.close()
