"""Seed the parking database with the 20 standard spaces.

Run from the repository root: ``python -m parking_service.seed``
"""
import math
from sqlalchemy.exc import SQLAlchemyError

from shared.core.database import Base, FacilitySessionLocal, facility_engine
from parking_service.app.enum.parking_enum import SpaceType
from parking_service.app.models.parking import parking_spaces, reservations, reservation_claims
from parking_service.app.models.parking.parking_spaces import ParkingSpace

SPACE_COUNT = 20
SPACES_PER_ROW = 10


def seed_spaces(db, count: int = SPACE_COUNT) -> int:
    existing = {space_id for (space_id,) in db.query(ParkingSpace.id).all()}
    created = 0
    for number in range(1, count + 1):
        space_id = f"space-{number}"
        if space_id in existing:
            continue
        db.add(ParkingSpace(
            id=space_id,
            space_number=number,
            type=SpaceType.standard.value,
            location=f"Row {math.ceil(number / SPACES_PER_ROW)}, Space {number}",
        ))
        created += 1
    db.commit()
    return created


if __name__ == "__main__":
    Base.metadata.create_all(bind=facility_engine)
    db = FacilitySessionLocal()
    try:
        print(f"Created {seed_spaces(db)} parking spaces")
    except SQLAlchemyError as e:
        db.rollback()
        print("Error seeding parking spaces:", str(e))
    finally:
        db.close()
