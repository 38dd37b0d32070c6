from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from shared.core.auth import validate_current_token
from shared.core.database import get_facility_db as get_db
from shared.core.schemas import Lookup
from ...crud.parking import space_crud as crud
from ...enum.parking_enum import ShiftType
from ...helpers.request_payload_helper import parse_payload
from ...schemas.parking.parking_space_schemas import (
    AvailabilityRequest,
    AvailabilityResponse,
    DashboardResponse,
    ParkingSpaceListResponse,
)

router = APIRouter(
    prefix="/api/parking",
    tags=["parking spaces"],
    dependencies=[Depends(validate_current_token)]
)


@router.get("/spaces", response_model=ParkingSpaceListResponse)
def get_spaces(db: Session = Depends(get_db)):
    return crud.get_spaces(db)


@router.get("/dashboard", response_model=DashboardResponse)
def get_dashboard(
    day: Optional[date] = Query(None, alias="date", description="Day to inspect, defaults to today"),
    db: Session = Depends(get_db)
):
    return crud.get_dashboard(db, day)


@router.get("/availability", response_model=AvailabilityResponse)
def check_availability(
    space_id: str = Query(...),
    start_date: date = Query(...),
    end_date: Optional[date] = Query(None),
    shift_type: str = Query(..., description="8:00-14:00, 14:00-21:00, 9:30-18:30 or MORNING, AFTERNOON, FULL_DAY"),
    db: Session = Depends(get_db)
):
    params = parse_payload(AvailabilityRequest, {
        "space_id": space_id,
        "start_date": start_date,
        "end_date": end_date,
        "shift_type": shift_type,
    })
    return crud.check_availability(db, params)


@router.get("/shift-lookup", response_model=List[Lookup])
def shift_lookup():
    return [Lookup(id=shift.value, name=shift.name.replace("_", " ").title())
            for shift in ShiftType]
