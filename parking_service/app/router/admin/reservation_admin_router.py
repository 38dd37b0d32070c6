from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session

from shared.core.auth import allow_admin
from shared.core.database import get_facility_db as get_db
from shared.core.schemas import UserToken
from ...crud.admin import reservation_admin_crud as crud
from ...crud.admin import stats_crud
from ...schemas.admin.reservation_admin_schemas import (
    AdminDocumentOut,
    AdminReservationAction,
    AdminReservationListResponse,
    AdminReservationRequest,
)
from ...schemas.admin.stats_schemas import StatsRequest, StatsResponse

router = APIRouter(
    prefix="/api/admin",
    tags=["admin reservations"],
    dependencies=[Depends(allow_admin)]
)


@router.get("/reservations", response_model=AdminReservationListResponse)
def get_reservations(
    params: AdminReservationRequest = Depends(),
    db: Session = Depends(get_db)
):
    return crud.get_reservations(db, params)


@router.put("/reservations", response_model=None)
def apply_reservation_action(
    payload: AdminReservationAction,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(allow_admin)
):
    return crud.apply_admin_action(background_tasks, db, current_user, payload)


@router.delete("/reservations/{reservation_id}", response_model=None)
def delete_reservation(
    reservation_id: str,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(allow_admin)
):
    return crud.delete_reservation(db, current_user, reservation_id)


@router.get("/documents/{reservation_id}", response_model=AdminDocumentOut)
def get_reservation_document(
    reservation_id: str,
    db: Session = Depends(get_db)
):
    return crud.get_reservation_document(db, reservation_id)


@router.get("/stats", response_model=StatsResponse)
def get_stats(
    params: StatsRequest = Depends(),
    db: Session = Depends(get_db)
):
    return stats_crud.get_stats(db, params)
