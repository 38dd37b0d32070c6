import logging
from datetime import datetime, timezone
from sqlalchemy.orm import Session, joinedload

from shared.core.schemas import UserToken
from shared.helpers.email_helper import EmailHelper
from shared.helpers.json_response_helper import error_response, success_response
from shared.models.user_profiles import UserProfile
from shared.utils.app_status_code import AppStatusCode
from ...enum.parking_enum import ReservationAdminAction, ReservationStatus, ShiftType
from ...models.parking.reservations import Reservation
from ...schemas.admin.reservation_admin_schemas import (
    AdminDocumentOut,
    AdminReservationAction,
    AdminReservationActionData,
    AdminReservationListResponse,
    AdminReservationOut,
    AdminReservationRequest,
    ReservationOwnerOut,
    ReservationSummaryOut,
)
from ..common.document_crud import DocumentService
from ..parking.availability_crud import release_reservation_slots
from ..parking.reservation_crud import (
    build_document_link,
    commit_with_claims,
    ensure_period_valid,
    ensure_space_available,
    get_reservation_or_404,
)

logger = logging.getLogger(__name__)


def _now():
    return datetime.now(timezone.utc)


def _admin_reservation_out(reservation: Reservation, owner: UserProfile = None) -> AdminReservationOut:
    out = AdminReservationOut.model_validate(reservation)
    if owner is not None:
        out.user = ReservationOwnerOut.model_validate(owner)
    return out


def get_reservations(db: Session, params: AdminReservationRequest) -> AdminReservationListResponse:
    query = (
        db.query(Reservation, UserProfile)
        .outerjoin(UserProfile, UserProfile.uid == Reservation.user_id)
        .options(joinedload(Reservation.space))
    )

    if params.status:
        query = query.filter(Reservation.status == params.status.value)

    if params.user_id:
        query = query.filter(Reservation.user_id == params.user_id)

    if params.space_id:
        query = query.filter(Reservation.space_id == params.space_id)

    total = query.count()
    rows = (
        query.order_by(Reservation.created_at.desc())
        .offset(params.skip)
        .limit(params.limit)
        .all()
    )

    reservations = [_admin_reservation_out(r, owner) for r, owner in rows]
    return AdminReservationListResponse(
        reservations=reservations,
        total=total,
        has_more=params.skip + len(reservations) < total
    )


def _ensure_transition(reservation: Reservation, target: ReservationStatus):
    current = ReservationStatus(reservation.status)
    if not current.can_transition_to(target):
        return error_response(
            message=f"Cannot change a {current.value} reservation to {target.value}",
            status_code=AppStatusCode.RESERVATION_STATUS_TRANSITION_INVALID
        )


def _approve(db: Session, reservation: Reservation, data: AdminReservationActionData, admin_id):
    _ensure_transition(reservation, ReservationStatus.active)
    reservation.status = ReservationStatus.active.value
    reservation.approved_at = _now()
    reservation.approved_by = admin_id
    if data.admin_notes:
        reservation.admin_notes = data.admin_notes
    db.commit()


def _reject(db: Session, reservation: Reservation, data: AdminReservationActionData, admin_id):
    _ensure_transition(reservation, ReservationStatus.rejected)
    reservation.status = ReservationStatus.rejected.value
    reservation.rejected_at = _now()
    reservation.rejected_by = admin_id
    reservation.rejection_reason = data.reason or "No reason provided"
    release_reservation_slots(db, reservation)
    db.commit()


def _cancel(db: Session, reservation: Reservation, data: AdminReservationActionData, admin_id):
    _ensure_transition(reservation, ReservationStatus.cancelled)
    reservation.status = ReservationStatus.cancelled.value
    reservation.cancelled_at = _now()
    reservation.cancelled_by = admin_id
    reservation.cancellation_reason = data.reason or "Cancelled by admin"
    release_reservation_slots(db, reservation)
    db.commit()


def _update(db: Session, reservation: Reservation, data: AdminReservationActionData, admin_id):
    if not ReservationStatus(reservation.status).blocks_space:
        return error_response(
            message="Only pending or active reservations can be updated",
            status_code=AppStatusCode.RESERVATION_STATUS_TRANSITION_INVALID
        )

    start_date = data.start_date or reservation.start_date
    end_date = data.end_date or reservation.end_date
    shift = data.shift_type or ShiftType.parse(reservation.shift_type)

    period_changed = (start_date != reservation.start_date
                      or end_date != reservation.end_date)
    slots_changed = period_changed or shift.value != reservation.shift_type

    if period_changed:
        ensure_period_valid(start_date, end_date)
    if slots_changed:
        ensure_space_available(db, reservation.space_id, start_date, end_date,
                               shift, exclude_reservation_id=reservation.id)

    reservation.start_date = start_date
    reservation.end_date = end_date
    reservation.shift_type = shift.value
    if data.admin_notes is not None:
        reservation.admin_notes = data.admin_notes
    reservation.admin_updated_by = admin_id

    if slots_changed:
        release_reservation_slots(db, reservation)
        commit_with_claims(db, reservation)
    else:
        db.commit()


ACTION_HANDLERS = {
    ReservationAdminAction.approve: (_approve, "Reservation approved successfully"),
    ReservationAdminAction.reject: (_reject, "Reservation rejected successfully"),
    ReservationAdminAction.cancel: (_cancel, "Reservation cancelled successfully"),
    ReservationAdminAction.update: (_update, "Reservation updated successfully"),
}


def apply_admin_action(
    background_tasks,
    db: Session,
    current_user: UserToken,
    payload: AdminReservationAction
):
    reservation = get_reservation_or_404(db, payload.reservation_id)
    previous_status = reservation.status
    handler, message = ACTION_HANDLERS[payload.action]

    handler(db, reservation, payload.data or AdminReservationActionData(), current_user.user_id)
    reservation.updated_at = _now()
    db.commit()
    db.refresh(reservation)

    logger.info(f"Admin {current_user.user_id} applied {payload.action.value} "
                f"to reservation {reservation.id} ({previous_status} -> {reservation.status})")

    owner = db.query(UserProfile).filter(
        UserProfile.uid == reservation.user_id).first()
    if owner and reservation.status != previous_status:
        send_reservation_status_email(background_tasks, reservation, owner)

    return success_response(
        data=_admin_reservation_out(reservation, owner),
        message=message,
        status_code=AppStatusCode.UPDATED_SUCCESSFULLY
    )


def delete_reservation(db: Session, current_user: UserToken, reservation_id):
    reservation = get_reservation_or_404(db, reservation_id)

    if reservation.schedule_document:
        # the row goes regardless; a stale blob is only logged
        result = DocumentService.delete_pdf(reservation.schedule_document.get("path"))
        if not result["success"]:
            logger.warning(f"Document of reservation {reservation.id} not removed: {result['error']}")

    reservation_uuid = reservation.id
    db.delete(reservation)
    db.commit()

    logger.info(f"Admin {current_user.user_id} deleted reservation {reservation_uuid}")
    return success_response(
        data={"id": str(reservation_uuid)},
        message="Reservation deleted successfully",
        status_code=AppStatusCode.DELETED_SUCCESSFULLY
    )


def get_reservation_document(db: Session, reservation_id) -> AdminDocumentOut:
    reservation = get_reservation_or_404(db, reservation_id)
    document = build_document_link(reservation)
    owner = db.query(UserProfile).filter(
        UserProfile.uid == reservation.user_id).first()

    return AdminDocumentOut(
        document=document,
        reservation=ReservationSummaryOut.model_validate(reservation),
        user=ReservationOwnerOut.model_validate(owner) if owner else None
    )


def send_reservation_status_email(background_tasks, reservation: Reservation, owner: UserProfile):
    email_helper = EmailHelper()

    reason = reservation.rejection_reason if reservation.status == ReservationStatus.rejected.value \
        else reservation.cancellation_reason if reservation.status == ReservationStatus.cancelled.value \
        else ""

    context = {
        "first_name": owner.first_name,
        "space_id": reservation.space_id,
        "start_date": reservation.start_date.isoformat(),
        "end_date": reservation.end_date.isoformat(),
        "shift_type": reservation.shift_type,
        "status": reservation.status,
        "reason": reason or "",
    }

    background_tasks.add_task(
        email_helper.send_email,
        template_code="reservation_status",
        recipients=[owner.email],
        context=context
    )
