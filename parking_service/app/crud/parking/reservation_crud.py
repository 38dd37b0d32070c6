import logging
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from shared.core.exceptions import ConflictError
from shared.core.schemas import UserToken
from shared.helpers.json_response_helper import error_response, success_response
from shared.utils.app_status_code import AppStatusCode
from ...enum.parking_enum import ReservationStatus, ShiftType
from ...models.parking.parking_spaces import ParkingSpace
from ...models.parking.reservations import Reservation
from ...schemas.parking.reservation_schemas import (
    DocumentLinkOut,
    ReservationCreate,
    ReservationListResponse,
    ReservationUpdate,
    ReservationWithSpaceOut,
    ScheduleDocumentOut,
    UploadResultOut,
    UploadedDocument,
)
from ..common.document_crud import DocumentService
from .availability_crud import (
    SPACE_NOT_AVAILABLE_MESSAGE,
    claim_reservation_slots,
    is_space_available,
    release_reservation_slots,
    requires_schedule_document,
    validate_reservation_period,
)

logger = logging.getLogger(__name__)

DOCUMENT_REQUIRED_MESSAGE = "Schedule document (PDF) is required for reservations longer than 2 days"


def _now():
    return datetime.now(timezone.utc)


def _parse_uuid(value, label: str = "Reservation") -> UUID:
    try:
        return value if isinstance(value, UUID) else UUID(str(value))
    except ValueError:
        return error_response(
            message=f"{label} not found",
            status_code=AppStatusCode.NOT_FOUND,
            http_status=404
        )


def get_reservation_or_404(db: Session, reservation_id) -> Reservation:
    reservation = db.query(Reservation).filter(
        Reservation.id == _parse_uuid(reservation_id)).first()
    if not reservation:
        return error_response(
            message="Reservation not found",
            status_code=AppStatusCode.NOT_FOUND,
            http_status=404
        )
    return reservation


def get_owned_reservation(db: Session, reservation_id, current_user: UserToken) -> Reservation:
    reservation = get_reservation_or_404(db, reservation_id)
    if reservation.user_id != current_user.user_id:
        return error_response(
            message="You can only access your own reservations",
            status_code=AppStatusCode.AUTHENTICATION_UNAUTHORIZED_ACCESS,
            http_status=403
        )
    return reservation


def ensure_period_valid(start_date, end_date):
    validation = validate_reservation_period(start_date, end_date)
    if not validation["valid"]:
        return error_response(
            message=validation["error"],
            status_code=AppStatusCode.RESERVATION_PERIOD_INVALID
        )


def ensure_space_available(db: Session, space_id, start_date, end_date, shift_type, exclude_reservation_id=None):
    if not is_space_available(db, space_id, start_date, end_date, shift_type, exclude_reservation_id):
        return error_response(
            message=SPACE_NOT_AVAILABLE_MESSAGE,
            status_code=AppStatusCode.SPACE_NOT_AVAILABLE,
            http_status=409
        )


def ensure_document_valid(document: Optional[UploadedDocument]):
    if document is None:
        return
    validation = DocumentService.validate_pdf(
        document.filename, document.content_type, document.content)
    if not validation["valid"]:
        return error_response(
            message=validation["error"],
            status_code=AppStatusCode.DOCUMENT_INVALID
        )


def store_document(document: UploadedDocument, user_id, reservation_id=None) -> dict:
    result = DocumentService.upload_pdf(
        document.content, document.filename, document.content_type, user_id, reservation_id)
    if not result["success"]:
        return error_response(
            message=f"Failed to upload document: {result['error']}",
            status_code=AppStatusCode.DOCUMENT_STORAGE_FAILED,
            http_status=500
        )
    return result["data"]


def discard_document(metadata: Optional[dict]):
    if metadata and metadata.get("path"):
        DocumentService.delete_pdf(metadata["path"])


def commit_with_claims(
    db: Session,
    reservation: Reservation,
    new_document: Optional[dict] = None,
    claim: bool = True
):
    """Claim the reservation's slots (unless `claim` is False) and commit.

    When the claim collides with a concurrent booking, or the commit fails,
    the freshly stored document is removed before the error propagates.
    """
    try:
        if claim:
            claim_reservation_slots(db, reservation)
        db.commit()
    except ConflictError:
        discard_document(new_document)
        raise
    except SQLAlchemyError:
        db.rollback()
        discard_document(new_document)
        raise


def reservation_out(reservation: Reservation) -> ReservationWithSpaceOut:
    return ReservationWithSpaceOut.model_validate(reservation)


def create_reservation(
    db: Session,
    current_user: UserToken,
    payload: ReservationCreate,
    document: Optional[UploadedDocument] = None
):
    ensure_period_valid(payload.start_date, payload.end_date)

    if requires_schedule_document(payload.start_date, payload.end_date) and document is None:
        return error_response(
            message=DOCUMENT_REQUIRED_MESSAGE,
            status_code=AppStatusCode.RESERVATION_DOCUMENT_REQUIRED
        )
    ensure_document_valid(document)

    space = db.query(ParkingSpace).filter(
        ParkingSpace.id == payload.space_id).first()
    if not space:
        return error_response(
            message="Parking space not found",
            status_code=AppStatusCode.NOT_FOUND,
            http_status=404
        )

    ensure_space_available(db, payload.space_id, payload.start_date,
                           payload.end_date, payload.shift_type)

    document_metadata = None
    if document is not None:
        document_metadata = store_document(document, current_user.user_id)

    reservation = Reservation(
        user_id=current_user.user_id,
        space_id=payload.space_id,
        start_date=payload.start_date,
        end_date=payload.end_date,
        shift_type=payload.shift_type.value,
        status=ReservationStatus.pending.value,
        schedule_document=document_metadata,
        created_at=_now(),
    )
    db.add(reservation)
    commit_with_claims(db, reservation, document_metadata)
    db.refresh(reservation)

    logger.info(f"Reservation {reservation.id} created by {current_user.user_id} "
                f"for {reservation.space_id} {reservation.start_date}..{reservation.end_date} "
                f"({reservation.shift_type})")
    return success_response(
        data=reservation_out(reservation),
        message="Reservation created successfully",
        status_code=AppStatusCode.CREATED_SUCCESSFULLY
    )


def get_user_reservations(db: Session, user_id: UUID) -> ReservationListResponse:
    reservations = (
        db.query(Reservation)
        .options(joinedload(Reservation.space))
        .filter(Reservation.user_id == user_id)
        .order_by(Reservation.created_at.desc())
        .all()
    )
    return ReservationListResponse(
        reservations=[reservation_out(r) for r in reservations],
        total=len(reservations)
    )


def update_reservation(
    db: Session,
    current_user: UserToken,
    reservation_id,
    payload: ReservationUpdate,
    document: Optional[UploadedDocument] = None
):
    reservation = get_owned_reservation(db, reservation_id, current_user)

    if not ReservationStatus(reservation.status).blocks_space:
        return error_response(
            message="Only pending or active reservations can be updated",
            status_code=AppStatusCode.RESERVATION_STATUS_TRANSITION_INVALID
        )

    start_date = payload.start_date or reservation.start_date
    end_date = payload.end_date or reservation.end_date
    shift = payload.shift_type or ShiftType.parse(reservation.shift_type)

    period_changed = (start_date != reservation.start_date
                      or end_date != reservation.end_date)
    slots_changed = period_changed or shift.value != reservation.shift_type

    if period_changed:
        ensure_period_valid(start_date, end_date)

    if (requires_schedule_document(start_date, end_date)
            and document is None and not reservation.schedule_document):
        return error_response(
            message=DOCUMENT_REQUIRED_MESSAGE,
            status_code=AppStatusCode.RESERVATION_DOCUMENT_REQUIRED
        )
    ensure_document_valid(document)

    if slots_changed:
        ensure_space_available(db, reservation.space_id, start_date, end_date,
                               shift, exclude_reservation_id=reservation.id)

    new_document = None
    old_document = reservation.schedule_document
    if document is not None:
        new_document = store_document(
            document, current_user.user_id, reservation.id)
        reservation.schedule_document = new_document

    reservation.start_date = start_date
    reservation.end_date = end_date
    reservation.shift_type = shift.value
    reservation.updated_at = _now()

    if slots_changed:
        release_reservation_slots(db, reservation)
    commit_with_claims(db, reservation, new_document, claim=slots_changed)

    if new_document and old_document:
        discard_document(old_document)

    db.refresh(reservation)
    logger.info(f"Reservation {reservation.id} updated by {current_user.user_id}")
    return success_response(
        data=reservation_out(reservation),
        message="Reservation updated successfully",
        status_code=AppStatusCode.UPDATED_SUCCESSFULLY
    )


def cancel_reservation(db: Session, current_user: UserToken, reservation_id):
    reservation = get_owned_reservation(db, reservation_id, current_user)

    if not ReservationStatus(reservation.status).can_transition_to(ReservationStatus.cancelled):
        return error_response(
            message=f"Cannot cancel a {reservation.status} reservation",
            status_code=AppStatusCode.RESERVATION_STATUS_TRANSITION_INVALID
        )

    if reservation.schedule_document:
        if DocumentService.delete_pdf(reservation.schedule_document.get("path"))["success"]:
            reservation.schedule_document = None

    reservation.status = ReservationStatus.cancelled.value
    reservation.cancelled_at = _now()
    reservation.cancelled_by = current_user.user_id
    reservation.updated_at = _now()
    release_reservation_slots(db, reservation)
    db.commit()

    logger.info(f"Reservation {reservation.id} cancelled by owner {current_user.user_id}")
    return success_response(
        data={"id": str(reservation.id), "status": reservation.status},
        message="Reservation cancelled successfully",
        status_code=AppStatusCode.UPDATED_SUCCESSFULLY
    )


def build_document_link(reservation: Reservation) -> DocumentLinkOut:
    metadata = reservation.schedule_document
    if not metadata:
        return error_response(
            message="No document found for this reservation",
            status_code=AppStatusCode.NOT_FOUND,
            http_status=404
        )

    signed = DocumentService.get_signed_url(metadata.get("path"))
    if not signed["success"]:
        return error_response(
            message="Failed to generate document access URL",
            status_code=AppStatusCode.DOCUMENT_STORAGE_FAILED,
            http_status=500
        )

    return DocumentLinkOut(
        download_url=signed["url"],
        filename=metadata.get("filename"),
        size=metadata.get("size", 0),
        uploaded_at=metadata.get("uploaded_at"),
        expires_in=signed["expires_in"],
    )


def get_reservation_document(db: Session, current_user: UserToken, reservation_id) -> DocumentLinkOut:
    reservation = get_reservation_or_404(db, reservation_id)
    if reservation.user_id != current_user.user_id and not current_user.is_admin:
        return error_response(
            message="You can only access your own reservations",
            status_code=AppStatusCode.AUTHENTICATION_UNAUTHORIZED_ACCESS,
            http_status=403
        )
    return build_document_link(reservation)


def delete_reservation_document(db: Session, current_user: UserToken, reservation_id):
    reservation = get_owned_reservation(db, reservation_id, current_user)
    metadata = reservation.schedule_document
    if not metadata:
        return error_response(
            message="No document found for this reservation",
            status_code=AppStatusCode.NOT_FOUND,
            http_status=404
        )

    result = DocumentService.delete_pdf(metadata.get("path"))
    if not result["success"]:
        return error_response(
            message="Failed to delete document",
            status_code=AppStatusCode.DOCUMENT_STORAGE_FAILED,
            http_status=500
        )

    reservation.schedule_document = None
    reservation.updated_at = _now()
    db.commit()
    return success_response(
        data={"id": str(reservation.id)},
        message="Document deleted successfully",
        status_code=AppStatusCode.DELETED_SUCCESSFULLY
    )


def upload_document(current_user: UserToken, document: UploadedDocument, reservation_id: Optional[str] = None):
    ensure_document_valid(document)
    metadata = store_document(document, current_user.user_id, reservation_id)
    logger.info(f"Document {metadata['path']} uploaded by {current_user.user_id}")
    return UploadResultOut(
        document=ScheduleDocumentOut(**metadata),
        reservation_id=reservation_id
    )
