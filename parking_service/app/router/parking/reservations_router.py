from typing import Optional
from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile
from fastapi.responses import FileResponse
from jose import JWTError
from sqlalchemy.orm import Session

from shared.core.auth import validate_current_token
from shared.core.database import get_facility_db as get_db
from shared.core.schemas import UserToken
from shared.helpers.json_response_helper import error_response
from shared.utils.app_status_code import AppStatusCode
from shared.utils.document_storage import document_storage
from ...crud.parking import reservation_crud as crud
from ...helpers.request_payload_helper import parse_payload, read_request_payload
from ...schemas.parking.reservation_schemas import (
    DocumentLinkOut,
    ReservationCreate,
    ReservationListResponse,
    ReservationUpdate,
    UploadResultOut,
    UploadedDocument,
)

router = APIRouter(prefix="/api/parking", tags=["reservations"])

RESERVATION_REQUIRED_FIELDS = ("space_id", "start_date", "end_date", "shift_type")


@router.get("/reservations", response_model=ReservationListResponse)
def get_my_reservations(
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.get_user_reservations(db, current_user.user_id)


@router.post("/reservations", response_model=None, status_code=201)
async def create_reservation(
    request: Request,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    """Accepts JSON, or multipart form data with a ``schedule_document`` PDF."""
    data, document = await read_request_payload(request)
    payload = parse_payload(ReservationCreate, data, RESERVATION_REQUIRED_FIELDS)
    return crud.create_reservation(db, current_user, payload, document)


@router.put("/reservations/{reservation_id}", response_model=None)
async def update_reservation(
    reservation_id: str,
    request: Request,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    data, document = await read_request_payload(request)
    payload = parse_payload(ReservationUpdate, data)
    return crud.update_reservation(db, current_user, reservation_id, payload, document)


@router.delete("/reservations/{reservation_id}", response_model=None)
def cancel_reservation(
    reservation_id: str,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.cancel_reservation(db, current_user, reservation_id)


@router.get("/reservations/{reservation_id}/document", response_model=DocumentLinkOut)
def get_reservation_document(
    reservation_id: str,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.get_reservation_document(db, current_user, reservation_id)


@router.delete("/reservations/{reservation_id}/document", response_model=None)
def delete_reservation_document(
    reservation_id: str,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.delete_reservation_document(db, current_user, reservation_id)


@router.post("/upload", response_model=UploadResultOut, status_code=201)
async def upload_document(
    file: UploadFile = File(...),
    reservation_id: Optional[str] = Form(None),
    current_user: UserToken = Depends(validate_current_token)
):
    document = UploadedDocument(
        filename=file.filename or "",
        content_type=file.content_type,
        content=await file.read()
    )
    return crud.upload_document(current_user, document, reservation_id)


@router.get("/documents/download", response_class=FileResponse)
def download_document(token: str = Query(...)):
    """Serves a stored document for a signed link; no bearer token needed."""
    try:
        path = document_storage.path_from_signed_token(token)
    except (JWTError, ValueError, KeyError):
        return error_response(
            message="Download link is invalid or has expired",
            status_code=AppStatusCode.AUTHENTICATION_TOKEN_EXPIRED,
            http_status=401
        )

    if not document_storage.exists(path):
        return error_response(
            message="Document not found",
            status_code=AppStatusCode.NOT_FOUND,
            http_status=404
        )

    return FileResponse(
        document_storage.local_path(path),
        media_type="application/pdf",
        filename=path.rsplit("/", 1)[-1]
    )
