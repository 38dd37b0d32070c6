from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from shared.core import auth
from shared.core.database import get_auth_db as get_db, get_facility_db
from shared.core.schemas import UserToken
from ..schemas import authschemas
from ..services import authservices

router = APIRouter(prefix="/api/auth", tags=["Parking Auth"])


@router.post("/login", response_model=authschemas.AuthenticationResponse)
def login(
        req: authschemas.LoginRequest,
        request: Request,
        db: Session = Depends(get_db),
        facility_db: Session = Depends(get_facility_db)):
    return authservices.login(request, db, facility_db, req)


@router.post("/logout")
def logout(
        db: Session = Depends(get_db),
        current_user: UserToken = Depends(auth.validate_current_token)):
    return authservices.logout_user(db, current_user)


@router.get("/validate", response_model=authschemas.ValidateResponse)
def validate(
        facility_db: Session = Depends(get_facility_db),
        current_user: UserToken = Depends(auth.validate_current_token)):
    return authservices.validate_user(facility_db, current_user)
