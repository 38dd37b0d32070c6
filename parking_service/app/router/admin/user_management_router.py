from typing import List
from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session

from shared.core.auth import allow_admin
from shared.core.database import get_auth_db, get_facility_db as get_db
from shared.core.schemas import Lookup, UserToken
from ...crud.admin import user_management_crud as crud
from ...schemas.admin.user_management_schemas import (
    BulkUserRequest,
    BulkUserResponse,
    UserCreate,
    UserListResponse,
    UserRequest,
    UserUpdate,
)

router = APIRouter(
    prefix="/api/admin/users",
    tags=["admin users"],
    dependencies=[Depends(allow_admin)]
)


@router.get("", response_model=UserListResponse)
def get_users(
    params: UserRequest = Depends(),
    db: Session = Depends(get_db)
):
    return crud.get_users(db, params)


@router.post("", response_model=None, status_code=201)
def create_user(
    payload: UserCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    auth_db: Session = Depends(get_auth_db),
    current_user: UserToken = Depends(allow_admin)
):
    return crud.create_user(background_tasks, db, auth_db, current_user, payload)


@router.put("", response_model=None)
def update_user(
    payload: UserUpdate,
    db: Session = Depends(get_db),
    auth_db: Session = Depends(get_auth_db),
    current_user: UserToken = Depends(allow_admin)
):
    return crud.update_user(db, auth_db, current_user, payload)


@router.put("/bulk", response_model=BulkUserResponse)
def bulk_update_users(
    payload: BulkUserRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    auth_db: Session = Depends(get_auth_db),
    current_user: UserToken = Depends(allow_admin)
):
    return crud.bulk_update_users(background_tasks, db, auth_db, current_user, payload)


@router.get("/department-lookup", response_model=List[Lookup])
def department_lookup():
    return crud.department_lookup()


@router.get("/role-lookup", response_model=List[Lookup])
def role_lookup():
    return crud.role_lookup()


@router.delete("/{user_id}", response_model=None)
def delete_user(
    user_id: str,
    db: Session = Depends(get_db),
    auth_db: Session = Depends(get_auth_db),
    current_user: UserToken = Depends(allow_admin)
):
    return crud.delete_user(db, auth_db, current_user, user_id)
