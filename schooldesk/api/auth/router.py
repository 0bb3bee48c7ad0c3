from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from schooldesk.auth.dependencies import get_current_principal
from schooldesk.auth.schemas import (
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    MeResponse,
    Principal,
    ResetPasswordRequest,
)
from schooldesk.core.exceptions import ServiceError
from schooldesk.core.schemas import MessageResponse
from schooldesk.db.session import get_db

from . import service

router = APIRouter(prefix="/api", tags=["auth"])


@router.post("/login", response_model=LoginResponse, status_code=status.HTTP_200_OK)
async def login(
    request: Request,
    payload: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> LoginResponse:
    try:
        return await service.login_user(db, payload, request.app.state.settings)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/users/me", response_model=MeResponse)
async def read_me(principal: Principal = Depends(get_current_principal)) -> MeResponse:
    return service.me(principal)


@router.post("/users/reset-password", response_model=MessageResponse)
async def reset_password(
    payload: ResetPasswordRequest,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> MessageResponse:
    try:
        await service.reset_own_password(db, principal, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return MessageResponse(message="Password updated successfully")


@router.put("/users/{user_id}/change-password", response_model=MessageResponse)
async def change_password(
    user_id: int,
    payload: ChangePasswordRequest,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> MessageResponse:
    try:
        await service.change_user_password(db, principal, user_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return MessageResponse(message="Password updated successfully")
