"""School ledger: fee and salary listings per school, the ledger's write aliases and the account aliases of /api/users."""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from schooldesk.api.fees import service as fee_service
from schooldesk.api.fees.schemas import FeeCreate, FeeResponse, FeeUpdate
from schooldesk.api.salaries import service as salary_service
from schooldesk.api.salaries.schemas import SalaryCreate, SalaryResponse, SalaryUpdate
from schooldesk.api.users import service as user_service
from schooldesk.api.users.schemas import UserResponse, UserUpdate
from schooldesk.auth.dependencies import get_current_principal
from schooldesk.auth.schemas import Principal
from schooldesk.core.exceptions import ServiceError
from schooldesk.db.session import get_db

router = APIRouter(prefix="/api/accounts", tags=["accounts"])


@router.get("/school/{school_id}/fees", response_model=List[FeeResponse])
async def list_school_fees(
    school_id: int,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> List[FeeResponse]:
    try:
        return await fee_service.list_for_school(db, principal, school_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/school/{school_id}/teacher-salaries", response_model=List[SalaryResponse])
async def list_school_teacher_salaries(
    school_id: int,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> List[SalaryResponse]:
    try:
        return await salary_service.list_teacher_salaries_for_school(db, principal, school_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/school/{school_id}/staff-salaries", response_model=List[SalaryResponse])
async def list_school_staff_salaries(
    school_id: int,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> List[SalaryResponse]:
    try:
        return await salary_service.list_staff_salaries_for_school(db, principal, school_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post("/fees", response_model=FeeResponse, status_code=status.HTTP_201_CREATED)
async def create_fee(
    payload: FeeCreate,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> FeeResponse:
    try:
        return await fee_service.create_fee(db, principal, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.put("/fees/{fee_id}", response_model=FeeResponse)
async def update_fee(
    fee_id: int,
    payload: FeeUpdate,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> FeeResponse:
    try:
        return await fee_service.update_fee(db, principal, fee_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.delete("/fees/{fee_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_fee(
    fee_id: int,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> Response:
    try:
        await fee_service.delete_fee(db, principal, fee_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/salaries", response_model=SalaryResponse, status_code=status.HTTP_201_CREATED)
async def create_salary(
    payload: SalaryCreate,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> SalaryResponse:
    try:
        return await salary_service.create_salary(db, principal, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.put("/salaries/{salary_id}", response_model=SalaryResponse)
async def update_salary(
    salary_id: int,
    payload: SalaryUpdate,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> SalaryResponse:
    try:
        return await salary_service.update_salary(db, principal, salary_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.delete("/salaries/{salary_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_salary(
    salary_id: int,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> Response:
    try:
        await salary_service.delete_salary(db, principal, salary_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Accounts are users; these routes sit after the ledger routes so /fees and /salaries win


@router.get("", response_model=List[UserResponse])
async def list_accounts(
    school_id: Optional[int] = Query(None, alias="schoolId"),
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> List[UserResponse]:
    try:
        return await user_service.list_users(db, principal, school_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.put("/{user_id}", response_model=UserResponse)
async def update_account(
    user_id: int,
    payload: UserUpdate,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> UserResponse:
    try:
        return await user_service.update_user(db, principal, user_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_account(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> Response:
    try:
        await user_service.delete_user(db, principal, user_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
