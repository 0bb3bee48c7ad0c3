from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from schooldesk.auth.dependencies import get_current_principal
from schooldesk.auth.schemas import Principal
from schooldesk.core.exceptions import ServiceError
from schooldesk.db.session import get_db

from .schemas import AttendanceCreate, AttendanceResponse, AttendanceUpdate
from . import service

router = APIRouter(prefix="/api/attendance", tags=["attendance"])


@router.get("/student/{student_id}", response_model=List[AttendanceResponse])
async def list_student_attendance(
    student_id: int,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> List[AttendanceResponse]:
    try:
        return await service.list_for_student(db, principal, student_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/teacher/{teacher_id}", response_model=List[AttendanceResponse])
async def list_teacher_attendance(
    teacher_id: int,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> List[AttendanceResponse]:
    try:
        return await service.list_for_teacher(db, principal, teacher_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post("", response_model=AttendanceResponse, status_code=status.HTTP_201_CREATED)
async def create_attendance(
    payload: AttendanceCreate,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> AttendanceResponse:
    try:
        return await service.create_attendance(db, principal, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.put("/{attendance_id}", response_model=AttendanceResponse)
async def update_attendance(
    attendance_id: int,
    payload: AttendanceUpdate,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> AttendanceResponse:
    try:
        return await service.update_attendance(db, principal, attendance_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.delete("/{attendance_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_attendance(
    attendance_id: int,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> Response:
    try:
        await service.delete_attendance(db, principal, attendance_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
