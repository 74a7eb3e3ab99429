"""Student registration, removal, room assignment and notices."""
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status

from hostel_ledger.api import deps
from hostel_ledger.api.errors import result_or_raise
from hostel_ledger.schemas.room.room import AssignmentResponse, AssignRoomRequest
from hostel_ledger.schemas.student.student import (
    NotifyRequest,
    NotifyResult,
    StudentCreate,
    StudentRegistration,
    StudentResponse,
)
from hostel_ledger.services.room.assignment_service import AssignmentService
from hostel_ledger.services.student.student_service import StudentService

router = APIRouter(prefix="/students", tags=["Students"])


@router.get("", response_model=List[StudentResponse])
def list_students(
    hostel_id: UUID = Depends(deps.get_hostel_id),
    students: StudentService = Depends(deps.get_student_service),
):
    return result_or_raise(students.list_students(hostel_id))


@router.post("", response_model=StudentRegistration, status_code=status.HTTP_201_CREATED)
def register_student(
    payload: StudentCreate,
    hostel_id: UUID = Depends(deps.get_hostel_id),
    students: StudentService = Depends(deps.get_student_service),
):
    """
    Register a student. With ``room_id`` the room is assigned, and with
    ``initial_payment`` a booking payment is recorded, all or nothing.
    """
    return result_or_raise(students.register_student(hostel_id, payload))


@router.post("/notify", response_model=NotifyResult)
def notify_students(
    payload: NotifyRequest,
    hostel_id: UUID = Depends(deps.get_hostel_id),
    students: StudentService = Depends(deps.get_student_service),
):
    return result_or_raise(students.notify_students(hostel_id, payload))


@router.get("/{student_id}", response_model=StudentResponse)
def get_student(
    student_id: UUID,
    hostel_id: UUID = Depends(deps.get_hostel_id),
    students: StudentService = Depends(deps.get_student_service),
):
    return result_or_raise(students.get_student(student_id, hostel_id))


@router.delete("/{student_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_student(
    student_id: UUID,
    hostel_id: UUID = Depends(deps.get_hostel_id),
    students: StudentService = Depends(deps.get_student_service),
) -> Response:
    result_or_raise(students.delete_student(student_id, hostel_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ------------------------------------------------------------------ #
# Assignment
# ------------------------------------------------------------------ #
@router.get("/{student_id}/assignment", response_model=Optional[AssignmentResponse])
def get_assignment(
    student_id: UUID,
    hostel_id: UUID = Depends(deps.get_hostel_id),
    assignments: AssignmentService = Depends(deps.get_assignment_service),
):
    return result_or_raise(assignments.current_assignment(student_id, hostel_id))


@router.post(
    "/{student_id}/assignment",
    response_model=AssignmentResponse,
    status_code=status.HTTP_201_CREATED,
)
def assign_room(
    student_id: UUID,
    payload: AssignRoomRequest,
    hostel_id: UUID = Depends(deps.get_hostel_id),
    assignments: AssignmentService = Depends(deps.get_assignment_service),
):
    return result_or_raise(assignments.assign(student_id, payload.room_id, hostel_id))


@router.put("/{student_id}/assignment", response_model=AssignmentResponse)
def reassign_room(
    student_id: UUID,
    payload: AssignRoomRequest,
    hostel_id: UUID = Depends(deps.get_hostel_id),
    assignments: AssignmentService = Depends(deps.get_assignment_service),
):
    """Move the student; the previous room becomes available again."""
    return result_or_raise(assignments.reassign(student_id, payload.room_id, hostel_id))


@router.delete("/{student_id}/assignment", response_model=Optional[AssignmentResponse])
def end_assignment(
    student_id: UUID,
    hostel_id: UUID = Depends(deps.get_hostel_id),
    assignments: AssignmentService = Depends(deps.get_assignment_service),
):
    return result_or_raise(assignments.end_assignment(student_id, hostel_id))
