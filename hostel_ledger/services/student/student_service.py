"""
Student workflows.

Registration places the student in a room and books the first payment
in one transaction; deletion ends the assignment and frees the room in
the same transaction as removing the student.
"""

from typing import Callable, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from hostel_ledger.models.base.enums import PaymentPurpose, UserRole
from hostel_ledger.models.user.user import User
from hostel_ledger.repositories.hostel.hostel_repository import HostelRepository
from hostel_ledger.repositories.room.assignment_repository import AssignmentRepository
from hostel_ledger.repositories.user.user_repository import UserRepository
from hostel_ledger.schemas.payment.payment import PaymentResponse
from hostel_ledger.schemas.room.room import AssignmentResponse, CurrentRoom
from hostel_ledger.schemas.student.student import (
    NotifyRequest,
    NotifyResult,
    StudentCreate,
    StudentRegistration,
    StudentResponse,
)
from hostel_ledger.services.base.base_service import BaseService
from hostel_ledger.services.base.service_result import ServiceResult
from hostel_ledger.services.common.errors import ConflictError, NotFoundError
from hostel_ledger.services.common.unit_of_work import UnitOfWork
from hostel_ledger.services.communication.email_service import NotificationService
from hostel_ledger.services.payment.payment_service import DEFAULT_CURRENCY, append_payment
from hostel_ledger.services.payment.summary_cache import BalanceSummaryCache
from hostel_ledger.services.room.assignment_service import occupy_room, release_student_room
from hostel_ledger.utils.date_utils import Clock


def _student_response(uow: UnitOfWork, user: User) -> StudentResponse:
    profile = uow.get_repo(UserRepository).get_student_profile(user.id)
    assignment = uow.get_repo(AssignmentRepository).get_active_for_student(user.id)
    room = None
    if assignment is not None:
        room = CurrentRoom(
            room_id=assignment.room.id,
            room_number=assignment.room.room_number,
            room_type=assignment.room.room_type,
            price=assignment.room.price,
        )
    return StudentResponse(
        user_id=user.id,
        name=user.name,
        email=user.email,
        hostel_id=user.hostel_id,
        access_number=profile.access_number if profile else None,
        phone=profile.phone if profile else None,
        whatsapp=profile.whatsapp if profile else None,
        course=profile.course if profile else None,
        room=room,
    )


class StudentService(BaseService):
    """Registration, removal and notification of a hostel's students."""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        summary_cache: BalanceSummaryCache,
        notifications: Optional[NotificationService] = None,
        clock: Optional[Clock] = None,
        default_currency: str = DEFAULT_CURRENCY,
    ) -> None:
        super().__init__(session_factory, clock)
        self._summary_cache = summary_cache
        self._notifications = notifications
        self._default_currency = default_currency

    # ==================== WRITE OPERATIONS ====================

    def register_student(self, hostel_id: UUID, data: StudentCreate) -> ServiceResult[StudentRegistration]:
        """
        Create (or attach) the student, then optionally assign the room and
        record the initial booking payment. Any failure rolls back all of it.
        """
        try:
            with self.unit_of_work() as uow:
                hostel = uow.get_repo(HostelRepository).get_by_id(hostel_id)
                if hostel is None:
                    raise NotFoundError("Hostel", hostel_id)
                hostel_name = hostel.name

                users = uow.get_repo(UserRepository)
                user = users.get_by_email(data.email)
                if user is None:
                    user = users.create_user(data.email, data.name, UserRole.USER, hostel_id)
                elif user.role != UserRole.USER:
                    raise ConflictError("Email already registered with another role", conflicting_field="email")
                elif user.is_deleted:
                    user = users.restore(user, data.name, hostel_id)
                elif user.hostel_id != hostel_id:
                    raise ConflictError("Student is registered at another hostel", conflicting_field="email")

                users.upsert_student_profile(
                    user.id,
                    {
                        "access_number": data.access_number,
                        "phone": data.phone,
                        "whatsapp": data.whatsapp,
                        "course": data.course,
                        "emergency_contact": data.emergency_contact,
                    },
                )

                now = self.now()
                assignment = None
                if data.room_id is not None:
                    assignment = AssignmentResponse.model_validate(
                        occupy_room(uow, user.id, data.room_id, hostel_id, now)
                    )

                payment = None
                if data.initial_payment is not None:
                    receipt = append_payment(
                        uow,
                        student_id=user.id,
                        hostel_id=hostel_id,
                        amount=data.initial_payment,
                        currency=data.currency or self._default_currency,
                        purpose=PaymentPurpose.BOOKING,
                        now=now,
                    )
                    payment = receipt.payment

                registration = StudentRegistration(
                    student=_student_response(uow, user),
                    assignment=assignment,
                    payment=payment,
                )

            self._summary_cache.invalidate(hostel_id)

            self._logger.info(
                "Registered student",
                extra={"hostel_id": str(hostel_id), "student_id": str(registration.student.user_id)},
            )
        except Exception as e:
            return self._handle_exception(e, "register student", data.email)

        if self._notifications is not None:
            room = registration.student.room
            self._notifications.send_welcome(
                registration.student.email,
                registration.student.name,
                hostel_name,
                room.room_number if room else None,
            )
        return ServiceResult.success(registration, message="Student registered successfully")

    def delete_student(self, student_id: UUID, hostel_id: UUID) -> ServiceResult[bool]:
        """
        Remove a student. The active assignment is ended and its room
        freed in the same transaction; ledger entries are kept.
        """
        try:
            with self.unit_of_work() as uow:
                users = uow.get_repo(UserRepository)
                student = users.get_student(student_id, hostel_id)
                if student is None:
                    raise NotFoundError("Student", student_id)
                now = self.now()
                ended = release_student_room(uow, student.id, now)
                freed_room_id = ended.room_id if ended is not None else None
                users.soft_delete(student, now)

            self._summary_cache.invalidate(hostel_id)
            self._logger.info(
                "Deleted student",
                extra={
                    "hostel_id": str(hostel_id),
                    "student_id": str(student_id),
                    "freed_room_id": str(freed_room_id) if freed_room_id else None,
                },
            )
            return ServiceResult.success(True, message="Student deleted successfully")
        except Exception as e:
            return self._handle_exception(e, "delete student", student_id)

    def notify_students(self, hostel_id: UUID, request: NotifyRequest) -> ServiceResult[NotifyResult]:
        """Email one student or all students; failures are counted, not raised."""
        try:
            with self.unit_of_work() as uow:
                users = uow.get_repo(UserRepository)
                if request.user_id is not None:
                    student = users.get_student(request.user_id, hostel_id)
                    if student is None:
                        raise NotFoundError("Student", request.user_id)
                    recipients = [(student.email, student.name)]
                else:
                    recipients = [(s.email, s.name) for s in users.list_students(hostel_id)]
        except Exception as e:
            return self._handle_exception(e, "notify students", hostel_id)

        sent = 0
        if self._notifications is not None:
            for email, name in recipients:
                if self._notifications.send_notice(email, name, request.subject, request.message):
                    sent += 1

        self._logger.info(
            f"Notified {sent}/{len(recipients)} students",
            extra={"hostel_id": str(hostel_id)},
        )
        return ServiceResult.success(NotifyResult(requested=len(recipients), sent=sent))

    # ==================== READ OPERATIONS ====================

    def get_student(self, student_id: UUID, hostel_id: UUID) -> ServiceResult[StudentResponse]:
        try:
            with self.unit_of_work() as uow:
                student = uow.get_repo(UserRepository).get_student(student_id, hostel_id)
                if student is None:
                    raise NotFoundError("Student", student_id)
                return ServiceResult.success(_student_response(uow, student))
        except Exception as e:
            return self._handle_exception(e, "get student", student_id)

    def list_students(self, hostel_id: UUID) -> ServiceResult[List[StudentResponse]]:
        try:
            with self.unit_of_work() as uow:
                students = uow.get_repo(UserRepository).list_students(hostel_id)
                return ServiceResult.success([_student_response(uow, s) for s in students])
        except Exception as e:
            return self._handle_exception(e, "list students", hostel_id)
