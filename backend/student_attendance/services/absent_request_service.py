"""Absence request workflow.

A request starts pending and moves once, to approved or rejected. Every
state-dependent write is a conditional UPDATE on ``status = 'pending'`` so a
concurrent decision or edit can never overwrite a terminal state.
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple

from student_attendance import db
from student_attendance.exceptions import (
    InvalidDate,
    NotFound,
    NotPending,
    Unauthorized,
    ValidationError,
)
from student_attendance.models.absent_request import AbsentRequest, Decision, RequestStatus
from student_attendance.models.base import utcnow
from student_attendance.models.classroom import ClassRoom
from student_attendance.models.principal import PrincipalRole, Student
from student_attendance.settings import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Page:
    """One page of absence requests."""
    items: List[AbsentRequest]
    limit: int
    offset: int

    @property
    def count(self) -> int:
        return len(self.items)

    def to_dict(self) -> dict:
        return {
            'data': [item.to_dict() for item in self.items],
            'count': self.count,
            'limit': self.limit,
            'offset': self.offset,
        }


class AbsenceRequestWorkflow:
    """Creates, edits, decides and lists absence requests."""

    def __init__(self, settings: Settings):
        self.settings = settings

    # Parsing helpers

    def parse_date(self, value: Any) -> date:
        if isinstance(value, date):
            return value
        try:
            return datetime.strptime(str(value).strip(), self.settings.request_date_format).date()
        except (TypeError, ValueError) as e:
            raise InvalidDate() from e

    def page_bounds(self, limit: Optional[int], offset: Optional[int]) -> Tuple[int, int]:
        """Clamp limit to [1, max]; offset is only floored at zero."""
        if limit is None or limit < 1:
            limit = self.settings.default_page_size
        limit = min(limit, self.settings.max_page_size)
        if offset is None or offset < 0:
            offset = 0
        return limit, offset

    @staticmethod
    def _clean_reason(reason: Any) -> str:
        if not isinstance(reason, str) or not reason.strip():
            raise ValidationError("Reason is required")
        return reason.strip()

    # Single-request operations

    def get(self, request_id: int) -> AbsentRequest:
        request = AbsentRequest.get_by_id(request_id)
        if request is None or request.deleted_at is not None:
            raise NotFound("Absent request not found")
        return request

    def create(self, student_id: str, request_date: Any, reason: Any) -> AbsentRequest:
        """Submit a request. Status is always pending; the class is snapshotted now."""
        parsed_date = self.parse_date(request_date)
        reason = self._clean_reason(reason)

        student = Student.query.filter_by(student_id=student_id).first()
        if student is None:
            raise NotFound("Student not found")

        request = AbsentRequest(
            student_id=student.student_id,
            class_id=student.class_id,
            request_date=parsed_date,
            reason=reason,
            status=RequestStatus.PENDING,
        )
        request.save()
        logger.info("Absent request %s created by %s", request.id, student_id)
        return request

    def update_own(self, request_id: int, student_id: str, changes: Dict[str, Any]) -> AbsentRequest:
        """Edit date/reason of the caller's own request while it is pending."""
        request = self.get(request_id)
        if request.student_id != student_id:
            raise Unauthorized("You can only update your own absent requests")
        if not request.is_pending:
            raise NotPending()

        values = {}
        if changes.get('request_date') is not None:
            values['request_date'] = self.parse_date(changes['request_date'])
        if changes.get('reason') is not None:
            values['reason'] = self._clean_reason(changes['reason'])
        if not values:
            raise ValidationError("Nothing to update. Provide request_date or reason")

        self._update_pending(request_id, values, AbsentRequest.student_id == student_id)
        logger.info("Absent request %s updated by %s", request_id, student_id)
        return self.get(request_id)

    def decide(self, request_id: int, teacher_id: str, decision: Decision) -> AbsentRequest:
        """Approve or reject a pending request."""
        request = self.get(request_id)
        if self.settings.enforce_teacher_class_ownership:
            classroom = ClassRoom.get_by_id(request.class_id)
            if classroom is None or classroom.homeroom_teacher != teacher_id:
                raise Unauthorized("You can only decide requests for your own classes")

        now = utcnow()
        values = {'status': decision.resulting_status}
        if decision is Decision.APPROVE:
            values.update(approved_by=teacher_id, approved_at=now)
        else:
            values.update(rejected_by=teacher_id, rejected_at=now)

        self._update_pending(request_id, values)
        logger.info("Absent request %s %s by %s", request_id, decision.resulting_status.value, teacher_id)
        return self.get(request_id)

    def soft_delete(self, request_id: int, role: PrincipalRole, actor: str) -> None:
        """Students may withdraw their own pending requests; staff may delete any."""
        request = self.get(request_id)
        values = {'deleted_at': utcnow(), 'deleted_by': actor}

        if role is PrincipalRole.STUDENT:
            if request.student_id != actor:
                raise Unauthorized("You can only delete your own absent requests")
            if not request.is_pending:
                raise NotPending()
            self._update_pending(request_id, values, AbsentRequest.student_id == actor)
        else:
            request.update(**values)

        logger.info("Absent request %s deleted by %s %s", request_id, role.value, actor)

    def _update_pending(self, request_id: int, values: Dict[str, Any], *criteria) -> None:
        """UPDATE ... WHERE id = ? AND status = 'pending'; NotPending if no row changed."""
        values = dict(values, updated_at=utcnow())
        changed = AbsentRequest.query.filter(
            AbsentRequest.id == request_id,
            AbsentRequest.status == RequestStatus.PENDING,
            AbsentRequest.deleted_at.is_(None),
            *criteria,
        ).update(values, synchronize_session=False)

        if changed == 0:
            db.session.rollback()
            self.get(request_id)
            raise NotPending()
        db.session.commit()

    # Listing

    def _active(self):
        return AbsentRequest.query.filter(AbsentRequest.deleted_at.is_(None))

    def _page(self, query, limit: Optional[int], offset: Optional[int]) -> Page:
        limit, offset = self.page_bounds(limit, offset)
        items = (
            query.order_by(AbsentRequest.created_at.desc(), AbsentRequest.id.desc())
            .limit(limit)
            .offset(offset)
            .all()
        )
        return Page(items=items, limit=limit, offset=offset)

    def list_pending(self, limit: Optional[int] = None, offset: Optional[int] = None) -> Page:
        query = self._active().filter(AbsentRequest.status == RequestStatus.PENDING)
        return self._page(query, limit, offset)

    def list_by_student(
        self, student_id: str, limit: Optional[int] = None, offset: Optional[int] = None
    ) -> Page:
        query = self._active().filter(AbsentRequest.student_id == student_id)
        return self._page(query, limit, offset)

    def list_by_class(
        self, class_id: int, limit: Optional[int] = None, offset: Optional[int] = None
    ) -> Page:
        query = self._active().filter(AbsentRequest.class_id == class_id)
        return self._page(query, limit, offset)

    def list_by_teacher(
        self, teacher_id: str, limit: Optional[int] = None, offset: Optional[int] = None
    ) -> Page:
        """Requests for every class the teacher is homeroom teacher of."""
        query = (
            self._active()
            .join(ClassRoom, AbsentRequest.class_id == ClassRoom.id)
            .filter(ClassRoom.homeroom_teacher == teacher_id)
        )
        return self._page(query, limit, offset)
