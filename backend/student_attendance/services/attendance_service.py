"""Attendance recording with at-most-one live record per student per day."""
import logging
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, Optional, Tuple

from sqlalchemy.exc import IntegrityError

from student_attendance import db
from student_attendance.exceptions import AlreadyMarked, NotFound, ValidationError
from student_attendance.models.attendance import AttendanceRecord, AttendanceStatus
from student_attendance.models.base import utcnow
from student_attendance.models.principal import PrincipalRole, Student
from student_attendance.services.auth_service import Authenticator

logger = logging.getLogger(__name__)

SELF_MARK_DESCRIPTION = "Self-marked attendance"

# Fields an admin correction may touch
CORRECTABLE_FIELDS = ('status', 'description', 'date', 'time_in', 'time_out')


class AttendanceRecorder:
    """Creates, corrects and soft-deletes attendance records."""

    def __init__(self, authenticator: Authenticator, clock: Callable[[], datetime] = datetime.now):
        self.authenticator = authenticator
        # Local wall clock; "today" is the local calendar day
        self.clock = clock

    def find_active(self, student_id: str, day: date) -> Optional[AttendanceRecord]:
        return AttendanceRecord.query.filter(
            AttendanceRecord.student_id == student_id,
            AttendanceRecord.date == day,
            AttendanceRecord.deleted_at.is_(None),
        ).first()

    def get(self, record_id: int) -> AttendanceRecord:
        record = AttendanceRecord.get_by_id(record_id)
        if record is None or record.is_deleted:
            raise NotFound("Attendance record not found")
        return record

    def mark_self(self, student_id: str, password: str) -> Tuple[str, AttendanceRecord]:
        """Mark the student present for today.

        Credentials are checked again here, independent of any session.
        Returns the student's display name and the new record.
        """
        principal = self.authenticator.verify_credentials(PrincipalRole.STUDENT, student_id, password)
        now = self.clock()
        today = now.date()

        if self.find_active(principal.identity_key, today) is not None:
            raise AlreadyMarked()

        student = Student.query.filter_by(student_id=principal.identity_key).first()
        if student is None:
            raise NotFound("Student not found")

        record = AttendanceRecord(
            student_id=student.student_id,
            class_id=student.class_id,
            date=today,
            status=AttendanceStatus.PRESENT,
            description=SELF_MARK_DESCRIPTION,
            time_in=now.astimezone(timezone.utc).replace(tzinfo=None),
            created_by=student.student_id,
        )
        db.session.add(record)
        try:
            db.session.commit()
        except IntegrityError as e:
            # A concurrent call won the race; the partial unique index rejected this row
            db.session.rollback()
            logger.info("Duplicate attendance for %s on %s rejected by index", student_id, today)
            raise AlreadyMarked() from e

        logger.info("Student %s marked present for %s", student.student_id, today)
        return principal.display_name, record

    def update(self, record_id: int, patch: Dict[str, Any], acting_admin: str) -> AttendanceRecord:
        """Admin correction of any record. Last write wins."""
        record = self.get(record_id)
        changes = {}
        for field in CORRECTABLE_FIELDS:
            if field in patch:
                changes[field] = _coerce(field, patch[field])

        if not changes:
            raise ValidationError(
                f"Nothing to update. Allowed fields: {', '.join(CORRECTABLE_FIELDS)}"
            )

        changes['updated_by'] = acting_admin
        try:
            record.update(**changes)
        except IntegrityError as e:
            db.session.rollback()
            raise AlreadyMarked("Student already has attendance for that date") from e

        logger.info("Attendance %s corrected by %s", record_id, acting_admin)
        return record

    def soft_delete(self, record_id: int, actor: str) -> AttendanceRecord:
        """Hide the record; the day becomes free for a new record."""
        record = self.get(record_id)
        record.update(deleted_at=utcnow(), deleted_by=actor)
        logger.info("Attendance %s deleted by %s", record_id, actor)
        return record


def _coerce(field: str, value: Any) -> Any:
    """Convert a JSON patch value to the column's Python type."""
    if field == 'description':
        if value is not None and not isinstance(value, str):
            raise ValidationError("Invalid value for description")
        return value
    try:
        if field == 'status':
            return AttendanceStatus(str(value).lower())
        if field == 'date':
            return value if isinstance(value, date) else date.fromisoformat(value)
        if field in ('time_in', 'time_out'):
            if value is None and field == 'time_out':
                return None
            return value if isinstance(value, datetime) else datetime.fromisoformat(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid value for {field}") from e
    return value
