"""Absence request model and its approval states."""
from enum import Enum
from student_attendance import db
from student_attendance.models.base import BaseModel


class RequestStatus(Enum):
    """Absence request lifecycle. Approved and rejected are terminal."""
    PENDING = 'pending'
    APPROVED = 'approved'
    REJECTED = 'rejected'


class Decision(Enum):
    """Teacher decision on a pending request."""
    APPROVE = 'approve'
    REJECT = 'reject'

    @property
    def resulting_status(self) -> RequestStatus:
        if self is Decision.APPROVE:
            return RequestStatus.APPROVED
        return RequestStatus.REJECTED


class AbsentRequest(BaseModel):
    """Student-submitted request to excuse an absence."""

    __tablename__ = 'absent_requests'

    student_id = db.Column(
        db.String(50), db.ForeignKey('students.student_id'), nullable=False, index=True
    )
    # Snapshot of the student's class at submission time
    class_id = db.Column(db.Integer, db.ForeignKey('classes.id'), nullable=False, index=True)
    request_date = db.Column(db.Date, nullable=False)
    reason = db.Column(db.Text, nullable=False)
    status = db.Column(
        db.Enum(RequestStatus, name='absent_request_status'),
        nullable=False,
        default=RequestStatus.PENDING,
        index=True,
    )

    approved_by = db.Column(db.String(100), nullable=True)
    approved_at = db.Column(db.DateTime, nullable=True)
    rejected_by = db.Column(db.String(100), nullable=True)
    rejected_at = db.Column(db.DateTime, nullable=True)
    deleted_at = db.Column(db.DateTime, nullable=True)
    deleted_by = db.Column(db.String(100), nullable=True)

    @property
    def is_pending(self) -> bool:
        return self.status == RequestStatus.PENDING

    def __repr__(self):
        return f'<AbsentRequest {self.id} {self.student_id} {self.status.value}>'
