"""Daily attendance record model."""
from enum import Enum
from student_attendance import db
from student_attendance.models.base import BaseModel


class AttendanceStatus(Enum):
    """Attendance status enumeration."""
    PRESENT = 'present'
    ABSENT = 'absent'
    LATE = 'late'
    EXCUSED = 'excused'


class AttendanceRecord(BaseModel):
    """One student's attendance for one calendar day."""

    __tablename__ = 'attendances'
    __table_args__ = (
        # At most one live record per student and day; soft-deleted rows are exempt.
        db.Index(
            'uq_attendances_student_day_active',
            'student_id',
            'date',
            unique=True,
            sqlite_where=db.text('deleted_at IS NULL'),
            postgresql_where=db.text('deleted_at IS NULL'),
        ),
    )

    student_id = db.Column(db.String(50), db.ForeignKey('students.student_id'), nullable=False)
    class_id = db.Column(db.Integer, db.ForeignKey('classes.id'), nullable=False, index=True)
    date = db.Column(db.Date, nullable=False)
    status = db.Column(
        db.Enum(AttendanceStatus, name='attendance_status'),
        nullable=False,
        default=AttendanceStatus.PRESENT,
    )
    description = db.Column(db.Text, nullable=True)

    # Naive UTC like created_at; date is the local calendar day
    time_in = db.Column(db.DateTime, nullable=False)
    time_out = db.Column(db.DateTime, nullable=True)

    # Identity keys of the acting principals
    created_by = db.Column(db.String(100), nullable=False)
    updated_by = db.Column(db.String(100), nullable=True)
    deleted_at = db.Column(db.DateTime, nullable=True)
    deleted_by = db.Column(db.String(100), nullable=True)

    student = db.relationship('Student', backref=db.backref('attendance_records', lazy='dynamic'))

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def __repr__(self):
        return f'<AttendanceRecord {self.student_id}@{self.date}>'
