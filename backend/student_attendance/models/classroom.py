"""Class (homeroom) model."""
from student_attendance import db
from student_attendance.models.base import BaseModel


class ClassRoom(BaseModel):
    """A class with one homeroom teacher and many students."""

    __tablename__ = 'classes'

    name = db.Column(db.String(100), nullable=False)
    homeroom_teacher = db.Column(
        db.String(50), db.ForeignKey('teachers.teacher_id'), nullable=False, index=True
    )
    description = db.Column(db.Text, nullable=True)

    def __repr__(self) -> str:
        return f'<ClassRoom {self.name}>'
