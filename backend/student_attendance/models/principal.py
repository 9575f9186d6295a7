"""Principal models: the three independent credential tables."""
from enum import Enum
from student_attendance import db
from student_attendance.models.base import BaseModel


class PrincipalRole(Enum):
    """Closed set of roles a session can carry."""
    ADMIN = 'admin'
    TEACHER = 'teacher'
    STUDENT = 'student'

    @classmethod
    def parse(cls, value: str) -> 'PrincipalRole':
        """Parse a role tag; raises ValueError for anything outside the set."""
        return cls((value or '').strip().lower())


class PrincipalMixin:
    """Columns shared by every principal table."""

    password_hash = db.Column(db.String(255), nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    def to_dict(self, exclude: list = None) -> dict:
        """Convert to dictionary excluding the credential hash."""
        exclude = (exclude or []) + ['password_hash']
        return super().to_dict(exclude=exclude)


class Admin(PrincipalMixin, BaseModel):
    """Administrator, identified by email."""

    __tablename__ = 'admins'

    email = db.Column(db.String(100), unique=True, nullable=False, index=True)
    last_login = db.Column(db.DateTime, nullable=True)

    @property
    def identity_key(self) -> str:
        return self.email

    @property
    def display_name(self) -> str:
        return self.email

    def __repr__(self) -> str:
        return f'<Admin {self.email}>'


class Teacher(PrincipalMixin, BaseModel):
    """Teacher, identified by the school-issued teacher ID."""

    __tablename__ = 'teachers'

    teacher_id = db.Column(db.String(50), unique=True, nullable=False, index=True)
    first_name = db.Column(db.String(50), nullable=False)
    last_name = db.Column(db.String(50), nullable=False)
    email = db.Column(db.String(100), unique=True, nullable=False)
    phone = db.Column(db.String(20), unique=True, nullable=True)

    classes = db.relationship('ClassRoom', backref='homeroom', lazy='dynamic')

    @property
    def identity_key(self) -> str:
        return self.teacher_id

    @property
    def display_name(self) -> str:
        return f'{self.first_name} {self.last_name}'

    def __repr__(self) -> str:
        return f'<Teacher {self.teacher_id}>'


class Student(PrincipalMixin, BaseModel):
    """Student, identified by the school-issued student ID."""

    __tablename__ = 'students'

    student_id = db.Column(db.String(50), unique=True, nullable=False, index=True)
    class_id = db.Column(db.Integer, db.ForeignKey('classes.id'), nullable=False)
    first_name = db.Column(db.String(50), nullable=False)
    last_name = db.Column(db.String(50), nullable=False)
    email = db.Column(db.String(100), unique=True, nullable=False)
    phone = db.Column(db.String(20), unique=True, nullable=True)

    classroom = db.relationship('ClassRoom', backref=db.backref('students', lazy='dynamic'))

    @property
    def identity_key(self) -> str:
        return self.student_id

    @property
    def display_name(self) -> str:
        return f'{self.first_name} {self.last_name}'

    def __repr__(self) -> str:
        return f'<Student {self.student_id}>'
