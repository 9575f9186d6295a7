"""Flask CLI commands for database setup and provisioning."""
import click
from flask import Flask
from sqlalchemy.exc import SQLAlchemyError

from student_attendance import db
from student_attendance.container import current_container
from student_attendance.models import Admin, ClassRoom, Student, Teacher


def _save(row, label: str) -> None:
    try:
        db.session.add(row)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise click.ClickException(f'Error creating {label}: {e}') from e


def register_cli(app: Flask) -> None:
    """Register CLI commands."""

    @app.cli.command('init-db')
    @click.option('--drop', is_flag=True, help='Drop existing tables')
    def init_db(drop):
        """Initialize the database."""
        if drop:
            db.drop_all()
            click.echo('Dropped all tables.')

        db.create_all()
        click.echo('Created all tables.')

    @app.cli.command('create-admin')
    @click.option('--email', prompt='Admin email')
    @click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True)
    def create_admin(email, password):
        """Create an admin account."""
        hasher = current_container().hasher
        admin = Admin(email=email.strip().lower(), password_hash=hasher.hash(password))
        _save(admin, 'admin')
        click.echo(f'Admin user created: {admin.email}')

    @app.cli.command('create-teacher')
    @click.option('--teacher-id', prompt='Teacher ID')
    @click.option('--first-name', prompt='First name')
    @click.option('--last-name', prompt='Last name')
    @click.option('--email', prompt='Email')
    @click.option('--phone', default=None)
    @click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True)
    def create_teacher(teacher_id, first_name, last_name, email, phone, password):
        """Create a teacher account."""
        hasher = current_container().hasher
        teacher = Teacher(
            teacher_id=teacher_id.strip(),
            first_name=first_name,
            last_name=last_name,
            email=email.strip().lower(),
            phone=phone,
            password_hash=hasher.hash(password),
        )
        _save(teacher, 'teacher')
        click.echo(f'Teacher created: {teacher.teacher_id}')

    @app.cli.command('create-class')
    @click.option('--name', prompt='Class name')
    @click.option('--homeroom-teacher', prompt='Homeroom teacher ID')
    @click.option('--description', default=None)
    def create_class(name, homeroom_teacher, description):
        """Create a class with its homeroom teacher."""
        if Teacher.query.filter_by(teacher_id=homeroom_teacher).first() is None:
            raise click.ClickException(f'Teacher {homeroom_teacher} does not exist')

        classroom = ClassRoom(name=name, homeroom_teacher=homeroom_teacher, description=description)
        _save(classroom, 'class')
        click.echo(f'Class created: {classroom.name} (id={classroom.id})')

    @app.cli.command('create-student')
    @click.option('--student-id', prompt='Student ID')
    @click.option('--class-id', prompt='Class ID', type=int)
    @click.option('--first-name', prompt='First name')
    @click.option('--last-name', prompt='Last name')
    @click.option('--email', prompt='Email')
    @click.option('--phone', default=None)
    @click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True)
    def create_student(student_id, class_id, first_name, last_name, email, phone, password):
        """Create a student account in an existing class."""
        if ClassRoom.get_by_id(class_id) is None:
            raise click.ClickException(f'Class {class_id} does not exist')

        hasher = current_container().hasher
        student = Student(
            student_id=student_id.strip(),
            class_id=class_id,
            first_name=first_name,
            last_name=last_name,
            email=email.strip().lower(),
            phone=phone,
            password_hash=hasher.hash(password),
        )
        _save(student, 'student')
        click.echo(f'Student created: {student.student_id}')
