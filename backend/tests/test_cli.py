"""Test the provisioning CLI commands."""
from student_attendance.models import Admin, ClassRoom, Student, Teacher
from student_attendance.models.principal import PrincipalRole


def test_init_db(app):
    runner = app.test_cli_runner()
    result = runner.invoke(args=['init-db', '--drop'])

    assert result.exit_code == 0
    assert 'Dropped all tables.' in result.output
    assert 'Created all tables.' in result.output
    assert Admin.query.count() == 0


def test_provisioning_commands(app, container):
    runner = app.test_cli_runner()

    result = runner.invoke(args=['create-admin', '--email', 'Boss@School.edu', '--password', 'boss-pass'])
    assert result.exit_code == 0, result.output
    admin = Admin.query.filter_by(email='boss@school.edu').first()
    assert container.hasher.verify(admin.password_hash, 'boss-pass')
    session = container.authenticator.login(PrincipalRole.ADMIN, 'Boss@School.edu', 'boss-pass')
    assert session.identity_key == 'boss@school.edu'

    result = runner.invoke(args=[
        'create-teacher', '--teacher-id', 'T7', '--first-name', 'Nora', '--last-name', 'Haddad',
        '--email', 'nora@school.edu', '--password', 'teach-pass',
    ])
    assert result.exit_code == 0, result.output
    assert Teacher.query.filter_by(teacher_id='T7').count() == 1

    result = runner.invoke(args=['create-class', '--name', '11-C', '--homeroom-teacher', 'T7'])
    assert result.exit_code == 0, result.output
    classroom = ClassRoom.query.filter_by(name='11-C').first()

    result = runner.invoke(args=[
        'create-student', '--student-id', 'S70', '--class-id', str(classroom.id),
        '--first-name', 'Adam', '--last-name', 'Saleh', '--email', 'adam@school.edu',
        '--password', 'learn-pass',
    ])
    assert result.exit_code == 0, result.output
    assert Student.query.filter_by(student_id='S70').first().class_id == classroom.id


def test_create_class_requires_teacher(app):
    result = app.test_cli_runner().invoke(args=['create-class', '--name', '9-Z', '--homeroom-teacher', 'T404'])
    assert result.exit_code != 0
    assert 'does not exist' in result.output


def test_duplicate_admin_is_reported(app):
    runner = app.test_cli_runner()
    args = ['create-admin', '--email', 'dup@school.edu', '--password', 'dup-pass']
    assert runner.invoke(args=args).exit_code == 0

    result = runner.invoke(args=args)
    assert result.exit_code != 0
    assert 'Error creating admin' in result.output
