"""Shared fixtures: app on in-memory SQLite with an in-memory session cache."""
import json
from datetime import timedelta

import pytest
import redis

from student_attendance import create_app, db, session_cache
from student_attendance.container import current_container
from student_attendance.models import Admin, ClassRoom, Student, Teacher

ADMIN_EMAIL = 'admin@school.edu'
ADMIN_PASSWORD = 'admin-pass'
TEACHER_PASSWORD = 'teacher-pass'
STUDENT_PASSWORD = 'student-pass'


class FakeRedis:
    """Dict-backed stand-in for the few Redis commands the cache uses."""

    def __init__(self):
        self.values = {}
        self.ttls = {}

    def setex(self, name, time, value):
        self.values[name] = value
        self.ttls[name] = time if isinstance(time, timedelta) else timedelta(seconds=time)
        return True

    def get(self, name):
        return self.values.get(name)

    def delete(self, *names):
        removed = 0
        for name in names:
            if self.values.pop(name, None) is not None:
                removed += 1
            self.ttls.pop(name, None)
        return removed


class BrokenRedis:
    """Every command fails as if the server were unreachable."""

    def _fail(self, *args, **kwargs):
        raise redis.ConnectionError('Connection refused')

    setex = get = delete = _fail


@pytest.fixture
def app():
    """Create test app."""
    app = create_app('testing')
    session_cache.client = FakeRedis()
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture
def container(app):
    return current_container()


@pytest.fixture
def fake_redis(app):
    return session_cache.client


@pytest.fixture
def seeded(app, container):
    """One admin, two teachers with a class each, and students."""
    hasher = container.hasher

    db.session.add(Admin(email=ADMIN_EMAIL, password_hash=hasher.hash(ADMIN_PASSWORD)))
    for teacher_id, first_name in (('T1', 'Tina'), ('T2', 'Omar')):
        db.session.add(Teacher(
            teacher_id=teacher_id,
            first_name=first_name,
            last_name='Teacher',
            email=f'{teacher_id.lower()}@school.edu',
            password_hash=hasher.hash(TEACHER_PASSWORD),
        ))
    db.session.commit()

    class_a = ClassRoom(name='10-A', homeroom_teacher='T1')
    class_b = ClassRoom(name='10-B', homeroom_teacher='T2')
    db.session.add_all([class_a, class_b])
    db.session.commit()

    students = [
        ('S1', 'Sara', class_a.id, True),
        ('S2', 'Sami', class_a.id, True),
        ('S3', 'Lina', class_b.id, True),
        ('S9', 'Idle', class_a.id, False),
    ]
    for student_id, first_name, class_id, active in students:
        db.session.add(Student(
            student_id=student_id,
            class_id=class_id,
            first_name=first_name,
            last_name='Student',
            email=f'{student_id.lower()}@school.edu',
            password_hash=hasher.hash(STUDENT_PASSWORD),
            is_active=active,
        ))
    db.session.commit()

    return {'class_a': class_a.id, 'class_b': class_b.id}


def login(client, user_type, user_id, password):
    """Log in through the API and return the token."""
    response = client.post('/api/auth/login', json={
        'user_type': user_type,
        'user_id': user_id,
        'password': password,
    })
    assert response.status_code == 200, response.data
    return json.loads(response.data)['token']


def auth_headers(token):
    return {'Authorization': f'Bearer {token}'}
