"""Test the absence request lifecycle."""
import dataclasses
from datetime import date

import pytest

from student_attendance import db
from student_attendance.exceptions import (
    InvalidDate,
    NotFound,
    NotPending,
    Unauthorized,
    ValidationError,
)
from student_attendance.models import AbsentRequest, Decision, RequestStatus, Student
from student_attendance.models.principal import PrincipalRole
from student_attendance.services.absent_request_service import AbsenceRequestWorkflow


@pytest.fixture
def workflow(container):
    return container.absent_requests


def test_create_is_pending_with_class_snapshot(workflow, seeded):
    request = workflow.create('S1', '2024-03-01', 'flu')

    assert request.status is RequestStatus.PENDING
    assert request.request_date == date(2024, 3, 1)
    assert request.class_id == seeded['class_a']

    # Moving the student later does not rewrite the request
    student = Student.query.filter_by(student_id='S1').first()
    student.update(class_id=seeded['class_b'])
    assert workflow.get(request.id).class_id == seeded['class_a']


def test_create_rejects_bad_input(workflow, seeded):
    with pytest.raises(InvalidDate):
        workflow.create('S1', '01/03/2024', 'flu')
    with pytest.raises(InvalidDate):
        workflow.create('S1', '2024-02-30', 'flu')
    with pytest.raises(ValidationError):
        workflow.create('S1', '2024-03-01', '   ')
    with pytest.raises(NotFound):
        workflow.create('S404', '2024-03-01', 'flu')


def test_reject_then_edit_scenario(workflow, seeded):
    request = workflow.create('S1', '2024-03-01', 'flu')

    decided = workflow.decide(request.id, 'T1', Decision.REJECT)
    assert decided.status is RequestStatus.REJECTED
    assert decided.rejected_by == 'T1'
    assert decided.rejected_at is not None
    assert decided.approved_by is None

    with pytest.raises(NotPending):
        workflow.update_own(request.id, 'S1', {'reason': 'cold'})
    assert workflow.get(request.id).reason == 'flu'


def test_approve_stamps_approver(workflow, seeded):
    request = workflow.create('S2', '2024-03-04', 'family event')
    decided = workflow.decide(request.id, 'T1', Decision.APPROVE)

    assert decided.status is RequestStatus.APPROVED
    assert decided.approved_by == 'T1'
    assert decided.approved_at is not None


def test_terminal_states_never_change(workflow, seeded):
    request = workflow.create('S1', '2024-03-01', 'flu')
    workflow.decide(request.id, 'T1', Decision.APPROVE)

    with pytest.raises(NotPending):
        workflow.decide(request.id, 'T2', Decision.REJECT)
    with pytest.raises(NotPending):
        workflow.decide(request.id, 'T1', Decision.APPROVE)

    stored = workflow.get(request.id)
    assert stored.status is RequestStatus.APPROVED
    assert stored.approved_by == 'T1'
    assert stored.rejected_by is None


def test_update_own_rules(workflow, seeded):
    request = workflow.create('S1', '2024-03-01', 'flu')

    with pytest.raises(Unauthorized):
        workflow.update_own(request.id, 'S2', {'reason': 'hijack'})
    with pytest.raises(ValidationError):
        workflow.update_own(request.id, 'S1', {'status': 'approved'})
    with pytest.raises(InvalidDate):
        workflow.update_own(request.id, 'S1', {'request_date': 'tomorrow'})

    updated = workflow.update_own(
        request.id, 'S1', {'request_date': '2024-03-02', 'reason': 'cold', 'status': 'approved'}
    )
    assert updated.request_date == date(2024, 3, 2)
    assert updated.reason == 'cold'
    assert updated.status is RequestStatus.PENDING
    assert updated.student_id == 'S1'


def test_owner_check_comes_before_state_check(workflow, seeded):
    request = workflow.create('S1', '2024-03-01', 'flu')
    workflow.decide(request.id, 'T1', Decision.REJECT)

    with pytest.raises(Unauthorized):
        workflow.update_own(request.id, 'S2', {'reason': 'cold'})


def test_conditional_update_loses_to_concurrent_decision(workflow, seeded):
    """A decision landing between the read and the write wins."""
    request = workflow.create('S1', '2024-03-01', 'flu')

    AbsentRequest.query.filter_by(id=request.id).update(
        {'status': RequestStatus.APPROVED, 'approved_by': 'T2'}, synchronize_session=False
    )
    db.session.commit()

    with pytest.raises(NotPending):
        workflow._update_pending(request.id, {'reason': 'cold'})
    assert workflow.get(request.id).reason == 'flu'


def test_decide_missing_request(workflow, seeded):
    with pytest.raises(NotFound):
        workflow.decide(999, 'T1', Decision.APPROVE)


def test_teacher_class_ownership_is_opt_in(workflow, container, seeded):
    request = workflow.create('S1', '2024-03-01', 'flu')

    strict = AbsenceRequestWorkflow(
        dataclasses.replace(container.settings, enforce_teacher_class_ownership=True)
    )
    with pytest.raises(Unauthorized):
        strict.decide(request.id, 'T2', Decision.APPROVE)
    assert strict.decide(request.id, 'T1', Decision.APPROVE).approved_by == 'T1'

    other = workflow.create('S1', '2024-03-05', 'dentist')
    assert workflow.decide(other.id, 'T2', Decision.REJECT).rejected_by == 'T2'


def test_soft_delete_rules(workflow, seeded):
    mine = workflow.create('S1', '2024-03-01', 'flu')
    with pytest.raises(Unauthorized):
        workflow.soft_delete(mine.id, PrincipalRole.STUDENT, 'S2')

    workflow.soft_delete(mine.id, PrincipalRole.STUDENT, 'S1')
    with pytest.raises(NotFound):
        workflow.get(mine.id)

    decided = workflow.create('S1', '2024-03-02', 'cold')
    workflow.decide(decided.id, 'T1', Decision.APPROVE)
    with pytest.raises(NotPending):
        workflow.soft_delete(decided.id, PrincipalRole.STUDENT, 'S1')

    workflow.soft_delete(decided.id, PrincipalRole.TEACHER, 'T1')
    stored = AbsentRequest.get_by_id(decided.id)
    assert stored.deleted_by == 'T1'
    assert stored.status is RequestStatus.APPROVED


def test_page_bounds(workflow):
    assert workflow.page_bounds(None, None) == (10, 0)
    assert workflow.page_bounds(1000, 5) == (100, 5)
    assert workflow.page_bounds(0, -3) == (10, 0)
    assert workflow.page_bounds(25, 100000) == (25, 100000)


def test_listings(workflow, seeded):
    for day in range(1, 4):
        workflow.create('S1', f'2024-03-0{day}', 'flu')
    decided = workflow.create('S3', '2024-03-01', 'trip')
    workflow.decide(decided.id, 'T2', Decision.APPROVE)

    pending = workflow.list_pending()
    assert pending.count == 3
    assert all(item.is_pending for item in pending.items)

    assert workflow.list_by_student('S1', limit=2).count == 2
    assert workflow.list_by_student('S1', limit=2, offset=2).count == 1
    assert workflow.list_by_student('S1', offset=50).count == 0

    assert workflow.list_by_class(seeded['class_b']).count == 1
    assert {item.student_id for item in workflow.list_by_teacher('T1').items} == {'S1'}
    assert workflow.list_by_teacher('T2').items[0].id == decided.id

    page = workflow.list_by_student('S1', limit=500).to_dict()
    assert page['limit'] == 100
    assert page['offset'] == 0
    assert page['count'] == len(page['data']) == 3
