from __future__ import annotations

import time
from dataclasses import replace

import pytest

from conftest import make_profile
from employee_service.core.constants import MAX_PHOTO_BYTES
from employee_service.core.enums import EmployeeStatus, Role
from employee_service.core.exceptions import (
    AuthorizationError,
    CollaboratorError,
    DeletedError,
    DuplicateError,
    NotFoundError,
    OperationTimeout,
    PhotoTooLargeError,
    ValidationError,
)
from employee_service.employees.model import EmployeeUpdate
from employee_service.employees.service import EmployeeService


def _update(employee, **profile_changes):
    return EmployeeUpdate(employee_id=employee.employee_id, profile=replace(employee.profile, **profile_changes))


@pytest.mark.parametrize("role", [Role.SUPERVISOR, Role.MANAGER, Role.HR])
def test_privileged_roles_can_create(employee_service, hasher, role):
    e = employee_service.create(caller_role=role, profile=make_profile(), password="secret-pass")

    assert e.employee_id == "emp-0001"
    assert e.email == "budi@example.com"
    assert e.password_hash != "secret-pass"
    assert hasher.verify(e.password_hash, "secret-pass")


def test_staff_cannot_create(employee_service):
    with pytest.raises(AuthorizationError):
        employee_service.create(caller_role=Role.STAFF, profile=make_profile(), password="secret-pass")


def test_unknown_caller_role_is_forbidden(employee_service):
    with pytest.raises(AuthorizationError):
        employee_service.create(caller_role="intern", profile=make_profile(), password="secret-pass")


def test_create_uses_caller_supplied_id(employee_service):
    e = employee_service.create(
        caller_role=Role.HR, profile=make_profile(), password="secret-pass", employee_id="  EMP-42 "
    )

    assert e.employee_id == "EMP-42"


def test_create_rejects_short_password(employee_service):
    with pytest.raises(ValidationError):
        employee_service.create(caller_role=Role.HR, profile=make_profile(), password="short")


def test_create_duplicate_email_case_insensitive(employee_service, staff):
    with pytest.raises(DuplicateError):
        employee_service.create(
            caller_role=Role.HR, profile=make_profile(email="BUDI@example.com"), password="secret-pass"
        )


def test_email_reusable_after_soft_delete(employee_service, staff):
    employee_service.delete(caller_role=Role.HR, employee_id=staff.employee_id)

    again = employee_service.create(caller_role=Role.HR, profile=make_profile(), password="secret-pass")

    assert again.employee_id != staff.employee_id


def test_create_with_photo_normalizes_jpg(employee_service):
    e = employee_service.create(
        caller_role=Role.HR, profile=make_profile(), password="secret-pass", photo=b"\xff\xd8", photo_mime="image/jpg"
    )

    assert e.photo_mime == "image/jpeg"


def test_list_all_requires_privilege(employee_service, staff):
    assert [e.employee_id for e in employee_service.list_all(caller_role=Role.MANAGER)] == [staff.employee_id]
    with pytest.raises(AuthorizationError):
        employee_service.list_all(caller_role=Role.STAFF)


def test_staff_reads_only_own_record(employee_service, staff, supervisor):
    own = employee_service.get(caller_role=Role.STAFF, caller_id=staff.employee_id, employee_id=staff.employee_id)
    assert own.employee_id == staff.employee_id

    with pytest.raises(AuthorizationError):
        employee_service.get(caller_role=Role.STAFF, caller_id=staff.employee_id, employee_id=supervisor.employee_id)


def test_get_unknown_and_deleted_are_distinguished(employee_service, staff):
    with pytest.raises(NotFoundError):
        employee_service.get(caller_role=Role.HR, caller_id="x", employee_id="nobody")

    employee_service.delete(caller_role=Role.HR, employee_id=staff.employee_id)
    with pytest.raises(DeletedError):
        employee_service.get(caller_role=Role.HR, caller_id="x", employee_id=staff.employee_id)


def test_get_me_returns_caller(employee_service, staff):
    assert employee_service.get_me(caller_id=staff.employee_id).email == staff.email


def test_update_preserves_photo_and_password_when_omitted(employee_service, employees, hasher):
    e = employee_service.create(
        caller_role=Role.HR, profile=make_profile(), password="secret-pass", photo=b"\x89PNG-bytes", photo_mime="image/png"
    )

    updated = employee_service.update(
        caller_role=Role.STAFF, caller_id=e.employee_id, changes=_update(e, city="Bandung")
    )

    stored = employees.find_by_id(e.employee_id)
    assert updated.city == stored.city == "Bandung"
    assert stored.photo == b"\x89PNG-bytes"
    assert stored.photo_mime == "image/png"
    assert stored.password_hash == e.password_hash
    assert hasher.verify(stored.password_hash, "secret-pass")


def test_update_rehashes_new_password(employee_service, employees, hasher, staff):
    changes = EmployeeUpdate(employee_id=staff.employee_id, profile=staff.profile, password="new-password")

    employee_service.update(caller_role=Role.STAFF, caller_id=staff.employee_id, changes=changes)

    stored = employees.find_by_id(staff.employee_id)
    assert hasher.verify(stored.password_hash, "new-password")
    assert not hasher.verify(stored.password_hash, "secret-pass")


@pytest.mark.parametrize("password, ok", [("seven77", False), ("eight888", True)])
def test_password_minimum_length_on_create_and_update(employee_service, staff, password, ok):
    changes = EmployeeUpdate(employee_id=staff.employee_id, profile=staff.profile, password=password)
    calls = [
        lambda: employee_service.create(
            caller_role=Role.HR, profile=make_profile(email="rina@example.com"), password=password
        ),
        lambda: employee_service.update(caller_role=Role.STAFF, caller_id=staff.employee_id, changes=changes),
    ]

    for call in calls:
        if ok:
            call()
        else:
            with pytest.raises(ValidationError, match="at least 8"):
                call()


def test_update_refreshes_updated_timestamp(employee_service, clock, staff):
    clock.advance(hours=2)

    updated = employee_service.update(caller_role=Role.HR, caller_id="hr-1", changes=_update(staff, phone="+62822"))

    assert updated.updated_at > staff.updated_at
    assert updated.created_at == staff.created_at


def test_update_empty_photo_removes_it(employee_service, employees):
    e = employee_service.create(
        caller_role=Role.HR, profile=make_profile(), password="secret-pass", photo=b"GIF89a", photo_mime="image/gif"
    )
    changes = EmployeeUpdate(employee_id=e.employee_id, profile=e.profile, photo=b"")

    employee_service.update(caller_role=Role.HR, caller_id="hr-1", changes=changes)

    assert employees.find_by_id(e.employee_id).photo is None


def test_update_requires_target_id(employee_service, staff):
    changes = EmployeeUpdate(employee_id="  ", profile=staff.profile)

    with pytest.raises(ValidationError):
        employee_service.update(caller_role=Role.HR, caller_id="hr-1", changes=changes)


def test_staff_cannot_update_someone_else(employee_service, staff, supervisor):
    with pytest.raises(AuthorizationError):
        employee_service.update(
            caller_role=Role.STAFF, caller_id=staff.employee_id, changes=_update(supervisor, city="Bogor")
        )


def test_staff_cannot_change_own_role_or_status(employee_service, staff):
    with pytest.raises(AuthorizationError):
        employee_service.update(
            caller_role=Role.STAFF, caller_id=staff.employee_id, changes=_update(staff, role=Role.MANAGER)
        )
    with pytest.raises(AuthorizationError):
        employee_service.update(
            caller_role=Role.STAFF, caller_id=staff.employee_id, changes=_update(staff, status=EmployeeStatus.SUSPENDED)
        )


def test_privileged_can_change_status(employee_service, staff):
    updated = employee_service.update(
        caller_role=Role.HR, caller_id="hr-1", changes=_update(staff, status="inactive")
    )

    assert updated.status is EmployeeStatus.INACTIVE


def test_update_to_taken_email_is_duplicate(employee_service, staff, supervisor):
    with pytest.raises(DuplicateError):
        employee_service.update(caller_role=Role.HR, caller_id="hr-1", changes=_update(staff, email=supervisor.email))


def test_update_deleted_employee_is_deleted_error(employee_service, staff):
    employee_service.delete(caller_role=Role.HR, employee_id=staff.employee_id)

    with pytest.raises(DeletedError):
        employee_service.update(caller_role=Role.HR, caller_id="hr-1", changes=_update(staff, city="Bogor"))


def test_update_photo_replaces_photo_only(employee_service, employees, staff):
    employee_service.update_photo(
        caller_role=Role.STAFF,
        caller_id=staff.employee_id,
        employee_id=staff.employee_id,
        photo=b"\xff\xd8\xff",
        photo_mime="image/jpg",
    )

    stored = employees.find_by_id(staff.employee_id)
    assert stored.photo == b"\xff\xd8\xff"
    assert stored.photo_mime == "image/jpeg"
    assert stored.name == staff.name


def test_update_photo_validation(employee_service, staff):
    kwargs = dict(caller_role=Role.HR, caller_id="hr-1", employee_id=staff.employee_id)

    with pytest.raises(ValidationError):
        employee_service.update_photo(photo=b"", photo_mime="image/png", **kwargs)
    with pytest.raises(ValidationError):
        employee_service.update_photo(photo=b"BM", photo_mime="image/bmp", **kwargs)
    with pytest.raises(PhotoTooLargeError):
        employee_service.update_photo(photo=b"x" * (MAX_PHOTO_BYTES + 1), photo_mime="image/png", **kwargs)


def test_update_photo_at_exact_limit_is_accepted(employee_service, staff):
    e = employee_service.update_photo(
        caller_role=Role.HR,
        caller_id="hr-1",
        employee_id=staff.employee_id,
        photo=b"x" * MAX_PHOTO_BYTES,
        photo_mime="image/png",
    )

    assert len(e.photo) == MAX_PHOTO_BYTES


def test_update_photo_size_checked_after_mime_alias(employee_service, staff):
    kwargs = dict(caller_role=Role.HR, caller_id="hr-1", employee_id=staff.employee_id)
    oversized = b"x" * (MAX_PHOTO_BYTES + 1)

    with pytest.raises(PhotoTooLargeError):
        employee_service.update_photo(photo=oversized, photo_mime=" Image/JPG ", **kwargs)
    with pytest.raises(PhotoTooLargeError):
        employee_service.update_photo(photo=oversized, photo_mime="image/bmp", **kwargs)
    assert not employee_service.get_me(caller_id=staff.employee_id).photo


def test_staff_cannot_update_photo_of_someone_else(employee_service, staff, supervisor):
    with pytest.raises(AuthorizationError):
        employee_service.update_photo(
            caller_role=Role.STAFF,
            caller_id=staff.employee_id,
            employee_id=supervisor.employee_id,
            photo=b"GIF89a",
            photo_mime="image/gif",
        )


def test_get_photo(employee_service, staff):
    with pytest.raises(NotFoundError):
        employee_service.get_photo(caller_role=Role.HR, caller_id="hr-1", employee_id=staff.employee_id)

    employee_service.update_photo(
        caller_role=Role.HR, caller_id="hr-1", employee_id=staff.employee_id, photo=b"GIF89a", photo_mime="image/gif"
    )

    assert employee_service.get_photo(
        caller_role=Role.STAFF, caller_id=staff.employee_id, employee_id=staff.employee_id
    ) == (b"GIF89a", "image/gif")


def test_delete_is_soft_and_disambiguated(employee_service, employees, staff):
    with pytest.raises(AuthorizationError):
        employee_service.delete(caller_role=Role.STAFF, employee_id=staff.employee_id)

    employee_service.delete(caller_role=Role.MANAGER, employee_id=staff.employee_id)

    assert staff.employee_id not in [e.employee_id for e in employee_service.list_all(caller_role=Role.HR)]
    assert employees.find_by_id(staff.employee_id) is None
    assert employees.rows[staff.employee_id].deleted_at is not None
    with pytest.raises(DeletedError):
        employee_service.delete(caller_role=Role.MANAGER, employee_id=staff.employee_id)
    with pytest.raises(NotFoundError):
        employee_service.delete(caller_role=Role.MANAGER, employee_id="nobody")


class _BrokenRepo:
    def find_by_email(self, email):
        raise RuntimeError("connection reset")

    def find_by_id(self, employee_id):
        raise OperationTimeout("database statement timed out")


def test_unexpected_repository_failure_is_wrapped(hasher, ids, clock):
    service = EmployeeService(_BrokenRepo(), hasher=hasher, ids=ids, clock=clock)

    with pytest.raises(CollaboratorError) as info:
        service.create(caller_role=Role.HR, profile=make_profile(), password="secret-pass")

    assert "find employee by email" in str(info.value)
    assert isinstance(info.value.__cause__, RuntimeError)


def test_repository_timeout_passes_through(hasher, ids, clock):
    service = EmployeeService(_BrokenRepo(), hasher=hasher, ids=ids, clock=clock)

    with pytest.raises(OperationTimeout):
        service.get_me(caller_id="e-1")


def _slowed(monkeypatch, repo, name, seconds=0.2):
    original = getattr(repo, name)

    def slow(*args, **kwargs):
        time.sleep(seconds)
        return original(*args, **kwargs)

    monkeypatch.setattr(repo, name, slow)


def test_read_overrunning_deadline_times_out(employee_service, employees, staff, monkeypatch):
    _slowed(monkeypatch, employees, "find_by_id")

    with pytest.raises(OperationTimeout):
        employee_service.get(caller_role=Role.HR, caller_id="hr-1", employee_id=staff.employee_id, timeout=0.05)


def test_write_overrunning_deadline_times_out(employee_service, employees, staff, monkeypatch):
    _slowed(monkeypatch, employees, "update")

    with pytest.raises(OperationTimeout):
        employee_service.update(
            caller_role=Role.HR, caller_id="hr-1", changes=_update(staff, city="Bogor"), timeout=0.05
        )


def test_slow_call_within_budget_succeeds(employee_service, employees, staff, monkeypatch):
    _slowed(monkeypatch, employees, "find_by_id", seconds=0.01)

    found = employee_service.get(caller_role=Role.HR, caller_id="hr-1", employee_id=staff.employee_id, timeout=5)

    assert found.employee_id == staff.employee_id
