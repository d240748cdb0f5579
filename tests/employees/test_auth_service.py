from dataclasses import replace

import pytest

from employee_service.core.enums import EmployeeStatus, Role
from employee_service.core.exceptions import AuthenticationError, TokenError, ValidationError
from employee_service.employees.model import EmployeeUpdate


def test_login_returns_token_with_claims(auth_service, signer, staff):
    token = auth_service.login("  BUDI@example.com ", "secret-pass")

    claims = signer.parse(token)
    assert token
    assert claims.user_id == staff.employee_id
    assert claims.email == "budi@example.com"
    assert claims.role is Role.STAFF


@pytest.mark.parametrize("email,password", [("", "secret-pass"), ("budi@example.com", ""), ("   ", "x")])
def test_login_requires_email_and_password(auth_service, email, password):
    with pytest.raises(ValidationError):
        auth_service.login(email, password)


def test_login_wrong_password_and_unknown_email_look_the_same(auth_service, staff):
    with pytest.raises(AuthenticationError) as wrong:
        auth_service.login(staff.email, "not-the-password")
    with pytest.raises(AuthenticationError) as unknown:
        auth_service.login("ghost@example.com", "secret-pass")

    assert str(wrong.value) == str(unknown.value) == "invalid email or password"


def test_login_rejects_inactive_employee(auth_service, employee_service, staff):
    employee_service.update(
        caller_role=Role.HR,
        caller_id="hr-1",
        changes=EmployeeUpdate(
            employee_id=staff.employee_id, profile=replace(staff.profile, status=EmployeeStatus.SUSPENDED)
        ),
    )

    with pytest.raises(AuthenticationError):
        auth_service.login(staff.email, "secret-pass")


def test_login_rejects_deleted_employee(auth_service, employee_service, staff):
    employee_service.delete(caller_role=Role.HR, employee_id=staff.employee_id)

    with pytest.raises(AuthenticationError):
        auth_service.login(staff.email, "secret-pass")


def test_authenticate_round_trip(auth_service, staff):
    claims = auth_service.authenticate(auth_service.login(staff.email, "secret-pass"))

    assert claims.user_id == staff.employee_id


def test_authenticate_rejects_missing_and_garbage_tokens(auth_service):
    with pytest.raises(AuthenticationError):
        auth_service.authenticate("")
    with pytest.raises(TokenError):
        auth_service.authenticate("not.a.jwt")
