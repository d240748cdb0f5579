from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, Optional, Tuple

from flask import Flask, Response, g, request

from ..common.datetime_utils import parse_iso_date
from ..common.http import respond, token_required
from ..core.exceptions import ValidationError
from ..container import Container
from .model import Employee, EmployeeProfile, EmployeeUpdate

PROFILE_FIELDS = (
    "name", "email", "role", "address", "district", "city", "province", "phone",
    "position", "salary", "status", "birth_date",
)


def employee_to_dict(e: Employee) -> Dict[str, Any]:
    return {
        "id": e.employee_id,
        "name": e.name,
        "email": e.email,
        "role": e.role.value,
        "position": e.position,
        "salary": e.salary,
        "status": e.status.value,
        "birth_date": e.birth_date.isoformat() if e.birth_date else None,
        "address": e.address,
        "district": e.district,
        "city": e.city,
        "province": e.province,
        "phone": e.phone,
        "has_photo": bool(e.photo),
        "photo_mime": e.photo_mime,
        "created_at": e.created_at.isoformat() if e.created_at else None,
        "updated_at": e.updated_at.isoformat() if e.updated_at else None,
    }


def _payload() -> Dict[str, Any]:
    """Form fields for multipart requests, the JSON object otherwise."""
    if request.mimetype == "multipart/form-data":
        return request.form.to_dict()
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("request body must be a JSON object")
    return data


def _uploaded_photo() -> Tuple[Optional[bytes], Optional[str]]:
    upload = request.files.get("photo")
    if upload is None or not upload.filename:
        return None, None
    return upload.read(), upload.mimetype


def _salary(value) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        raise ValidationError("salary must be an integer") from None


def _profile_kwargs(data: Dict[str, Any], *, partial: bool = False) -> Dict[str, Any]:
    kwargs = {k: data[k] for k in PROFILE_FIELDS if k in data}
    if "salary" in kwargs:
        if kwargs["salary"] not in (None, ""):
            kwargs["salary"] = _salary(kwargs["salary"])
        elif partial:
            # blank salary on update means "not supplied"
            del kwargs["salary"]
        else:
            kwargs["salary"] = 0
    if "birth_date" in kwargs:
        raw = kwargs["birth_date"]
        try:
            kwargs["birth_date"] = parse_iso_date(str(raw)) if raw else None
        except ValueError:
            raise ValidationError("birth_date must be YYYY-MM-DD") from None
    for k in ("name", "email", "address", "district", "city", "province", "phone", "position"):
        if k in kwargs and kwargs[k] is not None:
            kwargs[k] = str(kwargs[k])
    return kwargs


def register(app: Flask, container: Container) -> None:
    @app.route("/auth/login", methods=["POST"], endpoint="login")
    def login():
        data = _payload()
        token = container.auth_service.login(str(data.get("email") or ""), str(data.get("password") or ""))
        return respond({"token": token}, "login successful")

    @app.route("/employees/me", methods=["GET"], endpoint="employee_me")
    @token_required
    def employee_me():
        employee = container.employee_service.get_me(caller_id=g.claims.user_id)
        return respond(employee_to_dict(employee))

    @app.route("/employees", methods=["POST"], endpoint="create_employee")
    @token_required
    def create_employee():
        data = _payload()
        kwargs = _profile_kwargs(data)
        for k in ("name", "email", "role", "address", "district", "city", "province", "phone"):
            kwargs.setdefault(k, "")
        photo, photo_mime = _uploaded_photo()
        employee = container.employee_service.create(
            caller_role=g.claims.role,
            profile=EmployeeProfile(**kwargs),
            password=str(data.get("password") or ""),
            employee_id=str(data["id"]) if data.get("id") else None,
            photo=photo,
            photo_mime=photo_mime,
        )
        return respond(employee_to_dict(employee), "employee created", 201)

    @app.route("/employees", methods=["GET"], endpoint="list_employees")
    @token_required
    def list_employees():
        employees = container.employee_service.list_all(caller_role=g.claims.role)
        return respond([employee_to_dict(e) for e in employees])

    @app.route("/employees/<employee_id>", methods=["GET"], endpoint="get_employee")
    @token_required
    def get_employee(employee_id: str):
        employee = container.employee_service.get(
            caller_role=g.claims.role, caller_id=g.claims.user_id, employee_id=employee_id
        )
        return respond(employee_to_dict(employee))

    @app.route("/employees/<employee_id>", methods=["PUT"], endpoint="update_employee")
    @token_required
    def update_employee(employee_id: str):
        data = _payload()
        current = container.employee_service.get(
            caller_role=g.claims.role, caller_id=g.claims.user_id, employee_id=employee_id
        )
        # Fields left out of the body keep their stored values.
        profile = replace(current.profile, **_profile_kwargs(data, partial=True))

        photo, photo_mime = _uploaded_photo()
        if photo is None and str(data.get("remove_photo", "")).lower() in ("1", "true"):
            photo = b""

        changes = EmployeeUpdate(
            employee_id=employee_id,
            profile=profile,
            password=str(data["password"]) if data.get("password") else None,
            photo=photo,
            photo_mime=photo_mime,
        )
        employee = container.employee_service.update(
            caller_role=g.claims.role, caller_id=g.claims.user_id, changes=changes
        )
        return respond(employee_to_dict(employee), "employee updated")

    @app.route("/employees/<employee_id>", methods=["DELETE"], endpoint="delete_employee")
    @token_required
    def delete_employee(employee_id: str):
        container.employee_service.delete(caller_role=g.claims.role, employee_id=employee_id)
        return respond(message="employee deleted")

    @app.route("/employees/<employee_id>/photo", methods=["PUT"], endpoint="update_employee_photo")
    @token_required
    def update_employee_photo(employee_id: str):
        photo, photo_mime = _uploaded_photo()
        employee = container.employee_service.update_photo(
            caller_role=g.claims.role,
            caller_id=g.claims.user_id,
            employee_id=employee_id,
            photo=photo or b"",
            photo_mime=photo_mime or "",
        )
        return respond(employee_to_dict(employee), "photo updated")

    @app.route("/employees/<employee_id>/photo", methods=["GET"], endpoint="get_employee_photo")
    @token_required
    def get_employee_photo(employee_id: str):
        photo, mime = container.employee_service.get_photo(
            caller_role=g.claims.role, caller_id=g.claims.user_id, employee_id=employee_id
        )
        return Response(photo, mimetype=mime)
