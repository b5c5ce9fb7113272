# -*- coding: utf-8 -*-
import logging

from flask import Blueprint, abort, jsonify, request
from flask_login import current_user, login_user, logout_user

from ..acl import (
    current_client, current_employee, is_manager,
    login_employee_session, login_manager_session,
    logout_employee_session, logout_manager_session,
)
from ..models import AdminUser, Employee
from ..payloads import PIN_RE
from ..security import admin_required, member_required, pin_digest, verify_pin

log = logging.getLogger(__name__)

auth_bp = Blueprint("auth", __name__)


def _pin_from_body() -> str:
    pin = str((request.get_json(silent=True) or {}).get("pin") or "").strip()
    if not PIN_RE.match(pin):
        abort(400, description="invalid_pin")
    return pin


# ---------- admin portal ----------
@auth_bp.post("/api/admin/auth")
def admin_login():
    data = request.get_json(silent=True) or {}
    email = str(data.get("email") or "").strip().lower()
    password = str(data.get("password") or "")
    u = AdminUser.query.filter_by(email=email).first()
    if not u or not u.check_password(password):
        log.info("admin login failed for %r", email)
        abort(401, description="invalid_credentials")
    login_user(u, remember=False)
    return jsonify({"ok": True, "admin": {"id": u.id, "email": u.email}})


@auth_bp.get("/api/admin/auth")
@admin_required
def admin_me():
    return jsonify({"ok": True, "admin": {"id": current_user.id, "email": current_user.email}})


@auth_bp.delete("/api/admin/auth")
def admin_logout():
    logout_user()
    return jsonify({"ok": True})


# ---------- manager ----------
@auth_bp.post("/api/client/auth/manager")
def manager_login():
    client = current_client()
    pin = _pin_from_body()
    if not verify_pin(pin, client.manager_pin):
        log.info("manager login failed for %s", client.subdomain)
        abort(401, description="invalid_pin")
    if not client.is_active:
        abort(403, description="client_inactive")
    login_manager_session(client)
    return jsonify({"ok": True, "client": client.to_dict()})


@auth_bp.delete("/api/client/auth/manager")
def manager_logout():
    logout_manager_session()
    return jsonify({"ok": True})


# ---------- employee ----------
@auth_bp.post("/api/client/auth/employee")
def employee_login():
    client = current_client()
    pin = _pin_from_body()
    emp = Employee.query.filter_by(client_id=client.id, pin_digest=pin_digest(client.id, pin)).first()
    if emp is None or not verify_pin(pin, emp.pin_hash):
        log.info("employee login failed for %s", client.subdomain)
        abort(401, description="invalid_pin")
    if not client.is_active:
        abort(403, description="client_inactive")
    if not emp.is_active:
        abort(403, description="employee_inactive")
    login_employee_session(emp)
    return jsonify({"ok": True, "employee": emp.to_dict()})


@auth_bp.delete("/api/client/auth/employee")
def employee_logout():
    logout_employee_session()
    return jsonify({"ok": True})


@auth_bp.get("/api/client/auth/employee/me")
@member_required
def employee_me():
    client = current_client()
    emp = current_employee(client)
    if emp is None:
        # manager session without an employee signed in
        abort(401, description="not_authenticated")
    return jsonify({"ok": True, "employee": emp.to_dict(), "client": client.to_dict(),
                    "manager": is_manager(client)})
