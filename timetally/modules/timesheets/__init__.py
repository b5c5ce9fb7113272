# -*- coding: utf-8 -*-
from __future__ import annotations

from datetime import date

from flask import Blueprint, abort, jsonify, request

from ...acl import current_client, current_employee, is_manager, scoped_employee_id, tenant_get_or_404
from ...models import Employee, Timesheet
from ...payloads import TimesheetPatch, TimesheetPayload, ValidationError, parse_date_range
from ...security import manager_required, member_required
from ...timesheets import delete_entry, save_entry, update_entry

bp = Blueprint("timesheets", __name__, url_prefix="/api/client/timesheets")


def _int_arg(name: str) -> int | None:
    raw = (request.args.get(name) or "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be an integer", field=name) from None


@bp.get("")
@member_required
def index():
    client = current_client()
    # employees only ever see their own entries
    employee_id = scoped_employee_id(client) or _int_arg("employeeId")

    q = Timesheet.query.filter(Timesheet.client_id == client.id)
    if employee_id is not None:
        q = q.filter(Timesheet.employee_id == employee_id)
    if request.args.get("startDate") or request.args.get("endDate"):
        start, end = parse_date_range(request.args, date.min, date.max)
        q = q.filter(Timesheet.work_date >= start, Timesheet.work_date <= end)
    rows = q.order_by(Timesheet.work_date.desc(), Timesheet.id.desc()).all()
    return jsonify({"ok": True, "timesheets": [t.to_dict() for t in rows]})


@bp.post("")
@member_required
def save():
    client = current_client()
    payload = TimesheetPayload.from_json(request.get_json(silent=True))

    if is_manager(client):
        if payload.employee_id is None:
            raise ValidationError("employee_id is required", field="employee_id")
        employee = tenant_get_or_404(Employee, payload.employee_id, client, "employee_not_found")
        edited_by = "manager"
    else:
        employee = current_employee(client)
        if payload.employee_id not in (None, employee.id):
            abort(403, description="forbidden")
        edited_by = "employee"

    ts, created = save_entry(employee, payload, edited_by)
    return jsonify({"ok": True, "timesheet": ts.to_dict(), "created": created}), 201 if created else 200


@bp.patch("/<int:ts_id>")
@manager_required
def update(ts_id: int):
    client = current_client()
    ts = tenant_get_or_404(Timesheet, ts_id, client, "timesheet_not_found")
    patch = TimesheetPatch.from_json(request.get_json(silent=True))
    update_entry(ts, patch, "manager")
    return jsonify({"ok": True, "timesheet": ts.to_dict()})


@bp.delete("/<int:ts_id>")
@manager_required
def delete(ts_id: int):
    client = current_client()
    ts = tenant_get_or_404(Timesheet, ts_id, client, "timesheet_not_found")
    delete_entry(ts, "manager")
    return jsonify({"ok": True, "action": "delete"})

