# -*- coding: utf-8 -*-
from datetime import date

from flask import Blueprint, jsonify, request

from ...acl import current_client
from ...models import TimesheetEditLog
from ...payloads import ValidationError, parse_date_range
from ...security import manager_required

bp = Blueprint("edit_log", __name__, url_prefix="/api/client/timesheet-edit-log")

DEFAULT_LIMIT = 100
MAX_LIMIT = 500


@bp.get("")
@manager_required
def index():
    client = current_client()
    try:
        limit = min(int(request.args.get("limit") or DEFAULT_LIMIT), MAX_LIMIT)
        employee_id = int(request.args["employeeId"]) if request.args.get("employeeId") else None
    except ValueError:
        raise ValidationError("limit and employeeId must be integers") from None
    if limit < 1:
        raise ValidationError("limit must be positive", field="limit")

    q = TimesheetEditLog.query.filter_by(client_id=client.id)
    if request.args.get("startDate") or request.args.get("endDate"):
        start, end = parse_date_range(request.args, date.min, date.max)
        q = q.filter(TimesheetEditLog.work_date >= start, TimesheetEditLog.work_date <= end)
    if employee_id is not None:
        q = q.filter_by(employee_id=employee_id)
    rows = q.order_by(TimesheetEditLog.edited_at.desc(), TimesheetEditLog.id.desc()).limit(limit).all()
    return jsonify({"ok": True, "logs": [r.to_dict() for r in rows]})
