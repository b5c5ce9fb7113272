# -*- coding: utf-8 -*-
from __future__ import annotations

from datetime import date

from flask import Blueprint, Response, jsonify, request
from sqlalchemy import or_

from ...acl import current_client, tenant_get_or_404
from ...engine import aggregate, client_payroll, daily_breakdown, totals, week_bounds
from ...engine.export import export_filename, payroll_csv
from ...models import Employee, Timesheet, holiday_dates
from ...payloads import parse_date_range
from ...security import manager_required

bp = Blueprint("payroll", __name__, url_prefix="/api/client/payroll")


def _period() -> tuple[date, date]:
    return parse_date_range(request.args, *week_bounds(date.today()))


def _timesheets(client_id: int, start: date, end: date, employee_id: int | None = None):
    q = Timesheet.query.filter(Timesheet.client_id == client_id,
                               Timesheet.work_date >= start, Timesheet.work_date <= end)
    if employee_id is not None:
        q = q.filter(Timesheet.employee_id == employee_id)
    return q.all()


def _period_rows(client, start: date, end: date):
    """Active employees plus anyone with hours in the period."""
    sheets = _timesheets(client.id, start, end)
    with_hours = {t.employee_id for t in sheets}
    employees = (Employee.query
                 .filter(Employee.client_id == client.id)
                 .filter(or_(Employee.status == "active", Employee.id.in_(sorted(with_hours))))
                 .all())
    return client_payroll(employees, sheets, holiday_dates(client.id, start, end))


@bp.get("/summary")
@manager_required
def summary():
    client = current_client()
    start, end = _period()
    rows = _period_rows(client, start, end)
    return jsonify({
        "ok": True,
        "start": start.isoformat(),
        "end": end.isoformat(),
        "employees": [{"employee": r.employee.to_dict(), "summary": r.summary.to_dict()} for r in rows],
        "totals": totals(rows).to_dict(),
    })


@bp.get("/employees/<int:employee_id>")
@manager_required
def employee_detail(employee_id: int):
    client = current_client()
    emp = tenant_get_or_404(Employee, employee_id, client, "employee_not_found")
    start, end = _period()
    sheets = _timesheets(client.id, start, end, emp.id)
    holidays = holiday_dates(client.id, start, end)
    return jsonify({
        "ok": True,
        "start": start.isoformat(),
        "end": end.isoformat(),
        "employee": emp.to_dict(),
        "summary": aggregate(sheets, emp, holidays).to_dict(),
        "days": [d.to_dict() for d in daily_breakdown(sheets, emp, start, end, holidays)],
    })


@bp.get("/export.csv")
@manager_required
def export_csv():
    client = current_client()
    start, end = _period()
    body = payroll_csv(_period_rows(client, start, end), week_ending=end)
    return Response(
        body,
        mimetype="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{export_filename(end)}"'},
    )
