# -*- coding: utf-8 -*-
import logging

from flask import Blueprint, abort, jsonify, request

from ...acl import current_client, tenant_get_or_404
from ...extensions import db
from ...models import EMPLOYEE_STATUSES, Employee
from ...payloads import EmployeeCreate, EmployeePatch
from ...security import hash_pin, manager_required, pin_digest
from ...timesheets import recompute_employee

log = logging.getLogger(__name__)

bp = Blueprint("employees", __name__, url_prefix="/api/client/employees")


def _pin_taken(client_id: int, digest: str, exclude_id: int | None = None) -> bool:
    q = Employee.query.filter_by(client_id=client_id, pin_digest=digest)
    if exclude_id is not None:
        q = q.filter(Employee.id != exclude_id)
    return db.session.query(q.exists()).scalar()


@bp.get("")
@manager_required
def index():
    client = current_client()
    q = Employee.query.filter_by(client_id=client.id)
    status = request.args.get("status")
    if status in EMPLOYEE_STATUSES:
        q = q.filter_by(status=status)
    rows = q.order_by(Employee.first_name, Employee.last_name, Employee.id).all()
    return jsonify({"ok": True, "employees": [e.to_dict() for e in rows]})


@bp.post("")
@manager_required
def create():
    client = current_client()
    body = EmployeeCreate.from_json(request.get_json(silent=True))
    digest = pin_digest(client.id, body.pin)
    if _pin_taken(client.id, digest):
        abort(400, description="pin_in_use")

    e = Employee(
        client_id=client.id,
        first_name=body.first_name,
        last_name=body.last_name,
        pin_hash=hash_pin(body.pin),
        pin_digest=digest,
        weekday_rate=body.weekday_rate,
        saturday_rate=body.saturday_rate,
        sunday_rate=body.sunday_rate,
        public_holiday_rate=body.public_holiday_rate,
        pay_type=body.pay_type,
        apply_break_rules=body.apply_break_rules,
    )
    db.session.add(e)
    db.session.commit()
    log.info("client #%s: employee #%s created", client.id, e.id)
    return jsonify({"ok": True, "employee": e.to_dict()}), 201


@bp.get("/<int:employee_id>")
@manager_required
def show(employee_id: int):
    e = tenant_get_or_404(Employee, employee_id, current_client(), "employee_not_found")
    return jsonify({"ok": True, "employee": e.to_dict()})


@bp.route("/<int:employee_id>", methods=["PUT", "PATCH"])
@manager_required
def update(employee_id: int):
    client = current_client()
    e = tenant_get_or_404(Employee, employee_id, client, "employee_not_found")
    changes = EmployeePatch.from_json(request.get_json(silent=True)).changes()

    pin = changes.pop("pin", None)
    if pin is not None:
        digest = pin_digest(client.id, pin)
        if _pin_taken(client.id, digest, exclude_id=e.id):
            abort(400, description="pin_in_use")
        e.pin_hash = hash_pin(pin)
        e.pin_digest = digest

    toggled = "apply_break_rules" in changes and changes["apply_break_rules"] != bool(e.apply_break_rules)
    for name, value in changes.items():
        setattr(e, name, value)
    if toggled:
        recompute_employee(e)
    db.session.commit()
    return jsonify({"ok": True, "employee": e.to_dict()})


@bp.delete("/<int:employee_id>")
@manager_required
def delete(employee_id: int):
    client = current_client()
    e = tenant_get_or_404(Employee, employee_id, client, "employee_not_found")
    db.session.delete(e)
    db.session.commit()
    log.info("client #%s: employee #%s deleted", client.id, employee_id)
    return jsonify({"ok": True})
