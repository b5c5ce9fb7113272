# -*- coding: utf-8 -*-
from datetime import date

from flask import Blueprint, abort, jsonify, request
from sqlalchemy import extract

from ...acl import current_client, tenant_get_or_404
from ...extensions import db
from ...models import PublicHoliday, calendar_holidays
from ...payloads import HolidayPayload
from ...security import manager_required

bp = Blueprint("holidays", __name__, url_prefix="/api/client/holidays")


@bp.get("")
@manager_required
def index():
    client = current_client()
    q = PublicHoliday.query.filter_by(client_id=client.id)
    year = request.args.get("year", type=int)
    if year is not None and not 1900 <= year <= 2100:
        abort(400, description="invalid_year")
    if year:
        q = q.filter(extract("year", PublicHoliday.holiday_date) == year)
    rows = q.order_by(PublicHoliday.holiday_date).all()
    # statutory days are listed for one year: the requested one or this one
    y = year or date.today().year
    statutory = calendar_holidays(date(y, 1, 1), date(y, 12, 31))
    return jsonify({
        "ok": True,
        "holidays": [h.to_dict() for h in rows],
        "calendar": [{"date": d.isoformat(), "name": name} for d, name in statutory.items()],
    })


@bp.post("")
@manager_required
def create():
    client = current_client()
    body = HolidayPayload.from_json(request.get_json(silent=True))
    if PublicHoliday.query.filter_by(client_id=client.id, holiday_date=body.holiday_date).first():
        abort(409, description="holiday_exists")
    h = PublicHoliday(client_id=client.id, holiday_date=body.holiday_date, name=body.name)
    db.session.add(h)
    db.session.commit()
    return jsonify({"ok": True, "holiday": h.to_dict()}), 201


@bp.delete("/<int:holiday_id>")
@manager_required
def delete(holiday_id: int):
    h = tenant_get_or_404(PublicHoliday, holiday_id, current_client(), "holiday_not_found")
    db.session.delete(h)
    db.session.commit()
    return jsonify({"ok": True})
