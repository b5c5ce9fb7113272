# -*- coding: utf-8 -*-
from flask import Blueprint, jsonify, request

from ...acl import current_client
from ...models import BreakRule
from ...payloads import BreakRulesPayload
from ...security import manager_required
from ...timesheets import replace_break_rules

bp = Blueprint("break_rules", __name__, url_prefix="/api/client/break-rules")


@bp.get("")
@manager_required
def index():
    client = current_client()
    rows = BreakRule.query.filter_by(client_id=client.id).order_by(BreakRule.min_hours).all()
    return jsonify({"ok": True, "rules": [r.to_dict() for r in rows]})


@bp.route("", methods=["PUT", "POST"])
@manager_required
def replace():
    client = current_client()
    body = BreakRulesPayload.from_json(request.get_json(silent=True))
    rows, count = replace_break_rules(client, body.tiers, reset_overrides=body.reset_overrides)
    return jsonify({"ok": True, "rules": [r.to_dict() for r in rows], "recalculated": count})
