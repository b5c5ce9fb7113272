# -*- coding: utf-8 -*-
from __future__ import annotations

import logging

from flask import Blueprint, abort, current_app, jsonify, request
from sqlalchemy import func

from .engine.breaks import DEFAULT_TIERS
from .extensions import db
from .models import Client, Employee
from .payloads import ClientCreate, ClientPatch
from .security import admin_required, hash_pin
from .timesheets import install_rules

log = logging.getLogger(__name__)

bp = Blueprint("admin_mgmt", __name__, url_prefix="/api/admin/clients")


# ---------- helpers ----------
def subdomain_taken(subdomain: str) -> bool:
    return db.session.query(Client.query.filter_by(subdomain=subdomain).exists()).scalar()


def provision_client(body: ClientCreate) -> Client:
    """New tenant with the default break rules; commits."""
    c = Client(
        business_name=body.business_name,
        subdomain=body.subdomain,
        contact_email=body.contact_email,
        manager_pin=hash_pin(body.manager_pin or current_app.config["DEFAULT_MANAGER_PIN"]),
        status=body.status,
    )
    db.session.add(c)
    db.session.flush()
    install_rules(c, DEFAULT_TIERS)
    db.session.commit()
    log.info("client #%s provisioned at %s", c.id, c.subdomain)
    return c


def _employee_counts() -> dict[int, int]:
    rows = (db.session.query(Employee.client_id, func.count(Employee.id))
            .group_by(Employee.client_id).all())
    return {cid: n for cid, n in rows}


# ---------- clients ----------
@bp.get("")
@admin_required
def index():
    counts = _employee_counts()
    rows = Client.query.order_by(Client.created_at.desc(), Client.id.desc()).all()
    return jsonify({"ok": True, "clients": [c.to_dict(employee_count=counts.get(c.id, 0)) for c in rows]})


@bp.post("")
@admin_required
def create():
    body = ClientCreate.from_json(request.get_json(silent=True))
    if subdomain_taken(body.subdomain):
        abort(409, description="subdomain_exists")
    c = provision_client(body)
    return jsonify({"ok": True, "client": c.to_dict(employee_count=0)}), 201


@bp.get("/<int:client_id>")
@admin_required
def show(client_id: int):
    c = db.session.get(Client, client_id) or abort(404, description="client_not_found")
    return jsonify({"ok": True, "client": c.to_dict(employee_count=len(c.employees))})


@bp.patch("/<int:client_id>")
@admin_required
def update(client_id: int):
    c = db.session.get(Client, client_id) or abort(404, description="client_not_found")
    changes = ClientPatch.from_json(request.get_json(silent=True))
    if changes.business_name:
        c.business_name = changes.business_name
    if changes.contact_email:
        c.contact_email = changes.contact_email
    if changes.manager_pin:
        c.manager_pin = hash_pin(changes.manager_pin)
    if changes.status:
        c.status = changes.status
    db.session.commit()
    return jsonify({"ok": True, "client": c.to_dict(employee_count=len(c.employees))})


@bp.delete("/<int:client_id>")
@admin_required
def delete(client_id: int):
    c = db.session.get(Client, client_id) or abort(404, description="client_not_found")
    db.session.delete(c)
    db.session.commit()
    log.info("client #%s deleted", client_id)
    return jsonify({"ok": True})
