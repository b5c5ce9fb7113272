# -*- coding: utf-8 -*-
from __future__ import annotations

from flask import abort, current_app, g, request, session

from .extensions import db
from .models import Client, Employee

RESERVED_SUBDOMAINS = {"admin", "api", "www"}

# ---------- tenant by host ----------
def subdomain_from_host(host: str, base_domains) -> str | None:
    """``acme.timetally.com`` -> ``acme``; bare, ``www`` and unknown hosts -> None.

    ``admin`` is returned as-is so callers can route it to the admin portal.
    """
    host = (host or "").split(":", 1)[0].strip().lower().rstrip(".")
    for base in base_domains:
        if host == base or not host.endswith("." + base):
            continue
        sub = host[: -len(base) - 1]
        if not sub or "." in sub or sub == "www":
            return None
        return sub
    return None


def request_subdomain() -> str | None:
    explicit = (request.headers.get("X-Subdomain") or "").strip().lower()
    if explicit:
        return explicit
    return subdomain_from_host(request.host, current_app.config.get("TENANT_BASE_DOMAINS", ()))


def current_client() -> Client:
    """Tenant of this request; 400 without a subdomain, 404 if unknown."""
    if "client" in g:
        return g.client
    sub = request_subdomain()
    if not sub or sub in RESERVED_SUBDOMAINS:
        abort(400, description="invalid_subdomain")
    client = Client.query.filter_by(subdomain=sub).first()
    if client is None:
        abort(404, description="client_not_found")
    g.client = client
    return client


# ---------- sessions, one slot per tenant ----------
_MANAGER_KEY = "manager_client_id"
_EMPLOYEE_KEY = "employee"  # {"client_id": .., "employee_id": ..}

def login_manager_session(client: Client) -> None:
    session[_MANAGER_KEY] = int(client.id)
    session.permanent = True


def logout_manager_session() -> None:
    session.pop(_MANAGER_KEY, None)


def is_manager(client: Client) -> bool:
    try:
        return int(session.get(_MANAGER_KEY) or 0) == client.id
    except (TypeError, ValueError):
        return False


def login_employee_session(employee: Employee) -> None:
    session[_EMPLOYEE_KEY] = {"client_id": int(employee.client_id), "employee_id": int(employee.id)}
    session.permanent = True


def logout_employee_session() -> None:
    session.pop(_EMPLOYEE_KEY, None)


def current_employee(client: Client) -> Employee | None:
    """Signed-in employee of ``client``; sessions from another tenant or for a
    deactivated employee are ignored."""
    data = session.get(_EMPLOYEE_KEY) or {}
    if data.get("client_id") != client.id:
        return None
    emp = db.session.get(Employee, data.get("employee_id") or 0)
    if emp is None or emp.client_id != client.id or not emp.is_active:
        return None
    return emp


def scoped_employee_id(client: Client) -> int | None:
    """None for the manager (all employees), else the signed-in employee's id."""
    if is_manager(client):
        return None
    emp = current_employee(client)
    if emp is None:
        abort(401, description="not_authenticated")
    return emp.id


def tenant_get_or_404(model, obj_id: int, client: Client, code: str):
    """Row of ``model`` owned by ``client``; other tenants' rows look missing."""
    obj = db.session.get(model, obj_id)
    if obj is None or obj.client_id != client.id:
        abort(404, description=code)
    return obj
