# -*- coding: utf-8 -*-
import hashlib
import hmac
from functools import wraps

from flask import abort, current_app
from flask_login import current_user
from werkzeug.security import check_password_hash, generate_password_hash

from .acl import current_client, current_employee, is_manager


# ---------- PIN hashing ----------
def hash_pin(pin: str) -> str:
    return generate_password_hash(pin, method=current_app.config.get("PIN_HASH_METHOD", "scrypt"))


def verify_pin(pin: str, pin_hash: str) -> bool:
    if not pin or not pin_hash:
        return False
    return check_password_hash(pin_hash, pin)


def pin_digest(client_id: int, pin: str) -> str:
    """Deterministic keyed digest of an employee PIN.

    Salted hashes cannot be indexed, so lookup at the keypad and the
    per-client uniqueness constraint go through this value instead.
    """
    key = current_app.config["SECRET_KEY"].encode()
    return hmac.new(key, f"{client_id}:{pin}".encode(), hashlib.sha256).hexdigest()


# ---------- guards ----------
def manager_required(f):
    """Manager session for the tenant of this request, else 401/403."""
    @wraps(f)
    def wrapper(*args, **kwargs):
        client = current_client()
        if not is_manager(client):
            abort(401, description="manager_access_required")
        if not client.is_active:
            abort(403, description="client_inactive")
        return f(*args, **kwargs)
    return wrapper


def member_required(f):
    """Either the manager or a signed-in active employee of this tenant."""
    @wraps(f)
    def wrapper(*args, **kwargs):
        client = current_client()
        if not client.is_active:
            abort(403, description="client_inactive")
        if not is_manager(client) and current_employee(client) is None:
            abort(401, description="not_authenticated")
        return f(*args, **kwargs)
    return wrapper


def admin_required(f):
    @wraps(f)
    def wrapper(*args, **kwargs):
        if not current_user.is_authenticated:
            abort(401, description="admin_access_required")
        return f(*args, **kwargs)
    return wrapper
