# -*- coding: utf-8 -*-
import logging
import re

from flask import Flask, jsonify
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import HTTPException

from .config import Config, ensure_instance
from .engine.breaks import BreakRuleConfigError
from .extensions import db, migrate, login_manager
from .payloads import ValidationError

# blueprints
from .auth import auth_bp
from .admin_mgmt import bp as admin_mgmt_bp
from .modules.timesheets import bp as timesheets_bp
from .modules.employees import bp as employees_bp
from .modules.break_rules import bp as break_rules_bp
from .modules.payroll import bp as payroll_bp
from .modules.edit_log import bp as edit_log_bp
from .modules.holidays import bp as holidays_bp

log = logging.getLogger(__name__)

_CODE_RE = re.compile(r"^[a-z][a-z0-9_]*$")


def _configure_logging(app: Flask) -> None:
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger("timetally").setLevel(level)
    app.logger.setLevel(level)


def _error_code(e: HTTPException) -> str:
    # abort(404, description="client_not_found") -> client_not_found
    desc = e.description or ""
    if _CODE_RE.match(desc):
        return desc
    return (e.name or "error").lower().replace(" ", "_")


def _register_errors(app: Flask) -> None:
    @app.errorhandler(HTTPException)
    def http_error(e):
        return jsonify({"ok": False, "error": _error_code(e)}), e.code

    @app.errorhandler(ValidationError)
    def validation_error(e):
        return jsonify(e.to_dict()), 400

    @app.errorhandler(BreakRuleConfigError)
    def break_rules_error(e):
        return jsonify({"ok": False, "error": "invalid_break_rules", "message": str(e)}), 400

    @app.errorhandler(IntegrityError)
    def integrity_error(e):
        # a concurrent insert beat the pre-check
        db.session.rollback()
        log.warning("integrity error: %s", e.orig)
        return jsonify({"ok": False, "error": "conflict"}), 409

    @app.errorhandler(Exception)
    def unexpected(e):
        db.session.rollback()
        log.exception("unhandled error")
        return jsonify({"ok": False, "error": "internal_error"}), 500


def create_app(config=None):
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if config:
        app.config.update(config)
    ensure_instance(app)
    _configure_logging(app)

    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({"ok": False, "error": "admin_access_required"}), 401

    _register_errors(app)

    # --- blueprints ---
    app.register_blueprint(auth_bp)
    app.register_blueprint(admin_mgmt_bp)
    app.register_blueprint(timesheets_bp)
    app.register_blueprint(employees_bp)
    app.register_blueprint(break_rules_bp)
    app.register_blueprint(payroll_bp)
    app.register_blueprint(edit_log_bp)
    app.register_blueprint(holidays_bp)

    @app.get("/healthz")
    def healthz():
        return jsonify({"ok": True})

    return app
