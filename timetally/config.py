import os
from pathlib import Path
from dotenv import load_dotenv
load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent  # <project>
INSTANCE_DIR = BASE_DIR / "instance"

def _default_sqlite_uri():
    return f"sqlite:///{(INSTANCE_DIR / 'timetally.db').as_posix()}"

def _csv(value: str) -> list[str]:
    return [p.strip().lower() for p in value.split(",") if p.strip()]

class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL") or _default_sqlite_uri()
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # host suffixes under which <subdomain>.<base> selects a tenant
    TENANT_BASE_DOMAINS = _csv(os.getenv("TENANT_BASE_DOMAINS", "timetally.local,timetally.com"))
    DEFAULT_MANAGER_PIN = os.getenv("DEFAULT_MANAGER_PIN", "0000")
    PIN_HASH_METHOD = os.getenv("PIN_HASH_METHOD", "scrypt")
    # statutory holiday calendar; empty HOLIDAY_COUNTRY turns it off
    HOLIDAY_COUNTRY = os.getenv("HOLIDAY_COUNTRY", "AU")
    HOLIDAY_SUBDIV = os.getenv("HOLIDAY_SUBDIV", "NSW")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"
    SESSION_COOKIE_SECURE = os.getenv("FLASK_ENV") == "production"

def ensure_instance(app):
    # Flask instance path
    os.makedirs(app.instance_path, exist_ok=True)
    INSTANCE_DIR.mkdir(parents=True, exist_ok=True)
