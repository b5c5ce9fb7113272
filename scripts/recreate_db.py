# -*- coding: utf-8 -*-
"""
Full reset of the SQLite database plus a demo tenant.

Run from the project root:
  python scripts/recreate_db.py
"""

from __future__ import annotations
import os
import sys
from pathlib import Path
from typing import Optional

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

print(f"[recreate] ROOT={ROOT}")
from timetally import create_app
from timetally.extensions import db
from timetally.seed import ensure_admin, seed_demo


def _db_path_from_uri(uri: str) -> Optional[Path]:
    if uri.startswith("sqlite:///"):
        return Path(uri.replace("sqlite:///", "")).resolve()
    return None


def main() -> int:
    app = create_app()
    with app.app_context():
        uri = app.config["SQLALCHEMY_DATABASE_URI"]
        print(f"[recreate] SQLALCHEMY_DATABASE_URI = {uri}")
        path = _db_path_from_uri(uri)
        if path is None:
            print("[recreate] not SQLite: dropping tables instead of the file")
            db.drop_all()
        elif path.exists():
            db.engine.dispose()
            path.unlink()
            print(f"[recreate] removed {path}")

        db.create_all()
        print("[recreate] tables created")

        email = os.getenv("ADMIN_EMAIL", "admin@timetally.local")
        ensure_admin(email, os.getenv("ADMIN_PASSWORD", "admin"))
        print(f"[recreate] admin {email}")

        client = seed_demo()
        print(f"[recreate] demo tenant '{client.subdomain}' (manager PIN 1234, employees 1111/2222/3333)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
