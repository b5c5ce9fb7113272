"""
Create any tables declared by the models that are missing from the database,
leaving existing data untouched.

Run:
  python scripts/ensure_schema.py
"""

from __future__ import annotations

import sys
from pathlib import Path

from sqlalchemy import inspect

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from timetally import create_app
from timetally.extensions import db


def main() -> int:
    app = create_app()
    with app.app_context():
        print(f"[ensure] SQLALCHEMY_DATABASE_URI = {app.config.get('SQLALCHEMY_DATABASE_URI', '')}")
        before = set(inspect(db.engine).get_table_names())
        print(f"[ensure] tables before: {len(before)}")

        db.create_all()

        created = sorted(set(inspect(db.engine).get_table_names()) - before)
        if created:
            print(f"[ensure] created: {', '.join(created)}")
        else:
            print("[ensure] schema already complete")
        return 0


if __name__ == "__main__":
    sys.exit(main())
