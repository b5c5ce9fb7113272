# -*- coding: utf-8 -*-
"""Demo tenant for local runs: one admin, one client, three employees and a
fortnight of shifts."""
from __future__ import annotations

import logging
import random
from datetime import date, time, timedelta
from decimal import Decimal

from .admin_mgmt import provision_client, subdomain_taken
from .engine.timeutil import week_bounds
from .extensions import db
from .models import AdminUser, Client, Employee
from .payloads import ClientCreate, TimesheetPayload
from .security import hash_pin, pin_digest
from .timesheets import replace_break_rules, save_entry

log = logging.getLogger(__name__)

DEMO_EMPLOYEES = [
    # first, last, pin, weekday, saturday, sunday
    ("Sarah", "Johnson", "1111", "28.50", "35.60", "42.75"),
    ("Mike", "Chen", "2222", "26.00", "32.50", "39.00"),
    ("Emma", "Wilson", "3333", "30.00", "37.50", "45.00"),
]
DEMO_SHIFTS = [(time(9, 0), time(17, 0)), (time(10, 0), time(14, 30)),
               (time(7, 30), time(16, 0)), (time(12, 0), time(20, 0))]


def ensure_admin(email: str, password: str) -> AdminUser:
    u = AdminUser.query.filter_by(email=email.lower()).first()
    if u is None:
        u = AdminUser(email=email.lower())
        db.session.add(u)
    u.set_password(password)
    db.session.commit()
    return u


def add_employee(client: Client, first: str, last: str, pin: str,
                 weekday, saturday, sunday, holiday=None, **extra) -> Employee:
    weekday = Decimal(str(weekday))
    e = Employee(
        client_id=client.id,
        first_name=first,
        last_name=last,
        pin_hash=hash_pin(pin),
        pin_digest=pin_digest(client.id, pin),
        weekday_rate=weekday,
        saturday_rate=Decimal(str(saturday)),
        sunday_rate=Decimal(str(sunday)),
        public_holiday_rate=Decimal(str(holiday)) if holiday is not None else weekday * 2,
        **extra,
    )
    db.session.add(e)
    db.session.commit()
    return e


def seed_demo(subdomain: str = "demo", days: int = 14, rng: random.Random | None = None) -> Client:
    rng = rng or random.Random(7)
    if subdomain_taken(subdomain):
        raise ValueError(f"subdomain {subdomain!r} already exists")

    client = provision_client(ClientCreate(
        business_name="Demo Cafe",
        contact_email="owner@demo.example",
        subdomain=subdomain,
        manager_pin="1234",
    ))
    replace_break_rules(client, [(0, 0), (5, 30), (7, 60)])

    start = week_bounds(date.today())[0] - timedelta(days=days - 7)
    for first, last, pin, wd, sat, sun in DEMO_EMPLOYEES:
        emp = add_employee(client, first, last, pin, wd, sat, sun)
        for i in range(days):
            d = start + timedelta(days=i)
            if rng.random() < 0.35:
                continue
            s, e = rng.choice(DEMO_SHIFTS)
            save_entry(emp, TimesheetPayload(work_date=d, start_time=s, end_time=e), "employee")
    log.info("demo tenant %s seeded", subdomain)
    return client
