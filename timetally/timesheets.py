# -*- coding: utf-8 -*-
"""Writes that touch timesheet hours.

Every path that changes a shift's times, its override or the break rules it
is measured against goes through here, so ``break_minutes`` and
``total_hours`` are always derived from the client's current rules.
"""
from __future__ import annotations

import logging
from typing import Iterable

from .engine.breaks import BreakSchedule, BreakTier, validate_tiers
from .extensions import db
from .models import BreakRule, Client, Employee, Timesheet, TimesheetEditLog
from .payloads import UNSET, TimesheetPatch, TimesheetPayload

log = logging.getLogger(__name__)


def schedule_for(client_id: int) -> BreakSchedule:
    rows = BreakRule.query.filter_by(client_id=client_id).order_by(BreakRule.min_hours).all()
    return BreakSchedule(rows)


def _log_edit(ts: Timesheet, action: str, edited_by: str, prev: tuple, new: tuple) -> TimesheetEditLog:
    emp = ts.employee
    entry = TimesheetEditLog(
        client_id=ts.client_id,
        timesheet_id=ts.id,
        employee_id=ts.employee_id,
        employee_name=emp.full_name if emp else "",
        work_date=ts.work_date,
        action=action,
        edited_by=edited_by,
        previous_start_time=prev[0],
        previous_end_time=prev[1],
        new_start_time=new[0],
        new_end_time=new[1],
    )
    db.session.add(entry)
    return entry


def _recalculate(ts: Timesheet, employee: Employee, schedule: BreakSchedule):
    res = ts.recalculate(schedule, apply_rules=bool(employee.apply_break_rules))
    if res.issues:
        log.warning("timesheet #%s (%s): %s", ts.id, ts.work_date,
                    ", ".join(i.value for i in res.issues))
    return res


# ---------- single entries ----------
def save_entry(employee: Employee, payload: TimesheetPayload, edited_by: str) -> tuple[Timesheet, bool]:
    """Create or replace the entry for (employee, date). Returns (entry, created).

    Replacing an entry whose times change is recorded in the edit log.
    """
    ts = Timesheet.query.filter_by(employee_id=employee.id, work_date=payload.work_date).first()
    created = ts is None
    if created:
        ts = Timesheet(employee_id=employee.id, client_id=employee.client_id, work_date=payload.work_date)
        db.session.add(ts)
        prev = (None, None)
    else:
        prev = (ts.start_time, ts.end_time)

    ts.start_time, ts.end_time = payload.start_time, payload.end_time
    ts.break_override = payload.break_override
    if payload.notes is not None:
        ts.notes = payload.notes
    _recalculate(ts, employee, schedule_for(employee.client_id))
    db.session.flush()

    new = (ts.start_time, ts.end_time)
    if not created and prev != new:
        _log_edit(ts, "edit", edited_by, prev, new)
    db.session.commit()
    return ts, created


def update_entry(ts: Timesheet, patch: TimesheetPatch, edited_by: str) -> Timesheet:
    prev = (ts.start_time, ts.end_time)
    ts.start_time, ts.end_time = patch.apply_times(*prev)
    if patch.break_override is not UNSET:
        ts.break_override = patch.break_override
    if patch.notes is not UNSET:
        ts.notes = patch.notes
    _recalculate(ts, ts.employee, schedule_for(ts.client_id))

    new = (ts.start_time, ts.end_time)
    if prev != new:
        _log_edit(ts, "edit", edited_by, prev, new)
    db.session.commit()
    log.info("timesheet #%s updated by %s", ts.id, edited_by)
    return ts


def delete_entry(ts: Timesheet, edited_by: str) -> None:
    ts_id = ts.id
    _log_edit(ts, "delete", edited_by, (ts.start_time, ts.end_time), (None, None))
    db.session.delete(ts)
    db.session.commit()
    log.info("timesheet #%s deleted by %s", ts_id, edited_by)


# ---------- bulk ----------
def recompute_breaks_for_client(client_id: int, schedule: BreakSchedule | None = None,
                                reset_overrides: bool = True) -> int:
    """Re-derive break and total hours for every entry of a client.

    Only flushes; the caller owns the transaction. Returns the number of
    entries recomputed.
    """
    schedule = schedule if schedule is not None else schedule_for(client_id)
    rows = (db.session.query(Timesheet, Employee)
            .join(Employee, Employee.id == Timesheet.employee_id)
            .filter(Timesheet.client_id == client_id)
            .all())
    for ts, emp in rows:
        if reset_overrides:
            ts.break_override = None
        _recalculate(ts, emp, schedule)
    db.session.flush()
    return len(rows)


def recompute_employee(employee: Employee) -> int:
    """After a change to ``apply_break_rules``; overrides are kept."""
    schedule = schedule_for(employee.client_id)
    for ts in employee.timesheets:
        _recalculate(ts, employee, schedule)
    db.session.flush()
    return len(employee.timesheets)


def install_rules(client: Client, tiers: Iterable[BreakTier]) -> list[BreakRule]:
    """Swap the stored rule rows of ``client``; flushes, no commit."""
    for r in BreakRule.query.filter_by(client_id=client.id).all():
        db.session.delete(r)
    # old thresholds must be gone before the unique constraint sees new ones
    db.session.flush()
    db.session.expire(client, ["break_rules"])
    rows = [BreakRule(client_id=client.id, min_hours=t.min_hours, break_minutes=t.break_minutes)
            for t in tiers]
    db.session.add_all(rows)
    db.session.flush()
    return rows


def replace_break_rules(client: Client, tiers: Iterable, reset_overrides: bool = True) -> tuple[list[BreakRule], int]:
    """Replace the rule set and recompute the client's timesheets as one
    transaction. Nothing is kept if any step fails."""
    tiers = validate_tiers(tiers)
    try:
        rows = install_rules(client, tiers)
        count = recompute_breaks_for_client(client.id, BreakSchedule(rows), reset_overrides)
        db.session.commit()
    except Exception:
        db.session.rollback()
        log.exception("break rule replacement failed for client #%s", client.id)
        raise
    log.info("client #%s: %d break rules installed, %d timesheets recomputed",
             client.id, len(rows), count)
    return rows, count
