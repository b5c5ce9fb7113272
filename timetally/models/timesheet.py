from __future__ import annotations

from sqlalchemy import event

from ..extensions import db
from ..engine.breaks import BreakResolution, compute_shift
from ..engine.timeutil import format_hhmm, quantize

HOURS_PLACES = "0.0001"


class Timesheet(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey("employee.id", ondelete="CASCADE"), nullable=False, index=True)
    client_id = db.Column(db.Integer, db.ForeignKey("client.id", ondelete="CASCADE"), nullable=False, index=True)
    work_date = db.Column(db.Date, nullable=False, index=True)
    start_time = db.Column(db.Time, nullable=True)
    end_time = db.Column(db.Time, nullable=True)

    # effective deduction, always derived by recalculate()
    break_minutes = db.Column(db.Integer, nullable=False, default=0)
    # minutes entered by hand; None -> taken from the client's break rules
    break_override = db.Column(db.Integer, nullable=True)
    total_hours = db.Column(db.Numeric(9, 4), nullable=False, default=0)
    notes = db.Column(db.Text)

    submitted_at = db.Column(db.DateTime, server_default=db.func.now())
    created_at = db.Column(db.DateTime, server_default=db.func.now())
    updated_at = db.Column(db.DateTime, server_default=db.func.now(), onupdate=db.func.now())

    __table_args__ = (
        db.UniqueConstraint("employee_id", "work_date", name="uq_timesheet_employee_day"),
        db.Index("ix_timesheet_client_date", "client_id", "work_date"),
    )

    def recalculate(self, schedule, apply_rules: bool = True) -> BreakResolution:
        """Derive break_minutes / total_hours from the times and ``schedule``."""
        res = compute_shift(schedule, self.start_time, self.end_time,
                            override=self.break_override, apply_rules=apply_rules)
        self.break_minutes = res.break_minutes
        self.total_hours = quantize(res.total_hours, HOURS_PLACES)
        return res

    def to_dict(self) -> dict:
        emp = self.employee
        return {
            "id": self.id,
            "employee_id": self.employee_id,
            "employee": {"first_name": emp.first_name, "last_name": emp.last_name} if emp else None,
            "work_date": self.work_date.isoformat(),
            "start_time": format_hhmm(self.start_time) or None,
            "end_time": format_hhmm(self.end_time) or None,
            "break_minutes": self.break_minutes,
            "break_override": self.break_override,
            "total_hours": str(quantize(self.total_hours)),
            "notes": self.notes,
        }


class ImmutableRecordError(RuntimeError):
    pass


class TimesheetEditLog(db.Model):
    """Audit trail of timesheet edits and deletions. Rows are write-once."""

    id = db.Column(db.Integer, primary_key=True)
    client_id = db.Column(db.Integer, db.ForeignKey("client.id", ondelete="CASCADE"), nullable=False, index=True)
    # no FKs: entries outlive the timesheet (and employee) they describe
    timesheet_id = db.Column(db.Integer, index=True)
    employee_id = db.Column(db.Integer, index=True)
    employee_name = db.Column(db.String(201), default="")
    work_date = db.Column(db.Date, nullable=False, index=True)
    action = db.Column(db.String(16), nullable=False)  # edit|delete
    edited_by = db.Column(db.String(16), nullable=False)  # employee|manager
    edited_at = db.Column(db.DateTime, server_default=db.func.now(), index=True)
    previous_start_time = db.Column(db.Time)
    previous_end_time = db.Column(db.Time)
    new_start_time = db.Column(db.Time)
    new_end_time = db.Column(db.Time)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "timesheet_id": self.timesheet_id,
            "employee_id": self.employee_id,
            "employee_name": self.employee_name,
            "work_date": self.work_date.isoformat(),
            "action": self.action,
            "edited_by": self.edited_by,
            "edited_at": self.edited_at.isoformat() if self.edited_at else None,
            "previous_start_time": format_hhmm(self.previous_start_time) or None,
            "previous_end_time": format_hhmm(self.previous_end_time) or None,
            "new_start_time": format_hhmm(self.new_start_time) or None,
            "new_end_time": format_hhmm(self.new_end_time) or None,
        }


@event.listens_for(TimesheetEditLog, "before_update")
def _edit_log_is_append_only(mapper, connection, target):
    raise ImmutableRecordError(f"timesheet_edit_log #{target.id} is append-only")
