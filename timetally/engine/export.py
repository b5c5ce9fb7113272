# -*- coding: utf-8 -*-
"""Payroll CSV in the one-row-per-employee layout accepted by MYOB, Xero
(via UpSheets) and QuickBooks Online Payroll AU."""
from __future__ import annotations

import csv
import io
from datetime import date

from .timeutil import quantize

BASE_HEADERS = ["EmployeeID", "FirstName", "LastName", "Date",
                "Ordinary Hours", "Saturday Hours", "Sunday Hours"]
TAIL_HEADERS = ["Location", "Notes"]
HOLIDAY_HEADER = "Public Holiday Hours"


def format_date_au(d: date) -> str:
    return d.strftime("%d/%m/%Y")


def export_filename(week_ending: date) -> str:
    return f"payroll_timesheets_{week_ending.strftime('%d-%m-%Y')}.csv"


def payroll_csv(rows, week_ending: date) -> str:
    """``rows`` are :class:`~timetally.engine.payroll.EmployeePayroll` items in
    output order. The holiday column only appears when someone has holiday
    hours, so plain weeks keep the three-column import layout."""
    rows = list(rows)
    with_holidays = any(r.summary.holiday_hours > 0 for r in rows)
    headers = BASE_HEADERS + ([HOLIDAY_HEADER] if with_holidays else []) + TAIL_HEADERS

    buf = io.StringIO()
    w = csv.writer(buf, lineterminator="\n")
    w.writerow(headers)
    stamp = format_date_au(week_ending)
    for i, r in enumerate(rows):
        s = r.summary
        line = [
            f"EMP{i + 1:03d}",
            getattr(r.employee, "first_name", ""),
            getattr(r.employee, "last_name", ""),
            stamp,
            str(quantize(s.weekday_hours)),
            str(quantize(s.saturday_hours)),
            str(quantize(s.sunday_hours)),
        ]
        if with_holidays:
            line.append(str(quantize(s.holiday_hours)))
        line += ["", ""]
        w.writerow(line)
    return buf.getvalue()
