# -*- coding: utf-8 -*-
"""Request bodies parsed into typed objects.

Partial updates are explicit: every patchable field is listed on the patch
class and left as :data:`UNSET` when the body does not mention it, so
``None`` (clear the value) and "not given" stay distinct.
"""
from __future__ import annotations

import re
import secrets
from dataclasses import dataclass, field, fields
from datetime import date, time
from decimal import Decimal, InvalidOperation

from .engine.breaks import BreakTier, validate_tiers
from .engine.payroll import PayType
from .engine.timeutil import InvalidTimeFormat, parse_date, parse_time

PIN_RE = re.compile(r"^\d{4}$")
SUBDOMAIN_RE = re.compile(r"^[a-z0-9]([a-z0-9-]{1,61}[a-z0-9])?$")
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

# settings-form body -> tier thresholds
LEGACY_RULE_KEYS = (("underFiveHours", 0), ("fiveToSevenHours", 5), ("overSevenHours", 7))


class ValidationError(ValueError):
    def __init__(self, message: str, code: str = "validation_error", field: str | None = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.field = field

    def to_dict(self) -> dict:
        d = {"ok": False, "error": self.code, "message": self.message}
        if self.field:
            d["field"] = self.field
        return d


class _Unset:
    _inst = None

    def __new__(cls):
        if cls._inst is None:
            cls._inst = super().__new__(cls)
        return cls._inst

    def __bool__(self):
        return False

    def __repr__(self):
        return "UNSET"


UNSET = _Unset()


# ---------- field parsers ----------
def _body(data) -> dict:
    if not isinstance(data, dict):
        raise ValidationError("JSON object expected", "bad_request")
    return data


def _pick(data: dict, *names, default=UNSET):
    """First present key among ``names`` (snake_case and camelCase)."""
    for n in names:
        if n in data:
            return data[n]
    return default


def _text(value, name: str, *, required: bool = True, max_len: int = 255) -> str:
    s = (value or "").strip() if isinstance(value, str) or value is None else None
    if s is None:
        raise ValidationError(f"{name} must be a string", field=name)
    if required and not s:
        raise ValidationError(f"{name} is required", field=name)
    if len(s) > max_len:
        raise ValidationError(f"{name} is too long", field=name)
    return s


def parse_pin(value, name: str = "pin") -> str:
    s = str(value).strip() if isinstance(value, (str, int)) and not isinstance(value, bool) else ""
    if not PIN_RE.match(s):
        raise ValidationError(f"{name} must be exactly 4 digits", "invalid_pin", name)
    return s


def parse_rate(value, name: str) -> Decimal:
    if isinstance(value, bool) or value is None or value == "":
        raise ValidationError(f"{name} is required", field=name)
    try:
        d = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValidationError(f"{name} must be a number", field=name) from None
    if not d.is_finite() or d < 0:
        raise ValidationError(f"{name} must be >= 0", field=name)
    return d


def parse_pay_type(value) -> str:
    try:
        return PayType(str(value or "hourly")).value
    except ValueError:
        raise ValidationError("pay_type must be hourly or day_rate", field="pay_type") from None


def parse_bool(value, name: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "false", "1", "0"):
        return value.lower() in ("true", "1")
    raise ValidationError(f"{name} must be a boolean", field=name)


def parse_status(value, allowed, name: str = "status") -> str:
    if value not in allowed:
        raise ValidationError(f"{name} must be one of {', '.join(allowed)}", field=name)
    return value


def parse_minutes(value, name: str) -> int | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be a whole number of minutes", field=name)
    try:
        n = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be a whole number of minutes", field=name) from None
    if n < 0:
        raise ValidationError(f"{name} must be >= 0", field=name)
    return n


def _time(value, name: str) -> time | None:
    try:
        return parse_time(value)
    except InvalidTimeFormat as e:
        raise ValidationError(str(e), "invalid_time", name) from None


def _date(value, name: str) -> date:
    if value in (None, ""):
        raise ValidationError(f"{name} is required", field=name)
    try:
        return parse_date(value)
    except InvalidTimeFormat as e:
        raise ValidationError(str(e), "invalid_date", name) from None


def _check_order(start: time | None, end: time | None) -> None:
    if start is not None and end is not None and end <= start:
        raise ValidationError("end_time must be after start_time", "invalid_time_range", "end_time")


def validate_email(value) -> str:
    s = _text(value, "contact_email").lower()
    if not EMAIL_RE.match(s):
        raise ValidationError("contact_email is not a valid address", field="contact_email")
    return s


def validate_subdomain(value) -> str:
    s = (value or "").strip().lower() if isinstance(value, str) or value is None else ""
    if not SUBDOMAIN_RE.match(s):
        raise ValidationError("subdomain must be 3-63 lowercase letters, digits or hyphens",
                              "invalid_subdomain", "subdomain")
    from .acl import RESERVED_SUBDOMAINS
    if s in RESERVED_SUBDOMAINS:
        raise ValidationError(f"subdomain {s!r} is reserved", "invalid_subdomain", "subdomain")
    return s


def generate_subdomain(business_name: str) -> str:
    """'Joe's Café & Bar' -> 'joes-caf-bar'; pads short names with a suffix."""
    s = re.sub(r"[^a-z0-9\s-]", "", (business_name or "").lower())
    s = re.sub(r"[\s-]+", "-", s).strip("-")[:50].strip("-")
    if len(s) < 3:
        s = f"{s or 'client'}-{secrets.token_hex(2)}"
    return s


def parse_date_range(args, default_start: date, default_end: date) -> tuple[date, date]:
    start = _date(args.get("startDate"), "startDate") if args.get("startDate") else default_start
    end = _date(args.get("endDate"), "endDate") if args.get("endDate") else default_end
    if end < start:
        raise ValidationError("endDate must not be before startDate", "invalid_date_range", "endDate")
    return start, end


# ---------- employees ----------
@dataclass
class EmployeeCreate:
    first_name: str
    last_name: str
    pin: str
    weekday_rate: Decimal
    saturday_rate: Decimal
    sunday_rate: Decimal
    public_holiday_rate: Decimal
    pay_type: str = "hourly"
    apply_break_rules: bool = True

    @classmethod
    def from_json(cls, data) -> "EmployeeCreate":
        data = _body(data)
        weekday = parse_rate(_pick(data, "weekday_rate", "weekdayRate", default=None), "weekday_rate")
        holiday = _pick(data, "public_holiday_rate", "publicHolidayRate")
        abr = _pick(data, "apply_break_rules", "applyBreakRules")
        return cls(
            first_name=_text(_pick(data, "first_name", "firstName", default=None), "first_name", max_len=100),
            last_name=_text(_pick(data, "last_name", "lastName", default=None), "last_name", max_len=100),
            pin=parse_pin(_pick(data, "pin", default=None)),
            weekday_rate=weekday,
            saturday_rate=parse_rate(_pick(data, "saturday_rate", "saturdayRate", default=None), "saturday_rate"),
            sunday_rate=parse_rate(_pick(data, "sunday_rate", "sundayRate", default=None), "sunday_rate"),
            public_holiday_rate=(weekday * 2 if holiday in (UNSET, None, "")
                                 else parse_rate(holiday, "public_holiday_rate")),
            pay_type=parse_pay_type(_pick(data, "pay_type", "payType", default=None)),
            apply_break_rules=True if abr is UNSET else parse_bool(abr, "apply_break_rules"),
        )


@dataclass
class EmployeePatch:
    first_name: object = UNSET
    last_name: object = UNSET
    pin: object = UNSET
    weekday_rate: object = UNSET
    saturday_rate: object = UNSET
    sunday_rate: object = UNSET
    public_holiday_rate: object = UNSET
    pay_type: object = UNSET
    apply_break_rules: object = UNSET
    status: object = UNSET

    _ALIASES = {
        "first_name": ("first_name", "firstName"),
        "last_name": ("last_name", "lastName"),
        "pin": ("pin",),
        "weekday_rate": ("weekday_rate", "weekdayRate"),
        "saturday_rate": ("saturday_rate", "saturdayRate"),
        "sunday_rate": ("sunday_rate", "sundayRate"),
        "public_holiday_rate": ("public_holiday_rate", "publicHolidayRate"),
        "pay_type": ("pay_type", "payType"),
        "apply_break_rules": ("apply_break_rules", "applyBreakRules"),
        "status": ("status",),
    }

    @classmethod
    def from_json(cls, data) -> "EmployeePatch":
        from .models import EMPLOYEE_STATUSES

        data = _body(data)
        p = cls()
        for name, keys in cls._ALIASES.items():
            v = _pick(data, *keys)
            if v is UNSET:
                continue
            if name in ("first_name", "last_name"):
                v = _text(v, name, max_len=100)
            elif name == "pin":
                v = parse_pin(v)
            elif name.endswith("_rate"):
                v = parse_rate(v, name)
            elif name == "pay_type":
                v = parse_pay_type(v)
            elif name == "apply_break_rules":
                v = parse_bool(v, name)
            elif name == "status":
                v = parse_status(v, EMPLOYEE_STATUSES)
            setattr(p, name, v)
        if not p.changes():
            raise ValidationError("no fields to update", "no_change")
        return p

    def changes(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name) is not UNSET}


# ---------- timesheets ----------
@dataclass
class TimesheetPayload:
    """Upsert body: one entry per (employee, date)."""

    work_date: date
    start_time: time | None
    end_time: time | None
    employee_id: int | None = None
    break_override: int | None = None
    notes: str | None = None

    @classmethod
    def from_json(cls, data) -> "TimesheetPayload":
        data = _body(data)
        start = _time(_pick(data, "start_time", "startTime", default=None), "start_time")
        end = _time(_pick(data, "end_time", "endTime", default=None), "end_time")
        _check_order(start, end)
        emp = _pick(data, "employee_id", "employeeId")
        try:
            emp_id = None if emp in (UNSET, None, "") else int(emp)
        except (TypeError, ValueError):
            raise ValidationError("employee_id must be an integer", field="employee_id") from None
        notes = _pick(data, "notes")
        return cls(
            work_date=_date(_pick(data, "work_date", "date", "workDate", default=None), "work_date"),
            start_time=start,
            end_time=end,
            employee_id=emp_id,
            break_override=parse_minutes(_pick(data, "break_minutes", "breakMinutes", default=None), "break_minutes"),
            notes=None if notes in (UNSET, None) else _text(notes, "notes", required=False, max_len=2000),
        )


@dataclass
class TimesheetPatch:
    start_time: object = UNSET
    end_time: object = UNSET
    break_override: object = UNSET  # None clears the override
    notes: object = UNSET

    @classmethod
    def from_json(cls, data) -> "TimesheetPatch":
        data = _body(data)
        p = cls()
        v = _pick(data, "start_time", "startTime")
        if v is not UNSET:
            p.start_time = _time(v, "start_time")
        v = _pick(data, "end_time", "endTime")
        if v is not UNSET:
            p.end_time = _time(v, "end_time")
        v = _pick(data, "break_minutes", "breakMinutes")
        if v is not UNSET:
            p.break_override = parse_minutes(v, "break_minutes")
        v = _pick(data, "notes")
        if v is not UNSET:
            p.notes = None if v is None else _text(v, "notes", required=False, max_len=2000)
        if all(getattr(p, f.name) is UNSET for f in fields(p)):
            raise ValidationError("no fields to update", "no_change")
        return p

    def apply_times(self, start: time | None, end: time | None) -> tuple[time | None, time | None]:
        """Times after the patch; rejects an end that is not after the start."""
        s = start if self.start_time is UNSET else self.start_time
        e = end if self.end_time is UNSET else self.end_time
        _check_order(s, e)
        return s, e


# ---------- clients ----------
@dataclass
class ClientCreate:
    business_name: str
    contact_email: str
    subdomain: str
    manager_pin: str | None = None
    status: str = "active"

    @classmethod
    def from_json(cls, data) -> "ClientCreate":
        from .models import CLIENT_STATUSES

        data = _body(data)
        name = _text(_pick(data, "business_name", "businessName", default=None), "business_name")
        sub = _pick(data, "subdomain")
        pin = _pick(data, "manager_pin", "managerPin")
        status = _pick(data, "status")
        return cls(
            business_name=name,
            contact_email=validate_email(_pick(data, "contact_email", "contactEmail", default=None)),
            subdomain=generate_subdomain(name) if sub in (UNSET, None, "") else validate_subdomain(sub),
            manager_pin=None if pin in (UNSET, None, "") else parse_pin(pin, "manager_pin"),
            status="active" if status is UNSET else parse_status(status, CLIENT_STATUSES),
        )


@dataclass
class ClientPatch:
    business_name: object = UNSET
    contact_email: object = UNSET
    manager_pin: object = UNSET
    status: object = UNSET

    @classmethod
    def from_json(cls, data) -> "ClientPatch":
        from .models import CLIENT_STATUSES

        data = _body(data)
        p = cls()
        v = _pick(data, "business_name", "businessName")
        if v is not UNSET:
            p.business_name = _text(v, "business_name")
        v = _pick(data, "contact_email", "contactEmail")
        if v is not UNSET:
            p.contact_email = validate_email(v)
        v = _pick(data, "manager_pin", "managerPin")
        if v is not UNSET:
            p.manager_pin = parse_pin(v, "manager_pin")
        v = _pick(data, "status")
        if v is not UNSET:
            p.status = parse_status(v, CLIENT_STATUSES)
        if all(getattr(p, f.name) is UNSET for f in fields(p)):
            raise ValidationError("no fields to update", "no_change")
        return p


# ---------- holidays ----------
@dataclass
class HolidayPayload:
    holiday_date: date
    name: str = ""

    @classmethod
    def from_json(cls, data) -> "HolidayPayload":
        data = _body(data)
        return cls(
            holiday_date=_date(_pick(data, "date", "holiday_date", default=None), "date"),
            name=_text(_pick(data, "name", default=None), "name", required=False, max_len=120),
        )


# ---------- break rules ----------
@dataclass
class BreakRulesPayload:
    tiers: list = field(default_factory=list)
    reset_overrides: bool = True

    @classmethod
    def from_json(cls, data) -> "BreakRulesPayload":
        data = _body(data)
        reset = _pick(data, "reset_overrides", "resetOverrides")
        return cls(
            tiers=parse_break_rules(data),
            reset_overrides=True if reset is UNSET else parse_bool(reset, "reset_overrides"),
        )


def parse_break_rules(data) -> list[BreakTier]:
    """Accept ``{"rules": [{min_hours, break_minutes}, ...]}`` or the settings
    form's three fixed bands. Raises BreakRuleConfigError on a bad rule set."""
    data = _body(data)
    if "rules" in data:
        raw = data["rules"]
        if not isinstance(raw, list):
            raise ValidationError("rules must be a list", "invalid_break_rules", "rules")
        items = []
        for i, r in enumerate(raw):
            if not isinstance(r, dict):
                raise ValidationError(f"rules[{i}] must be an object", "invalid_break_rules", "rules")
            mh = _pick(r, "min_hours", "minHours")
            bm = parse_minutes(_pick(r, "break_minutes", "breakMinutes"), f"rules[{i}].break_minutes")
            if mh is UNSET or bm is None:
                raise ValidationError(f"rules[{i}] needs min_hours and break_minutes",
                                      "invalid_break_rules", "rules")
            items.append((_hours(mh, f"rules[{i}].min_hours"), bm))
    elif any(k in data for k, _ in LEGACY_RULE_KEYS):
        items = []
        for key, threshold in LEGACY_RULE_KEYS:
            bm = parse_minutes(data.get(key), key)
            items.append((threshold, bm or 0))
    else:
        raise ValidationError("no break rules given", "invalid_break_rules", "rules")
    return validate_tiers(items)


def _hours(value, name: str) -> Decimal:
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be a number", "invalid_break_rules", name)
    try:
        d = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValidationError(f"{name} must be a number", "invalid_break_rules", name) from None
    if not d.is_finite():
        raise ValidationError(f"{name} must be a number", "invalid_break_rules", name)
    return d
