# -*- coding: utf-8 -*-
"""Break deduction by tiered rules.

A client configures tiers ``(min_hours, break_minutes)``. The tier that
applies to a shift is the one with the greatest ``min_hours`` not exceeding
the shift's raw duration (boundary inclusive). Every valid rule set carries a
``min_hours = 0`` floor; :func:`validate_tiers` enforces that when rules are
saved, so lookups on stored data always find a tier.

Problems found while resolving are returned on :class:`BreakResolution`
instead of being raised, so "zero hours" and "could not compute" stay
distinguishable for the caller.
"""
from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass
from datetime import time
from decimal import Decimal
from enum import Enum
from typing import Iterable, NamedTuple

from .timeutil import D, ZERO, quantize, raw_hours as _raw_hours


class BreakTier(NamedTuple):
    min_hours: Decimal
    break_minutes: int

    @classmethod
    def of(cls, item) -> "BreakTier":
        """Accept a tier, a ``(min_hours, minutes)`` pair or any object with
        ``min_hours`` / ``break_minutes`` attributes (ORM rows)."""
        if isinstance(item, BreakTier):
            return item
        if isinstance(item, (tuple, list)):
            mh, bm = item
        else:
            mh, bm = item.min_hours, item.break_minutes
        return cls(D(mh), int(bm))


DEFAULT_TIERS = (BreakTier(Decimal("0"), 0), BreakTier(Decimal("5"), 30))


class BreakRuleConfigError(ValueError):
    pass


class Issue(str, Enum):
    INVALID_TIME_RANGE = "invalid_time_range"
    NO_APPLICABLE_BREAK_RULE = "no_applicable_break_rule"
    NEGATIVE_COMPUTED_HOURS = "negative_computed_hours"


# clamped totals are still usable for payroll
_WARNINGS = {Issue.NEGATIVE_COMPUTED_HOURS}


@dataclass(frozen=True)
class BreakResolution:
    raw_hours: Decimal
    break_minutes: int
    total_hours: Decimal
    source: str  # rule | override | disabled | empty
    tier: BreakTier | None = None
    issues: tuple[Issue, ...] = ()

    @property
    def ok(self) -> bool:
        return all(i in _WARNINGS for i in self.issues)

    @property
    def clamped(self) -> bool:
        return Issue.NEGATIVE_COMPUTED_HOURS in self.issues


THRESHOLD_PLACES = "0.01"  # BreakRule.min_hours is Numeric(4, 2)


def _stored(t: BreakTier) -> BreakTier:
    if not t.min_hours.is_finite():
        raise BreakRuleConfigError(f"min_hours must be a number (got {t.min_hours})")
    if abs(t.min_hours) >= 24:
        return t  # out of range, rejected by validate_tiers
    return BreakTier(quantize(t.min_hours, THRESHOLD_PLACES), t.break_minutes)


def validate_tiers(tiers: Iterable) -> list[BreakTier]:
    """Check a rule set before it is stored. Returns tiers sorted by threshold.

    Thresholds are rounded to the stored precision first, so the tiers
    returned here resolve exactly like the rows read back later.
    """
    out = sorted((_stored(BreakTier.of(t)) for t in tiers), key=lambda t: t.min_hours)
    if not out:
        raise BreakRuleConfigError("at least one break rule is required")
    seen: set[Decimal] = set()
    for t in out:
        if t.min_hours < 0:
            raise BreakRuleConfigError(f"min_hours must be >= 0 (got {t.min_hours})")
        if t.min_hours >= 24:
            raise BreakRuleConfigError(f"min_hours must be below 24 (got {t.min_hours})")
        if t.break_minutes < 0:
            raise BreakRuleConfigError(f"break_minutes must be >= 0 (got {t.break_minutes})")
        if t.min_hours in seen:
            raise BreakRuleConfigError(f"duplicate threshold {t.min_hours}h")
        seen.add(t.min_hours)
    if out[0].min_hours != 0:
        raise BreakRuleConfigError("rules must include a 0-hour tier")
    return out


class BreakSchedule:
    """Sorted tiers of one client, ready for floor lookups."""

    def __init__(self, tiers: Iterable = ()):
        ordered = sorted((BreakTier.of(t) for t in tiers), key=lambda t: (t.min_hours, t.break_minutes))
        # duplicate thresholds: the smallest deduction was sorted first and wins
        uniq: list[BreakTier] = []
        for t in ordered:
            if uniq and uniq[-1].min_hours == t.min_hours:
                continue
            uniq.append(t)
        self.tiers = tuple(uniq)
        self._keys = [t.min_hours for t in self.tiers]

    def __len__(self):
        return len(self.tiers)

    def __repr__(self):
        body = ", ".join(f"{t.min_hours}h->{t.break_minutes}m" for t in self.tiers)
        return f"<BreakSchedule {body}>"

    def lookup(self, hours) -> BreakTier | None:
        i = bisect_right(self._keys, D(hours))
        return self.tiers[i - 1] if i else None

    def resolve(self, hours, *, override: int | None = None, apply_rules: bool = True) -> BreakResolution:
        raw = D(hours)
        if raw <= 0:
            issues = (Issue.INVALID_TIME_RANGE,) if raw < 0 else ()
            return BreakResolution(raw, 0, ZERO, "empty", issues=issues)

        issues: list[Issue] = []
        tier = None
        if not apply_rules:
            minutes, source = 0, "disabled"
        elif override is not None:
            minutes, source = max(0, int(override)), "override"
        else:
            source = "rule"
            tier = self.lookup(raw)
            if tier is None:
                minutes = 0
                issues.append(Issue.NO_APPLICABLE_BREAK_RULE)
            else:
                minutes = tier.break_minutes

        total = raw - Decimal(minutes) / 60
        if total < 0:
            total = ZERO
            issues.append(Issue.NEGATIVE_COMPUTED_HOURS)
        return BreakResolution(raw, minutes, total, source, tier, tuple(issues))


def _schedule(rules) -> BreakSchedule:
    return rules if isinstance(rules, BreakSchedule) else BreakSchedule(rules)


def resolve_break(rules, hours, *, override: int | None = None, apply_rules: bool = True) -> BreakResolution:
    return _schedule(rules).resolve(hours, override=override, apply_rules=apply_rules)


def compute_shift(rules, start: time | None, end: time | None, *,
                  override: int | None = None, apply_rules: bool = True) -> BreakResolution:
    """Break and paid hours for one clock-in/clock-out pair.

    An entry missing either time is in progress: nothing is deducted and
    nothing is paid until it is completed.
    """
    if start is None or end is None:
        return BreakResolution(ZERO, 0, ZERO, "empty")
    return resolve_break(rules, _raw_hours(start, end), override=override, apply_rules=apply_rules)
