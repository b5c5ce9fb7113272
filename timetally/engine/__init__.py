from .timeutil import DayType, InvalidTimeFormat, parse_time, parse_date, raw_hours, day_type, week_bounds
from .breaks import (
    BreakTier, BreakSchedule, BreakResolution, BreakRuleConfigError, Issue,
    DEFAULT_TIERS, compute_shift, resolve_break, validate_tiers,
)
from .payroll import (
    PayType, RateCard, PayrollSummary, DayLine, EmployeePayroll,
    aggregate, daily_breakdown, client_payroll, totals,
)
from .public_holidays import statutory_holidays
