from .admin import AdminUser
from .client import Client, CLIENT_STATUSES
from .employee import Employee, PAY_TYPES, EMPLOYEE_STATUSES
from .break_rule import BreakRule
from .holiday import PublicHoliday, calendar_holidays, holiday_dates
from .timesheet import Timesheet, TimesheetEditLog, ImmutableRecordError
