"""Payroll aggregation over stored timesheet hours."""

import random
from datetime import date, time, timedelta
from decimal import Decimal
from types import SimpleNamespace

import pytest

from timetally.engine.payroll import (
    PayType,
    RateCard,
    aggregate,
    bucket_pay,
    client_payroll,
    daily_breakdown,
    totals,
)
from timetally.engine.timeutil import DayType, day_type

MON = date(2024, 6, 3)
TUE = date(2024, 6, 4)
SAT = date(2024, 6, 8)
SUN = date(2024, 6, 9)


def _emp(id=1, first="Sarah", last="Johnson", weekday="25", saturday="30", sunday="35",
         holiday=None, pay_type="hourly"):
    return SimpleNamespace(id=id, first_name=first, last_name=last,
                           weekday_rate=Decimal(weekday), saturday_rate=Decimal(saturday),
                           sunday_rate=Decimal(sunday), public_holiday_rate=holiday, pay_type=pay_type)


def _ts(d, hours, start=time(9), end=time(17), brk=0, employee_id=1, id=None):
    return SimpleNamespace(id=id, employee_id=employee_id, work_date=d, start_time=start, end_time=end,
                           total_hours=Decimal(str(hours)), break_minutes=brk)


# =============================================================================
# aggregate
# =============================================================================

class TestAggregate:

    def test_weekday_and_saturday_pay(self):
        sheets = [_ts(MON, 8), _ts(SAT, 4, end=time(13))]
        s = aggregate(sheets, _emp())
        assert s.weekday_hours == Decimal("8")
        assert s.saturday_hours == Decimal("4")
        assert s.sunday_hours == Decimal("0")
        assert s.total_pay == Decimal("320")
        assert s.to_dict()["total_pay"] == "320.00"

    def test_order_independent(self):
        sheets = [_ts(MON, "7.5"), _ts(TUE, "4.25"), _ts(SAT, "6.1"), _ts(SUN, "3.3")]
        expected = aggregate(sheets, _emp())
        rng = random.Random(3)
        for _ in range(5):
            rng.shuffle(sheets)
            assert aggregate(sheets, _emp()) == expected

    def test_buckets_sum_to_total(self):
        sheets = [_ts(MON, "7.3333"), _ts(SAT, "2.6667"), _ts(SUN, "1.0001")]
        s = aggregate(sheets, _emp())
        assert s.total_hours == s.weekday_hours + s.saturday_hours + s.sunday_hours + s.holiday_hours
        assert s.total_hours == Decimal("11.0001")

    def test_many_small_entries_keep_full_precision(self):
        # one minute a day for 600 days from Monday 1 January 2024
        minute = Decimal("0.0167")
        days = [date(2024, 1, 1) + timedelta(days=i) for i in range(600)]
        s = aggregate([_ts(d, minute) for d in days], _emp())

        counts = {k: sum(1 for d in days if day_type(d) is k) for k in DayType}
        assert (counts[DayType.WEEKDAY], counts[DayType.SATURDAY], counts[DayType.SUNDAY]) == (430, 85, 85)
        assert s.weekday_hours == minute * 430 == Decimal("7.1810")
        assert s.saturday_hours == s.sunday_hours == minute * 85
        assert s.total_hours == minute * 600 == Decimal("10.0200")
        assert s.total_pay == minute * 430 * 25 + minute * 85 * 30 + minute * 85 * 35

        out = s.to_dict()
        assert (out["weekday_hours"], out["saturday_hours"], out["sunday_hours"]) == ("7.18", "1.42", "1.42")
        assert (out["total_hours"], out["total_pay"]) == ("10.02", "271.79")

    def test_negative_stored_hours_count_as_zero(self):
        s = aggregate([_ts(MON, "-1.5"), _ts(TUE, 2)], _emp())
        assert s.weekday_hours == Decimal("2")
        assert s.total_pay == Decimal("50")

    def test_in_progress_entry_adds_nothing(self):
        s = aggregate([_ts(MON, 0, end=None)], _emp())
        assert s.total_hours == 0
        assert s.total_pay == 0
        assert s.days_worked == 0

    def test_empty(self):
        s = aggregate([], _emp())
        assert s.total_pay == 0
        assert s.to_dict()["total_hours"] == "0.00"

    def test_raw_hours_and_breaks(self):
        s = aggregate([_ts(MON, 7, brk=60), _ts(TUE, "5.5", end=time(15), brk=30)], _emp())
        assert s.raw_hours == Decimal("14")
        assert s.break_minutes == 90
        assert s.days_worked == 2

    def test_presentation_rounding_half_up(self):
        s = aggregate([_ts(MON, "1.125")], _emp(weekday="10"))
        d = s.to_dict()
        assert d["weekday_hours"] == "1.13"
        assert d["total_pay"] == "11.25"


class TestHolidays:

    def test_holiday_bucket_and_rate(self):
        s = aggregate([_ts(MON, 8), _ts(TUE, 8)], _emp(holiday=Decimal("50")), holidays={MON})
        assert s.holiday_hours == Decimal("8")
        assert s.weekday_hours == Decimal("8")
        assert s.total_pay == Decimal("600")

    def test_holiday_on_saturday_uses_holiday_rate(self):
        s = aggregate([_ts(SAT, 4)], _emp(holiday=Decimal("60")), holidays={SAT})
        assert s.saturday_hours == 0
        assert s.total_pay == Decimal("240")

    def test_missing_holiday_rate_falls_back_to_weekday(self):
        assert RateCard.of(_emp()).rate_for(DayType.PUBLIC_HOLIDAY) == Decimal("25")

    def test_without_holidays_classification_is_fixed(self):
        s = aggregate([_ts(MON, 8)], _emp(holiday=Decimal("50")))
        assert s.holiday_hours == 0
        assert s.total_pay == Decimal("200")


class TestPayType:

    def test_day_rate_paid_like_hourly(self):
        sheets = [_ts(MON, 8), _ts(SAT, 4)]
        hourly = aggregate(sheets, _emp())
        day_rate = aggregate(sheets, _emp(pay_type="day_rate"))
        assert day_rate.total_pay == hourly.total_pay

    @pytest.mark.parametrize("pay_type", list(PayType))
    def test_bucket_pay(self, pay_type):
        assert bucket_pay(pay_type, Decimal("2.5"), Decimal("20")) == Decimal("50")


# =============================================================================
# Breakdown and client view
# =============================================================================

class TestDailyBreakdown:

    def test_one_line_per_day(self):
        lines = daily_breakdown([_ts(MON, 7, brk=60, id=10)], _emp(), MON, SUN)
        assert len(lines) == 7
        assert [l.day_name for l in lines] == ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
        mon = lines[0]
        assert (mon.total_hours, mon.break_minutes, mon.pay, mon.timesheet_id) == (Decimal("7"), 60, Decimal("175"), 10)
        assert mon.raw_hours == Decimal("8")
        assert lines[5].kind is DayType.SATURDAY and lines[5].rate == Decimal("30")
        assert all(l.pay == 0 for l in lines[1:])

    def test_in_progress_day_shows_times_without_hours(self):
        lines = daily_breakdown([_ts(TUE, 0, end=None)], _emp(), MON, TUE)
        d = lines[1].to_dict()
        assert d["start_time"] == "09:00"
        assert d["end_time"] == ""
        assert d["total_hours"] == "0.00"
        assert d["pay"] == "0.00"

    def test_breakdown_agrees_with_aggregate(self):
        sheets = [_ts(MON, "7.5"), _ts(SAT, 4), _ts(SUN, "5.25")]
        lines = daily_breakdown(sheets, _emp(), MON, SUN)
        assert sum(l.pay for l in lines) == aggregate(sheets, _emp()).total_pay


class TestClientPayroll:

    def test_sorted_by_pay_then_name(self):
        a = _emp(id=1, first="Zoe")
        b = _emp(id=2, first="Adam")
        c = _emp(id=3, first="Bella")
        sheets = [_ts(MON, 2, employee_id=1), _ts(MON, 2, employee_id=2), _ts(MON, 8, employee_id=3)]
        rows = client_payroll([a, b, c], sheets)
        assert [r.employee.first_name for r in rows] == ["Bella", "Adam", "Zoe"]

    def test_employee_without_entries_gets_zero_row(self):
        rows = client_payroll([_emp(id=1), _emp(id=2, first="Mike")], [_ts(MON, 4, employee_id=1)])
        assert rows[-1].employee.first_name == "Mike"
        assert rows[-1].summary.total_pay == 0

    def test_totals(self):
        rows = client_payroll([_emp(id=1), _emp(id=2, first="Mike")],
                              [_ts(MON, 4, employee_id=1), _ts(SAT, 2, employee_id=2)])
        t = totals(rows)
        assert t.total_hours == Decimal("6")
        assert t.total_pay == Decimal("160")
