"""ORM rules: audit immutability, uniqueness and cascades."""

from datetime import time

import pytest
from sqlalchemy.exc import IntegrityError

from timetally.extensions import db
from timetally.models import (
    BreakRule,
    Client,
    Employee,
    ImmutableRecordError,
    Timesheet,
    TimesheetEditLog,
)
from timetally.payloads import TimesheetPayload
from timetally.security import pin_digest, verify_pin
from timetally.timesheets import delete_entry, save_entry

from tests.conftest import WEEK_START


class TestEditLog:

    def test_rows_cannot_be_updated(self, app, tenant, week):
        with app.app_context():
            emp = db.session.get(Employee, tenant.sarah_id)
            save_entry(emp, TimesheetPayload(WEEK_START, time(10), time(17)), "manager")
            log = TimesheetEditLog.query.one()
            log.edited_by = "employee"
            with pytest.raises(ImmutableRecordError):
                db.session.commit()
            db.session.rollback()
            assert TimesheetEditLog.query.one().edited_by == "manager"

    def test_log_outlives_employee(self, app, tenant, week):
        with app.app_context():
            ts = Timesheet.query.filter_by(employee_id=tenant.sarah_id, work_date=WEEK_START).one()
            delete_entry(ts, "manager")
            db.session.delete(db.session.get(Employee, tenant.sarah_id))
            db.session.commit()
            assert Timesheet.query.filter_by(employee_id=tenant.sarah_id).count() == 0
            log = TimesheetEditLog.query.one()
            assert log.employee_name == "Sarah Johnson"
            assert log.to_dict()["previous_start_time"] == "09:00"


class TestConstraints:

    def test_one_entry_per_employee_and_day(self, app, tenant, week):
        with app.app_context():
            db.session.add(Timesheet(employee_id=tenant.sarah_id, client_id=tenant.client_id,
                                     work_date=WEEK_START))
            with pytest.raises(IntegrityError):
                db.session.commit()
            db.session.rollback()

    def test_one_rule_per_threshold(self, app, tenant):
        with app.app_context():
            db.session.add(BreakRule(client_id=tenant.client_id, min_hours=5, break_minutes=10))
            with pytest.raises(IntegrityError):
                db.session.commit()
            db.session.rollback()

    def test_pin_unique_within_client_only(self, app, tenant, other_tenant):
        with app.app_context():
            sarah = db.session.get(Employee, tenant.sarah_id)
            olga = db.session.get(Employee, other_tenant.employee_id)
            # both use 1111; digests differ because they are keyed by client
            assert sarah.pin_digest != olga.pin_digest
            assert sarah.pin_digest == pin_digest(tenant.client_id, "1111")


class TestCredentials:

    def test_pins_are_hashed(self, app, tenant):
        with app.app_context():
            client = db.session.get(Client, tenant.client_id)
            sarah = db.session.get(Employee, tenant.sarah_id)
            assert client.manager_pin != "1234"
            assert verify_pin("1234", client.manager_pin)
            assert sarah.pin_hash != "1111"
            assert verify_pin("1111", sarah.pin_hash)
            assert not verify_pin("1112", sarah.pin_hash)
            assert "pin" not in sarah.to_dict()
            assert "pin_hash" not in sarah.to_dict()


class TestClientCascade:

    def test_delete_client_removes_everything(self, app, tenant, week):
        with app.app_context():
            db.session.delete(db.session.get(Client, tenant.client_id))
            db.session.commit()
            assert Employee.query.count() == 0
            assert Timesheet.query.count() == 0
            assert BreakRule.query.count() == 0
