from ..extensions import db
from ..engine.timeutil import quantize

PAY_TYPES = ("hourly", "day_rate")
EMPLOYEE_STATUSES = ("active", "inactive")


class Employee(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    client_id = db.Column(db.Integer, db.ForeignKey("client.id", ondelete="CASCADE"), nullable=False, index=True)
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)

    # 4-digit keypad PIN: salted hash for verification, keyed digest for
    # lookup and per-client uniqueness (see security.pin_digest)
    pin_hash = db.Column(db.String(256), nullable=False)
    pin_digest = db.Column(db.String(64), nullable=False)

    weekday_rate = db.Column(db.Numeric(10, 2), nullable=False)
    saturday_rate = db.Column(db.Numeric(10, 2), nullable=False)
    sunday_rate = db.Column(db.Numeric(10, 2), nullable=False)
    public_holiday_rate = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    pay_type = db.Column(db.String(20), nullable=False, default="hourly")  # hourly|day_rate
    apply_break_rules = db.Column(db.Boolean, nullable=False, default=True)
    status = db.Column(db.String(20), nullable=False, default="active", index=True)  # active|inactive

    created_at = db.Column(db.DateTime, server_default=db.func.now())
    updated_at = db.Column(db.DateTime, server_default=db.func.now(), onupdate=db.func.now())

    timesheets = db.relationship("Timesheet", backref="employee", cascade="all, delete-orphan")

    __table_args__ = (db.UniqueConstraint("client_id", "pin_digest", name="uq_employee_client_pin"),)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    def to_dict(self) -> dict:
        money = lambda v: str(quantize(v))
        return {
            "id": self.id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "full_name": self.full_name,
            "weekday_rate": money(self.weekday_rate),
            "saturday_rate": money(self.saturday_rate),
            "sunday_rate": money(self.sunday_rate),
            "public_holiday_rate": money(self.public_holiday_rate),
            "pay_type": self.pay_type,
            "apply_break_rules": bool(self.apply_break_rules),
            "status": self.status,
        }
