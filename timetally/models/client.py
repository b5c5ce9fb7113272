from ..extensions import db

CLIENT_STATUSES = ("active", "inactive", "suspended")


class Client(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    business_name = db.Column(db.String(255), nullable=False)
    subdomain = db.Column(db.String(63), nullable=False, unique=True, index=True)
    contact_email = db.Column(db.String(255), nullable=False)
    manager_pin = db.Column(db.String(256), nullable=False)  # hashed
    status = db.Column(db.String(20), nullable=False, default="active", index=True)  # active|inactive|suspended
    created_at = db.Column(db.DateTime, server_default=db.func.now())
    updated_at = db.Column(db.DateTime, server_default=db.func.now(), onupdate=db.func.now())

    employees = db.relationship("Employee", backref="client", cascade="all, delete-orphan", lazy="select")
    break_rules = db.relationship("BreakRule", backref="client", cascade="all, delete-orphan",
                                  order_by="BreakRule.min_hours")
    holidays = db.relationship("PublicHoliday", backref="client", cascade="all, delete-orphan")
    edit_logs = db.relationship("TimesheetEditLog", cascade="all, delete-orphan")

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    def to_dict(self, employee_count: int | None = None) -> dict:
        d = {
            "id": self.id,
            "business_name": self.business_name,
            "subdomain": self.subdomain,
            "contact_email": self.contact_email,
            "status": self.status,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
        if employee_count is not None:
            d["employee_count"] = employee_count
        return d
