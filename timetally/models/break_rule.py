from ..extensions import db


class BreakRule(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    client_id = db.Column(db.Integer, db.ForeignKey("client.id", ondelete="CASCADE"), nullable=False, index=True)
    min_hours = db.Column(db.Numeric(4, 2), nullable=False)
    break_minutes = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, server_default=db.func.now())
    __table_args__ = (db.UniqueConstraint("client_id", "min_hours", name="uq_break_rule_threshold"),)

    def to_dict(self) -> dict:
        return {"id": self.id, "min_hours": str(self.min_hours), "break_minutes": self.break_minutes}
