from flask import current_app

from ..extensions import db
from ..engine.public_holidays import statutory_holidays


class PublicHoliday(db.Model):
    """Extra holiday of one client, on top of the statutory calendar."""

    id = db.Column(db.Integer, primary_key=True)
    client_id = db.Column(db.Integer, db.ForeignKey("client.id", ondelete="CASCADE"), nullable=False, index=True)
    holiday_date = db.Column(db.Date, nullable=False)
    name = db.Column(db.String(120), default="")
    __table_args__ = (db.UniqueConstraint("client_id", "holiday_date", name="uq_client_holiday"),)

    def to_dict(self) -> dict:
        return {"id": self.id, "date": self.holiday_date.isoformat(), "name": self.name or ""}


def calendar_holidays(start, end) -> dict:
    cfg = current_app.config
    return statutory_holidays(start, end, cfg.get("HOLIDAY_COUNTRY"), cfg.get("HOLIDAY_SUBDIV"))


def holiday_dates(client_id: int, start, end) -> set:
    """Statutory holidays plus the client's own, within ``start..end``."""
    q = (db.session.query(PublicHoliday.holiday_date)
         .filter(PublicHoliday.client_id == client_id,
                 PublicHoliday.holiday_date >= start,
                 PublicHoliday.holiday_date <= end))
    return set(calendar_holidays(start, end)) | {r[0] for r in q.all()}
