# -*- coding: utf-8 -*-
"""Statutory public holidays from the ``holidays`` calendar package.

Only the public category is used: bank and observance days are not paid at
the holiday rate.
"""
from __future__ import annotations

from datetime import date

import holidays
from holidays.constants import PUBLIC


def statutory_holidays(start: date, end: date, country: str | None = "AU",
                       subdiv: str | None = "NSW") -> dict[date, str]:
    """Public holidays of ``country``/``subdiv`` within ``start..end``.

    An empty ``country`` switches the calendar off.
    """
    if not country or end < start:
        return {}
    calendar = holidays.country_holidays(
        country,
        subdiv=subdiv or None,
        years=range(start.year, end.year + 1),
        categories=(PUBLIC,),
    )
    return {d: str(name) for d, name in sorted(calendar.items()) if start <= d <= end}
