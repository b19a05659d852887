from __future__ import annotations

from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo

from config import get_config_value


def current_date(timezone: Optional[str] = None) -> date:
    """Calendar date in the configured timezone, or the server's local date."""
    if timezone is None:
        timezone = get_config_value("scheduler", "timezone")
    if timezone:
        return datetime.now(ZoneInfo(timezone)).date()
    return date.today()


def resolve_today(today: Optional[date] = None) -> date:
    """Use the caller's date when supplied so every layer agrees on one "today"."""
    return today if today is not None else current_date()
