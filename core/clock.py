from __future__ import annotations
from datetime import date, datetime
from zoneinfo import ZoneInfo

from core.config_loader import settings


def today() -> date:
    """Current calendar day in the configured timezone."""
    return datetime.now(ZoneInfo(settings.TIMEZONE)).date()


# FastAPI dependency, tests override it to pin the date
def get_today() -> date:
    return today()
