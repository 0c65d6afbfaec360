from datetime import datetime
from zoneinfo import ZoneInfo

from fastapi import Depends

from backend.app.core.config import Settings, get_settings


class SystemClock:
    """Current wall-clock time in the service's operating timezone."""

    def __init__(self, timezone_name: str) -> None:
        self.tz = ZoneInfo(timezone_name)

    def now(self) -> datetime:
        return datetime.now(self.tz)


def get_clock(settings: Settings = Depends(get_settings)) -> SystemClock:
    return SystemClock(settings.TIMEZONE)
