"""Time-slot availability and conflict detection.

Pure functions over a snapshot of active bookings: the caller fetches the
bookings, supplies the current time and the override flag, and receives a
fully annotated slot list or an ``InvalidDateError``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, tzinfo
from enum import Enum
from typing import Iterable

from backend.app.core.errors import InvalidDateError

logger = logging.getLogger(__name__)

SAME_DAY_LEAD_HOURS = 2


class BookingStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


ACTIVE_BOOKING_STATUSES = frozenset(
    {BookingStatus.PENDING, BookingStatus.CONFIRMED, BookingStatus.IN_PROGRESS}
)


@dataclass(frozen=True)
class TimeWindow:
    start_time: time
    end_time: time

    @property
    def label(self) -> str:
        return f"{self.start_time:%H:%M}-{self.end_time:%H:%M}"


# Twelve four-hour windows, one starting every hour from 08:00 to 19:00.
TIME_WINDOWS: tuple[TimeWindow, ...] = tuple(
    TimeWindow(time(hour, 0), time(hour + 4, 0)) for hour in range(8, 20)
)


@dataclass(frozen=True)
class BookingLocation:
    city: str | None = None
    pincode: str | None = None


@dataclass(frozen=True)
class ExistingBooking:
    start_time: time
    end_time: time
    location: BookingLocation | None = None
    status: BookingStatus = BookingStatus.PENDING


@dataclass(frozen=True)
class AvailabilityQuery:
    date: str
    city: str | None = None
    pincode: str | None = None


@dataclass(frozen=True)
class AvailabilitySlot:
    start_time: time
    end_time: time
    is_available: bool


@dataclass(frozen=True)
class AvailabilityResult:
    query: AvailabilityQuery
    event_date: date
    slots: tuple[AvailabilitySlot, ...]
    is_weekend: bool
    is_same_day: bool

    @property
    def total_slots(self) -> int:
        return len(self.slots)

    @property
    def available_slots(self) -> int:
        return sum(1 for slot in self.slots if slot.is_available)

    def slot_for(self, window: TimeWindow) -> AvailabilitySlot | None:
        for slot in self.slots:
            if slot.start_time == window.start_time and slot.end_time == window.end_time:
                return slot
        return None


def parse_event_date(value: str, tz: tzinfo | None = None) -> date:
    """Parse an ISO calendar date or timestamp into a calendar day.

    A timestamp carrying an offset is first moved into ``tz`` so the day is
    the local one; naive timestamps are taken as already local.
    """
    raw = (value or "").strip()
    try:
        return date.fromisoformat(raw)
    except ValueError:
        pass
    try:
        moment = datetime.fromisoformat(raw)
    except ValueError:
        raise InvalidDateError("Invalid date format") from None
    if tz is not None and moment.tzinfo is not None:
        moment = moment.astimezone(tz)
    return moment.date()


def find_window(start_time: time, end_time: time) -> TimeWindow | None:
    for window in TIME_WINDOWS:
        if window.start_time == start_time and window.end_time == end_time:
            return window
    return None


def windows_overlap(start_a: time, end_a: time, start_b: time, end_b: time) -> bool:
    """Strict overlap: intervals that only touch at a boundary do not overlap."""
    return start_a < end_b and end_a > start_b


def booking_conflicts(window: TimeWindow, booking: ExistingBooking, query: AvailabilityQuery) -> bool:
    if booking.status not in ACTIVE_BOOKING_STATUSES:
        return False
    if not windows_overlap(window.start_time, window.end_time, booking.start_time, booking.end_time):
        return False

    # Without a location on either side nothing narrows the overlap down.
    if not query.city or booking.location is None:
        return True

    booking_city = (booking.location.city or "").lower()
    if booking_city == query.city.lower():
        return True
    return bool(query.pincode) and booking.location.pincode == query.pincode


def compute_availability(
    query: AvailabilityQuery,
    active_bookings: Iterable[ExistingBooking],
    now: datetime,
    override_all_available: bool = False,
) -> AvailabilityResult:
    """Annotate every catalogue window with its availability for ``query``.

    Raises ``InvalidDateError`` for an unparseable date or a calendar day
    before ``now``'s. ``override_all_available`` forces every window open and
    disables the same-day lead-time rule.
    """
    event_date = parse_event_date(query.date, now.tzinfo)
    today = now.date()
    if event_date < today:
        raise InvalidDateError("Cannot check availability for past dates")

    bookings = list(active_bookings)
    is_same_day = not override_all_available and event_date == today

    slots = []
    for window in TIME_WINDOWS:
        if override_all_available:
            available = True
        else:
            available = not any(booking_conflicts(window, b, query) for b in bookings)
            if available and is_same_day:
                available = window.start_time.hour > now.hour + SAME_DAY_LEAD_HOURS
        slots.append(AvailabilitySlot(window.start_time, window.end_time, available))

    result = AvailabilityResult(
        query=query,
        event_date=event_date,
        slots=tuple(slots),
        is_weekend=event_date.weekday() >= 5,
        is_same_day=is_same_day,
    )
    logger.info(
        "Availability for %s (city=%s): %d/%d slots open against %d bookings",
        event_date.isoformat(),
        query.city,
        result.available_slots,
        result.total_slots,
        len(bookings),
    )
    return result
