from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from backend.app.core.clock import SystemClock, get_clock
from backend.app.core.config import Settings, get_settings
from backend.app.core.errors import InvalidRequestError
from backend.app.db.session import get_booking_repository
from backend.app.routers.schemas import (
    AvailabilityMetadataOut,
    AvailabilityOut,
    LocationQueryOut,
    SlotOut,
    SuccessEnvelope,
    envelope,
)
from backend.app.services.availability import (
    AvailabilityQuery,
    AvailabilityResult,
    compute_availability,
    parse_event_date,
)
from backend.app.services.bookings import BookingRepository

logger = logging.getLogger(__name__)

router = APIRouter()


def _to_response(result: AvailabilityResult) -> AvailabilityOut:
    return AvailabilityOut(
        date=result.query.date,
        location=LocationQueryOut(city=result.query.city, pincode=result.query.pincode),
        slots=[
            SlotOut(
                start_time=slot.start_time.strftime("%H:%M"),
                end_time=slot.end_time.strftime("%H:%M"),
                is_available=slot.is_available,
            )
            for slot in result.slots
        ],
        metadata=AvailabilityMetadataOut(
            total_slots=result.total_slots,
            available_slots=result.available_slots,
            is_weekend=result.is_weekend,
            is_same_day=result.is_same_day,
        ),
    )


@router.get("/bookings/availability", response_model=SuccessEnvelope[AvailabilityOut])
async def check_availability(
    date: str | None = None,
    city: str | None = None,
    pincode: str | None = None,
    repository: BookingRepository = Depends(get_booking_repository),
    clock: SystemClock = Depends(get_clock),
    settings: Settings = Depends(get_settings),
) -> SuccessEnvelope[AvailabilityOut]:
    if not date:
        raise InvalidRequestError("Date parameter is required")

    query = AvailabilityQuery(date=date, city=city or None, pincode=pincode or None)
    now = clock.now()

    # Bad or past dates never reach the database.
    event_date = parse_event_date(date, now.tzinfo)
    bookings = []
    if settings.ENABLE_ALL_SLOTS:
        logger.warning("ENABLE_ALL_SLOTS is set; reporting every slot as available")
    elif event_date >= now.date():
        bookings = await repository.list_active_bookings(event_date)

    result = compute_availability(
        query,
        bookings,
        now=now,
        override_all_available=settings.ENABLE_ALL_SLOTS,
    )
    return envelope(_to_response(result))
