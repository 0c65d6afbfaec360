import logging
from datetime import timedelta

from fastapi import APIRouter, Depends, status

from backend.app.core import redis_client as redis_module
from backend.app.core.clock import SystemClock, get_clock
from backend.app.core.config import Settings, get_settings
from backend.app.core.errors import (
    InvalidDateError,
    InvalidRequestError,
    ServiceUnavailableError,
    SlotUnavailableError,
)
from backend.app.db.session import get_booking_repository
from backend.app.routers.pricing import breakdown_out
from backend.app.routers.schemas import CreateBookingIn, CreateBookingOut, SuccessEnvelope, envelope
from backend.app.services.availability import (
    AvailabilityQuery,
    compute_availability,
    find_window,
    parse_event_date,
)
from backend.app.services.bookings import BookingRepository, NewBooking
from backend.app.services.pricing import calculate_breakdown, calculate_token_amount


logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/bookings", response_model=SuccessEnvelope[CreateBookingOut], status_code=status.HTTP_201_CREATED)
async def create_booking(
    payload: CreateBookingIn,
    repository: BookingRepository = Depends(get_booking_repository),
    clock: SystemClock = Depends(get_clock),
    settings: Settings = Depends(get_settings),
) -> SuccessEnvelope[CreateBookingOut]:
    now = clock.now()
    event_date = parse_event_date(payload.date, now.tzinfo)
    if event_date < now.date():
        raise InvalidDateError("Please select a future date")
    if event_date > now.date() + timedelta(days=settings.MAX_BOOKING_DAYS_AHEAD):
        raise InvalidDateError("Please select a date within the next year")

    window = find_window(payload.time_slot.start_time, payload.time_slot.end_time)
    if window is None:
        raise InvalidRequestError("Selected time slot is not offered")

    if redis_module.redis_client is None:
        raise ServiceUnavailableError("Redis unavailable")

    hold_key = redis_module.slot_hold_key(event_date, window.start_time, payload.location.city)
    hold_token = await redis_module.acquire_slot_hold(hold_key, settings.SLOT_HOLD_TTL_SECONDS)
    if hold_token is None:
        logger.info("Hold %s already taken", hold_key)
        raise SlotUnavailableError("Selected time slot is temporarily held by another request")

    try:
        if settings.ENABLE_ALL_SLOTS:
            logger.warning("Bypassing slot availability check due to ENABLE_ALL_SLOTS")
        else:
            availability = compute_availability(
                AvailabilityQuery(
                    date=event_date.isoformat(),
                    city=payload.location.city,
                    pincode=payload.location.pincode,
                ),
                await repository.list_active_bookings(event_date),
                now=now,
            )
            slot = availability.slot_for(window)
            if slot is None or not slot.is_available:
                raise SlotUnavailableError("Selected time slot is no longer available")

        known_prices = await repository.addon_prices(payload.addon_ids)
        breakdown = calculate_breakdown(
            payload.occasion_type,
            payload.budget_range,
            guest_count=payload.guest_count,
            location=payload.location.city,
            addon_ids=payload.addon_ids,
            addon_price_lookup=lambda addon_id: known_prices.get(addon_id, settings.ADDON_DEFAULT_PRICE),
        )
        if breakdown.final_amount <= 0:
            raise InvalidRequestError("Unknown budget range")
        token = calculate_token_amount(breakdown.final_amount)

        booking_id = await repository.create_booking(
            NewBooking(
                occasion=payload.occasion_type.value,
                theme_id=payload.theme_id,
                event_date=event_date,
                start_time=window.start_time,
                end_time=window.end_time,
                guest_count=payload.guest_count,
                budget_range=payload.budget_range,
                location=payload.location.model_dump(),
                customer_name=payload.customer_info.name,
                customer_email=payload.customer_info.email,
                customer_phone=payload.customer_info.phone,
                total_amount=breakdown.final_amount,
                token_amount=token,
                addon_ids=list(payload.addon_ids),
                special_requests=payload.special_requests,
            )
        )
    except Exception:
        await redis_module.release_slot_hold(hold_key, hold_token)
        raise

    logger.info("Booking %s created for %s %s", booking_id, event_date.isoformat(), window.label)
    return envelope(
        CreateBookingOut(
            id=booking_id,
            status="PENDING",
            payment_status="PENDING",
            total_amount=breakdown.final_amount,
            token_amount=token,
            price_breakdown=breakdown_out(breakdown),
        )
    )
