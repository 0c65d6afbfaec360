import json
import logging
from dataclasses import dataclass, field
from datetime import date, time
from typing import Any, Iterable

from asyncpg import exceptions as asyncpg_exc
from sqlalchemy import bindparam, text
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.errors import SlotUnavailableError
from backend.app.services.availability import (
    ACTIVE_BOOKING_STATUSES,
    BookingLocation,
    BookingStatus,
    ExistingBooking,
)

logger = logging.getLogger(__name__)

_SLOT_CONFLICT_ERRORS = (asyncpg_exc.UniqueViolationError, asyncpg_exc.ExclusionViolationError)


@dataclass(frozen=True)
class NewBooking:
    occasion: str
    theme_id: str
    event_date: date
    start_time: time
    end_time: time
    guest_count: int
    budget_range: str
    location: dict[str, Any]
    customer_name: str
    customer_email: str
    customer_phone: str
    total_amount: int
    token_amount: int
    addon_ids: list[str] = field(default_factory=list)
    special_requests: str | None = None


def _is_slot_conflict(exc: DBAPIError) -> bool:
    orig = getattr(exc, "orig", exc)
    cause = getattr(orig, "__cause__", None)
    if isinstance(orig, _SLOT_CONFLICT_ERRORS) or isinstance(cause, _SLOT_CONFLICT_ERRORS):
        return True
    return "booking_no_overlap" in str(orig)


class BookingRepository:
    """Booking and addon storage over raw SQL."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def ping(self) -> None:
        await self.session.execute(text("SELECT 1"))

    async def list_active_bookings(self, event_date: date) -> list[ExistingBooking]:
        result = await self.session.execute(
            text(
                """
                SELECT start_time,
                       end_time,
                       status,
                       location IS NOT NULL AND location <> 'null'::jsonb AS has_location,
                       location->>'city' AS city,
                       location->>'pincode' AS pincode
                FROM booking
                WHERE event_date = :event_date
                  AND status IN :statuses
                """
            ).bindparams(bindparam("statuses", expanding=True)),
            {
                "event_date": event_date,
                "statuses": [s.value for s in ACTIVE_BOOKING_STATUSES],
            },
        )
        return [
            ExistingBooking(
                start_time=row["start_time"],
                end_time=row["end_time"],
                location=BookingLocation(city=row["city"], pincode=row["pincode"])
                if row["has_location"]
                else None,
                status=BookingStatus(row["status"]),
            )
            for row in result.mappings()
        ]

    async def addon_prices(self, addon_ids: Iterable[str]) -> dict[str, float]:
        ids = list(dict.fromkeys(addon_ids))
        if not ids:
            return {}
        result = await self.session.execute(
            text("SELECT id, price FROM addon WHERE id IN :ids").bindparams(
                bindparam("ids", expanding=True)
            ),
            {"ids": ids},
        )
        return {row["id"]: float(row["price"]) for row in result.mappings()}

    async def create_booking(self, booking: NewBooking) -> str:
        """Insert a PENDING booking and return its id.

        The ``booking_no_overlap`` exclusion constraint rejects a second active
        booking overlapping the same city; that surfaces as
        ``SlotUnavailableError``.
        """
        query = text(
            """
            INSERT INTO booking (
              occasion, theme_id, event_date, start_time, end_time,
              guest_count, budget_range, addon_ids, location,
              customer_name, customer_email, customer_phone, special_requests,
              total_amount, token_amount, status, payment_status
            ) VALUES (
              :occasion, :theme_id, :event_date, :start_time, :end_time,
              :guest_count, :budget_range, CAST(:addon_ids AS jsonb), CAST(:location AS jsonb),
              :name, :email, :phone, :special_requests,
              :total_amount, :token_amount, 'PENDING', 'PENDING'
            )
            RETURNING id
            """
        )
        try:
            result = await self.session.execute(
                query,
                {
                    "occasion": booking.occasion,
                    "theme_id": booking.theme_id,
                    "event_date": booking.event_date,
                    "start_time": booking.start_time,
                    "end_time": booking.end_time,
                    "guest_count": booking.guest_count,
                    "budget_range": booking.budget_range,
                    "addon_ids": json.dumps(booking.addon_ids),
                    "location": json.dumps(booking.location),
                    "name": booking.customer_name,
                    "email": booking.customer_email,
                    "phone": booking.customer_phone,
                    "special_requests": booking.special_requests,
                    "total_amount": booking.total_amount,
                    "token_amount": booking.token_amount,
                },
            )
            booking_id = str(result.scalar_one())
            await self.session.commit()
        except DBAPIError as exc:
            await self.session.rollback()
            if _is_slot_conflict(exc):
                logger.info(
                    "Insert rejected: %s %s already booked",
                    booking.event_date.isoformat(),
                    booking.start_time.strftime("%H:%M"),
                )
                raise SlotUnavailableError("Selected time slot is no longer available") from exc
            raise
        return booking_id
