from datetime import datetime, time, timezone
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from backend.app.services.pricing import Occasion


class CamelModel(BaseModel):
    # Wire format is camelCase, Python attributes stay snake_case.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ErrorDetail(BaseModel):
    code: str
    message: str


class ErrorEnvelope(BaseModel):
    success: bool = False
    error: ErrorDetail
    timestamp: datetime


T = TypeVar("T")


class SuccessEnvelope(BaseModel, Generic[T]):
    success: bool = True
    data: T
    timestamp: datetime


def envelope(data: T) -> SuccessEnvelope[T]:
    return SuccessEnvelope(data=data, timestamp=datetime.now(timezone.utc))


class LocationQueryOut(CamelModel):
    city: str | None = None
    pincode: str | None = None


class SlotOut(CamelModel):
    start_time: str
    end_time: str
    is_available: bool


class AvailabilityMetadataOut(CamelModel):
    total_slots: int
    available_slots: int
    is_weekend: bool
    is_same_day: bool


class AvailabilityOut(CamelModel):
    date: str
    location: LocationQueryOut
    slots: list[SlotOut]
    metadata: AvailabilityMetadataOut


class PriceEstimateIn(CamelModel):
    occasion: Occasion
    budget_range: str = Field(min_length=1)
    guest_count: int | None = Field(default=None, ge=1)
    location: str | None = None


class PriceEstimateOut(CamelModel):
    estimated_price: int
    formatted_price: str


class PriceBreakdownIn(PriceEstimateIn):
    addon_ids: list[str] = Field(default_factory=list)


class PriceBreakdownOut(CamelModel):
    base_price: float
    addon_prices: dict[str, float]
    location_surcharge: float
    guest_count_multiplier: float
    total_price: float
    taxes: float
    final_amount: int


class TokenAmountOut(CamelModel):
    total_amount: float
    token_amount: int


class BudgetRangeOut(CamelModel):
    label: str
    value: str
    min: int
    max: int


class ServiceabilityOut(CamelModel):
    location: str
    serviceable: bool
    surcharge_rate: float


class TimeSlotIn(CamelModel):
    start_time: time
    end_time: time


class BookingLocationIn(CamelModel):
    address: str = Field(min_length=3, max_length=500)
    city: str = Field(min_length=2, max_length=100)
    pincode: str = Field(pattern=r"^\d{6}$")
    landmark: str | None = Field(default=None, max_length=200)


class CustomerInfoIn(CamelModel):
    name: str = Field(min_length=2, max_length=200)
    email: str = Field(pattern=r"^[^\s@]+@[^\s@]+\.[^\s@]+$", max_length=254)
    # Indian mobile number, optional +91/91 prefix
    phone: str = Field(pattern=r"^(\+91|91)?[6-9]\d{9}$")


class CreateBookingIn(CamelModel):
    occasion_type: Occasion
    theme_id: str = Field(min_length=1)
    date: str
    time_slot: TimeSlotIn
    location: BookingLocationIn
    customer_info: CustomerInfoIn
    guest_count: int = Field(default=25, ge=1, le=1000)
    budget_range: str = Field(min_length=1)
    addon_ids: list[str] = Field(default_factory=list)
    special_requests: str | None = Field(default=None, max_length=1024)


class CreateBookingOut(CamelModel):
    id: str
    status: str
    payment_status: str
    total_amount: int
    token_amount: int
    price_breakdown: PriceBreakdownOut
