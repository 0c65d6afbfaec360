from fastapi import APIRouter, Depends, Query

from backend.app.core.config import Settings, get_settings
from backend.app.db.session import get_booking_repository
from backend.app.routers.schemas import (
    BudgetRangeOut,
    PriceBreakdownIn,
    PriceBreakdownOut,
    PriceEstimateIn,
    PriceEstimateOut,
    ServiceabilityOut,
    SuccessEnvelope,
    TokenAmountOut,
    envelope,
)
from backend.app.services.bookings import BookingRepository
from backend.app.services.pricing import (
    BUDGET_RANGES,
    PriceBreakdown,
    calculate_breakdown,
    calculate_token_amount,
    estimate_price,
    format_price,
    get_location_surcharge_rate,
    is_location_serviceable,
)

router = APIRouter(prefix="/pricing")


def breakdown_out(breakdown: PriceBreakdown) -> PriceBreakdownOut:
    return PriceBreakdownOut(
        base_price=breakdown.base_price,
        addon_prices=breakdown.addon_prices,
        location_surcharge=breakdown.location_surcharge,
        guest_count_multiplier=breakdown.guest_count_multiplier,
        total_price=breakdown.total_price,
        taxes=breakdown.taxes,
        final_amount=breakdown.final_amount,
    )


@router.post("/estimate", response_model=SuccessEnvelope[PriceEstimateOut])
async def estimate(payload: PriceEstimateIn) -> SuccessEnvelope[PriceEstimateOut]:
    price = estimate_price(
        payload.occasion,
        payload.budget_range,
        guest_count=payload.guest_count,
        location=payload.location,
    )
    return envelope(PriceEstimateOut(estimated_price=price, formatted_price=format_price(price)))


@router.post("/breakdown", response_model=SuccessEnvelope[PriceBreakdownOut])
async def breakdown(
    payload: PriceBreakdownIn,
    repository: BookingRepository = Depends(get_booking_repository),
    settings: Settings = Depends(get_settings),
) -> SuccessEnvelope[PriceBreakdownOut]:
    known_prices = await repository.addon_prices(payload.addon_ids)
    result = calculate_breakdown(
        payload.occasion,
        payload.budget_range,
        guest_count=payload.guest_count,
        location=payload.location,
        addon_ids=payload.addon_ids,
        addon_price_lookup=lambda addon_id: known_prices.get(addon_id, settings.ADDON_DEFAULT_PRICE),
    )
    return envelope(breakdown_out(result))


@router.get("/token-amount", response_model=SuccessEnvelope[TokenAmountOut])
async def token_amount(
    total_amount: float = Query(alias="totalAmount", ge=0),
) -> SuccessEnvelope[TokenAmountOut]:
    return envelope(
        TokenAmountOut(total_amount=total_amount, token_amount=calculate_token_amount(total_amount))
    )


@router.get("/budget-ranges", response_model=SuccessEnvelope[list[BudgetRangeOut]])
async def budget_ranges() -> SuccessEnvelope[list[BudgetRangeOut]]:
    return envelope(
        [BudgetRangeOut(label=b.label, value=b.value, min=b.min, max=b.max) for b in BUDGET_RANGES]
    )


@router.get("/serviceability", response_model=SuccessEnvelope[ServiceabilityOut])
async def serviceability(location: str = Query(min_length=1)) -> SuccessEnvelope[ServiceabilityOut]:
    return envelope(
        ServiceabilityOut(
            location=location,
            serviceable=is_location_serviceable(location),
            surcharge_rate=get_location_surcharge_rate(location),
        )
    )
