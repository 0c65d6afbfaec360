import pytest

from backend.app.services.pricing import (
    BUDGET_RANGES,
    Occasion,
    calculate_breakdown,
    calculate_token_amount,
    estimate_price,
    format_price,
    get_budget_range,
    get_location_surcharge_rate,
    guest_count_multiplier,
    is_location_serviceable,
    round_half_up,
)


class TestGuestCountMultiplier:
    @pytest.mark.parametrize(
        "guests, expected",
        [(1, 0.8), (10, 0.8), (11, 1.0), (25, 1.0), (26, 1.3), (50, 1.3), (51, 1.6), (100, 1.6), (101, 2.0)],
    )
    def test_buckets_inclusive_on_lower(self, guests, expected):
        assert guest_count_multiplier(guests) == expected


class TestEstimatePrice:
    def test_birthday_mumbai_compounds_surcharge(self):
        assert estimate_price(Occasion.BIRTHDAY, "10000-20000", 25, "Mumbai") == 11500

    def test_defaults_to_25_guests_and_no_surcharge(self):
        assert estimate_price(Occasion.CORPORATE, "5000-10000") == 7500

    def test_occasion_multiplier(self):
        assert estimate_price(Occasion.ANNIVERSARY, "20000-50000", 25, "") == 24000

    def test_unknown_budget_is_zero(self):
        assert estimate_price(Occasion.BIRTHDAY, "0-5000", 25, "Mumbai") == 0

    def test_unknown_occasion_uses_neutral_multiplier(self):
        assert estimate_price("GRADUATION", "10000-20000") == 10000

    def test_unknown_city_has_no_surcharge(self):
        assert estimate_price(Occasion.BIRTHDAY, "10000-20000", 25, "Atlantis") == 10000

    @pytest.mark.parametrize("occasion", list(Occasion))
    @pytest.mark.parametrize("budget", [b.value for b in BUDGET_RANGES])
    def test_non_decreasing_across_guest_buckets(self, occasion, budget):
        prices = [estimate_price(occasion, budget, g, "Delhi") for g in (10, 11, 25, 26, 50, 51, 100, 101)]
        assert prices == sorted(prices)


class TestCalculateBreakdown:
    def test_birthday_mumbai_reports_surcharge_separately(self):
        result = calculate_breakdown(Occasion.BIRTHDAY, "10000-20000", 25, "Mumbai")
        assert result.base_price == pytest.approx(10000)
        assert result.location_surcharge == pytest.approx(1500)
        assert result.guest_count_multiplier == 1.0
        assert result.addon_prices == {}
        assert result.total_price == pytest.approx(11500)
        assert result.taxes == pytest.approx(2070)
        assert result.final_amount == 13570

    def test_addons_use_lookup(self):
        prices = {"balloon-arch": 2500.0}
        result = calculate_breakdown(
            Occasion.ANNIVERSARY,
            "5000-10000",
            10,
            "Pune",
            addon_ids=["balloon-arch", "cake-table"],
            addon_price_lookup=lambda addon_id: prices.get(addon_id, 750.0),
        )
        # 5000 * 1.2 * 0.8 = 4800; surcharge 480
        assert result.base_price == pytest.approx(4800)
        assert result.location_surcharge == pytest.approx(480)
        assert result.addon_prices == {"balloon-arch": 2500.0, "cake-table": 750.0}
        assert result.total_price == pytest.approx(4800 + 480 + 3250)
        assert result.final_amount == round_half_up((4800 + 480 + 3250) * 1.18)

    def test_addons_default_price_without_lookup(self):
        result = calculate_breakdown(Occasion.OTHER, "5000-10000", addon_ids=["x", "y"])
        assert result.addon_prices == {"x": 1000.0, "y": 1000.0}
        assert result.total_price == pytest.approx(7000)

    def test_unknown_budget_gives_all_zero(self):
        result = calculate_breakdown(Occasion.CORPORATE, "nope", 40, "Delhi", addon_ids=["x"])
        assert result.base_price == 0
        assert result.addon_prices == {}
        assert result.location_surcharge == 0
        assert result.guest_count_multiplier == 0
        assert result.total_price == 0
        assert result.taxes == 0
        assert result.final_amount == 0

    @pytest.mark.parametrize("guests", [5, 25, 42, 99, 300])
    @pytest.mark.parametrize("city", ["Mumbai", "Jaipur", "Surat", ""])
    def test_tax_law(self, guests, city):
        result = calculate_breakdown(Occasion.BABY_SHOWER, "20000-50000", guests, city, addon_ids=["a"])
        assert result.taxes == pytest.approx(result.total_price * 0.18)
        assert result.final_amount == round_half_up(result.total_price + result.taxes)


class TestTokenAmount:
    @pytest.mark.parametrize(
        "total, expected",
        [(3000, 600), (1000, 500), (2000, 500), (5000, 1000), (10000, 2000), (15000, 2000), (20000, 2000)],
    )
    def test_twenty_percent_clamped(self, total, expected):
        assert calculate_token_amount(total) == expected

    def test_half_rounds_up(self):
        assert round_half_up(500.5) == 501
        assert round_half_up(2.5) == 3
        assert round_half_up(2.49) == 2


class TestLookups:
    def test_budget_ranges_ordered(self):
        assert [b.value for b in BUDGET_RANGES] == ["5000-10000", "10000-20000", "20000-50000", "50000+"]
        assert get_budget_range("50000+").min == 50000
        assert get_budget_range("missing") is None

    def test_surcharge_rates(self):
        assert get_location_surcharge_rate("Mumbai") == 0.15
        assert get_location_surcharge_rate("Surat") == 0.02
        assert get_location_surcharge_rate(None) == 0.0
        assert get_location_surcharge_rate("Goa") == 0.0

    def test_serviceable(self):
        assert is_location_serviceable("bangalore")
        assert is_location_serviceable("Andheri West, Mumbai")
        assert not is_location_serviceable("Goa")
        assert not is_location_serviceable("  ")

    def test_empty_location_matches_every_city(self):
        assert is_location_serviceable("")


class TestFormatPrice:
    @pytest.mark.parametrize(
        "amount, expected",
        [(0, "₹0"), (999, "₹999"), (1000, "₹1,000"), (50000, "₹50,000"), (100000, "₹1,00,000"), (12345678, "₹1,23,45,678"), (1499.5, "₹1,500")],
    )
    def test_indian_grouping(self, amount, expected):
        assert format_price(amount) == expected
