"""Tests for the pricing engine and pricing service."""
import pytest
from datetime import date, datetime
from decimal import Decimal
from types import SimpleNamespace
from app.backend.db.models import RateType
from app.backend.schemas.pricing import PricingConfig
from app.backend.services.errors import (
    CurrencyMismatchError,
    InvalidDateRangeError,
    MinimumStayViolationError,
    RateGapError,
    RoomTypeNotFoundError,
    UnitNotFoundError,
)
from app.backend.services.pricing import PricingEngine, PricingService, parse_booking_date
from app.backend.services.repository import RateRepository, SqlRateRepository


class InMemoryRateRepository(RateRepository):
    """Repository over plain dictionaries."""
    
    def __init__(self, units=None, room_types=None, rates=None, configs=None):
        self.units = units or {}
        self.room_types = room_types or {}
        self.rates = rates or []
        self.configs = configs or {}
    
    def get_unit(self, unit_id):
        return self.units.get(unit_id)
    
    def get_room_type(self, room_type_id):
        return self.room_types.get(room_type_id)
    
    def get_rates_for_room_type(self, room_type_id):
        return [rate for rate in self.rates if rate.room_type_id == room_type_id]
    
    def get_pricing_config(self, room_type_id):
        return self.configs.get(room_type_id, PricingConfig())


@pytest.fixture
def pricing_service(db_session):
    return PricingService(SqlRateRepository(db_session))


def test_parse_booking_date():
    assert parse_booking_date("2025-01-15", "start_date") == date(2025, 1, 15)
    assert parse_booking_date(date(2025, 1, 15), "start_date") == date(2025, 1, 15)
    parsed = parse_booking_date(datetime(2025, 1, 15, 9, 30), "start_date")
    assert parsed == date(2025, 1, 15)
    assert type(parsed) is date
    for bad in ("2025-1-15", "15/01/2025", "2025-02-30", None):
        with pytest.raises(InvalidDateRangeError):
            parse_booking_date(bad, "start_date")


def test_single_period(pricing_service):
    """Five nights at 150.00 daily is 750.00 in one segment."""
    breakdown = pricing_service.calculate_price("unit_dt_exec_001", "2025-01-15", "2025-01-20")
    
    assert breakdown.total_price == Decimal("750.00")
    assert breakdown.currency == "USD"
    assert breakdown.rate_type == RateType.DAILY
    assert breakdown.total_nights == 5
    assert len(breakdown.segments) == 1
    assert breakdown.segments[0].days == 5
    assert breakdown.segments[0].rate_id == "rate_exec_dt_daily_q1"
    assert breakdown.complete
    assert breakdown.booking_details.room_type_id == "rt_exec_office_dt"
    assert breakdown.booking_details.room_type == "Executive Office"


def test_multi_period_segments_partition_booking(make_rate):
    rates = [
        make_rate("q1", "daily", "100.00", "2025-01-01", "2025-03-31"),
        make_rate("q2", "daily", "105.00", "2025-04-01", "2025-06-30"),
    ]
    breakdown = PricingEngine().price(
        "rt_test", rates, PricingConfig(), date(2025, 3, 25), date(2025, 4, 5)
    )
    
    assert len(breakdown.segments) == 2
    first, second = breakdown.segments
    assert first.period_start == date(2025, 3, 25)
    assert first.period_end == second.period_start == date(2025, 4, 1)
    assert second.period_end == date(2025, 4, 5)
    assert first.days + second.days == breakdown.total_nights == 11
    assert first.subtotal + second.subtotal == breakdown.total_price == Decimal("1120.00")


def test_monthly_for_long_stay(pricing_service):
    breakdown = pricing_service.calculate_price("unit_dt_desk_001", "2025-01-01", "2025-03-02")
    assert breakdown.rate_type == RateType.MONTHLY
    assert breakdown.total_nights == 60
    assert breakdown.total_price == Decimal("1600.00")
    assert breakdown.segments[0].units_of_duration == Decimal("2.0000")


def test_zero_rates_gap_covers_whole_booking(pricing_service):
    with pytest.raises(RateGapError) as exc_info:
        pricing_service.calculate_price("unit_dt_meet_001", "2025-05-01", "2025-05-04")
    assert exc_info.value.gaps == [{"start_date": "2025-05-01", "end_date": "2025-05-04"}]


def test_zero_rates_never_priced_as_free(pricing_service):
    with pytest.raises(RateGapError):
        pricing_service.calculate_price("unit_dt_meet_001", "2025-05-01", "2025-05-04", allow_partial=True)


def test_partial_gap_lists_only_uncovered_nights(pricing_service):
    with pytest.raises(RateGapError) as exc_info:
        pricing_service.calculate_price("unit_dt_exec_001", "2025-03-25", "2025-04-05")
    assert exc_info.value.gaps == [{"start_date": "2025-04-01", "end_date": "2025-04-05"}]
    assert exc_info.value.details["rate_type"] == "daily"


def test_gap_between_q1_and_h2(pricing_service):
    """A long stay across the missing Q2 window is priced daily and reports the daily gap."""
    with pytest.raises(RateGapError) as exc_info:
        pricing_service.calculate_price("unit_dt_exec_001", "2025-03-30", "2025-07-03")
    assert exc_info.value.details["rate_type"] == "daily"
    assert exc_info.value.gaps == [{"start_date": "2025-04-01", "end_date": "2025-07-01"}]


def test_covering_hourly_does_not_hide_daily_gap(make_rate):
    rates = [
        make_rate("hourly", "hourly", "15.00", "2025-01-01", "2025-12-31"),
        make_rate("daily_h1", "daily", "50.00", "2025-01-01", "2025-06-30"),
    ]
    with pytest.raises(RateGapError) as exc_info:
        PricingEngine().price("rt_test", rates, PricingConfig(), date(2025, 6, 28), date(2025, 7, 3))
    assert exc_info.value.details["rate_type"] == "daily"
    assert exc_info.value.gaps == [{"start_date": "2025-07-01", "end_date": "2025-07-03"}]


def test_allow_partial_prices_covered_nights(pricing_service):
    breakdown = pricing_service.calculate_price(
        "unit_dt_exec_001", "2025-03-30", "2025-07-03", allow_partial=True
    )
    
    assert not breakdown.complete
    assert breakdown.rate_type == RateType.DAILY
    assert breakdown.subtotal == Decimal("650.00")
    assert breakdown.adjustments[0].amount == Decimal("-65.00")
    assert breakdown.total_price == Decimal("585.00")
    assert [gap.model_dump(mode="json") for gap in breakdown.gaps] == [
        {"start_date": "2025-04-01", "end_date": "2025-07-01"}
    ]
    assert any(warning.startswith("RATE_GAP") for warning in breakdown.warnings)


def test_overlap_tie_break_is_deterministic(make_rate):
    rates = [
        make_rate("rate_office_tc_daily_h1", "daily", "120.00", "2025-01-01", "2025-06-30",
                  room_type_id="rt_private_office_tc"),
        make_rate("rate_office_tc_daily_overlap", "daily", "125.00", "2025-06-15", "2025-09-30",
                  room_type_id="rt_private_office_tc"),
    ]
    config = PricingConfig(rate_selection_strategy="daily")
    engine = PricingEngine()
    
    results = [
        engine.price("rt_private_office_tc", list(order), config, date(2025, 6, 10), date(2025, 6, 20))
        for order in (rates, reversed(rates), rates)
    ]
    
    for breakdown in results:
        assert [s.rate_id for s in breakdown.segments] == [
            "rate_office_tc_daily_h1",
            "rate_office_tc_daily_overlap",
        ]
        assert breakdown.total_price == Decimal("1225.00")
        assert len(breakdown.warnings) == 1
        assert breakdown.warnings[0].startswith("OVERLAPPING_RATES_WARNING")
        assert "rt_private_office_tc" in breakdown.warnings[0]


def test_idempotent_output(pricing_service):
    first = pricing_service.calculate_price("unit_tc_office_001", "2025-06-10", "2025-06-20")
    second = pricing_service.calculate_price("unit_tc_office_001", "2025-06-10", "2025-06-20")
    assert first.model_dump_json() == second.model_dump_json()


def test_lowest_total_keeps_cheapest_rate_type(pricing_service):
    breakdown = pricing_service.calculate_price("unit_tc_office_001", "2025-02-03", "2025-02-13")
    assert breakdown.rate_type == RateType.MONTHLY
    assert breakdown.total_price == Decimal("933.33")


def test_minimum_stay_violation(pricing_service):
    with pytest.raises(MinimumStayViolationError):
        pricing_service.calculate_price("unit_tc_office_001", "2025-02-03", "2025-02-06")


def test_weekend_premium_applied(pricing_service):
    breakdown = pricing_service.calculate_price("unit_tc_collab_001", "2025-03-03", "2025-03-10")
    assert breakdown.subtotal == Decimal("1400.00")
    assert [a.kind for a in breakdown.adjustments] == ["weekend_premium"]
    assert breakdown.total_price == Decimal("1480.00")


def test_length_of_stay_discount_applied(pricing_service):
    breakdown = pricing_service.calculate_price("unit_dt_exec_001", "2025-01-05", "2025-01-15")
    assert breakdown.subtotal == Decimal("1500.00")
    assert breakdown.adjustments[0].kind == "length_of_stay_discount"
    assert breakdown.total_price == Decimal("1425.00")


def test_currency_invariant(make_rate):
    rates = [
        make_rate("usd", "daily", "100.00", "2025-01-01", "2025-01-31"),
        make_rate("eur", "daily", "90.00", "2025-02-01", "2025-02-28", currency="EUR"),
    ]
    with pytest.raises(CurrencyMismatchError):
        PricingEngine().price("rt_test", rates, PricingConfig(), date(2025, 1, 30), date(2025, 2, 3))


def test_one_day_booking(pricing_service):
    breakdown = pricing_service.calculate_price("unit_dt_desk_001", "2025-06-01", "2025-06-02")
    assert breakdown.total_nights == 1
    assert breakdown.total_price == Decimal("50.00")


@pytest.mark.parametrize("start,end", [
    ("2025-06-01", "2025-06-01"),
    ("2025-06-05", "2025-06-01"),
    ("2025-06-01", "not-a-date"),
])
def test_invalid_date_range(pricing_service, start, end):
    with pytest.raises(InvalidDateRangeError):
        pricing_service.calculate_price("unit_dt_desk_001", start, end)


def test_unknown_unit(pricing_service):
    with pytest.raises(UnitNotFoundError) as exc_info:
        pricing_service.calculate_price("unit_missing", "2025-06-01", "2025-06-05")
    assert exc_info.value.status_code == 404


def test_unit_with_missing_room_type(make_rate):
    repository = InMemoryRateRepository(
        units={"unit_orphan": SimpleNamespace(unit_id="unit_orphan", room_type_id="rt_gone")}
    )
    with pytest.raises(RoomTypeNotFoundError):
        PricingService(repository).calculate_price("unit_orphan", "2025-06-01", "2025-06-05")


def test_service_reads_rates_through_repository(make_rate):
    repository = InMemoryRateRepository(
        units={"u1": SimpleNamespace(unit_id="u1", room_type_id="rt_test")},
        room_types={"rt_test": SimpleNamespace(room_type_id="rt_test", name="Test Room")},
        rates=[make_rate("hourly", "hourly", "10.00", "2025-01-01", "2025-12-31")],
    )
    breakdown = PricingService(repository).calculate_price("u1", "2025-06-01", "2025-06-03")
    
    assert breakdown.rate_type == RateType.HOURLY
    assert breakdown.segments[0].units_of_duration == Decimal("48.0000")
    assert breakdown.total_price == Decimal("480.00")
