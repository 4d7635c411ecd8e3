#!/usr/bin/env python3
"""Tests for derived metric helper functions."""
from datetime import date, datetime

import pytest

from ledger import (
    DailyLog,
    EntryStatus,
    FuelEntry,
    OdometerInterval,
    Ownership,
    RentPeriod,
    Vehicle,
    calc_mileage,
    calc_rent_days,
    calc_rent_units,
    date_range,
    distance,
    filter_by_date,
    fuel_cost,
    mileage,
    rent_cost,
    summarize,
)

DAY = date(2025, 3, 1)


def fuel(opening, closing=None, litres=40.0, price=100.0, day=DAY):
    status = EntryStatus.CLOSED if closing is not None else EntryStatus.OPEN
    return FuelEntry(
        7, day, OdometerInterval(opening, closing), status,
        supplier_id=1, litres=litres, price_per_litre=price,
    )


def rented(period, price, start, end=None):
    return Vehicle(
        7, "JCB", "KA01",
        ownership=Ownership.RENTED,
        rent_period=period,
        rent_price=price,
        start_date=start,
        end_date=end,
    )


class TestDistanceAndMileage:
    """Tests for distance, calc_mileage and mileage."""

    def test_distance_closed(self):
        assert distance(fuel(100, 460)) == 360

    def test_distance_open_is_none(self):
        assert distance(fuel(100)) is None
        assert distance(DailyLog(7, DAY, OdometerInterval(100))) is None

    def test_mileage(self):
        assert mileage(fuel(100, 460, litres=30)) == 12

    def test_mileage_zero_litres_is_undefined(self):
        """No data rather than zero or an error."""
        assert mileage(fuel(100, 460, litres=0)) is None
        assert calc_mileage(360, 0) is None

    def test_mileage_missing_litres(self):
        assert mileage(fuel(100, 460, litres=None)) is None

    def test_mileage_open_entry(self):
        assert mileage(fuel(100)) is None

    def test_fuel_cost(self):
        assert fuel_cost(fuel(100, litres=12.5, price=96)) == 1200
        assert fuel_cost(fuel(100, price=None)) is None


class TestRentDays:
    """Tests for calc_rent_days inclusive counting."""

    def test_same_day_counts_one(self):
        assert calc_rent_days(date(2025, 1, 1), date(2025, 1, 1)) == 1

    def test_ten_day_span(self):
        assert calc_rent_days(date(2025, 1, 1), date(2025, 1, 10)) == 10

    def test_partial_day_rounds_up(self):
        """A datetime end part way through day 10 counts day 11 too."""
        assert calc_rent_days(date(2025, 1, 1), datetime(2025, 1, 10, 12, 0)) == 11

    def test_midnight_datetime_same_as_date(self):
        assert calc_rent_days(date(2025, 1, 1), datetime(2025, 1, 10)) == 10


class TestRentUnits:
    """Tests for calc_rent_units."""

    def test_daily(self):
        assert calc_rent_units(10, RentPeriod.DAILY) == 10

    def test_monthly_rounds_up(self):
        assert calc_rent_units(40, RentPeriod.MONTHLY) == 2
        assert calc_rent_units(30, RentPeriod.MONTHLY) == 1
        assert calc_rent_units(31, RentPeriod.MONTHLY) == 2

    def test_hourly_counts_full_days(self):
        assert calc_rent_units(1, RentPeriod.HOURLY) == 24


class TestRentCost:
    """Tests for rent_cost proration."""

    def test_daily_same_day(self):
        vehicle = rented(RentPeriod.DAILY, 100, date(2025, 1, 1), date(2025, 1, 1))
        assert rent_cost(vehicle) == 100

    def test_daily_ten_days(self):
        vehicle = rented(RentPeriod.DAILY, 100, date(2025, 1, 1), date(2025, 1, 10))
        assert rent_cost(vehicle) == 1000

    def test_monthly_forty_days(self):
        vehicle = rented(RentPeriod.MONTHLY, 1000, date(2025, 1, 1), date(2025, 2, 9))
        assert calc_rent_days(vehicle.start_date, vehicle.end_date) == 40
        assert rent_cost(vehicle) == 2000

    def test_hourly_same_day(self):
        vehicle = rented(RentPeriod.HOURLY, 50, date(2025, 1, 1), date(2025, 1, 1))
        assert rent_cost(vehicle) == 50 * 24

    def test_open_ended_uses_as_of(self):
        vehicle = rented(RentPeriod.DAILY, 100, date(2025, 1, 1))
        assert rent_cost(vehicle, as_of=date(2025, 1, 5)) == 500
        assert rent_cost(vehicle, as_of=datetime(2025, 1, 5, 9, 30)) == 600

    def test_end_date_wins_over_as_of(self):
        vehicle = rented(RentPeriod.DAILY, 100, date(2025, 1, 1), date(2025, 1, 3))
        assert rent_cost(vehicle, as_of=date(2025, 6, 1)) == 300

    def test_owned_has_no_rent(self):
        assert rent_cost(Vehicle(7, "Ace", "MH12")) is None

    def test_rented_without_price(self):
        vehicle = rented(RentPeriod.DAILY, None, date(2025, 1, 1), date(2025, 1, 2))
        assert rent_cost(vehicle) is None


class TestSummarize:
    """Tests for summarize rollups."""

    def test_totals_over_closed_entries(self):
        summary = summarize([
            fuel(0, 400, litres=40, price=100),
            fuel(400, 700, litres=20, price=110),
            fuel(700),  # open, skipped
        ])
        assert summary.entry_count == 2
        assert summary.total_distance == 700
        assert summary.total_litres == 60
        assert summary.total_cost == 6200
        assert summary.average_mileage == pytest.approx(700 / 60)
        assert summary.cost_per_litre == pytest.approx(6200 / 60)
        assert summary.cost_per_km == pytest.approx(6200 / 700)

    def test_missing_values_excluded(self):
        """An entry without a price adds litres and distance but no cost."""
        summary = summarize([
            fuel(0, 100, litres=10, price=None),
            fuel(100, 300, litres=20, price=50),
        ])
        assert summary.total_litres == 30
        assert summary.total_cost == 1000
        assert summary.total_distance == 300

    def test_daily_logs_add_distance_only(self):
        summary = summarize([
            DailyLog(7, DAY, OdometerInterval(0, 80), EntryStatus.CLOSED),
        ])
        assert summary.total_distance == 80
        assert summary.total_litres == 0
        assert summary.average_mileage is None

    def test_empty(self):
        summary = summarize([])
        assert summary.entry_count == 0
        assert summary.average_mileage is None
        assert summary.cost_per_litre is None
        assert summary.cost_per_km is None


class TestDateRange:
    """Tests for date_range reporting windows."""

    NOW = datetime(2025, 3, 31, 15, 30)

    def test_day(self):
        start, end = date_range("day", self.NOW)
        assert start == datetime(2025, 3, 31)
        assert end.date() == date(2025, 3, 31)
        assert end > self.NOW

    def test_week(self):
        assert date_range("week", self.NOW) == (datetime(2025, 3, 24), self.NOW)

    def test_month_is_calendar_aware(self):
        start, _ = date_range("month", self.NOW)
        assert start == datetime(2025, 2, 28)

    def test_year(self):
        start, _ = date_range("year", self.NOW)
        assert start == datetime(2024, 3, 31)

    def test_all(self):
        start, end = date_range("all", self.NOW)
        assert start == datetime(1970, 1, 1)
        assert end == self.NOW

    def test_unknown_period(self):
        with pytest.raises(ValueError):
            date_range("fortnight", self.NOW)


class TestFilterByDate:
    """Tests for filter_by_date."""

    def test_inclusive_window(self):
        entries = [
            fuel(0, 10, day=date(2025, 3, 1)),
            fuel(10, 20, day=date(2025, 3, 5)),
            fuel(20, 30, day=date(2025, 3, 10)),
        ]
        kept = filter_by_date(entries, date(2025, 3, 1), date(2025, 3, 5))
        assert [e.date.day for e in kept] == [1, 5]
