#!/usr/bin/env python3
"""Tests for DailyLog and FuelEntry."""
from datetime import date

import pytest

from ledger import (
    AlreadyClosed,
    BelowOpening,
    DailyLog,
    EntryKind,
    EntryStatus,
    FuelEntry,
    MissingRequiredField,
    OdometerInterval,
)


class TestDailyLog:
    """Tests for DailyLog."""

    def test_defaults_to_open(self):
        log = DailyLog(7, date(2025, 3, 1), OdometerInterval(100))
        assert log.status is EntryStatus.OPEN
        assert log.is_open
        assert log.id is None
        assert log.kind is EntryKind.DAILY_LOG

    def test_close_returns_closed_copy(self):
        log = DailyLog(7, date(2025, 3, 1), OdometerInterval(100), id=3)
        closed = log.close(160)
        assert closed.is_closed
        assert closed.closing_km == 160
        assert closed.distance == 60
        assert closed.id == 3
        # Original untouched
        assert log.is_open
        assert log.closing_km is None

    def test_close_below_opening_raises(self):
        log = DailyLog(7, date(2025, 3, 1), OdometerInterval(100))
        with pytest.raises(BelowOpening):
            log.close(90)

    def test_close_twice_raises_already_closed(self):
        closed = DailyLog(7, date(2025, 3, 1), OdometerInterval(100)).close(120)
        with pytest.raises(AlreadyClosed):
            closed.close(130)

    def test_closed_without_reading_rejected(self):
        with pytest.raises(MissingRequiredField):
            DailyLog(7, date(2025, 3, 1), OdometerInterval(100), EntryStatus.CLOSED)

    def test_open_with_reading_rejected(self):
        with pytest.raises(ValueError):
            DailyLog(7, date(2025, 3, 1), OdometerInterval(100, 120), EntryStatus.OPEN)

    def test_with_id(self):
        log = DailyLog(7, date(2025, 3, 1), OdometerInterval(100))
        assert log.with_id(12).id == 12


class TestFuelEntry:
    """Tests for FuelEntry."""

    def test_total_cost(self):
        entry = FuelEntry(
            7, date(2025, 3, 1), OdometerInterval(100),
            supplier_id=1, litres=40, price_per_litre=95.5,
        )
        assert entry.kind is EntryKind.FUEL_ENTRY
        assert entry.total_cost == pytest.approx(3820.0)
        assert not entry.is_placeholder

    def test_placeholder_without_details(self):
        """A refill placeholder carries only the interval."""
        entry = FuelEntry(7, date(2025, 3, 1), OdometerInterval(100))
        assert entry.is_placeholder
        assert entry.total_cost is None

    def test_partial_details_still_placeholder(self):
        entry = FuelEntry(7, date(2025, 3, 1), OdometerInterval(100), supplier_id=2)
        assert entry.is_placeholder

    def test_negative_litres_rejected(self):
        with pytest.raises(MissingRequiredField) as exc:
            FuelEntry(7, date(2025, 3, 1), OdometerInterval(100), litres=-5)
        assert exc.value.field == "litres"

    def test_negative_price_rejected(self):
        with pytest.raises(MissingRequiredField) as exc:
            FuelEntry(7, date(2025, 3, 1), OdometerInterval(100), price_per_litre=-1)
        assert exc.value.field == "price_per_litre"

    def test_close_keeps_fuel_details(self):
        entry = FuelEntry(
            7, date(2025, 3, 1), OdometerInterval(100),
            supplier_id=1, litres=40, price_per_litre=90,
        )
        closed = entry.close(500)
        assert isinstance(closed, FuelEntry)
        assert closed.litres == 40
        assert closed.distance == 400

    def test_open_entry_with_zero_litres_rejected(self):
        with pytest.raises(MissingRequiredField) as exc:
            FuelEntry(
                7, date(2025, 3, 1), OdometerInterval(100),
                supplier_id=1, litres=0, price_per_litre=90,
            )
        assert exc.value.field == "litres"

    def test_closed_entry_may_record_zero_litres(self):
        """Stored history with an empty fill still loads; its mileage is undefined."""
        entry = FuelEntry(
            7, date(2025, 3, 1), OdometerInterval(100, 200), EntryStatus.CLOSED,
            supplier_id=1, litres=0, price_per_litre=90,
        )
        assert entry.litres == 0

    @pytest.mark.parametrize("field", ["litres", "price_per_litre"])
    @pytest.mark.parametrize("value", [float("nan"), float("inf")])
    def test_non_finite_fuel_details_rejected(self, field, value):
        with pytest.raises(MissingRequiredField) as exc:
            FuelEntry(7, date(2025, 3, 1), OdometerInterval(100), **{field: value})
        assert exc.value.field == field
