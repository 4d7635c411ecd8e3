#!/usr/bin/env python3
"""Tests for Vehicle class and status history."""
from datetime import date

import pytest

from ledger import (
    FuelType,
    Ownership,
    RentPeriod,
    StatusChange,
    Vehicle,
    VehicleStatus,
)


class TestVehicle:
    """Tests for Vehicle attributes."""

    def test_defaults(self):
        vehicle = Vehicle(7, "Tata Ace", "MH12AB1234")
        assert vehicle.ownership is Ownership.OWNED
        assert vehicle.status is VehicleStatus.ACTIVE
        assert vehicle.fuel_type is FuelType.DIESEL
        assert not vehicle.is_rented
        assert vehicle.status_history == []

    def test_display_name(self):
        assert Vehicle(7, "Tata Ace", "MH12AB1234").display_name == "Tata Ace (MH12AB1234)"
        assert Vehicle(7, "Tata Ace", "").display_name == "Tata Ace"

    def test_rented_needs_period(self):
        with pytest.raises(ValueError):
            Vehicle(7, "JCB", "KA01", ownership=Ownership.RENTED, rent_price=100)

    def test_negative_rent_rejected(self):
        with pytest.raises(ValueError):
            Vehicle(
                7, "JCB", "KA01",
                ownership=Ownership.RENTED,
                rent_period=RentPeriod.DAILY,
                rent_price=-1,
            )

    def test_rented(self):
        vehicle = Vehicle(
            7, "JCB", "KA01",
            ownership=Ownership.RENTED,
            rent_period=RentPeriod.MONTHLY,
            rent_price=1000,
        )
        assert vehicle.is_rented


class TestVehicleStatusHistory:
    """Tests for change_status and status_as_of."""

    @pytest.fixture
    def vehicle(self):
        return Vehicle(
            7, "Tata Ace", "MH12AB1234",
            start_date=date(2025, 1, 1),
            status_history=[StatusChange(VehicleStatus.ACTIVE, date(2025, 1, 1))],
        )

    def test_change_status_closes_open_period(self, vehicle):
        change = vehicle.change_status(
            VehicleStatus.INACTIVE, date(2025, 3, 1), "Engine overhaul"
        )
        assert vehicle.status is VehicleStatus.INACTIVE
        assert vehicle.status_history[0].end_date == date(2025, 3, 1)
        assert change.start_date == date(2025, 3, 1)
        assert change.end_date is None
        assert change.reason == "Engine overhaul"

    def test_status_as_of(self, vehicle):
        vehicle.change_status(VehicleStatus.INACTIVE, date(2025, 3, 1), "Repair")
        assert vehicle.status_as_of(date(2025, 2, 28)) is VehicleStatus.ACTIVE
        assert vehicle.status_as_of(date(2025, 3, 1)) is VehicleStatus.INACTIVE
        assert vehicle.status_as_of(date(2026, 1, 1)) is VehicleStatus.INACTIVE

    def test_status_as_of_before_history_uses_current(self, vehicle):
        assert vehicle.status_as_of(date(2024, 6, 1)) is VehicleStatus.ACTIVE

    def test_change_needs_reason(self, vehicle):
        with pytest.raises(ValueError):
            vehicle.change_status(VehicleStatus.INACTIVE, date(2025, 3, 1), "")

    def test_change_cannot_predate_current_period(self, vehicle):
        with pytest.raises(ValueError):
            vehicle.change_status(VehicleStatus.INACTIVE, date(2024, 12, 1), "Typo")
        assert vehicle.status is VehicleStatus.ACTIVE
