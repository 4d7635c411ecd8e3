"""Vehicle class and its reference enums."""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import List, Optional


class FuelType(Enum):
    PETROL = "PETROL"
    DIESEL = "DIESEL"
    ELECTRIC = "ELECTRIC"


class Ownership(Enum):
    OWNED = "OWNED"
    RENTED = "RENTED"


class RentPeriod(Enum):
    MONTHLY = "MONTHLY"
    DAILY = "DAILY"
    HOURLY = "HOURLY"


class VehicleStatus(Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    PLANNED = "PLANNED"


@dataclass
class StatusChange:
    """One period in a vehicle's status history."""

    status: VehicleStatus
    start_date: date
    end_date: Optional[date] = None
    reason: Optional[str] = None

    def covers(self, day: date) -> bool:
        if day < self.start_date:
            return False
        return self.end_date is None or day < self.end_date


class Vehicle:
    """A project vehicle, owned or rented."""

    def __init__(
        self,
        id: int,
        name: str,
        number: str,
        project_id: Optional[int] = None,
        fuel_type: FuelType = FuelType.DIESEL,
        ownership: Ownership = Ownership.OWNED,
        status: VehicleStatus = VehicleStatus.ACTIVE,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        rent_period: Optional[RentPeriod] = None,
        rent_price: Optional[float] = None,
        status_history: Optional[List[StatusChange]] = None,
    ):
        if ownership is Ownership.RENTED and rent_period is None:
            raise ValueError("A rented vehicle needs a rent period")
        if rent_price is not None and rent_price < 0:
            raise ValueError(f"Rent price cannot be negative: {rent_price}")
        self.id = id
        self.name = name
        self.number = number
        self.project_id = project_id
        self.fuel_type = fuel_type
        self.ownership = ownership
        self.status = status
        self.start_date = start_date
        self.end_date = end_date
        self.rent_period = rent_period
        self.rent_price = rent_price
        self.status_history = status_history or []

    @property
    def is_rented(self) -> bool:
        return self.ownership is Ownership.RENTED

    @property
    def display_name(self) -> str:
        """Vehicle name with its registration number."""
        return f"{self.name} ({self.number})" if self.number else self.name

    def status_as_of(self, day: date) -> VehicleStatus:
        """Status recorded for the period containing day, else the current one."""
        for change in reversed(self.status_history):
            if change.covers(day):
                return change.status
        return self.status

    def change_status(
        self, status: VehicleStatus, effective_date: date, reason: str
    ) -> StatusChange:
        """
        Record a status change effective from the given date.

        Ends the currently open period (if any) on effective_date and
        appends a new open period.
        """
        if not reason:
            raise ValueError("A status change needs a reason")
        for change in self.status_history:
            if change.end_date is None:
                if effective_date < change.start_date:
                    raise ValueError(
                        f"Status change on {effective_date} predates the "
                        f"current period starting {change.start_date}"
                    )
                change.end_date = effective_date
        change = StatusChange(status, effective_date, None, reason)
        self.status_history.append(change)
        self.status = status
        return change
