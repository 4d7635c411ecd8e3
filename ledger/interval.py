"""OdometerInterval value type shared by both ledger streams."""

import math
from dataclasses import dataclass
from typing import Optional

from .errors import BelowOpening, MissingRequiredField


@dataclass(frozen=True)
class OdometerInterval:
    """A pair of odometer readings bounding one usage segment."""

    opening_km: float
    closing_km: Optional[float] = None

    def __post_init__(self):
        if self.opening_km is None:
            raise MissingRequiredField("opening_km")
        if not math.isfinite(self.opening_km) or self.opening_km < 0:
            raise MissingRequiredField("opening_km", self.opening_km)
        if self.closing_km is None:
            return
        if not math.isfinite(self.closing_km):
            raise MissingRequiredField("closing_km", self.closing_km)
        if self.closing_km < self.opening_km:
            raise BelowOpening(self.closing_km, self.opening_km)

    @property
    def is_closed(self) -> bool:
        return self.closing_km is not None

    @property
    def distance(self) -> Optional[float]:
        """closing - opening, or None while the interval is open."""
        if self.closing_km is None:
            return None
        return self.closing_km - self.opening_km

    def closed_at(self, closing_km: float) -> "OdometerInterval":
        """Return a new interval closed at the given reading."""
        if closing_km is None:
            raise MissingRequiredField("closing_km")
        return OdometerInterval(self.opening_km, closing_km)
