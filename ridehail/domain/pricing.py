"""
Fare Engine
===========

Formula
-------
Fare = round_half_up((Base_Fare + Distance x Rate_Per_KM[vehicle]) x Time_Multiplier)

* **Rate_Per_KM**: MINI 12, SEDAN 15, SUV 20 (unknown types fall back to MINI)
* **Time_Multiplier**: first matching surge window wins, in configured order
    - Peak  [17:00, 20:00) -> 1.25
    - Night [22:00, 06:00) -> 1.15
    - otherwise 1.0

Arithmetic is done in ``Decimal`` so that half-unit totals (e.g. 190 x 1.15 =
218.5) round up instead of falling victim to binary float error.

Complexity: O(w) per quote, w = number of surge windows.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal
from typing import Optional

from .enums import VehicleType
from .exceptions import ValidationError

DEFAULT_TAMPER_TOLERANCE = 0.10


def _dec(value: float | int) -> Decimal:
    return Decimal(str(value))


def round_half_up(value: float | Decimal) -> int:
    return int(_dec(value).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


# ── Configuration ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class SurgeWindow:
    """Hour range ``[start_hour, end_hour)``; wraps past midnight if start > end."""

    start_hour: int
    end_hour: int
    multiplier: float
    label: str

    def covers(self, hour: int) -> bool:
        if self.start_hour <= self.end_hour:
            return self.start_hour <= hour < self.end_hour
        return hour >= self.start_hour or hour < self.end_hour


PEAK_WINDOW = SurgeWindow(17, 20, 1.25, "Peak hours (5PM-8PM)")
NIGHT_WINDOW = SurgeWindow(22, 6, 1.15, "Night hours (10PM-6AM)")


@dataclass(frozen=True)
class PricingConfig:
    base_fare: float = 40.0
    per_km_rates: dict[VehicleType, float] = field(
        default_factory=lambda: {
            VehicleType.MINI: 12.0,
            VehicleType.SEDAN: 15.0,
            VehicleType.SUV: 20.0,
        }
    )
    # Order is precedence: peak is checked before night.
    surge_windows: tuple[SurgeWindow, ...] = (PEAK_WINDOW, NIGHT_WINDOW)
    fallback_vehicle: VehicleType = VehicleType.MINI


# ── Results ───────────────────────────────────────────────────────────


@dataclass(frozen=True)
class FareBreakdown:
    base_fare: float
    distance_fare: float
    distance_km: float
    per_km_rate: float
    time_multiplier: float
    time_multiplier_label: Optional[str]
    surge_applied: bool


@dataclass(frozen=True)
class FareQuote:
    total_fare: int
    surge_applied: bool
    breakdown: FareBreakdown


# ── Engine ────────────────────────────────────────────────────────────


class FareEngine:
    """High-level API used by the trip service and the quote endpoint."""

    def __init__(self, config: PricingConfig | None = None):
        self.config = config or PricingConfig()

    def per_km_rate(self, vehicle_type: VehicleType | str) -> float:
        rates = self.config.per_km_rates
        try:
            return rates[VehicleType(vehicle_type)]
        except (KeyError, ValueError):
            return rates[self.config.fallback_vehicle]

    def time_multiplier(self, hour: int) -> tuple[float, Optional[str]]:
        for window in self.config.surge_windows:
            if window.covers(hour):
                return window.multiplier, window.label
        return 1.0, None

    def calculate_fare(
        self,
        distance_km: float,
        vehicle_type: VehicleType | str,
        timestamp: datetime | None = None,
    ) -> FareQuote:
        if not math.isfinite(distance_km):
            raise ValidationError("Distance must be a finite number")
        if distance_km < 0:
            raise ValidationError("Distance must be non-negative")

        when = timestamp or datetime.now()
        rate = self.per_km_rate(vehicle_type)
        multiplier, label = self.time_multiplier(when.hour)

        base = _dec(self.config.base_fare)
        distance_fare = _dec(distance_km) * _dec(rate)
        subtotal = base + distance_fare
        total = round_half_up(subtotal * _dec(multiplier))
        surge = multiplier > 1

        return FareQuote(
            total_fare=total,
            surge_applied=surge,
            breakdown=FareBreakdown(
                base_fare=float(base),
                distance_fare=float(
                    distance_fare.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
                ),
                distance_km=distance_km,
                per_km_rate=rate,
                time_multiplier=multiplier,
                time_multiplier_label=label,
                surge_applied=surge,
            ),
        )


def cap_client_fare(
    client_fare: float,
    quote: FareQuote,
    tolerance: float = DEFAULT_TAMPER_TOLERANCE,
) -> int:
    """
    Accept a client-submitted fare up to ``total_fare x (1 + tolerance)``.

    The ceiling is floored so an integer fare never exceeds it.
    """
    if not math.isfinite(client_fare):
        raise ValidationError("Fare must be a finite number")
    ceiling = int(
        (_dec(quote.total_fare) * (1 + _dec(tolerance))).quantize(
            Decimal("1"), rounding=ROUND_FLOOR
        )
    )
    return min(round_half_up(client_fare), ceiling)


def calculate_fare(
    distance_km: float,
    vehicle_type: VehicleType | str,
    timestamp: datetime | None = None,
) -> FareQuote:
    """Quote with the default pricing configuration."""
    return FareEngine().calculate_fare(distance_km, vehicle_type, timestamp)
