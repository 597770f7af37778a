"""Promo code validation and discount calculation."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Mapping, Optional

from .pricing import round_half_up


@dataclass(frozen=True)
class PromoCode:
    """Either ``percent`` or ``fixed`` is set, never both."""

    percent: Optional[int] = None
    fixed: Optional[int] = None

    def __post_init__(self):
        if (self.percent is None) == (self.fixed is None):
            raise ValueError("A promo code needs exactly one of percent / fixed")


DEFAULT_PROMOS: dict[str, PromoCode] = {
    "WELCOME10": PromoCode(percent=10),
    "SAVE20": PromoCode(percent=20),
    "FLAT50": PromoCode(fixed=50),
    "RIDE100": PromoCode(fixed=100),
}


@dataclass(frozen=True)
class PromoResult:
    valid: bool
    message: str
    code: Optional[str] = None
    discount_percent: Optional[int] = None
    discount_fixed: Optional[int] = None


@dataclass(frozen=True)
class DiscountResult:
    final_fare: int
    discount: int


def normalize_code(code: str | None) -> str:
    return (code or "").strip().upper()


class PromoEvaluator:
    def __init__(
        self,
        promos: Mapping[str, PromoCode] | None = None,
        currency_symbol: str = "₹",
    ):
        registry = DEFAULT_PROMOS if promos is None else promos
        self.promos = {normalize_code(k): v for k, v in registry.items()}
        self.currency_symbol = currency_symbol

    def validate(self, code: str | None) -> PromoResult:
        normalized = normalize_code(code)
        if not normalized:
            return PromoResult(valid=False, message="Enter a promo code")

        promo = self.promos.get(normalized)
        if promo is None:
            return PromoResult(valid=False, message="Invalid promo code")

        if promo.percent is not None:
            return PromoResult(
                valid=True,
                code=normalized,
                discount_percent=promo.percent,
                message=f"{promo.percent}% off applied",
            )
        return PromoResult(
            valid=True,
            code=normalized,
            discount_fixed=promo.fixed,
            message=f"{self.currency_symbol}{promo.fixed} off applied",
        )

    @staticmethod
    def apply(fare: int, result: PromoResult) -> DiscountResult:
        if not result.valid:
            return DiscountResult(final_fare=fare, discount=0)

        discount = 0
        if result.discount_percent is not None:
            discount = round_half_up(Decimal(fare) * result.discount_percent / 100)
        elif result.discount_fixed is not None:
            discount = min(result.discount_fixed, fare)

        return DiscountResult(final_fare=max(0, fare - discount), discount=discount)


def validate_promo_code(code: str | None) -> PromoResult:
    return PromoEvaluator().validate(code)


def apply_discount(fare: int, result: PromoResult) -> DiscountResult:
    return PromoEvaluator.apply(fare, result)
