"""Line-item pricing for bookings."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional

from django.conf import settings

from . import errors
from .domain import ResolvedLineItem

logger = logging.getLogger(__name__)
ZERO = Decimal("0")


@dataclass(frozen=True)
class LineTotal:
    option_id: int
    name: str
    quantity: int
    price_per_night: Decimal
    taxes: Decimal
    nights: int
    total: Decimal
    addons: tuple[str, ...] = ()


@dataclass(frozen=True)
class BookingTotals:
    subtotal: Decimal
    taxes: Decimal
    fees: Decimal
    total_amount: Decimal
    lines: tuple[LineTotal, ...]

    @property
    def per_line_totals(self) -> tuple[Decimal, ...]:
        return tuple(line.total for line in self.lines)


def _money(value: object, *, field: str) -> Decimal:
    """Convert to Decimal without rounding; reject negative or non-finite values."""
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value))
        except (InvalidOperation, TypeError, ValueError):
            raise errors.ValidationError(f"{field} must be a number.") from None
    if not amount.is_finite() or amount < ZERO:
        raise errors.ValidationError(f"{field} must be a non-negative amount.")
    return amount


def _unit_prices(item: ResolvedLineItem, allow_overrides: bool) -> tuple[Decimal, Decimal]:
    price = item.snapshot.price
    taxes = item.snapshot.taxes
    if item.price_override is not None or item.taxes_override is not None:
        if allow_overrides:
            if item.price_override is not None:
                price = item.price_override
            if item.taxes_override is not None:
                taxes = item.taxes_override
        else:
            logger.info(
                "bookings: ignoring client price override for option %s",
                item.snapshot.option_id,
            )
    return _money(price, field="pricePerNight"), _money(taxes, field="taxes")


def compute_totals(
    nights: int,
    line_items: Iterable[ResolvedLineItem],
    extra_fees: object = ZERO,
    *,
    allow_overrides: Optional[bool] = None,
) -> BookingTotals:
    """
    Aggregate per-line and booking totals.

    For each line: total = (pricePerNight + taxes) * quantity * nights.
    subtotal and taxes accumulate the two parts separately, and
    total_amount = subtotal + taxes + fees. Values are Decimals and are not
    rounded here.
    """
    if nights < 1:
        raise errors.ValidationError("A booking must span at least one night.")
    if allow_overrides is None:
        allow_overrides = settings.BOOKING_ALLOW_PRICE_OVERRIDES

    fees = _money(extra_fees if extra_fees is not None else ZERO, field="fees")
    subtotal = ZERO
    taxes_total = ZERO
    lines: list[LineTotal] = []

    for item in line_items:
        price, taxes = _unit_prices(item, allow_overrides)
        units = item.quantity * nights
        subtotal += price * units
        taxes_total += taxes * units
        lines.append(
            LineTotal(
                option_id=item.snapshot.option_id,
                name=item.snapshot.name,
                quantity=item.quantity,
                price_per_night=price,
                taxes=taxes,
                nights=nights,
                total=(price + taxes) * units,
                addons=item.addons,
            )
        )

    return BookingTotals(
        subtotal=subtotal,
        taxes=taxes_total,
        fees=fees,
        total_amount=subtotal + taxes_total + fees,
        lines=tuple(lines),
    )
