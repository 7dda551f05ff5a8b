"""Quote template pricing.

The total is a fixed computation: every included service costs
``base_price * pax * duration``; a rule named "Group Discount" takes 10 %
off for ten or more pax, and a rule named "Seasonal Markup" adds 20 % in
Peak season. Rules apply in the order they are listed, once per
occurrence. The ``formula`` text stored on services and rules is shown to
staff but never evaluated.
"""
import logging
from decimal import Decimal, InvalidOperation
from typing import Any

from .errors import InvalidArgument
from .models import PricingRule, QuoteTemplate, TemplateService

logger = logging.getLogger(__name__)

GROUP_DISCOUNT = "Group Discount"
SEASONAL_MARKUP = "Seasonal Markup"

GROUP_DISCOUNT_MIN_PAX = 10
GROUP_DISCOUNT_RATE = Decimal("0.10")
SEASONAL_MARKUP_RATE = Decimal("0.20")
PEAK_SEASON = "Peak"


def _count(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgument(f"{name} must be a whole number, got {value!r}")
    if value < 0:
        raise InvalidArgument(f"{name} must not be negative, got {value}")
    return value


def _amount(value: Any, name: str) -> Decimal:
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        raise InvalidArgument(f"{name} must be numeric, got {value!r}")
    try:
        amount = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
    except InvalidOperation as e:
        raise InvalidArgument(f"{name} must be numeric, got {value!r}") from e
    if not amount.is_finite():
        raise InvalidArgument(f"{name} must be finite, got {value!r}")
    if amount < 0:
        raise InvalidArgument(f"{name} must not be negative, got {value}")
    return amount


def price_template(template: QuoteTemplate, pax_count: int, season: str = "Normal") -> Decimal:
    """Compute the total price of a quote template.

    Raises InvalidArgument for non-numeric or negative pax count, duration
    or base price.
    """
    pax = _count(pax_count, "pax_count")
    duration = _count(template.duration, "duration")

    total = Decimal("0")
    for service in template.services:
        base_price = _amount(service.base_price, f"base_price of {service.service_name or service.service_type}")
        if not service.is_included:
            continue
        total += base_price * pax * duration

    for rule in template.formulas:
        if rule.name == GROUP_DISCOUNT and pax >= GROUP_DISCOUNT_MIN_PAX:
            total -= total * GROUP_DISCOUNT_RATE
        elif rule.name == SEASONAL_MARKUP and season == PEAK_SEASON:
            total += total * SEASONAL_MARKUP_RATE

    logger.debug(f"Priced template '{template.name}' for {pax} pax ({season}): {total}")
    return total


DEFAULT_QUOTE_TEMPLATES = [
    QuoteTemplate(
        name="Classic Safari 7 Days",
        description="Standard 7-day safari package",
        tour_type="Group",
        duration=7,
        services=[
            TemplateService(
                service_type="accommodation",
                service_name="Lodge Accommodation",
                description="3-star lodge accommodation",
                base_price=Decimal("1200"),
                formula="=basePrice * paxCount * nights",
            ),
            TemplateService(
                service_type="activity",
                service_name="Game Drives",
                description="Morning and afternoon game drives",
                base_price=Decimal("450"),
                formula="=basePrice * paxCount * days",
            ),
            TemplateService(
                service_type="meal",
                service_name="Full Board",
                description="Breakfast, lunch, and dinner",
                base_price=Decimal("350"),
                formula="=basePrice * paxCount * days",
            ),
        ],
        formulas=[
            PricingRule(
                name=GROUP_DISCOUNT,
                formula="=IF(paxCount >= 10, totalAmount * 0.1, 0)",
                description="10% discount for groups of 10 or more",
                variables=["paxCount", "totalAmount"],
            ),
            PricingRule(
                name=SEASONAL_MARKUP,
                formula="=IF(season = 'Peak', totalAmount * 0.2, 0)",
                description="20% markup during peak season",
                variables=["season", "totalAmount"],
            ),
        ],
    ),
]
