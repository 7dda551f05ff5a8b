from dataclasses import replace
from decimal import Decimal

import pytest

from backoffice.errors import InvalidArgument
from backoffice.models import PricingRule, QuoteTemplate, TemplateService
from backoffice.pricing import DEFAULT_QUOTE_TEMPLATES, price_template

SAFARI = DEFAULT_QUOTE_TEMPLATES[0]


def test_no_discount_below_ten_pax():
    # (1200 + 450 + 350) * 9 pax * 7 days
    assert price_template(SAFARI, 9, "Normal") == Decimal("126000")


def test_group_discount_at_ten_pax():
    assert price_template(SAFARI, 10, "Normal") == Decimal("140000") * Decimal("0.9")


def test_discount_then_peak_markup():
    assert price_template(SAFARI, 10, "Peak") == Decimal("151200")
    assert price_template(SAFARI, 12, "Peak") == Decimal("181440")


def test_peak_markup_without_discount():
    assert price_template(SAFARI, 5, "Peak") == Decimal("84000")


def test_default_season_is_normal():
    assert price_template(SAFARI, 9) == price_template(SAFARI, 9, "Normal")


def test_excluded_services_are_not_priced():
    services = [replace(s, is_included=(s.service_type != "meal")) for s in SAFARI.services]
    template = replace(SAFARI, services=services)
    assert price_template(template, 1, "Normal") == Decimal("1650") * 7


def test_rules_matched_by_name_only():
    template = QuoteTemplate(
        name="Custom",
        tour_type="FIT",
        duration=2,
        services=[TemplateService(service_type="activity", base_price=Decimal("100"))],
        formulas=[PricingRule(name="Big Group Discount", formula="=IF(paxCount >= 10, totalAmount * 0.1, 0)")],
    )
    assert price_template(template, 20, "Peak") == Decimal("4000")


def test_zero_pax():
    assert price_template(SAFARI, 0, "Peak") == Decimal("0")


@pytest.mark.parametrize("pax", ["10", 10.5, True, -1, None])
def test_invalid_pax_count(pax):
    with pytest.raises(InvalidArgument):
        price_template(SAFARI, pax, "Normal")


@pytest.mark.parametrize("price", ["abc", float("nan"), -5, None])
def test_invalid_base_price(price):
    services = [TemplateService(service_type="meal", base_price=price)]
    template = replace(SAFARI, services=services)
    with pytest.raises(InvalidArgument):
        price_template(template, 2, "Normal")


def test_invalid_duration():
    with pytest.raises(InvalidArgument):
        price_template(replace(SAFARI, duration="7"), 2, "Normal")


def test_rules_apply_in_order_once_per_occurrence():
    discount = PricingRule(name="Group Discount")
    markup = PricingRule(name="Seasonal Markup")
    template = replace(SAFARI, formulas=[discount, markup, discount])
    # 140000 * 0.9 * 1.2 * 0.9
    assert price_template(template, 10, "Peak") == Decimal("136080")

    template = replace(SAFARI, formulas=[markup, markup])
    assert price_template(template, 1, "Peak") == Decimal("14000") * Decimal("1.44")
