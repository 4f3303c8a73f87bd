"""Tests for order pricing."""

from decimal import Decimal

import pytest

from mustore.checkout.pricing import DeliverySettings, calculate_pricing, line_subtotal

SETTINGS = DeliverySettings(free_shipping_threshold=Decimal("5000"), delivery_fee=Decimal("300"))


class TestCalculatePricing:
    def test_pickup_is_free(self):
        pricing = calculate_pricing([(1000, 3)], "pickup", SETTINGS)
        assert pricing.subtotal == 3000
        assert pricing.delivery_fee == 0
        assert pricing.total == 3000

    def test_delivery_below_threshold_pays_fee(self):
        pricing = calculate_pricing([(1000, 3)], "delivery", SETTINGS)
        assert pricing.delivery_fee == 300
        assert pricing.total == 3300

    def test_delivery_at_threshold_is_free(self):
        pricing = calculate_pricing([(2500, 2)], "delivery", SETTINGS)
        assert pricing.delivery_fee == 0
        assert pricing.total == 5000

    def test_multiple_lines(self):
        pricing = calculate_pricing([(15990, 1), (499.5, 2)], "pickup", SETTINGS)
        assert pricing.subtotal == 16989

    def test_unknown_delivery_method(self):
        with pytest.raises(ValueError):
            calculate_pricing([(100, 1)], "teleport", SETTINGS)

    def test_settings_from_domain_config(self):
        settings = DeliverySettings.from_config()
        assert settings.free_shipping_threshold == Decimal("5000")
        assert settings.delivery_fee == Decimal("300")


def test_line_subtotal_rounds_to_cents():
    assert line_subtotal(0.1, 3) == 0.3
