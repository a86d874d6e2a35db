"""Tests for pricing value types and manual shipping methods."""

from __future__ import annotations

from decimal import Decimal

import pytest

from services.pricing import (
    SHIPPING_METHODS,
    CartMetrics,
    Customer,
    InvalidLineItemError,
    LineItem,
    LineItemErrorCode,
    PricingErrorCode,
    RateType,
    ReconciliationTransactionFailed,
    ShippingRate,
    ShippingZone,
    line_total,
    round2,
    validate_line_item,
    zones_for_shipping_method,
)
from services.pricing.shipping_methods import get_shipping_method


class TestRounding:
    """Tests for round2 and line_total."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [("1.005", "1.01"), ("1.004", "1.00"), ("2.675", "2.68"), ("0", "0.00")],
    )
    def test_round_half_up(self, value: str, expected: str) -> None:
        """Amounts are rounded half-up to cents."""
        assert round2(Decimal(value)) == Decimal(expected)

    def test_line_total(self) -> None:
        """Line totals are rounded once."""
        assert line_total(3, Decimal("3.335")) == Decimal("10.01")


class TestLineItem:
    """Tests for LineItem validation."""

    def test_valid_item(self) -> None:
        """A valid item exposes its gross amount and weight."""
        item = LineItem(title="LP", unit_price=Decimal("12.50"), quantity=2, weight_kg=Decimal("0.25"))

        assert item.gross_amount == Decimal("25.00")
        assert item.total_weight_kg == Decimal("0.50")

    def test_unknown_weight_counts_as_zero(self) -> None:
        """Items without a weight weigh nothing."""
        assert LineItem(title="Gift card", unit_price=Decimal("20"), quantity=3).total_weight_kg == 0

    @pytest.mark.parametrize("quantity", [0, -1, 1.5, True])
    def test_invalid_quantity(self, quantity: object) -> None:
        """Quantities must be positive integers."""
        with pytest.raises(InvalidLineItemError) as exc_info:
            LineItem(title="LP", unit_price=Decimal("10"), quantity=quantity)  # type: ignore[arg-type]

        assert exc_info.value.code == LineItemErrorCode.NEGATIVE_OR_INVALID_QUANTITY

    @pytest.mark.parametrize("price", [Decimal("-0.01"), Decimal("NaN"), Decimal("Infinity"), 10.0])
    def test_invalid_price(self, price: object) -> None:
        """Prices must be finite, non-negative decimals."""
        with pytest.raises(InvalidLineItemError) as exc_info:
            LineItem(title="LP", unit_price=price, quantity=1)  # type: ignore[arg-type]

        assert exc_info.value.code == LineItemErrorCode.NEGATIVE_OR_INVALID_PRICE

    def test_invalid_weight(self) -> None:
        """Weights cannot be negative."""
        with pytest.raises(InvalidLineItemError) as exc_info:
            LineItem(title="LP", unit_price=Decimal("10"), quantity=1, weight_kg=Decimal("-1"))

        assert exc_info.value.code == LineItemErrorCode.NEGATIVE_OR_INVALID_WEIGHT

    def test_free_item_is_allowed(self) -> None:
        """A zero price is valid."""
        assert LineItem(title="Poster", unit_price=Decimal("0"), quantity=1).gross_amount == 0


class TestValidateLineItem:
    """Tests for validate_line_item."""

    def test_success(self) -> None:
        """Valid fields give a Success."""
        result = validate_line_item(title="LP", unit_price=Decimal("10"), quantity=1, product_id="p-1")

        assert result.unwrap().product_id == "p-1"

    def test_failure(self) -> None:
        """Invalid fields give a Failure with the rejection."""
        result = validate_line_item(title="LP", unit_price=Decimal("10"), quantity=0)

        assert result.is_failure()
        assert result.error.code == LineItemErrorCode.NEGATIVE_OR_INVALID_QUANTITY


class TestCustomer:
    """Tests for the pricing Customer."""

    @pytest.mark.parametrize("rate", [Decimal("-0.1"), Decimal("1.5")])
    def test_discount_rate_bounds(self, rate: Decimal) -> None:
        """The discount rate is a fraction between 0 and 1."""
        with pytest.raises(ValueError, match="discount_rate"):
            Customer(country="FR", discount_rate=rate)

    def test_address(self) -> None:
        """The address carries the country and VAT number."""
        address = Customer(country="BE", vat_number="BE0123456789").address

        assert address.country == "BE"
        assert address.vat_number == "BE0123456789"


class TestShippingZone:
    """Tests for ShippingZone."""

    def test_countries_are_normalized(self) -> None:
        """Codes are stripped, upper-cased and blanks dropped."""
        zone = ShippingZone(
            id="z",
            name="Benelux",
            countries=(" be", "nl ", "", "lu"),
            rate=ShippingRate(rate_type=RateType.FLAT, base_price=Decimal("8")),
        )

        assert zone.countries == ("BE", "NL", "LU")
        assert zone.covers("NL") is True
        assert zone.covers("") is False
        assert zone.is_fallback is False


class TestCartMetrics:
    """Tests for CartMetrics.from_items."""

    def test_from_items(self) -> None:
        """Weight and item count sum over quantities."""
        items = [
            LineItem(title="LP", unit_price=Decimal("20"), quantity=2, weight_kg=Decimal("0.3")),
            LineItem(title="CD", unit_price=Decimal("10"), quantity=3, weight_kg=Decimal("0.1")),
        ]

        cart = CartMetrics.from_items(items, Decimal("70"))

        assert cart.total_weight_kg == Decimal("0.9")
        assert cart.item_count == 5
        assert cart.subtotal_net == Decimal("70")


class TestShippingMethods:
    """Tests for the manual shipping picklist."""

    def test_lookup_is_case_insensitive(self) -> None:
        """Carriers are found regardless of case."""
        assert get_shipping_method(" colissimo ").default_cost == Decimal("6.50")
        assert get_shipping_method("Pigeon") is None

    def test_every_method_has_a_non_negative_cost(self) -> None:
        """Default costs are valid flat rates."""
        assert all(m.default_cost >= 0 for m in SHIPPING_METHODS)

    def test_known_method_uses_default_cost(self) -> None:
        """A carrier alone gives its default cost as a fallback flat zone."""
        (zone,) = zones_for_shipping_method("Colissimo")

        assert zone.name == "Colissimo"
        assert zone.is_fallback is True
        assert zone.rate.rate_type == RateType.FLAT
        assert zone.rate.base_price == Decimal("6.50")

    def test_explicit_amount_wins(self) -> None:
        """The amount typed by the operator replaces the default."""
        (zone,) = zones_for_shipping_method("DHL Express", Decimal("22.00"))

        assert zone.rate.base_price == Decimal("22.00")

    def test_unknown_method_without_amount_is_free(self) -> None:
        """An unknown carrier without an amount ships at 0."""
        (zone,) = zones_for_shipping_method("Coursier", None)

        assert zone.name == "Coursier"
        assert zone.rate.base_price == Decimal("0")

    def test_no_method(self) -> None:
        """Without a carrier the zone is named Manuel."""
        (zone,) = zones_for_shipping_method(None, Decimal("3"))

        assert zone.name == "Manuel"
        assert zone.id == "manual:Manuel"


class TestReconciliationTransactionFailed:
    """Tests for ReconciliationTransactionFailed."""

    def test_as_error_carries_cause(self) -> None:
        """The error value includes the database cause."""
        try:
            try:
                raise RuntimeError("deadlock detected")
            except RuntimeError as e:
                raise ReconciliationTransactionFailed("o-1") from e
        except ReconciliationTransactionFailed as exc:
            error = exc.as_error()

        assert error.code == PricingErrorCode.RECONCILIATION_TRANSACTION_FAILED
        assert error.details == "deadlock detected"
        assert str(error) == "reconciliation_transaction_failed: Order item update failed"
