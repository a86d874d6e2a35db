"""Tests for VAT zone classification."""

from __future__ import annotations

from decimal import Decimal

import pytest

from services.pricing import CustomerType, PricingWarning, VatClassifier, VatZone
from services.pricing.vat import (
    EXPORT_LABEL,
    REVERSE_CHARGE_LABEL,
    clean_vat_number,
    format_rate,
    is_valid_vat_number_format,
    standard_label,
)

PARTICULIER = CustomerType.PARTICULIER
PRO = CustomerType.PROFESSIONNEL


@pytest.fixture()
def classifier() -> VatClassifier:
    """Create a classifier for a French seller at 20%."""
    return VatClassifier(seller_country="FR", standard_rate_percent=Decimal("20"))


class TestVatNumberFormat:
    """Tests for VAT-number cleaning and syntax checks."""

    def test_clean_vat_number(self) -> None:
        """Spaces, dots and dashes should be removed and letters upper-cased."""
        assert clean_vat_number(" de 123.456-789 ") == "DE123456789"
        assert clean_vat_number(None) == ""

    @pytest.mark.parametrize(
        "vat_number",
        ["DE123456789", "FR40303265045", "nl 8178.10.425B01", "ATU12345678", "EL12"],
    )
    def test_valid_formats(self, vat_number: str) -> None:
        """Well-formed numbers should pass."""
        assert is_valid_vat_number_format(vat_number) is True

    @pytest.mark.parametrize(
        "vat_number",
        ["", "123456789", "D1234", "DE1", "DE12345678901234", "DE_123456"],
    )
    def test_invalid_formats(self, vat_number: str) -> None:
        """Malformed numbers should be rejected."""
        assert is_valid_vat_number_format(vat_number) is False


class TestLabels:
    """Tests for rate labels."""

    @pytest.mark.parametrize(
        ("rate", "expected"),
        [("20", "20"), ("20.00", "20"), ("5.5", "5.5"), ("5.50", "5.5"), ("0", "0")],
    )
    def test_format_rate(self, rate: str, expected: str) -> None:
        """Integral rates should have no decimals, others only significant ones."""
        assert format_rate(Decimal(rate)) == expected

    def test_standard_label(self) -> None:
        """The standard label should read "TVA {rate}%"."""
        assert standard_label(Decimal("20")) == "TVA 20%"


class TestVatClassifier:
    """Tests for VatClassifier."""

    @pytest.mark.parametrize("customer_type", [PARTICULIER, PRO])
    def test_domestic_buyer(self, classifier: VatClassifier, customer_type: CustomerType) -> None:
        """A buyer in the seller's country pays the standard rate."""
        result = classifier.classify("FR", customer_type, vat_number="FR40303265045", vat_validated=True)

        assert result.rate_percent == Decimal("20")
        assert result.label == "TVA 20%"
        assert result.zone == VatZone.DOMESTIC

    def test_domestic_buyer_by_name(self, classifier: VatClassifier) -> None:
        """Country names should be recognized."""
        assert classifier.classify("France", PARTICULIER).zone == VatZone.DOMESTIC

    def test_intra_community_reverse_charge(self, classifier: VatClassifier) -> None:
        """A verified EU professional gets reverse charge at 0%."""
        result = classifier.classify("DE", PRO, vat_number="DE123456789", vat_validated=True)

        assert result.rate_percent == Decimal("0")
        assert result.label == REVERSE_CHARGE_LABEL
        assert "Autoliquidation" in result.label
        assert result.zone == VatZone.INTRA_COMMUNITY
        assert result.warnings == ()

    def test_eu_professional_not_verified(self, classifier: VatClassifier) -> None:
        """An unverified VAT number keeps the standard rate."""
        result = classifier.classify("DE", PRO, vat_number="DE123456789", vat_validated=False)

        assert result.rate_percent == Decimal("20")
        assert result.zone == VatZone.EU_STANDARD
        assert result.warnings == ()

    def test_eu_professional_without_vat_number(self, classifier: VatClassifier) -> None:
        """A professional without a VAT number keeps the standard rate."""
        result = classifier.classify("DE", PRO, vat_number=None, vat_validated=True)

        assert result.rate_percent == Decimal("20")

    def test_eu_professional_malformed_vat_number(self, classifier: VatClassifier) -> None:
        """A malformed number keeps the standard rate and raises a warning."""
        result = classifier.classify("DE", PRO, vat_number="123", vat_validated=True)

        assert result.rate_percent == Decimal("20")
        assert result.warnings == (PricingWarning.INVALID_VAT_NUMBER_FORMAT,)

    def test_eu_individual(self, classifier: VatClassifier) -> None:
        """An EU individual pays the standard rate."""
        result = classifier.classify("DE", PARTICULIER, vat_number="DE123456789", vat_validated=True)

        assert result.rate_percent == Decimal("20")
        assert result.label == "TVA 20%"
        assert result.zone == VatZone.EU_STANDARD

    @pytest.mark.parametrize("customer_type", [PARTICULIER, PRO])
    def test_export(self, classifier: VatClassifier, customer_type: CustomerType) -> None:
        """Buyers outside the EU are zero-rated as exports."""
        result = classifier.classify("US", customer_type)

        assert result.rate_percent == Decimal("0")
        assert result.label == EXPORT_LABEL
        assert "Export" in result.label
        assert result.zone == VatZone.EXPORT
        assert result.warnings == ()

    @pytest.mark.parametrize("country", ["", None, "Atlantis"])
    def test_unknown_country(self, classifier: VatClassifier, country: str | None) -> None:
        """Unknown countries fall back to export with a warning."""
        result = classifier.classify(country, PRO, vat_number="DE123456789", vat_validated=True)

        assert result.rate_percent == Decimal("0")
        assert result.label == EXPORT_LABEL
        assert result.warnings == (PricingWarning.UNKNOWN_COUNTRY,)

    def test_validated_must_be_true(self, classifier: VatClassifier) -> None:
        """Only an explicit True counts as verified."""
        result = classifier.classify("DE", PRO, vat_number="DE123456789", vat_validated=1)  # type: ignore[arg-type]

        assert result.zone == VatZone.EU_STANDARD

    def test_custom_rate_label(self) -> None:
        """Fractional standard rates should appear in the label."""
        classifier = VatClassifier(seller_country="France", standard_rate_percent=Decimal("5.5"))

        assert classifier.classify("FR", PARTICULIER).label == "TVA 5.5%"
