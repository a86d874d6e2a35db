"""VAT zone classification for sales made from the seller's country."""

from __future__ import annotations

import re
from decimal import Decimal

from services.pricing.countries import is_eu_country, normalize_country
from services.pricing.errors import PricingWarning
from services.pricing.types import CustomerType, VatTreatment, VatZone

VAT_NUMBER_PATTERN = re.compile(r"^[A-Z]{2}[A-Z0-9]{2,13}$")
_VAT_NUMBER_NOISE = re.compile(r"[\s.\-]")

REVERSE_CHARGE_LABEL = "TVA 0% (Autoliquidation intracommunautaire)"
EXPORT_LABEL = "TVA 0% (Export hors UE)"


def clean_vat_number(vat_number: str | None) -> str:
    """Strip spaces, dots and dashes and upper-case a VAT number."""
    if not vat_number:
        return ""
    return _VAT_NUMBER_NOISE.sub("", vat_number).upper()


def is_valid_vat_number_format(vat_number: str | None) -> bool:
    """
    Check the syntax of an intra-community VAT number.

    Only the shape is checked: a 2-letter prefix followed by 2 to 13
    alphanumerics. Whether the number exists is decided by VIES.
    """
    return bool(VAT_NUMBER_PATTERN.match(clean_vat_number(vat_number)))


def format_rate(rate_percent: Decimal) -> str:
    """Render a rate without trailing zeros ("20", "5.5")."""
    if rate_percent == rate_percent.to_integral_value():
        return format(rate_percent.to_integral_value(), "f")
    return format(rate_percent.normalize(), "f")


def standard_label(rate_percent: Decimal) -> str:
    """Label of the domestic rate, e.g. "TVA 20%"."""
    return f"TVA {format_rate(rate_percent)}%"


class VatClassifier:
    """
    Map a buyer to a VAT treatment.

    Rules, first match wins:
        1. Buyer in the seller's country: standard rate.
        2. EU professional with a well-formed, verified VAT number: reverse charge (0%).
        3. Any other EU buyer: standard rate.
        4. Everyone else, including unknown countries: export (0%).
    """

    def __init__(self, seller_country: str, standard_rate_percent: Decimal) -> None:
        """
        Initialize the classifier.

        Args:
            seller_country: Country code or name of the seller.
            standard_rate_percent: Domestic VAT rate as a percentage.
        """
        self.seller_country = normalize_country(seller_country)
        self.standard_rate_percent = standard_rate_percent

    def classify(
        self,
        buyer_country: str | None,
        customer_type: CustomerType,
        vat_number: str | None = None,
        vat_validated: bool = False,
    ) -> VatTreatment:
        """
        Classify a sale.

        Args:
            buyer_country: Country code or name of the buyer.
            customer_type: Individual or professional.
            vat_number: Buyer's intra-community VAT number, if any.
            vat_validated: Outcome of the external verification; anything
                other than an explicit True counts as not verified.

        Returns:
            The VatTreatment to apply.
        """
        code = normalize_country(buyer_country)
        warnings: list[PricingWarning] = []

        if not code:
            warnings.append(PricingWarning.UNKNOWN_COUNTRY)
            return self._export(warnings)

        if code == self.seller_country:
            return self._standard(VatZone.DOMESTIC, warnings)

        if not is_eu_country(code):
            return self._export(warnings)

        if customer_type == CustomerType.PROFESSIONNEL and vat_number:
            if not is_valid_vat_number_format(vat_number):
                warnings.append(PricingWarning.INVALID_VAT_NUMBER_FORMAT)
            elif vat_validated is True:
                return VatTreatment(
                    rate_percent=Decimal("0"),
                    label=REVERSE_CHARGE_LABEL,
                    zone=VatZone.INTRA_COMMUNITY,
                    warnings=tuple(warnings),
                )

        return self._standard(VatZone.EU_STANDARD, warnings)

    def _standard(self, zone: VatZone, warnings: list[PricingWarning]) -> VatTreatment:
        return VatTreatment(
            rate_percent=self.standard_rate_percent,
            label=standard_label(self.standard_rate_percent),
            zone=zone,
            warnings=tuple(warnings),
        )

    @staticmethod
    def _export(warnings: list[PricingWarning]) -> VatTreatment:
        return VatTreatment(
            rate_percent=Decimal("0"),
            label=EXPORT_LABEL,
            zone=VatZone.EXPORT,
            warnings=tuple(warnings),
        )
