"""VAT-number verification package."""

from services.vat_verification.client import ViesClient
from services.vat_verification.service import VatVerificationService
from services.vat_verification.types import (
    VatCheck,
    VatVerificationError,
    VatVerificationErrorCode,
    VatVerificationOutcome,
)

__all__ = [
    "VatCheck",
    "VatVerificationError",
    "VatVerificationErrorCode",
    "VatVerificationOutcome",
    "VatVerificationService",
    "ViesClient",
]
