"""Types for VAT-number verification."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from services.pricing.errors import PricingWarning


class VatVerificationErrorCode(str, Enum):
    """Reasons a verification produced no answer."""

    INVALID_FORMAT = "invalid_format"
    TIMEOUT = "timeout"
    NETWORK = "network"
    SERVICE_UNAVAILABLE = "service_unavailable"
    PARSE = "parse"


@dataclass(frozen=True, slots=True)
class VatVerificationError:
    """
    A verification that could not be completed.

    Attributes:
        code: Error code.
        message: Human-readable message.
        details: Additional details (optional).
    """

    code: VatVerificationErrorCode
    message: str
    details: str | None = None

    def __str__(self) -> str:
        """Return string representation of the error."""
        return f"{self.code.value}: {self.message}"


@dataclass(frozen=True, slots=True)
class VatCheck:
    """
    Answer from the VAT register.

    Attributes:
        country_code: VAT prefix (e.g. "DE", "EL").
        vat_number: Number without its prefix.
        valid: Whether the register knows the number.
        name: Registered company name, when disclosed.
        address: Registered address, when disclosed.
    """

    country_code: str
    vat_number: str
    valid: bool
    name: str | None = None
    address: str | None = None

    @property
    def full_number(self) -> str:
        """Prefix and number joined."""
        return f"{self.country_code}{self.vat_number}"


@dataclass(frozen=True, slots=True)
class VatVerificationOutcome:
    """
    What the pricing core needs to know about a VAT number.

    Attributes:
        validated: True only when the register positively confirmed the number.
        name: Registered company name, when known.
        warning: Set when the register could not be reached.
    """

    validated: bool
    name: str | None = None
    warning: PricingWarning | None = None

    @classmethod
    def unavailable(cls) -> VatVerificationOutcome:
        """Outcome used when verification failed or timed out."""
        return cls(validated=False, warning=PricingWarning.VAT_VERIFICATION_UNAVAILABLE)
