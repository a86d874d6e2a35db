"""HTTP client for the EU VIES VAT-number register."""

from __future__ import annotations

from typing import Any

import httpx

from core.logging import get_logger
from core.result import Result, failure, success
from services.pricing.vat import clean_vat_number, is_valid_vat_number_format
from services.vat_verification.types import (
    VatCheck,
    VatVerificationError,
    VatVerificationErrorCode,
)

logger = get_logger(__name__)

# VAT prefixes VIES answers for (EL is Greece, XI Northern Ireland)
VIES_PREFIXES: frozenset[str] = frozenset(
    {
        "AT", "BE", "BG", "CY", "CZ", "DE", "DK", "EE", "EL", "ES", "FI", "FR", "HR",
        "HU", "IE", "IT", "LT", "LU", "LV", "MT", "NL", "PL", "PT", "RO", "SE", "SI",
        "SK", "XI",
    }
)  # fmt: skip

DEFAULT_TIMEOUT = 10.0
BASE_URL = "https://ec.europa.eu/taxation_customs/vies/rest-api"

# VIES placeholder for undisclosed fields
UNDISCLOSED = "---"

# userError values that mean the register gave a real answer
ANSWERED = {"VALID", "INVALID"}


def _disclosed(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value if value and value != UNDISCLOSED else None


class ViesClient:
    """
    HTTP client for the VIES REST API.

    Makes exactly one request per check. Retrying is left to the caller.

    Attributes:
        base_url: VIES REST API base URL.
        timeout: Request timeout in seconds.
    """

    def __init__(self, base_url: str = BASE_URL, timeout: float = DEFAULT_TIMEOUT) -> None:
        """
        Initialize the VIES client.

        Args:
            base_url: VIES REST API base URL.
            timeout: Request timeout in seconds.
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers={
                    "Accept": "application/json",
                    "Content-Type": "application/json",
                },
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def check_vat(self, vat_number: str) -> Result[VatCheck, VatVerificationError]:
        """
        Ask VIES whether a VAT number is registered.

        Args:
            vat_number: VAT number with its 2-letter prefix, in any format.

        Returns:
            Result containing the VatCheck, or a VatVerificationError when the
            number is malformed or the register could not answer.
        """
        cleaned = clean_vat_number(vat_number)
        if not is_valid_vat_number_format(cleaned) or cleaned[:2] not in VIES_PREFIXES:
            return failure(
                VatVerificationError(
                    code=VatVerificationErrorCode.INVALID_FORMAT,
                    message="Not an EU VAT number",
                    details=cleaned,
                )
            )

        country_code, number = cleaned[:2], cleaned[2:]
        client = await self._get_client()

        logger.info("Checking VAT number with VIES", vat_number=cleaned)

        try:
            response = await client.post(
                "/check-vat-number",
                json={"countryCode": country_code, "vatNumber": number},
            )
        except httpx.TimeoutException:
            logger.warning("VIES request timeout", vat_number=cleaned)
            return failure(
                VatVerificationError(
                    code=VatVerificationErrorCode.TIMEOUT,
                    message="VIES request timeout",
                )
            )
        except httpx.RequestError as e:
            logger.warning("VIES request error", vat_number=cleaned, error=str(e))
            return failure(
                VatVerificationError(
                    code=VatVerificationErrorCode.NETWORK,
                    message="VIES request failed",
                    details=str(e),
                )
            )

        if response.status_code >= 500:
            logger.warning(
                "VIES service unavailable",
                vat_number=cleaned,
                status_code=response.status_code,
            )
            return failure(
                VatVerificationError(
                    code=VatVerificationErrorCode.SERVICE_UNAVAILABLE,
                    message=f"VIES returned status {response.status_code}",
                    details=response.text[:500],
                )
            )

        if response.status_code >= 400:
            logger.error(
                "VIES rejected the request",
                vat_number=cleaned,
                status_code=response.status_code,
                response_text=response.text[:500],
            )
            return failure(
                VatVerificationError(
                    code=VatVerificationErrorCode.NETWORK,
                    message=f"VIES returned status {response.status_code}",
                    details=response.text[:500],
                )
            )

        try:
            data: dict[str, Any] = response.json()
        except ValueError as e:
            logger.error("Failed to parse VIES response", vat_number=cleaned, error=str(e))
            return failure(
                VatVerificationError(
                    code=VatVerificationErrorCode.PARSE,
                    message="Failed to parse VIES response",
                    details=str(e),
                )
            )

        return self._parse_check(data, country_code, number)

    @staticmethod
    def _parse_check(
        data: dict[str, Any],
        country_code: str,
        number: str,
    ) -> Result[VatCheck, VatVerificationError]:
        """Turn a VIES JSON body into a VatCheck."""
        if data.get("errorWrappers") or data.get("actionSucceed") is False:
            return failure(
                VatVerificationError(
                    code=VatVerificationErrorCode.SERVICE_UNAVAILABLE,
                    message="VIES could not answer",
                    details=str(data.get("errorWrappers")),
                )
            )

        user_error = data.get("userError")
        if user_error is not None and user_error not in ANSWERED:
            return failure(
                VatVerificationError(
                    code=VatVerificationErrorCode.SERVICE_UNAVAILABLE,
                    message="Member state register unavailable",
                    details=str(user_error),
                )
            )

        valid = data.get("valid")
        if not isinstance(valid, bool):
            return failure(
                VatVerificationError(
                    code=VatVerificationErrorCode.PARSE,
                    message="VIES response has no validity flag",
                )
            )

        return success(
            VatCheck(
                country_code=data.get("countryCode") or country_code,
                vat_number=data.get("vatNumber") or number,
                valid=valid,
                name=_disclosed(data.get("name")),
                address=_disclosed(data.get("address")),
            )
        )
