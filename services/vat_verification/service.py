"""VAT-number verification with caching."""

from __future__ import annotations

from typing import TYPE_CHECKING

from asgiref.sync import async_to_sync

from core.logging import get_logger
from core.result import Result, success
from services.cache import VAT_CHECK_TTL, VatCheckCache, vat_check_cache
from services.pricing.vat import clean_vat_number
from services.vat_verification.client import ViesClient
from services.vat_verification.types import (
    VatCheck,
    VatVerificationError,
    VatVerificationErrorCode,
    VatVerificationOutcome,
)

if TYPE_CHECKING:
    from core.config import ViesSettings

logger = get_logger(__name__)


class VatVerificationService:
    """
    Verify VAT numbers for the pricing core.

    Register answers (valid or not) are cached; failures are not, so the next
    checkout tries again. Every failure maps to ``validated=False``.
    """

    def __init__(
        self,
        client: ViesClient,
        cache: VatCheckCache | None = None,
        cache_ttl: int = VAT_CHECK_TTL,
        enabled: bool = True,
    ) -> None:
        """
        Initialize the verification service.

        Args:
            client: VIES client.
            cache: Cache for register answers (default: shared VAT check cache).
            cache_ttl: Seconds an answer stays cached.
            enabled: When False, no call is made and numbers count as unverified.
        """
        self._client = client
        self._cache = cache or vat_check_cache
        self._cache_ttl = cache_ttl
        self._enabled = enabled

    @classmethod
    def from_settings(cls, settings: ViesSettings) -> VatVerificationService:
        """Build the service from VIES settings."""
        return cls(
            client=ViesClient(base_url=settings.base_url, timeout=settings.timeout),
            cache_ttl=settings.cache_ttl,
            enabled=settings.enabled,
        )

    async def verify(self, vat_number: str) -> Result[VatCheck, VatVerificationError]:
        """
        Check a VAT number, using the cache when possible.

        Args:
            vat_number: VAT number in any format.

        Returns:
            Result containing the VatCheck or the VatVerificationError.
        """
        cleaned = clean_vat_number(vat_number)
        cached = self._cache.get(cleaned)
        if isinstance(cached, VatCheck):
            logger.debug("VAT check served from cache", vat_number=cleaned)
            return success(cached)

        result = await self._client.check_vat(cleaned)
        if result.is_success():
            self._cache.store(cleaned, result.unwrap(), ttl=self._cache_ttl)
        return result

    async def is_validated(self, vat_number: str | None) -> VatVerificationOutcome:
        """
        Reduce a verification to what pricing needs.

        Args:
            vat_number: VAT number, possibly empty.

        Returns:
            The VatVerificationOutcome; ``validated`` is True only for a
            positive register answer.
        """
        if not vat_number:
            return VatVerificationOutcome(validated=False)

        if not self._enabled:
            return VatVerificationOutcome.unavailable()

        result = await self.verify(vat_number)
        if result.is_failure():
            error = result.error
            if error.code == VatVerificationErrorCode.INVALID_FORMAT:
                return VatVerificationOutcome(validated=False)
            logger.warning(
                "VAT verification unavailable, treating number as unverified",
                vat_number=clean_vat_number(vat_number),
                error=str(error),
            )
            return VatVerificationOutcome.unavailable()

        check = result.unwrap()
        logger.info("VAT number verified", vat_number=check.full_number, valid=check.valid)
        return VatVerificationOutcome(validated=check.valid, name=check.name)

    def is_validated_sync(self, vat_number: str | None) -> VatVerificationOutcome:
        """Synchronous wrapper around ``is_validated`` for Django views."""
        return async_to_sync(self._validate_and_close)(vat_number)

    async def _validate_and_close(self, vat_number: str | None) -> VatVerificationOutcome:
        try:
            return await self.is_validated(vat_number)
        finally:
            await self._client.close()
