"""Cache of VIES register answers, backed by Django's cache framework."""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.core.cache import cache

if TYPE_CHECKING:
    from services.vat_verification.types import VatCheck

VAT_CHECK_TTL = 86400  # 1 day


class VatCheckCache:
    """
    Stores VIES answers per cleaned VAT number.

    Keys look like ``backoffice:vat:DE123456789``. Both positive and negative
    answers are stored; failures never reach the cache.
    """

    def __init__(self, namespace: str = "backoffice") -> None:
        """
        Initialize the cache.

        Args:
            namespace: Leading key segment shared with other cached data.
        """
        self._namespace = namespace

    def key_for(self, vat_number: str) -> str:
        """Return the cache key of a cleaned VAT number."""
        return f"{self._namespace}:vat:{vat_number}"

    def get(self, vat_number: str) -> VatCheck | None:
        """Return the stored answer for a VAT number, if any."""
        return cache.get(self.key_for(vat_number))

    def store(self, vat_number: str, check: VatCheck, ttl: int = VAT_CHECK_TTL) -> None:
        """
        Store a register answer.

        Args:
            vat_number: Cleaned, upper-case VAT number.
            check: Answer returned by VIES.
            ttl: Seconds the answer stays valid.
        """
        cache.set(self.key_for(vat_number), check, ttl)


vat_check_cache = VatCheckCache()
