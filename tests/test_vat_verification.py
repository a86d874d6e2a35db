"""Tests for VatVerificationService."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from core.config import ViesSettings
from core.result import failure, success
from services.pricing import PricingWarning
from services.vat_verification import (
    VatCheck,
    VatVerificationError,
    VatVerificationErrorCode,
    VatVerificationOutcome,
    VatVerificationService,
    ViesClient,
)

CHECK = VatCheck(country_code="DE", vat_number="123456789", valid=True, name="Plattenladen GmbH")


@pytest.fixture()
def client() -> MagicMock:
    """Mocked VIES client."""
    mock = MagicMock(spec=ViesClient)
    mock.check_vat = AsyncMock(return_value=success(CHECK))
    mock.close = AsyncMock()
    return mock


@pytest.fixture()
def cache() -> MagicMock:
    """Mocked cache that starts empty."""
    mock = MagicMock()
    mock.get.return_value = None
    return mock


@pytest.fixture()
def service(client: MagicMock, cache: MagicMock) -> VatVerificationService:
    """Create a service with a mocked client and cache."""
    return VatVerificationService(client=client, cache=cache, cache_ttl=3600)


def unavailable(code: VatVerificationErrorCode = VatVerificationErrorCode.TIMEOUT):
    """Failure returned when VIES cannot answer."""
    return failure(VatVerificationError(code=code, message="VIES request timeout"))


class TestFromSettings:
    """Tests for VatVerificationService.from_settings."""

    def test_builds_client_from_settings(self) -> None:
        """Settings configure the client and the cache TTL."""
        settings = ViesSettings(base_url="https://vies.test/", timeout=3.0, cache_ttl=60, enabled=False)

        service = VatVerificationService.from_settings(settings)

        assert service._client.base_url == "https://vies.test"
        assert service._client.timeout == 3.0
        assert service._cache_ttl == 60
        assert service._enabled is False


class TestVerify:
    """Tests for VatVerificationService.verify."""

    @pytest.mark.asyncio
    async def test_answer_is_cached(
        self,
        service: VatVerificationService,
        client: MagicMock,
        cache: MagicMock,
    ) -> None:
        """A register answer is stored under the cleaned number."""
        result = await service.verify("de 123.456.789")

        assert result.unwrap() == CHECK
        client.check_vat.assert_awaited_once_with("DE123456789")
        cache.get.assert_called_once_with("DE123456789")
        cache.store.assert_called_once_with("DE123456789", CHECK, ttl=3600)

    @pytest.mark.asyncio
    async def test_negative_answer_is_cached(
        self,
        service: VatVerificationService,
        client: MagicMock,
        cache: MagicMock,
    ) -> None:
        """An unregistered number is an answer and is cached too."""
        unknown = VatCheck(country_code="DE", vat_number="999999999", valid=False)
        client.check_vat.return_value = success(unknown)

        await service.verify("DE999999999")

        cache.store.assert_called_once()

    @pytest.mark.asyncio
    async def test_cache_hit_skips_vies(
        self,
        service: VatVerificationService,
        client: MagicMock,
        cache: MagicMock,
    ) -> None:
        """A cached answer is returned without calling VIES."""
        cache.get.return_value = CHECK

        result = await service.verify("DE123456789")

        assert result.unwrap() == CHECK
        client.check_vat.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failure_is_not_cached(
        self,
        service: VatVerificationService,
        client: MagicMock,
        cache: MagicMock,
    ) -> None:
        """Failures are retried at the next checkout."""
        client.check_vat.return_value = unavailable()

        result = await service.verify("DE123456789")

        assert result.is_failure()
        cache.store.assert_not_called()


class TestIsValidated:
    """Tests for VatVerificationService.is_validated."""

    @pytest.mark.asyncio
    async def test_confirmed_number(self, service: VatVerificationService) -> None:
        """A positive answer validates the number."""
        outcome = await service.is_validated("DE123456789")

        assert outcome == VatVerificationOutcome(validated=True, name="Plattenladen GmbH")

    @pytest.mark.asyncio
    async def test_unregistered_number(self, service: VatVerificationService, client: MagicMock) -> None:
        """A negative answer does not validate and raises no warning."""
        client.check_vat.return_value = success(VatCheck(country_code="DE", vat_number="1", valid=False))

        outcome = await service.is_validated("DE123456789")

        assert outcome.validated is False
        assert outcome.warning is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("vat_number", [None, ""])
    async def test_missing_number(
        self,
        service: VatVerificationService,
        client: MagicMock,
        vat_number: str | None,
    ) -> None:
        """No number means nothing to verify."""
        outcome = await service.is_validated(vat_number)

        assert outcome == VatVerificationOutcome(validated=False)
        client.check_vat.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "code",
        [
            VatVerificationErrorCode.TIMEOUT,
            VatVerificationErrorCode.NETWORK,
            VatVerificationErrorCode.SERVICE_UNAVAILABLE,
            VatVerificationErrorCode.PARSE,
        ],
    )
    async def test_unavailable_maps_to_unverified(
        self,
        service: VatVerificationService,
        client: MagicMock,
        code: VatVerificationErrorCode,
    ) -> None:
        """Any failure to answer counts as unverified, with a warning and a log."""
        client.check_vat.return_value = unavailable(code)

        with patch("services.vat_verification.service.logger") as mock_logger:
            outcome = await service.is_validated("DE123456789")

        assert outcome.validated is False
        assert outcome.warning == PricingWarning.VAT_VERIFICATION_UNAVAILABLE
        mock_logger.warning.assert_called_once()
        assert mock_logger.warning.call_args.kwargs["vat_number"] == "DE123456789"

    @pytest.mark.asyncio
    async def test_invalid_format_has_no_warning(
        self,
        service: VatVerificationService,
        client: MagicMock,
    ) -> None:
        """A malformed number is unverified without the unavailable warning."""
        client.check_vat.return_value = unavailable(VatVerificationErrorCode.INVALID_FORMAT)

        outcome = await service.is_validated("XX1")

        assert outcome == VatVerificationOutcome(validated=False)

    @pytest.mark.asyncio
    async def test_disabled_service(self, client: MagicMock, cache: MagicMock) -> None:
        """A disabled service never calls VIES."""
        service = VatVerificationService(client=client, cache=cache, enabled=False)

        outcome = await service.is_validated("DE123456789")

        assert outcome == VatVerificationOutcome.unavailable()
        client.check_vat.assert_not_awaited()


class TestIsValidatedSync:
    """Tests for VatVerificationService.is_validated_sync."""

    def test_runs_and_closes_client(self, service: VatVerificationService, client: MagicMock) -> None:
        """The synchronous wrapper returns the outcome and closes the client."""
        outcome = service.is_validated_sync("DE123456789")

        assert outcome.validated is True
        client.close.assert_awaited_once()

    def test_closes_client_on_error(self, service: VatVerificationService, client: MagicMock) -> None:
        """The client is closed even when the check raises."""
        client.check_vat.side_effect = RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            service.is_validated_sync("DE123456789")

        client.close.assert_awaited_once()
