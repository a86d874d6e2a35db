"""API views for pricing, orders and shipping zones."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from django.shortcuts import get_object_or_404
from drf_spectacular.utils import extend_schema
from rest_framework import generics, mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.api.serializers import (
    ErrorSerializer,
    LineItemInputSerializer,
    OrderItemEditSerializer,
    OrderItemsEditSerializer,
    OrderRequestSerializer,
    OrderSerializer,
    PriceBreakdownSerializer,
    ShippingZoneSerializer,
)
from apps.orders.checkout import CheckoutErrorCode, OrderRequest, get_checkout_service
from apps.orders.models import Customer, Order, ShippingZone
from core.logging import get_logger, log_context
from services.pricing import InvalidLineItemError, PricingErrorCode, minimum_order_shortfall

if TYPE_CHECKING:
    from django.db.models import QuerySet
    from rest_framework.request import Request

    from apps.orders.checkout import CheckoutError
    from services.pricing import PricingError

logger = get_logger(__name__)

ERROR_STATUS: dict[Any, int] = {
    PricingErrorCode.ZONE_NOT_FOUND: status.HTTP_422_UNPROCESSABLE_ENTITY,
    PricingErrorCode.INVALID_ZONE_CONFIGURATION: status.HTTP_422_UNPROCESSABLE_ENTITY,
    PricingErrorCode.UNKNOWN_ORDER_ITEM: status.HTTP_400_BAD_REQUEST,
    PricingErrorCode.DUPLICATE_ORDER_ITEM: status.HTTP_400_BAD_REQUEST,
    PricingErrorCode.RECONCILIATION_TRANSACTION_FAILED: status.HTTP_500_INTERNAL_SERVER_ERROR,
    CheckoutErrorCode.EMPTY_ORDER: status.HTTP_400_BAD_REQUEST,
    CheckoutErrorCode.UNSUPPORTED_CURRENCY: status.HTTP_400_BAD_REQUEST,
    CheckoutErrorCode.PRO_ACCOUNT_REQUIRED: status.HTTP_422_UNPROCESSABLE_ENTITY,
    CheckoutErrorCode.BELOW_MINIMUM_ORDER: status.HTTP_422_UNPROCESSABLE_ENTITY,
}


def error_response(error: PricingError | CheckoutError) -> Response:
    """Translate a pricing or checkout error into an HTTP response."""
    logger.info("Request refused", code=error.code.value, message=error.message)
    return Response(
        {"error": ErrorSerializer(error).data},
        status=ERROR_STATUS.get(error.code, status.HTTP_400_BAD_REQUEST),
    )


def invalid_line_response(error: InvalidLineItemError) -> Response:
    """Translate a rejected line item into an HTTP 400 response."""
    return Response(
        {"error": {"code": error.code.value, "message": error.message, "details": None}},
        status=status.HTTP_400_BAD_REQUEST,
    )


def build_order_request(data: dict[str, Any]) -> OrderRequest:
    """
    Build an OrderRequest from validated request data.

    Raises:
        Http404: If the customer does not exist.
        InvalidLineItemError: If a line is rejected by the pricing core.
    """
    customer = get_object_or_404(Customer, pk=data["customer_id"])
    return OrderRequest(
        customer=customer,
        items=tuple(LineItemInputSerializer.to_line_item(item) for item in data["items"]),
        channel=data["channel"],
        currency=data.get("currency"),
        shipping_country=data["shipping_country"],
        shipping_method=data["shipping_method"],
        manual_shipping_amount=data.get("manual_shipping_amount"),
        order_level_discount=data["order_level_discount"],
        internal_notes=data["internal_notes"],
    )


class QuoteView(APIView):
    """
    Price an order without saving it.

    Used by both the back-office order form and the Pro checkout to show
    the breakdown before submission.
    """

    @extend_schema(request=OrderRequestSerializer, responses=PriceBreakdownSerializer)
    def post(self, request: Request) -> Response:
        """Return the price breakdown of the submitted order."""
        serializer = OrderRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            order_request = build_order_request(serializer.validated_data)
        except InvalidLineItemError as e:
            return invalid_line_response(e)

        service = get_checkout_service()
        with log_context(customer_id=str(order_request.customer.pk), channel=order_request.channel):
            result = service.quote(order_request)
        if result.is_failure():
            return error_response(result.error)

        breakdown = result.unwrap()
        data = dict(PriceBreakdownSerializer(breakdown).data)
        if order_request.is_pro:
            shortfall = minimum_order_shortfall(breakdown, service.settings)
            data["minimum_order_shortfall"] = str(shortfall)
        return Response(data, status=status.HTTP_200_OK)


class OrderViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """
    ViewSet for orders.

    Orders are created priced and their items are only changed through the
    ``items`` action, so stored totals always match the stored items.
    """

    serializer_class = OrderSerializer

    def get_queryset(self) -> QuerySet[Order]:
        """Return orders with their items."""
        return Order.objects.select_related("customer").prefetch_related("items")

    @extend_schema(request=OrderRequestSerializer, responses={201: OrderSerializer})
    def create(self, request: Request) -> Response:
        """Price and save an order."""
        serializer = OrderRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            order_request = build_order_request(serializer.validated_data)
        except InvalidLineItemError as e:
            return invalid_line_response(e)

        with log_context(customer_id=str(order_request.customer.pk), channel=order_request.channel):
            result = get_checkout_service().place_order(order_request)
        if result.is_failure():
            return error_response(result.error)

        order = self.get_queryset().get(pk=result.unwrap().pk)
        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=OrderItemsEditSerializer, responses=OrderSerializer)
    @action(detail=True, methods=["post"])
    def items(self, request: Request, pk: str | None = None) -> Response:
        """
        Apply an edit of the order's items.

        Each line carries its ``id`` (absent for new lines) and the
        ``is_new`` / ``is_deleted`` flags. Items and totals are written in
        one transaction.
        """
        order = self.get_object()

        serializer = OrderItemsEditSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            forms = [
                OrderItemEditSerializer.to_form(line)
                for line in serializer.validated_data["items"]
            ]
        except InvalidLineItemError as e:
            return invalid_line_response(e)

        with log_context(order_id=str(order.pk), customer_id=str(order.customer_id)):
            result = get_checkout_service().edit_items(order, forms)
        if result.is_failure():
            return error_response(result.error)

        order = self.get_queryset().get(pk=order.pk)
        return Response(OrderSerializer(order).data, status=status.HTTP_200_OK)


class ShippingZoneListView(generics.ListAPIView):
    """
    List the active shipping zones in matching order.

    Zones without a rate are listed with ``rate: null``; they are ignored
    when pricing.
    """

    serializer_class = ShippingZoneSerializer
    pagination_class = None

    def get_queryset(self) -> QuerySet[ShippingZone]:
        """Return active zones ordered by position."""
        return (
            ShippingZone.objects.filter(is_active=True)
            .select_related("rate")
            .order_by("position", "created_at")
        )
