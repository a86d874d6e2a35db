"""Order pricing and shipping-rate resolution package."""

from services.pricing.engine import OrderPricingEngine, minimum_order_shortfall, pro_order_note
from services.pricing.errors import (
    InvalidLineItemError,
    LineItemErrorCode,
    PricingError,
    PricingErrorCode,
    PricingWarning,
    ReconciliationTransactionFailed,
)
from services.pricing.reconciliation import (
    OrderItem,
    OrderItemForm,
    ReconciliationPlan,
    reconcile,
)
from services.pricing.shipping import resolve_shipping, validate_zones
from services.pricing.shipping_methods import SHIPPING_METHODS, zones_for_shipping_method
from services.pricing.types import (
    CartMetrics,
    Customer,
    CustomerType,
    LineItem,
    PriceBreakdown,
    RateType,
    ShippingQuote,
    ShippingRate,
    ShippingZone,
    VatTreatment,
    VatZone,
    line_total,
    round2,
    validate_line_item,
)
from services.pricing.vat import VatClassifier

__all__ = [
    "SHIPPING_METHODS",
    "CartMetrics",
    "Customer",
    "CustomerType",
    "InvalidLineItemError",
    "LineItem",
    "LineItemErrorCode",
    "OrderItem",
    "OrderItemForm",
    "OrderPricingEngine",
    "PriceBreakdown",
    "PricingError",
    "PricingErrorCode",
    "PricingWarning",
    "RateType",
    "ReconciliationPlan",
    "ReconciliationTransactionFailed",
    "ShippingQuote",
    "ShippingRate",
    "ShippingZone",
    "VatClassifier",
    "VatTreatment",
    "VatZone",
    "line_total",
    "minimum_order_shortfall",
    "pro_order_note",
    "reconcile",
    "resolve_shipping",
    "round2",
    "validate_line_item",
    "validate_zones",
    "zones_for_shipping_method",
]
