from .installment_plan import InstallmentPlan
from .order import Order
from .order_item import OrderItem
from .tracking_event import TrackingEvent

__all__ = ["InstallmentPlan", "Order", "OrderItem", "TrackingEvent"]
