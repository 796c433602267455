from decimal import Decimal
from pydantic import BaseModel, ConfigDict
from typing import List, Optional
from datetime import datetime

from models.sale import SaleStatus, PaymentMethod, PriceType


# Output schema for a line item of a sale
class SaleItemOut(BaseModel):
    book_id: int
    title: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal
    price_type: PriceType


# Output schema for a status history entry
class StatusHistoryOut(BaseModel):
    status: SaleStatus
    timestamp: Optional[datetime] = None
    note: Optional[str] = None
    changed_by: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


# Output schema representing the full order
class OrderResponse(BaseModel):
    id: int
    status: SaleStatus
    sale_date: Optional[datetime] = None
    subtotal: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    currency: str
    payment_method: PaymentMethod
    payment_receipt_url: Optional[str] = None
    customer_email: Optional[str] = None
    customer_name: Optional[str] = None
    cancellation_reason: Optional[str] = None
    items: List[SaleItemOut]
    status_history: List[StatusHistoryOut]


# Schema for paginated order lists
class OrdersPage(BaseModel):
    items: List[OrderResponse]
    total: int
    page: int
    page_size: int


# Schema for updating order status
class OrderStatusPatch(BaseModel):
    status: SaleStatus
    note: Optional[str] = None


# Schema for cancelling an order
class OrderCancelPayload(BaseModel):
    reason: str
    restore_stock: bool = True
