from pydantic import BaseModel, EmailStr
from typing import List, Optional

from models.sale import PaymentMethod

# Input schema for committing the current cart as an order
class CheckoutRequest(BaseModel):
    payment_method: PaymentMethod
    # Gateway payment id, required for CARD
    payment_transaction_id: Optional[str] = None
    payment_receipt_url: Optional[str] = None
    customer_email: Optional[EmailStr] = None
    customer_name: Optional[str] = None

# Outcome of a checkout; failures carry a code and message, never both ids and errors
class CheckoutResult(BaseModel):
    success: bool
    order_id: Optional[int] = None
    error: Optional[str] = None
    code: Optional[str] = None
    warnings: List[str] = []
    removed_items: List[int] = []
