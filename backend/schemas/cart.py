from datetime import datetime, timedelta, timezone
from decimal import Decimal
from pydantic import BaseModel, Field
from typing import List, Literal, Optional

SUPPORTED_CURRENCIES = ("USD", "EUR", "GBP", "AUD")
Currency = Literal["USD", "EUR", "GBP", "AUD"]

MAX_CART_ITEMS = 50
MAX_ITEM_QUANTITY = 99
CART_EXPIRY_DAYS = 7

# A single line of the client-held cart
class CartItem(BaseModel):
    book_id: int = Field(gt=0)
    quantity: int = Field(ge=1, le=MAX_ITEM_QUANTITY)
    price_at_add: Decimal = Field(gt=0) # Price captured when the item was added
    currency: Currency
    is_member_price: bool = False

# The cart as stored in the signed cookie
class Cart(BaseModel):
    items: List[CartItem] = Field(default_factory=list, max_length=MAX_CART_ITEMS)
    created_at: datetime
    expires_at: datetime

    @classmethod
    def empty(cls, now: Optional[datetime] = None) -> "Cart":
        now = now or datetime.now(timezone.utc)
        return cls(items=[], created_at=now, expires_at=now + timedelta(days=CART_EXPIRY_DAYS))

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return (now or datetime.now(timezone.utc)) > self.expires_at

    def find(self, book_id: int) -> Optional[CartItem]:
        return next((it for it in self.items if it.book_id == book_id), None)

# Request schema for adding a book to the cart
class CartAddItem(BaseModel):
    book_id: int
    quantity: int = Field(default=1, ge=1, le=MAX_ITEM_QUANTITY)
    is_member_price: bool = False

# Request schema for changing a line quantity
class CartUpdateItem(BaseModel):
    quantity: int = Field(ge=1, le=MAX_ITEM_QUANTITY)

# Response schema for one populated cart line
class CartItemOut(BaseModel):
    book_id: int
    title: str
    author: Optional[str] = None
    quantity: int
    price_at_add: Decimal
    currency: str
    is_member_price: bool
    stock_quantity: int
    line_total: Decimal

# Response schema for the whole cart
class CartOut(BaseModel):
    items: List[CartItemOut]
    item_count: int
    subtotal: Decimal
    currency: str
    created_at: datetime
    expires_at: datetime
