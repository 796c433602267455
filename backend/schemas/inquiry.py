from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import List, Optional

from models.inquiry import InquiryStatus

# Input schema for asking about the books in the cart
class InquiryRequest(BaseModel):
    customer_name: str = Field(min_length=1, max_length=200)
    customer_email: EmailStr
    message: Optional[str] = Field(default=None, max_length=2000)

# Outcome of an inquiry submission
class InquiryResult(BaseModel):
    success: bool
    inquiry_id: Optional[int] = None
    error: Optional[str] = None
    code: Optional[str] = None

# Output schema for one requested book
class InquiryItemOut(BaseModel):
    book_id: Optional[int] = None
    title: str
    quantity: int
    price: Optional[Decimal] = None

    model_config = ConfigDict(from_attributes=True)

# Output schema for staff
class InquiryOut(BaseModel):
    id: int
    created_at: Optional[datetime] = None
    customer_name: str
    customer_email: str
    message: Optional[str] = None
    status: InquiryStatus
    staff_notes: Optional[str] = None
    items: List[InquiryItemOut]

    model_config = ConfigDict(from_attributes=True)

# Schema for staff follow-up
class InquiryUpdate(BaseModel):
    status: Optional[InquiryStatus] = None
    staff_notes: Optional[str] = None
