# backend/models/inquiry.py
import enum
from sqlalchemy import Column, Integer, String, Numeric, ForeignKey, DateTime, Enum, func
from sqlalchemy.orm import relationship
from database import Base


class InquiryStatus(str, enum.Enum):
    NEW = "NEW"
    CONTACTED = "CONTACTED"
    RESOLVED = "RESOLVED"


# A customer's request for books, taken instead of an order while online
# ordering is switched off. Staff follow up by email.
class Inquiry(Base):
    __tablename__ = "inquiries"

    id = Column(Integer, primary_key=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    customer_name = Column(String(200), nullable=False)
    customer_email = Column(String, nullable=False, index=True)
    message = Column(String(2000), nullable=True)

    status = Column(Enum(InquiryStatus), nullable=False, default=InquiryStatus.NEW, index=True)
    # Internal, never shown to the customer
    staff_notes = Column(String, nullable=True)

    items = relationship("InquiryItem", back_populates="inquiry", cascade="all, delete-orphan")


# Snapshot of one cart line at inquiry time
class InquiryItem(Base):
    __tablename__ = "inquiry_items"

    id = Column(Integer, primary_key=True, index=True)
    inquiry_id = Column(Integer, ForeignKey("inquiries.id"), nullable=False, index=True)
    book_id = Column(Integer, ForeignKey("books.id"), nullable=True)
    title = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=True)

    inquiry = relationship("Inquiry", back_populates="items")
