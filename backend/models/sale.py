# backend/models/sale.py
import enum
from sqlalchemy import Column, Integer, String, Numeric, ForeignKey, DateTime, Enum, func
from sqlalchemy.orm import relationship
from database import Base


class SaleStatus(str, enum.Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    REFUNDED = "REFUNDED"


# Statuses a sale can never leave once reached
TERMINAL_STATUSES = {SaleStatus.CANCELLED, SaleStatus.REFUNDED}


class PaymentMethod(str, enum.Enum):
    CARD = "CARD"
    CASH = "CASH"
    OTHER = "OTHER"


class PriceType(str, enum.Enum):
    RETAIL = "RETAIL"
    MEMBER = "MEMBER"


# Represents a completed checkout (an order)
class Sale(Base):
    __tablename__ = "sales"

    id = Column(Integer, primary_key=True, index=True)
    sale_date = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    # Totals captured at commit time, total_amount is tax inclusive
    subtotal = Column(Numeric(10, 2), nullable=False)
    tax_amount = Column(Numeric(10, 2), nullable=False, default=0)
    total_amount = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), nullable=False)

    # Payment details; one gateway transaction backs at most one sale
    payment_method = Column(Enum(PaymentMethod), nullable=False)
    payment_transaction_id = Column(String, unique=True, nullable=True, index=True)
    payment_receipt_url = Column(String, nullable=True)

    # Customer details (guest checkouts only carry email/name)
    customer_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    customer_email = Column(String, nullable=True, index=True)
    customer_name = Column(String, nullable=True)

    status = Column(Enum(SaleStatus), nullable=False, default=SaleStatus.PENDING, index=True)

    # Cancellation details
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    cancellation_reason = Column(String, nullable=True)

    items = relationship("SaleItem", back_populates="sale", cascade="all, delete-orphan")
    status_history = relationship(
        "SaleStatusHistory", back_populates="sale",
        cascade="all, delete-orphan", order_by="SaleStatusHistory.id",
    )


# A single book/quantity/price line within a sale. Prices are snapshots
# taken at commit time and are never updated afterwards.
class SaleItem(Base):
    __tablename__ = "sale_items"

    id = Column(Integer, primary_key=True, index=True)
    sale_id = Column(Integer, ForeignKey("sales.id"), nullable=False, index=True)
    book_id = Column(Integer, ForeignKey("books.id"), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    line_total = Column(Numeric(10, 2), nullable=False)
    price_type = Column(Enum(PriceType), nullable=False, default=PriceType.RETAIL)

    sale = relationship("Sale", back_populates="items")
    book = relationship("Book")


# Append-only log of status changes for a sale
class SaleStatusHistory(Base):
    __tablename__ = "sale_status_history"

    id = Column(Integer, primary_key=True, index=True)
    sale_id = Column(Integer, ForeignKey("sales.id"), nullable=False, index=True)
    status = Column(Enum(SaleStatus), nullable=False)
    timestamp = Column(DateTime(timezone=True), server_default=func.now())
    note = Column(String, nullable=True)
    changed_by = Column(Integer, ForeignKey("users.id"), nullable=True)

    sale = relationship("Sale", back_populates="status_history")
