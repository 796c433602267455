# backend/models/book.py
from sqlalchemy import Column, Integer, String, Numeric, DateTime, CheckConstraint, func
from database import Base

# Model Book
# Catalog entry for a single title. Only the stock ledger writes
# stock_quantity; each write bumps `version`, which is the optimistic-lock
# token every conditional stock update is keyed on.
class Book(Base):
    __tablename__ = "books"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False, index=True)
    author = Column(String, nullable=True)
    isbn = Column(String, unique=True, nullable=True, index=True)

    # Prices in major currency units (e.g. dollars)
    sell_price = Column(Numeric(10, 2), CheckConstraint("sell_price >= 0"), nullable=False)
    member_price = Column(Numeric(10, 2), CheckConstraint("member_price >= 0"), nullable=False)
    currency = Column(String(3), nullable=False, default="AUD")

    stock_quantity = Column(Integer, CheckConstraint("stock_quantity >= 0"), nullable=False, default=0)
    version = Column(Integer, nullable=False, default=1)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
