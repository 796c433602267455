# backend/models/payment_claim.py
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, func
from database import Base

# Records every gateway transaction that passed verification. The unique
# transaction_id rejects a second checkout attaching the same charge, even
# when the first checkout never got as far as recording its sale.
class PaymentClaim(Base):
    __tablename__ = "payment_claims"

    id = Column(Integer, primary_key=True, index=True)
    transaction_id = Column(String, unique=True, nullable=False, index=True)
    claimed_at = Column(DateTime(timezone=True), server_default=func.now())
    sale_id = Column(Integer, ForeignKey("sales.id"), nullable=True)
