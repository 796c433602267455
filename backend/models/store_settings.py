# backend/models/store_settings.py
from sqlalchemy import Column, Integer, String, Boolean
from database import Base

DEFAULT_ORDERING_DISABLED_MESSAGE = (
    "Online ordering is currently unavailable. You can submit an inquiry and we will get back to you."
)

# Store-wide switches (a single row, id=1)
class StoreSettings(Base):
    __tablename__ = "store_settings"

    id = Column(Integer, primary_key=True)
    ordering_enabled = Column(Boolean, nullable=False, default=True)
    ordering_disabled_message = Column(String, nullable=False, default=DEFAULT_ORDERING_DISABLED_MESSAGE)
