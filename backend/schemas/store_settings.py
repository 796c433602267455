from pydantic import BaseModel, ConfigDict
from typing import Optional

class StoreSettingsOut(BaseModel):
    ordering_enabled: bool
    ordering_disabled_message: str

    model_config = ConfigDict(from_attributes=True)

class StoreSettingsUpdate(BaseModel):
    ordering_enabled: Optional[bool] = None
    ordering_disabled_message: Optional[str] = None
