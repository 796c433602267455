# backend/routes/store_settings.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_db
from models.users import User
from schemas.store_settings import StoreSettingsOut, StoreSettingsUpdate
from services.store_settings import get_store_settings, update_store_settings
from utils.audit import write_log
from utils.tokenJWT import role_required

router = APIRouter(prefix="/store-settings", tags=["Store settings"])

@router.get("", response_model=StoreSettingsOut)
def read_settings(db: Session = Depends(get_db)):
    return get_store_settings(db)

@router.put("", response_model=StoreSettingsOut)
def write_settings(
    payload: StoreSettingsUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("ADMIN")),
):
    row = update_store_settings(
        db,
        ordering_enabled=payload.ordering_enabled,
        ordering_disabled_message=payload.ordering_disabled_message,
    )
    write_log(db, user_id=current_user.id, action="STORE_SETTINGS_UPDATE", resource="store_settings",
              status="SUCCESS", meta=payload.model_dump(exclude_none=True))
    return row
