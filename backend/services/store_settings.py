# backend/services/store_settings.py
from sqlalchemy.orm import Session

from models.store_settings import StoreSettings, DEFAULT_ORDERING_DISABLED_MESSAGE

SETTINGS_ID = 1


def get_store_settings(db: Session) -> StoreSettings:
    # A store that never saved settings takes orders
    settings_row = db.get(StoreSettings, SETTINGS_ID)
    if settings_row is None:
        return StoreSettings(
            id=SETTINGS_ID,
            ordering_enabled=True,
            ordering_disabled_message=DEFAULT_ORDERING_DISABLED_MESSAGE,
        )
    return settings_row


def is_ordering_enabled(db: Session) -> bool:
    return bool(get_store_settings(db).ordering_enabled)


def update_store_settings(db: Session, ordering_enabled=None, ordering_disabled_message=None) -> StoreSettings:
    settings_row = db.get(StoreSettings, SETTINGS_ID)
    if settings_row is None:
        settings_row = StoreSettings(
            id=SETTINGS_ID,
            ordering_enabled=True,
            ordering_disabled_message=DEFAULT_ORDERING_DISABLED_MESSAGE,
        )
        db.add(settings_row)

    if ordering_enabled is not None:
        settings_row.ordering_enabled = ordering_enabled
    if ordering_disabled_message:
        settings_row.ordering_disabled_message = ordering_disabled_message

    db.commit()
    db.refresh(settings_row)
    return settings_row
