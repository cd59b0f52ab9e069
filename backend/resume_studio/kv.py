"""Key-value shim over the kv_store table (getItem/setItem/removeItem)."""
from typing import Optional
from sqlalchemy.orm import Session
from .models import KVEntry

PROFILES_KEY = "resume_ai_profiles"
SETTINGS_KEY = "resume_ai_settings"
MASTER_KEY = "sys_secure_integrity_check"


def get_item(db: Session, key: str) -> Optional[str]:
    entry = db.get(KVEntry, key)
    return entry.value if entry else None


def set_item(db: Session, key: str, value: str) -> None:
    entry = db.get(KVEntry, key)
    if not entry:
        entry = KVEntry(key=key)
        db.add(entry)
    entry.value = value
    db.commit()


def remove_item(db: Session, key: str) -> None:
    entry = db.get(KVEntry, key)
    if entry:
        db.delete(entry); db.commit()
