"""
Read-modify-write persistence of resume profiles and AI settings.

Both records live as JSON strings in the key-value table; every save
rewrites the whole record.
"""
import json
import logging
import time
import uuid
from typing import List, Optional

from sqlalchemy.orm import Session

from . import kv
from .encryption import decrypt_data, encrypt_data
from .schemas import AISettings, ResumeProfile

logger = logging.getLogger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


def _write_resumes(db: Session, resumes: List[ResumeProfile]) -> None:
    payload = [r.model_dump(by_alias=True) for r in resumes]
    kv.set_item(db, kv.PROFILES_KEY, json.dumps(payload))


def get_resumes(db: Session) -> List[ResumeProfile]:
    data = kv.get_item(db, kv.PROFILES_KEY)
    if not data:
        return []
    return [ResumeProfile.model_validate(r) for r in json.loads(data)]


def get_resume_by_id(db: Session, resume_id: str) -> Optional[ResumeProfile]:
    return next((r for r in get_resumes(db) if r.id == resume_id), None)


def save_resume(db: Session, resume: ResumeProfile) -> ResumeProfile:
    """Replace the profile with the same id, or append it when new."""
    existing = get_resumes(db)
    saved = resume.model_copy(update={"last_modified": now_ms()})
    index = next((i for i, r in enumerate(existing) if r.id == resume.id), -1)
    if index >= 0:
        existing[index] = saved
    else:
        existing.append(saved)
    _write_resumes(db, existing)
    return saved


def delete_resume(db: Session, resume_id: str) -> None:
    existing = get_resumes(db)
    filtered = [r for r in existing if r.id != resume_id]
    if len(filtered) == len(existing):
        return
    _write_resumes(db, filtered)


def create_empty_resume() -> ResumeProfile:
    return ResumeProfile(id=str(uuid.uuid4()), last_modified=now_ms())


def get_ai_settings(db: Session) -> AISettings:
    defaults = AISettings()
    data = kv.get_item(db, kv.SETTINGS_KEY)
    if not data:
        return defaults
    try:
        parsed = json.loads(data)
        if parsed.get("apiKey"):
            parsed["apiKey"] = decrypt_data(db, parsed["apiKey"])
        return AISettings.model_validate({**defaults.model_dump(by_alias=True), **parsed})
    except Exception as e:
        logger.error(f"Failed to load settings: {e}")
        return defaults


def save_ai_settings(db: Session, settings: AISettings) -> None:
    to_save = settings.model_dump(by_alias=True)
    if to_save["apiKey"]:
        to_save["apiKey"] = encrypt_data(db, to_save["apiKey"])
    kv.set_item(db, kv.SETTINGS_KEY, json.dumps(to_save))
