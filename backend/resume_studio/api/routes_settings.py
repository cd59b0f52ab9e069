from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List
from ..config import PROVIDER_PRESETS
from ..db import get_db
from ..schemas import AISettings, ProviderPreset
from ..storage import get_ai_settings, save_ai_settings

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("", response_model=AISettings)
def read_settings(db: Session = Depends(get_db)):
    return get_ai_settings(db)


@router.put("", response_model=AISettings)
def update_settings(body: AISettings, db: Session = Depends(get_db)):
    preset = PROVIDER_PRESETS.get(body.provider)
    if preset is None:
        raise HTTPException(400, f"Unknown AI provider: {body.provider}")
    default_base_url, default_model = preset
    settings = body.model_copy(update={
        "base_url": body.base_url.strip() or default_base_url,
        "model": body.model.strip() or default_model,
        "api_key": body.api_key.strip(),
    })
    save_ai_settings(db, settings)
    return get_ai_settings(db)


@router.get("/providers", response_model=List[ProviderPreset])
def list_providers():
    return [
        ProviderPreset(id=pid, default_base_url=base_url, default_model=model)
        for pid, (base_url, model) in PROVIDER_PRESETS.items()
    ]
