from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from src.database import get_db
from src.event_settings.schemas import PublicEventSettings
from src.event_settings.service import SettingsStore

router = APIRouter()

@router.get("/", response_model=PublicEventSettings)
def get_event_settings(db: Session = Depends(get_db)):
    """Get the public event settings (title, location, slot rules, schedule)"""
    return SettingsStore(db).get_public()
