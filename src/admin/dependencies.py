from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session
from typing import Optional
from loguru import logger
import secrets

from src.database import get_db
from src.event_settings.service import SettingsStore

def pin_matches(candidate: Optional[str], admin_pin: str) -> bool:
    """Compare a submitted PIN with the configured one"""
    if not candidate:
        return False
    return secrets.compare_digest(candidate.encode(), admin_pin.encode())

def require_admin(
    x_admin_pin: Optional[str] = Header(None, description="Admin PIN"),
    db: Session = Depends(get_db)
):
    """Require the admin PIN for access.

    This is a convenience gate for a single local device, not an
    authentication boundary: the PIN is stored and compared in plain text.
    """
    if not pin_matches(x_admin_pin, SettingsStore(db).get().admin_pin):
        logger.warning("Admin request rejected: missing or wrong PIN")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Admin PIN required"
        )
    return True
