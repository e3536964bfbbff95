from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from src.database import get_db
from src.slots.schemas import SlotAvailability
from src.slots.service import SlotService

router = APIRouter()

@router.get("/", response_model=List[SlotAvailability])
def get_slots(db: Session = Depends(get_db)):
    """Get today's slots with remaining capacity and full/past flags"""
    return SlotService(db).get_availability()
