from sqlalchemy import Column, String, DateTime, JSON
from sqlalchemy.sql import func
from src.database import Base

# ================================
# Key-Value Persistence
# ================================
class KeyValueEntry(Base):
    """One persisted record (settings or the ticket list) stored as JSON"""
    __tablename__ = "key_value_entries"
    
    key = Column(String(100), primary_key=True)
    value = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
