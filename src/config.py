from pydantic_settings import BaseSettings
from typing import List, Optional

class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite:///./entry_tickets.db"
    
    # Application
    PROJECT_NAME: str = "Timed Entry Ticketing"
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173"]
    
    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: Optional[str] = None
    
    # Event defaults (used until an admin saves settings)
    DEFAULT_EVENT_TITLE: str = "Haunted House \"Curse of Noguchi\" Timed Entry"
    DEFAULT_LOCATION: str = "School Festival Hall B, 1F"
    DEFAULT_SLOT_MINUTES: int = 10
    DEFAULT_SLOT_CAPACITY: int = 8
    DEFAULT_REMINDER_MINUTES_BEFORE: int = 5
    DEFAULT_ADMIN_PIN: str = "noguchi"
    DEFAULT_SCHEDULE_START: str = "09:00"
    DEFAULT_SCHEDULE_END: str = "16:00"
    
    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")
    
    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
