from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from src.config import settings
from src.logger_config import setup_logging
from src.database import SessionLocal, init_db
from src.event_settings import router as event_settings_router
from src.slots import router as slots_router
from src.tickets import router as tickets_router
from src.tickets.reminder_service import reminder_scheduler, rearm_pending_reminders
from src.admin import router as admin_router

setup_logging()

@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    db = SessionLocal()
    try:
        rearm_pending_reminders(db)
    finally:
        db.close()
    logger.info(f"{settings.PROJECT_NAME} started ({settings.ENVIRONMENT})")
    yield
    cancelled = reminder_scheduler.cancel_all()
    logger.info(f"Shutting down, {cancelled} pending reminder(s) dropped")

# Create FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    version="1.0.0",
    description="Numbered timed-entry tickets for a small event",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(
    event_settings_router,
    prefix=f"{settings.API_V1_STR}/settings",
    tags=["Event Settings"]
)

app.include_router(
    slots_router,
    prefix=f"{settings.API_V1_STR}/slots",
    tags=["Slots"]
)

app.include_router(
    tickets_router,
    prefix=f"{settings.API_V1_STR}/tickets",
    tags=["Tickets"]
)

app.include_router(
    admin_router.router,
    prefix=f"{settings.API_V1_STR}/admin",
    tags=["Admin"]
)

@app.get("/")
def root():
    """Root endpoint"""
    return {
        "message": settings.PROJECT_NAME,
        "version": "1.0.0",
        "docs": "/docs"
    }

@app.get("/health")
def health_check():
    """Health check endpoint"""
    return {"status": "healthy"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
