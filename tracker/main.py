from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tracker.api.auth import router as auth_router
from tracker.api.routes import router as api_router
from tracker.config.settings import get_settings
from tracker.storage.database import init_db
from tracker.utils.logging_config import setup_logging


# Setup logging
logger = setup_logging()
settings = get_settings()

APP_VERSION = "1.0.0"

app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    description="Multi-user project and task tracker with dependency-aware scheduling",
    version=APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(dict.fromkeys([
        settings.frontend_origin.rstrip("/"),
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ])),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Initialize database on startup
@app.on_event("startup")
async def startup_event():
    logger.info(f"Starting {settings.app_name}...")
    init_db()
    logger.info("Database initialized")
    logger.info(f"Schedule day starts at {settings.schedule_day_start_hour:02d}:00 UTC")

@app.on_event("shutdown")
async def shutdown_event():
    logger.info(f"Shutting down {settings.app_name}...")

app.include_router(auth_router, prefix="/api/v1/auth", tags=["auth"])
app.include_router(api_router, prefix="/api/v1")


@app.get("/health", tags=["health"])
def health_check():
    """Health check endpoint for monitoring and load balancers."""
    return {"status": "ok", "app": settings.app_name, "version": APP_VERSION}
