import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pickup.database import init_db
from pickup.routes import games, notifications

logger = logging.getLogger(__name__)

app = FastAPI(title="Pickup Games API")

_cors_origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
]
_extra = os.getenv("CORS_ORIGINS", "")
if _extra:
    _cors_origins.extend(o.strip() for o in _extra.split(",") if o.strip())

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(games.router, prefix="/api", tags=["games"])

# Notification router has its own /api prefix
app.include_router(notifications.router)


@app.on_event("startup")
def on_startup():
    init_db()  # Use centralized init_db() which imports models and creates tables
    logger.info(f"Registered {len(app.routes)} routes")


@app.get("/api/health")
def health_check():
    """Diagnostic endpoint"""
    return {
        "app_name": "Pickup Games API",
        "status": "healthy",
        "green_api_configured": bool(
            os.getenv("GREEN_API_ID_INSTANCE") and os.getenv("GREEN_API_ACCESS_TOKEN")
        ),
    }
