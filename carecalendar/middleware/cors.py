"""CORS configuration for the care calendar frontend."""
from fastapi.middleware.cors import CORSMiddleware
import logging

from carecalendar.config import ENVIRONMENT, FRONTEND_URL

logger = logging.getLogger(__name__)

# Base allowed origins for development
ALLOWED_ORIGINS = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]

if FRONTEND_URL and FRONTEND_URL not in ALLOWED_ORIGINS:
    ALLOWED_ORIGINS.append(FRONTEND_URL)


def add_cors_middleware(app):
    """Add CORS middleware to the FastAPI application."""
    # Production only trusts the configured frontend
    origins = [FRONTEND_URL] if ENVIRONMENT == "production" and FRONTEND_URL else ALLOWED_ORIGINS
    logger.info(f"CORS allowed origins ({ENVIRONMENT}): {origins}")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
