"""Runtime configuration for the Care Calendar backend."""
import os
from dotenv import load_dotenv

# Load environment variables from a local .env file when present
load_dotenv()

DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///./care_calendar.db")
IS_SQLITE = DATABASE_URL.startswith("sqlite")

ENVIRONMENT = os.environ.get("ENVIRONMENT", "development")
FRONTEND_URL = os.environ.get("FRONTEND_URL", "http://localhost:5173")

# Owner's local zone when a request does not name one
DEFAULT_TIMEZONE = os.environ.get("DEFAULT_TIMEZONE", "UTC")

RELIABILITY_WINDOW_DAYS = int(os.environ.get("RELIABILITY_WINDOW_DAYS", "30"))

# Hour used for brand-new tasks that have no scheduled time
DEFAULT_DUE_HOUR = int(os.environ.get("DEFAULT_DUE_HOUR", "9"))

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
