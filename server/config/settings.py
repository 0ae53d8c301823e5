"""Application configuration"""
import os

from dotenv import load_dotenv

# Load environment variables from .env file (if present)
load_dotenv()

# Server settings
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "5000"))
APP_ENV = os.getenv("APP_ENV", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Database settings (empty = run without persistence)
DATABASE_URL = os.getenv("DATABASE_URL", "")
REQUIRE_DATABASE = os.getenv("REQUIRE_DATABASE", "false").lower() in ("1", "true", "yes")

# In-memory fallback storage settings
FALLBACK_MAX_SIZE = 100
RECENT_DATA_LIMIT = 100

# Simulation settings
UPDATE_INTERVAL_SECONDS = float(os.getenv("UPDATE_INTERVAL_SECONDS", "10"))
DEFAULT_DEVICES = ["device001", "device002", "device003"]

# Client (dashboard) settings
API_URL = os.getenv("API_URL", f"http://localhost:{PORT}/api/data")
HISTORY_SIZE = 10
LATEST_POLL_SECONDS = 10
STATUS_POLL_SECONDS = 30
FETCH_ALL_TIMEOUT = 5.0
FETCH_LATEST_TIMEOUT = 3.0
FETCH_STATUS_TIMEOUT = 3.0
POST_TIMEOUT = 3.0
DELETE_TIMEOUT = 8.0
