"""Configuration module for the class workspace service.

This module provides centralized configuration management, including directory
paths, API server settings, identity settings, and domain limits.
All configuration values can be overridden via environment variables.
"""

import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# --- Directory Configuration ---

# Root directory of the project
ROOT_DIR = Path(__file__).parent.parent.resolve()

# Data directory name
DATA_DIR_NAME = "data"
DATA_DIR = ROOT_DIR / DATA_DIR_NAME

# --- Database Configuration ---

DATABASE_URL: str = os.getenv(
    "DATABASE_URL", f"sqlite:///{DATA_DIR}/class_workspace.db"
)

# --- API Server Configuration ---

API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
API_PORT: int = int(os.getenv("API_PORT", "8000"))

# CORS allowed origins (comma-separated list)
# Default includes local development addresses. For production, set via
# CORS_ALLOWED_ORIGINS environment variable.
_CORS_ALLOWED_ORIGINS_STR: str = os.getenv(
    "CORS_ALLOWED_ORIGINS",
    "http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000,"
    "http://127.0.0.1:3000",
)
CORS_ALLOWED_ORIGINS: List[str] = [
    origin.strip()
    for origin in _CORS_ALLOWED_ORIGINS_STR.split(",")
    if origin.strip()
]

# --- Logging Configuration ---

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

# --- Identity Configuration ---

JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY", "your-secret-key-change-in-production")
JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES: int = int(
    os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24 * 30))
)

# Resolved identities are reused for this many seconds before the token is
# decoded again.
IDENTITY_CACHE_TTL_SECONDS: int = int(os.getenv("IDENTITY_CACHE_TTL_SECONDS", "300"))
IDENTITY_CACHE_MAX_ENTRIES: int = int(os.getenv("IDENTITY_CACHE_MAX_ENTRIES", "1024"))

# --- Class Configuration ---

CLASS_NAME_MAX_LENGTH: int = 100
CLASS_DESCRIPTION_MAX_LENGTH: int = 500

INVITATION_CODE_LENGTH: int = 6
INVITATION_CODE_TTL_DAYS: int = int(os.getenv("INVITATION_CODE_TTL_DAYS", "7"))

# --- Channel & Message Configuration ---

# Channels every class has when none were stored. These cannot be deleted.
DEFAULT_CHANNELS: List[str] = ["general", "assignments", "questions"]
DEFAULT_CHANNEL: str = "general"

MESSAGE_MAX_LENGTH: int = 2000

# Number of messages returned by a channel listing
MESSAGE_PAGE_SIZE: int = int(os.getenv("MESSAGE_PAGE_SIZE", "50"))
