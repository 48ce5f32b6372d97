"""
Central configuration for the collaboration backend.

All settings loaded from .env file or environment variables.
See .env.example for available options.
"""
import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env file from backend directory
load_dotenv(Path(__file__).parent / ".env")

# Server bind address
HOST = os.getenv("COLLAB_HOST", "0.0.0.0")
PORT = int(os.getenv("COLLAB_PORT", "5000"))

# Frontend origins allowed to open connections (comma-separated)
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("COLLAB_CORS_ORIGINS", "http://localhost:3000,http://localhost:5173").split(",")
    if origin.strip()
]

# Max queued outbound messages per connection before new ones are dropped
OUTBOX_MAX_SIZE = int(os.getenv("COLLAB_OUTBOX_SIZE", "1000"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
