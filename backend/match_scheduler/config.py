"""
Runtime configuration for the match scheduler service.

All settings come from environment variables (optionally via a .env file).
"""

import os

from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./tournament.db")
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() in ("true", "1", "yes")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

CORS_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
_extra = os.getenv("CORS_ORIGINS", "")
if _extra:
    CORS_ORIGINS.extend(o.strip() for o in _extra.split(",") if o.strip())

# Number of pending pairings scanned per cell by the assignment engine
LOOKAHEAD_WINDOW = int(os.getenv("SCHEDULER_LOOKAHEAD_WINDOW", "180"))
