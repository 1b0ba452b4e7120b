import logging
import os
import subprocess
from datetime import datetime

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from match_scheduler.config import CORS_ORIGINS, LOG_LEVEL
from match_scheduler.database import init_db
from match_scheduler.logging_config import setup_logging
from match_scheduler.routes import schedule, teams, tournaments

logger = logging.getLogger(__name__)

app = FastAPI(title="Match Scheduler API")


def get_build_info():
    """Get git commit hash or build timestamp"""
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],
            cwd=os.path.dirname(os.path.dirname(__file__)),
            capture_output=True,
            text=True,
            timeout=2,
        )
        if result.returncode == 0:
            return result.stdout.strip()
    except (OSError, subprocess.SubprocessError):
        pass

    return datetime.now().strftime("%Y%m%d-%H%M%S")


BUILD_HASH = get_build_info()

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(tournaments.router, prefix="/api", tags=["tournaments"])
app.include_router(teams.router, prefix="/api", tags=["teams"])
app.include_router(schedule.router, prefix="/api", tags=["schedule"])


@app.on_event("startup")
def on_startup():
    setup_logging(getattr(logging, LOG_LEVEL, logging.INFO))
    init_db()
    logger.info(f"Match Scheduler API started (build {BUILD_HASH})")


@app.get("/api/health")
def health_check():
    """Diagnostic endpoint to verify which code is running"""
    return {"app_name": "Match Scheduler API", "build_hash": BUILD_HASH, "status": "healthy"}
