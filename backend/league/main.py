import logging
import os
import subprocess
from datetime import datetime

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from league.database import init_db
from league.routes import categories, cron, fixtures, matches, players, rounds, standings

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Round-Robin League API")


# Get build info
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

    # Fallback to build timestamp
    return datetime.now().strftime("%Y%m%d-%H%M%S")


BUILD_HASH = get_build_info()

_cors_origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
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

# Admin
app.include_router(categories.router, prefix="/api", tags=["categories"])
app.include_router(players.router, prefix="/api", tags=["players"])
app.include_router(fixtures.router, prefix="/api", tags=["fixtures"])
app.include_router(rounds.router, prefix="/api", tags=["rounds"])

# Results and standings
app.include_router(matches.router, prefix="/api", tags=["matches"])
app.include_router(standings.router, prefix="/api", tags=["standings"])

# Periodic trigger (bearer secret)
app.include_router(cron.router, prefix="/api", tags=["cron"])


@app.on_event("startup")
def on_startup():
    init_db()
    route_count = sum(1 for r in app.routes if getattr(r, "path", None))
    logger.info(f"League API started: {route_count} routes, build {BUILD_HASH}")


@app.get("/api/health")
def health_check():
    """Diagnostic endpoint to verify which code is running"""
    return {"app_name": "Round-Robin League API", "build_hash": BUILD_HASH, "status": "healthy"}
