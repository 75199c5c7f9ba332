"""
Periodic trigger endpoint.

Scheduled daily shortly after midnight in the league timezone. Expires every
active round whose play window ended before today; unplayed matches of those
rounds are marked not reported, which penalizes both players.
"""
import hmac
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel
from sqlmodel import Session

from league.config import LeagueSettings, get_settings
from league.database import get_session
from league.services.auto_expiry import expire_elapsed_rounds

logger = logging.getLogger(__name__)

router = APIRouter()

security = HTTPBearer(auto_error=False)


class CloseRoundsResponse(BaseModel):
    today: str
    expired_count: int
    expired: List[Dict[str, Any]]
    failed: List[Dict[str, Any]]


def require_cron_secret(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    settings: LeagueSettings = Depends(get_settings),
) -> None:
    if not settings.cron_secret:
        logger.error("LEAGUE_CRON_SECRET is not configured; refusing cron request")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Cron trigger not configured")

    provided = credentials.credentials if credentials else ""
    if not hmac.compare_digest(provided.encode(), settings.cron_secret.encode()):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )


@router.api_route(
    "/cron/close-rounds",
    methods=["GET", "POST"],
    response_model=CloseRoundsResponse,
    dependencies=[Depends(require_cron_secret)],
)
def close_elapsed_rounds(
    session: Session = Depends(get_session),
    settings: LeagueSettings = Depends(get_settings),
):
    report = expire_elapsed_rounds(session, settings=settings)
    logger.info(f"Cron close-rounds: {len(report.expired)} expired, {len(report.failed)} failed")
    return report.as_dict()
