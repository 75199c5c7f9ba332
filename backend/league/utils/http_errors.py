"""
Translate league errors into HTTP errors.

Routes call services inside `try/except LeagueError` and re-raise through
http_error(); anything else propagates as a 500.
"""

from fastapi import HTTPException

from league.exceptions import (
    LeagueError,
    LeagueStateError,
    LeagueValidationError,
    NotFoundError,
    NotParticipantError,
    UnresolvedMatchesError,
)


def http_error(exc: LeagueError) -> HTTPException:
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, NotParticipantError):
        return HTTPException(status_code=403, detail=str(exc))
    if isinstance(exc, UnresolvedMatchesError):
        return HTTPException(
            status_code=409,
            detail={"code": "UNRESOLVED_MATCHES", "message": str(exc), "unresolved_count": exc.count},
        )
    if isinstance(exc, LeagueStateError):
        return HTTPException(status_code=409, detail=str(exc))
    if isinstance(exc, LeagueValidationError):
        return HTTPException(status_code=422, detail=str(exc))
    return HTTPException(status_code=400, detail=str(exc))
