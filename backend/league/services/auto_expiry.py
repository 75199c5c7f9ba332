"""
Periodic expiry of rounds whose play window has ended.

"Today" is evaluated in the league's configured timezone, not the server's.
Each elapsed round is handled in its own transaction: a business-rule failure
on one round is logged and reported, and the sweep moves on. Database or
other infrastructure errors propagate.
"""
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional

import pytz
from sqlmodel import Session, select

from league.config import LeagueSettings, get_settings
from league.exceptions import LeagueError
from league.models.round import Round, RoundStatus
from league.services.round_lifecycle import ExpiredRound, auto_expire

logger = logging.getLogger(__name__)


@dataclass
class ExpiryReport:
    today: date
    expired: List[ExpiredRound] = field(default_factory=list)
    failed: List[dict] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "today": self.today.isoformat(),
            "expired_count": len(self.expired),
            "expired": [
                {
                    "round_id": r.round_id,
                    "category_id": r.category_id,
                    "round_number": r.round_number,
                    "unreported_marked": r.unreported_marked,
                    "next_round_activated": r.next_round_activated,
                }
                for r in self.expired
            ],
            "failed": self.failed,
        }


def local_today(tz_name: str, now: Optional[datetime] = None) -> date:
    """Calendar date in `tz_name`. Naive `now` values are taken as UTC."""
    tz = pytz.timezone(tz_name)
    now = now or datetime.utcnow()
    if now.tzinfo is None:
        now = pytz.UTC.localize(now)
    return now.astimezone(tz).date()


def find_elapsed_rounds(session: Session, today: date) -> List[Round]:
    """Active rounds whose period_end is strictly before `today`."""
    return list(
        session.exec(
            select(Round)
            .where(Round.status == RoundStatus.active.value, Round.period_end < today)
            .order_by(Round.category_id, Round.round_number)
        ).all()
    )


def expire_elapsed_rounds(
    session: Session,
    today: Optional[date] = None,
    settings: Optional[LeagueSettings] = None,
) -> ExpiryReport:
    settings = settings or get_settings()
    today = today or local_today(settings.timezone)

    round_ids = [r.id for r in find_elapsed_rounds(session, today)]
    report = ExpiryReport(today=today)
    logger.info(f"Expiry sweep for {today}: {len(round_ids)} elapsed round(s)")

    for round_id in round_ids:
        try:
            report.expired.append(auto_expire(session, round_id, today=today, settings=settings))
        except LeagueError as e:
            logger.warning(f"Skipping expiry of round {round_id}: {e}")
            report.failed.append({"round_id": round_id, "error": str(e)})

    return report
