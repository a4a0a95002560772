"""
Statistics over one owner's jobs: counts per status and a monthly trend.
"""

import calendar
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from .database import Job, get_session
from .enums import JobStatus
from .logger import get_logger

TREND_MONTHS = 6


def months_ago(now: datetime, months: int) -> datetime:
    """
    Step back whole calendar months, clamping the day to the target month's length.

    Example:
        months_ago(datetime(2025, 8, 31), 6) -> datetime(2025, 2, 28)
    """
    total = now.year * 12 + (now.month - 1) - months
    year, month = divmod(total, 12)
    month += 1
    day = min(now.day, calendar.monthrange(year, month)[1])
    return now.replace(year=year, month=month, day=day)


def merge_status_counts(grouped: Iterable[Tuple[str, int]]) -> Dict[str, int]:
    """Zero-filled count for every status, overlaid with grouped counts."""
    counts = {status.value: 0 for status in JobStatus}
    for status, count in grouped:
        if status in counts:
            counts[status] = count
    return counts


def bucket_by_month(applied_dates: Iterable[datetime]) -> List[Dict[str, object]]:
    """
    Count dates per month in a single pass.

    Buckets keep first-seen order, so feed dates in ascending order to get
    a chronological result. Months without dates are not emitted.
    """
    buckets: Dict[Tuple[int, int], Dict[str, object]] = {}
    for applied in applied_dates:
        key = (applied.year, applied.month)
        if key in buckets:
            buckets[key]["count"] += 1
        else:
            buckets[key] = {"date": applied.strftime("%b %y"), "count": 1}
    return list(buckets.values())


class StatsAggregator:
    """Owner-scoped status counts and monthly trend."""

    def __init__(
        self,
        owner_id: str,
        session_factory: Callable = get_session,
        trend_months: int = TREND_MONTHS,
    ):
        self.owner_id = owner_id
        self.trend_months = trend_months
        self._session_factory = session_factory

    def counts_by_status(self) -> Dict[str, int]:
        logger = get_logger()
        logger.record_attempt("counts_by_status")
        try:
            with self._session_factory() as session:
                grouped = (
                    session.query(Job.status, func.count(Job.id))
                    .filter(Job.owner_id == self.owner_id)
                    .group_by(Job.status)
                    .all()
                )
        except SQLAlchemyError as e:
            logger.record_failure("counts_by_status", type(e).__name__)
            logger.error("counts_by_status failed", owner_id=self.owner_id, error=str(e))
            return merge_status_counts([])
        logger.record_success("counts_by_status")
        return merge_status_counts(grouped)

    def monthly_trend(self, now: Optional[datetime] = None) -> List[Dict[str, object]]:
        """
        Applications per month over the trailing window.

        The window starts exactly trend_months calendar months before now and
        includes its boundary.
        """
        logger = get_logger()
        logger.record_attempt("monthly_trend")
        cutoff = months_ago(now or datetime.now(), self.trend_months)
        try:
            with self._session_factory() as session:
                rows = (
                    session.query(Job.applied_date)
                    .filter(Job.owner_id == self.owner_id, Job.applied_date >= cutoff)
                    .order_by(Job.applied_date.asc())
                    .all()
                )
        except SQLAlchemyError as e:
            logger.record_failure("monthly_trend", type(e).__name__)
            logger.error("monthly_trend failed", owner_id=self.owner_id, error=str(e))
            return []
        logger.record_success("monthly_trend")
        return bucket_by_month(applied for (applied,) in rows)
