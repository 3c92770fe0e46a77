import calendar
from datetime import date, datetime, time, timedelta
from typing import Optional, Tuple


def now() -> datetime:
    """Local wall-clock time; all timestamps are stored naive."""
    return datetime.now()


def today() -> date:
    return date.today()


def month_bounds(day: Optional[date] = None) -> Tuple[date, date]:
    """First and last calendar day of the month containing `day`."""
    d = day or today()
    last = calendar.monthrange(d.year, d.month)[1]
    return d.replace(day=1), d.replace(day=last)


def period_start(period: str, reference: Optional[datetime] = None) -> Optional[datetime]:
    """
    Start of a reporting window.

    today -> local midnight, week -> 7 days back, month -> 30 days back,
    all -> None (no lower bound).
    """
    ref = reference or now()
    if period == "today":
        return datetime.combine(ref.date(), time.min)
    if period == "week":
        return ref - timedelta(days=7)
    if period == "month":
        return ref - timedelta(days=30)
    if period == "all":
        return None
    raise ValueError(f"Unknown period: {period}")
