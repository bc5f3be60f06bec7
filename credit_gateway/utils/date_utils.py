"""Date manipulation utilities"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def relative_time_label(created_at: datetime, now: datetime | None = None) -> str:
    """
    Human-readable age of an event, as shown in credit history.

    Just now (<1h), N hour(s) ago (<24h), Yesterday, N days ago (<7d),
    N week(s) ago (<30d), otherwise the calendar date as M/D/YYYY.
    """
    now = now or utc_now()
    elapsed = max((now - created_at).total_seconds(), 0.0)  # clock skew reads as "Just now"
    days_ago = int(elapsed // 86400)

    if days_ago == 0:
        hours_ago = int(elapsed // 3600)
        if hours_ago == 0:
            return "Just now"
        return f"{hours_ago} hour{'s' if hours_ago > 1 else ''} ago"
    elif days_ago == 1:
        return "Yesterday"
    elif days_ago < 7:
        return f"{days_ago} days ago"
    elif days_ago < 30:
        weeks_ago = days_ago // 7
        return f"{weeks_ago} week{'s' if weeks_ago > 1 else ''} ago"
    else:
        return f"{created_at.month}/{created_at.day}/{created_at.year}"
