# storefront/utils/dates.py
from datetime import date, datetime, timezone


def utcnow():
    """Naive UTC now; every DateTime column stores naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_iso_date(s):
    """'YYYY-MM-DD' (or a full ISO datetime) -> date, None when blank or malformed."""
    if not s:
        return None
    s = s.strip()
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    try:
        if len(s) == 10:
            return date.fromisoformat(s)
        dt = datetime.fromisoformat(s)
        if dt.tzinfo:
            dt = dt.astimezone(timezone.utc)
        return dt.date()
    except ValueError:
        return None
