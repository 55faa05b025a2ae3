# storefront/analytics/routes.py
from datetime import timedelta

from flask import request

from . import bp
from ..errors import ValidationError
from ..services import analytics_service
from ..utils.api import ok
from ..utils.dates import parse_iso_date, utcnow
from ..utils.decorators import admin_route, protect_route

DEFAULT_WINDOW_DAYS = 7


def _date_arg(name, default):
    raw = request.args.get(name)
    if raw is None:
        return default
    parsed = parse_iso_date(raw)
    if parsed is None:
        raise ValidationError(f"{name} must be an ISO date (YYYY-MM-DD)")
    return parsed


@bp.get("")
@protect_route
@admin_route
def analytics():
    """
    Query params:
      - start=YYYY-MM-DD (default: 7 days before end)
      - end=YYYY-MM-DD   (default: today, inclusive)
    """
    end = _date_arg("end", utcnow().date())
    start = _date_arg("start", end - timedelta(days=DEFAULT_WINDOW_DAYS))
    return ok("analytics", {
        "analyticsData": analytics_service.summary(),
        "dailySalesData": analytics_service.daily_series(start, end),
    })
