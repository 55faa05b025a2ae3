"""Read-only sales aggregates over the orders table."""
from datetime import datetime, time, timedelta

import pandas as pd
from sqlalchemy import func

from ..errors import ValidationError
from ..extensions import db
from ..model import Order, Product, User


def summary():
    total_sales, total_revenue = db.session.query(
        func.count(Order.id), func.coalesce(func.sum(Order.total_amount), 0)
    ).one()
    return {
        "users": db.session.query(func.count(User.id)).scalar() or 0,
        "products": db.session.query(func.count(Product.id)).scalar() or 0,
        "totalSales": int(total_sales or 0),
        "totalRevenue": round(float(total_revenue or 0), 2),
    }


def _daily_rows(start_date, end_date):
    day = func.date(Order.created_at).label("day")
    return (
        db.session.query(day, func.count(Order.id), func.sum(Order.total_amount))
        .filter(
            Order.created_at >= datetime.combine(start_date, time.min),
            Order.created_at < datetime.combine(end_date + timedelta(days=1), time.min),
        )
        .group_by(day)
        .all()
    )


def daily_series(start_date, end_date):
    """One entry per calendar day in [start_date, end_date], zero-filled.

    The query only yields days that had orders, so the full calendar is built
    separately and the aggregates are left-joined onto it.
    """
    if end_date < start_date:
        raise ValidationError("end date must not be before start date")

    activity = pd.DataFrame(
        [(str(day), int(count), float(revenue or 0)) for day, count, revenue in _daily_rows(start_date, end_date)],
        columns=["date", "sales", "revenue"],
    )
    calendar = pd.DataFrame({"date": pd.date_range(start_date, end_date, freq="D").strftime("%Y-%m-%d")})
    # an empty frame has object columns; align the key dtype before merging
    activity["date"] = activity["date"].astype(str)
    calendar["date"] = calendar["date"].astype(str)
    merged = calendar.merge(activity, on="date", how="left").fillna({"sales": 0, "revenue": 0.0})

    return [
        {
            "date": row.date,
            "sales": int(row.sales),
            "revenue": round(float(row.revenue), 2),
        }
        for row in merged.itertuples(index=False)
    ]
