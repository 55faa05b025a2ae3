from datetime import date, datetime, timedelta
from decimal import Decimal
from uuid import uuid4

import pytest

from storefront.extensions import db
from storefront.model import Order, Role, User
from storefront.services import analytics_service
from storefront.errors import ValidationError
from storefront.utils.dates import utcnow


@pytest.fixture()
def buyer():
    u = User(name="Buyer", email="buyer@example.com", role=Role.CUSTOMER)
    u.set_password("buyerpass")
    db.session.add(u)
    db.session.commit()
    return u


@pytest.fixture()
def place_order(buyer):
    def _place(total, created_at):
        o = Order(user_id=buyer.id, total_amount=Decimal(total),
                  stripe_session_id=f"cs_{uuid4().hex}", created_at=created_at)
        db.session.add(o)
        db.session.commit()
        return o
    return _place


def test_default_window_on_empty_store(admin_client):
    resp = admin_client.get("/api/analytics")
    assert resp.status_code == 200
    series = resp.get_json()["data"]["dailySalesData"]
    assert len(series) == 8
    assert series[-1]["date"] == utcnow().date().isoformat()
    assert all(d["sales"] == 0 and d["revenue"] == 0 for d in series)


def test_summary_counts(admin_client, make_product, place_order):
    make_product()
    place_order("20.00", utcnow())
    place_order("5.50", utcnow())
    data = admin_client.get("/api/analytics").get_json()["data"]["analyticsData"]
    # admin + buyer
    assert data == {"users": 2, "products": 1, "totalSales": 2, "totalRevenue": 25.5}


def test_explicit_range_is_contiguous(admin_client, place_order):
    place_order("10.00", datetime(2024, 3, 1, 9, 30))
    place_order("2.25", datetime(2024, 3, 1, 23, 59, 59))
    place_order("7.00", datetime(2024, 3, 3, 0, 0))
    place_order("99.00", datetime(2024, 3, 5, 12, 0))  # outside the window

    resp = admin_client.get("/api/analytics?start=2024-02-29&end=2024-03-03")
    assert resp.get_json()["data"]["dailySalesData"] == [
        {"date": "2024-02-29", "sales": 0, "revenue": 0},
        {"date": "2024-03-01", "sales": 2, "revenue": 12.25},
        {"date": "2024-03-02", "sales": 0, "revenue": 0},
        {"date": "2024-03-03", "sales": 1, "revenue": 7.0},
    ]


def test_single_day_range(app, place_order):
    place_order("4.00", datetime(2024, 1, 10, 8))
    assert analytics_service.daily_series(date(2024, 1, 10), date(2024, 1, 10)) == [
        {"date": "2024-01-10", "sales": 1, "revenue": 4.0},
    ]


def test_end_before_start(admin_client):
    assert admin_client.get("/api/analytics?start=2024-03-05&end=2024-03-01").status_code == 400
    with pytest.raises(ValidationError):
        analytics_service.daily_series(date(2024, 3, 5), date(2024, 3, 1))


def test_malformed_date(admin_client):
    assert admin_client.get("/api/analytics?start=yesterday").status_code == 400


def test_default_start_is_a_week_before_end(admin_client):
    series = admin_client.get("/api/analytics?end=2024-03-10").get_json()["data"]["dailySalesData"]
    assert series[0]["date"] == (date(2024, 3, 10) - timedelta(days=7)).isoformat()
    assert len(series) == 8


def test_admin_only(client, customer):
    assert client.get("/api/analytics").status_code == 403
