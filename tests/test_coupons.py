from datetime import timedelta

import pytest

from conftest import signup
from storefront.extensions import db
from storefront.model import Coupon, User
from storefront.utils.dates import utcnow


@pytest.fixture()
def make_coupon():
    def _make(user, code="SAVE10", percentage=10, expires_in=timedelta(days=5), active=True):
        c = Coupon(code=code, discount_percentage=percentage, expiration_date=utcnow() + expires_in,
                   is_active=active, user_id=user.id)
        db.session.add(c)
        db.session.commit()
        return c
    return _make


def test_no_coupon(client, customer):
    resp = client.get("/api/coupons")
    assert resp.status_code == 200
    assert resp.get_json()["data"] is None


def test_get_active_coupon(client, customer, make_coupon):
    make_coupon(customer)
    data = client.get("/api/coupons").get_json()["data"]
    assert data["code"] == "SAVE10"
    assert data["discountPercentage"] == 10
    assert data["isActive"] is True


def test_validate_valid_code(client, customer, make_coupon):
    make_coupon(customer)
    resp = client.post("/api/coupons/validate", json={"code": "SAVE10"})
    assert resp.status_code == 200
    assert resp.get_json()["data"] == {"status": "valid", "code": "SAVE10", "discountPercentage": 10}


def test_validate_expired_code_deactivates_it(client, customer, make_coupon):
    coupon = make_coupon(customer, expires_in=timedelta(seconds=-1))
    resp = client.post("/api/coupons/validate", json={"code": "SAVE10"})
    assert resp.status_code == 404
    assert resp.get_json()["message"] == "Coupon expired"
    db.session.refresh(coupon)
    assert coupon.is_active is False


def test_validate_unknown_code(client, customer):
    resp = client.post("/api/coupons/validate", json={"code": "NOPE"})
    assert resp.status_code == 404
    assert resp.get_json()["message"] == "Coupon not found"


def test_validate_inactive_code(client, customer, make_coupon):
    make_coupon(customer, active=False)
    assert client.post("/api/coupons/validate", json={"code": "SAVE10"}).status_code == 404


def test_coupon_belongs_to_its_owner(app, client, customer, make_coupon):
    other = app.test_client()
    signup(other, email="other@example.com")
    owner = User.query.filter_by(email="other@example.com").one()
    make_coupon(owner, code="THEIRS")
    assert client.post("/api/coupons/validate", json={"code": "THEIRS"}).status_code == 404


def test_validate_requires_code(client, customer):
    assert client.post("/api/coupons/validate", json={}).status_code == 400


def test_validate_non_string_code(client, customer):
    resp = client.post("/api/coupons/validate", json={"code": 10})
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "code must be a string"
