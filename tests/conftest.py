import uuid
from decimal import Decimal
from uuid import uuid4

import fakeredis
import pytest

from storefront import create_app
from storefront.config import TestingConfig
from storefront.errors import UpstreamError
from storefront.extensions import db
from storefront.model import Product, Role, User
from storefront.services.payment_gateway import CheckoutSession, PaymentGateway
from storefront.utils.money import percent_of


class FakeGateway(PaymentGateway):
    """In-memory processor: remembers sessions and lets tests mark them paid."""

    def __init__(self):
        self.coupons = {}
        self.sessions = {}

    def create_discount(self, percent_off):
        coupon_id = f"coupon_{len(self.coupons) + 1}"
        self.coupons[coupon_id] = percent_off
        return coupon_id

    def create_checkout_session(self, line_items, success_url, cancel_url, metadata, discounts=None):
        session_id = f"cs_test_{uuid4().hex[:12]}"
        subtotal = sum(li["price_data"]["unit_amount"] * li["quantity"] for li in line_items)
        for d in discounts or []:
            subtotal -= percent_of(subtotal, self.coupons[d["coupon"]])
        self.sessions[session_id] = {
            "payment_status": "unpaid",
            "amount_total": subtotal,
            "metadata": dict(metadata),
            "line_items": line_items,
            "discounts": discounts or [],
            "success_url": success_url,
            "cancel_url": cancel_url,
        }
        return CheckoutSession(id=session_id, url=f"https://checkout.test/{session_id}")

    def retrieve_session(self, session_id):
        s = self.sessions.get(session_id)
        if s is None:
            raise UpstreamError("Payment processor error", f"No such checkout.session: {session_id}")
        return CheckoutSession(
            id=session_id,
            url=f"https://checkout.test/{session_id}",
            payment_status=s["payment_status"],
            amount_total=s["amount_total"],
            metadata=dict(s["metadata"]),
        )

    def mark_paid(self, session_id):
        self.sessions[session_id]["payment_status"] = "paid"

    def add_session(self, metadata, amount_total, payment_status="paid"):
        session_id = f"cs_test_{uuid4().hex[:12]}"
        self.sessions[session_id] = {
            "payment_status": payment_status,
            "amount_total": amount_total,
            "metadata": metadata,
            "line_items": [],
            "discounts": [],
            "success_url": None,
            "cancel_url": None,
        }
        return session_id


@pytest.fixture()
def redis_client():
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture()
def gateway():
    return FakeGateway()


@pytest.fixture()
def app(redis_client, gateway):
    app = create_app(TestingConfig, CACHE_CLIENT=redis_client, PAYMENT_GATEWAY=gateway)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


def signup(client, email="shopper@example.com", password="secret123", name="Shopper"):
    return client.post("/api/auth/signup", json={"name": name, "email": email, "password": password})


@pytest.fixture()
def customer(client):
    resp = signup(client)
    assert resp.status_code == 201
    return db.session.get(User, uuid.UUID(resp.get_json()["data"]["_id"]))


@pytest.fixture()
def admin_client(app):
    admin = User(name="Admin", email="admin@example.com", role=Role.ADMIN)
    admin.set_password("adminpass")
    db.session.add(admin)
    db.session.commit()

    c = app.test_client()
    resp = c.post("/api/auth/login", json={"email": "admin@example.com", "password": "adminpass"})
    assert resp.status_code == 200
    return c


@pytest.fixture()
def make_product():
    def _make(name="Tee", price=Decimal("10.00"), category="shirts", featured=False, description="A plain tee"):
        p = Product(name=name, description=description, price=price, category=category,
                    image="https://img.test/tee.png", is_featured=featured)
        db.session.add(p)
        db.session.commit()
        return p
    return _make
