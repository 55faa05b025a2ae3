"""Checkout orchestration between the local cart and the payment processor.

Phase 1 (``create_session``) prices the cart from the catalog, applies the
caller's coupon and opens a hosted session whose metadata is enough to rebuild
the order later. Phase 2 (``reconcile_session``) turns a paid session into
exactly one ``Order``: the existence check is an early exit, the unique
constraint on ``orders.stripe_session_id`` is what actually enforces it.
"""
import json
from dataclasses import dataclass

import structlog
from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..errors import DuplicateOrder, InvalidReference, NotFoundError, ValidationError
from ..extensions import db, payments
from ..model import CartItem, Order, OrderItem, Product, parse_guid
from ..utils.money import D, from_cents, percent_of, round_money
from . import coupon_service

logger = structlog.get_logger(__name__)

REWARD_THRESHOLD_CENTS = 20000
# Stripe caps each metadata value at 500 characters
METADATA_VALUE_LIMIT = 500


@dataclass(frozen=True)
class CheckoutLine:
    product: Product
    quantity: int

    @property
    def line_cents(self):
        return self.product.price_cents * self.quantity


@dataclass(frozen=True)
class CheckoutResult:
    session_id: str
    url: str | None
    total_cents: int

    def as_api(self):
        return {
            "id": self.session_id,
            "url": self.url,
            "totalAmount": float(from_cents(self.total_cents)),
        }


def _parse_quantity(value):
    if value is None:
        return 1
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValidationError("quantity must be a positive integer")
    return value


def resolve_lines(user, items=None):
    """Turn request items (or the user's saved cart) into priced lines."""
    if items is None:
        requested = [(i.product_id, i.quantity) for i in user.cart_items]
    else:
        if not isinstance(items, list):
            raise ValidationError("Invalid products")
        requested = []
        for raw in items:
            if not isinstance(raw, dict):
                raise ValidationError("Invalid products")
            pid = parse_guid(raw.get("id") or raw.get("_id"))
            if pid is None:
                raise ValidationError("Invalid product id")
            requested.append((pid, _parse_quantity(raw.get("quantity"))))

    if not requested:
        raise ValidationError("Invalid products")

    ids = {pid for pid, _ in requested}
    found = {p.id: p for p in Product.query.filter(Product.id.in_(ids)).all()}
    missing = ids - set(found)
    if missing:
        raise NotFoundError("Product not found", [str(pid) for pid in sorted(missing, key=str)])
    return [CheckoutLine(found[pid], qty) for pid, qty in requested]


def subtotal_cents(lines):
    return sum(line.line_cents for line in lines)


def discounted_total_cents(total, percentage):
    return total - percent_of(total, percentage)


def encode_lines(lines):
    return json.dumps(
        [
            {"id": str(line.product.id), "quantity": line.quantity, "price": float(line.product.price)}
            for line in lines
        ],
        separators=(",", ":"),
    )


def decode_lines(raw):
    try:
        lines = json.loads(raw or "")
    except (TypeError, ValueError) as e:
        raise ValidationError("Session metadata has no readable products") from e
    if not isinstance(lines, list) or not lines:
        raise ValidationError("Session metadata has no readable products")
    return lines


def _stripe_line_item(line):
    product_data = {"name": line.product.name}
    if line.product.image:
        product_data["images"] = [line.product.image]
    return {
        "price_data": {
            "currency": current_app.config["CURRENCY"],
            "product_data": product_data,
            "unit_amount": line.product.price_cents,
        },
        "quantity": line.quantity,
    }


def create_session(user, items=None, coupon_code=None):
    lines = resolve_lines(user, items)
    total = subtotal_cents(lines)

    encoded = encode_lines(lines)
    if len(encoded) > METADATA_VALUE_LIMIT:
        raise ValidationError("Too many distinct products for a single checkout")

    coupon = coupon_service.find_usable_coupon(coupon_code, user.id)
    discounts = []
    if coupon:
        total = discounted_total_cents(total, coupon.discount_percentage)
        discounts = [{"coupon": payments.gateway.create_discount(coupon.discount_percentage)}]

    client_url = current_app.config["CLIENT_URL"].rstrip("/")
    session = payments.gateway.create_checkout_session(
        line_items=[_stripe_line_item(line) for line in lines],
        success_url=f"{client_url}/purchase-success?session_id={{CHECKOUT_SESSION_ID}}",
        cancel_url=f"{client_url}/purchase-cancel",
        metadata={
            "userId": str(user.id),
            "couponCode": coupon.code if coupon else "",
            "products": encoded,
        },
        discounts=discounts,
    )
    logger.info("checkout_session_created", user_id=str(user.id), session_id=session.id, total_cents=total)

    # loyalty side effect, independent of the payment itself
    if total >= REWARD_THRESHOLD_CENTS and not coupon_service.has_any_coupon(user.id):
        coupon_service.create_reward_coupon(user.id)

    return CheckoutResult(session.id, session.url, total)


def _order_items(lines):
    items = []
    for line in lines:
        raw_id = (line.get("id") or line.get("_id")) if isinstance(line, dict) else None
        pid = parse_guid(raw_id)
        if pid is None:
            raise InvalidReference(f"Invalid product ID {raw_id}")
        try:
            quantity = int(line.get("quantity") or 1)
            price = round_money(D(line.get("price")))
        except (ArithmeticError, TypeError, ValueError) as e:
            raise ValidationError(f"Invalid line item for product {raw_id}") from e
        items.append(OrderItem(product_id=pid, quantity=quantity, price=price))
    return items


def _deactivate_used_coupon(code, user_id):
    try:
        coupon_service.deactivate_coupon(code, user_id)
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error("coupon_deactivation_failed", code=code, user_id=str(user_id), error=str(e))


def reconcile_session(session_id):
    if not session_id:
        raise ValidationError("sessionId is required")

    session = payments.gateway.retrieve_session(session_id)
    if session.payment_status != "paid":
        raise ValidationError("Payment has not been completed")

    metadata = session.metadata or {}
    user_id = parse_guid(metadata.get("userId"))
    if user_id is None:
        raise InvalidReference("Invalid user reference in session metadata")

    if metadata.get("couponCode"):
        _deactivate_used_coupon(metadata["couponCode"], user_id)

    lines = decode_lines(metadata.get("products"))

    existing = Order.query.filter_by(stripe_session_id=session_id).first()
    if existing:
        logger.info("order_already_exists", session_id=session_id, order_id=str(existing.id))
        raise DuplicateOrder(existing.id)

    order = Order(
        user_id=user_id,
        items=_order_items(lines),
        # what the processor charged, not what we computed
        total_amount=from_cents(session.amount_total or 0),
        stripe_session_id=session_id,
    )
    try:
        db.session.add(order)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        existing = Order.query.filter_by(stripe_session_id=session_id).first()
        if existing is None:
            raise
        logger.info("order_insert_lost_race", session_id=session_id)
        raise DuplicateOrder(existing.id)

    CartItem.query.filter_by(user_id=user_id).delete(synchronize_session=False)
    db.session.commit()
    logger.info("order_created", order_id=str(order.id), session_id=session_id, user_id=str(user_id))
    return order
