import uuid
from ..extensions import db
from ..utils.dates import utcnow
from .types import GUID


class Order(db.Model):
    __tablename__ = "orders"

    id = db.Column(GUID(), primary_key=True, default=uuid.uuid4)
    user_id = db.Column(GUID(), db.ForeignKey("users.id"), nullable=False, index=True)
    total_amount = db.Column(db.Numeric(12, 2), nullable=False)

    # The storage-level guarantee that one payment session yields one order
    stripe_session_id = db.Column(db.String(255), unique=True, nullable=False, index=True)

    created_at = db.Column(db.DateTime, default=utcnow, index=True)

    items = db.relationship(
        "OrderItem",
        backref="order",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="OrderItem.id.asc()",
    )

    __table_args__ = (
        db.CheckConstraint("total_amount >= 0", name="ck_orders_total_non_negative"),
    )

    def as_api(self):
        return {
            "_id": str(self.id),
            "user": str(self.user_id),
            "products": [i.as_api() for i in self.items],
            "totalAmount": float(self.total_amount or 0),
            "stripeSessionId": self.stripe_session_id,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }


class OrderItem(db.Model):
    __tablename__ = "order_items"

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(GUID(), db.ForeignKey("orders.id"), nullable=False, index=True)

    # Snapshot of the product at purchase time (not a FK constraint)
    product_id = db.Column(GUID(), nullable=False, index=True)
    quantity = db.Column(db.Integer, nullable=False, default=1)
    price = db.Column(db.Numeric(12, 2), nullable=False)

    def as_api(self):
        return {
            "product": str(self.product_id),
            "quantity": self.quantity,
            "price": float(self.price or 0),
        }
