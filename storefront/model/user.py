# --- storefront/model/user.py ---
import uuid

from werkzeug.security import generate_password_hash, check_password_hash
from ..extensions import db
from ..utils.dates import utcnow
from .types import GUID, Role


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(GUID(), primary_key=True, default=uuid.uuid4)
    name = db.Column(db.String(180), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(
        db.Enum(Role, name="user_role", values_callable=lambda e: [r.value for r in e]),
        nullable=False,
        default=Role.CUSTOMER,
        index=True,
    )
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    cart_items = db.relationship(
        "CartItem",
        backref="user",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="CartItem.id.asc()",
    )

    def set_password(self, password):
        # werkzeug salts every hash with a fresh random salt
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)

    @property
    def is_admin(self):
        return self.role == Role.ADMIN

    def as_dict(self):
        return {
            "_id": str(self.id),
            "name": self.name,
            "email": self.email,
            "role": self.role.value,
            "cartItems": [i.as_dict() for i in self.cart_items],
        }


class CartItem(db.Model):
    __tablename__ = "cart_items"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(GUID(), db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = db.Column(GUID(), db.ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    quantity = db.Column(db.Integer, nullable=False, default=1)

    def as_dict(self):
        return {
            "productId": str(self.product_id),
            "quantity": self.quantity,
        }
