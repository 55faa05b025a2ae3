# storefront/model/product.py
import uuid
from sqlalchemy.sql import func
from ..extensions import db
from ..utils.money import to_cents
from .types import GUID


class Product(db.Model):
    __tablename__ = "products"

    id = db.Column(GUID(), primary_key=True, default=uuid.uuid4)
    name = db.Column(db.String(255), nullable=False, index=True)
    description = db.Column(db.Text, nullable=False)
    price = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    image = db.Column(db.String(1024), nullable=False, default="")
    category = db.Column(db.String(120), nullable=False, index=True)
    is_featured = db.Column(db.Boolean, nullable=False, default=False, index=True)

    created_at = db.Column(db.DateTime, server_default=func.now())
    updated_at = db.Column(db.DateTime, onupdate=func.now(), server_default=func.now())

    __table_args__ = (
        db.CheckConstraint("price >= 0", name="ck_products_price_non_negative"),
    )

    @property
    def price_cents(self):
        return to_cents(self.price)

    def as_api(self):
        return {
            "_id": str(self.id),
            "name": self.name,
            "description": self.description,
            "price": float(self.price or 0),
            "image": self.image,
            "category": self.category,
            "isFeatured": bool(self.is_featured),
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
