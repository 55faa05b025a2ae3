# --- storefront/model/coupon.py ---
import uuid
from ..extensions import db
from ..utils.dates import utcnow
from .types import GUID


class Coupon(db.Model):
    __tablename__ = "coupons"

    id = db.Column(GUID(), primary_key=True, default=uuid.uuid4)
    code = db.Column(db.String(64), unique=True, nullable=False, index=True)
    discount_percentage = db.Column(db.Integer, nullable=False)
    expiration_date = db.Column(db.DateTime, nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)
    user_id = db.Column(GUID(), db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    created_at = db.Column(db.DateTime, default=utcnow)

    __table_args__ = (
        db.CheckConstraint(
            "discount_percentage >= 0 AND discount_percentage <= 100",
            name="ck_coupons_percentage_range",
        ),
    )

    def is_expired(self, now=None):
        # valid while now < expiration_date
        now = now or utcnow()
        return now >= self.expiration_date

    def as_api(self):
        return {
            "_id": str(self.id),
            "code": self.code,
            "discountPercentage": self.discount_percentage,
            "expirationDate": self.expiration_date.isoformat() if self.expiration_date else None,
            "isActive": self.is_active,
            "userId": str(self.user_id),
        }
