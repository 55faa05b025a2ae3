# storefront/services/coupon_service.py
import secrets
import string
from datetime import timedelta

import structlog

from ..extensions import db
from ..model import Coupon
from ..utils.dates import utcnow

logger = structlog.get_logger(__name__)

REWARD_PREFIX = "GIFT"
REWARD_PERCENTAGE = 10
REWARD_TTL = timedelta(days=30)
_CODE_ALPHABET = string.ascii_lowercase + string.digits


def active_coupon_for(user_id):
    """The user's active, unexpired coupon, if any."""
    return (
        Coupon.query.filter(
            Coupon.user_id == user_id,
            Coupon.is_active.is_(True),
            Coupon.expiration_date > utcnow(),
        )
        .order_by(Coupon.created_at.desc())
        .first()
    )


def find_usable_coupon(code, user_id):
    if not code:
        return None
    return Coupon.query.filter(
        Coupon.code == code,
        Coupon.user_id == user_id,
        Coupon.is_active.is_(True),
        Coupon.expiration_date > utcnow(),
    ).first()


def has_any_coupon(user_id):
    return db.session.query(Coupon.id).filter(Coupon.user_id == user_id).first() is not None


def create_reward_coupon(user_id):
    code = REWARD_PREFIX + "".join(secrets.choice(_CODE_ALPHABET) for _ in range(6))
    coupon = Coupon(
        code=code,
        discount_percentage=REWARD_PERCENTAGE,
        expiration_date=utcnow() + REWARD_TTL,
        user_id=user_id,
    )
    db.session.add(coupon)
    db.session.commit()
    logger.info("reward_coupon_created", user_id=str(user_id), code=code)
    return coupon


def deactivate_coupon(code, user_id):
    updated = (
        Coupon.query.filter(Coupon.code == code, Coupon.user_id == user_id)
        .update({Coupon.is_active: False}, synchronize_session=False)
    )
    db.session.commit()
    return updated
