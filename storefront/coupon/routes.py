# storefront/coupon/routes.py

from . import bp
from ..errors import NotFoundError, ValidationError
from ..extensions import db
from ..model import Coupon
from ..services.coupon_service import active_coupon_for
from ..utils.api import ok
from ..utils.dates import utcnow
from ..utils.decorators import current_user, protect_route
from ..utils.validation import json_body, str_field


@bp.get("")
@protect_route
def get_coupon():
    coupon = active_coupon_for(current_user().id)
    return ok("coupon", coupon.as_api() if coupon else None)


@bp.post("/validate")
@protect_route
def validate_coupon():
    data = json_body()
    code = str_field(data, "code")
    if not code:
        raise ValidationError("code is required")

    coupon = Coupon.query.filter_by(code=code, user_id=current_user().id, is_active=True).first()
    if not coupon:
        raise NotFoundError("Coupon not found")

    if coupon.is_expired(utcnow()):
        coupon.is_active = False
        db.session.commit()
        raise NotFoundError("Coupon expired")

    return ok("Coupon is valid", {
        "status": "valid",
        "code": coupon.code,
        "discountPercentage": coupon.discount_percentage,
    })
