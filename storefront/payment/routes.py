# storefront/payment/routes.py

from . import bp
from ..errors import DuplicateOrder
from ..services import checkout_service
from ..utils.api import ok
from ..utils.decorators import current_user, protect_route
from ..utils.validation import json_body, str_field


@bp.post("/create-checkout-session")
@protect_route
def create_checkout_session():
    """
    Body:
      - products: [{ "id" | "_id": "<uuid>", "quantity": int }]  (optional, defaults to the saved cart)
      - couponCode: str (optional)
    """
    data = json_body()
    result = checkout_service.create_session(
        current_user(),
        items=data.get("products"),
        coupon_code=str_field(data, "couponCode") or None,
    )
    return ok("Checkout session created", result.as_api())


@bp.post("/checkout-success")
def checkout_success():
    data = json_body()
    session_id = str_field(data, "sessionId")
    try:
        order = checkout_service.reconcile_session(session_id)
    except DuplicateOrder as e:
        # replayed confirmation
        return ok("Order already processed", {
            "success": True,
            "duplicate": True,
            "orderId": str(e.order_id),
        })

    return ok("Payment successful, order created, and coupon deactivated if used.", {
        "success": True,
        "duplicate": False,
        "orderId": str(order.id),
    })
