# storefront/cart/routes.py

from . import bp
from ..errors import NotFoundError, ValidationError
from ..extensions import db
from ..model import CartItem, Product, parse_guid
from ..utils.api import ok
from ..utils.decorators import current_user, protect_route
from ..utils.validation import json_body

# ---- helpers ---------------------------------------------------------------

def _product_id_from(value):
    pid = parse_guid(value)
    if pid is None:
        raise ValidationError("productId is required and must be a valid id")
    return pid

def _find_item(user, product_id):
    return next((i for i in user.cart_items if i.product_id == product_id), None)

def _cart_payload(user):
    return [i.as_dict() for i in user.cart_items]

# ---- endpoints -------------------------------------------------------------

@bp.get("")
@protect_route
def get_cart():
    user = current_user()
    ids = [i.product_id for i in user.cart_items]
    products = {p.id: p for p in Product.query.filter(Product.id.in_(ids)).all()} if ids else {}
    items = [
        {**products[i.product_id].as_api(), "quantity": i.quantity}
        for i in user.cart_items
        if i.product_id in products
    ]
    return ok("cart", items)

@bp.post("")
@protect_route
def add_to_cart():
    """Body: { "productId": "<uuid>" }; adds one unit."""
    data = json_body()
    product_id = _product_id_from(data.get("productId"))
    if db.session.get(Product, product_id) is None:
        raise NotFoundError("Product not found")

    user = current_user()
    item = _find_item(user, product_id)
    if item:
        item.quantity += 1
    else:
        user.cart_items.append(CartItem(product_id=product_id, quantity=1))
    db.session.commit()
    return ok("Item added to cart", _cart_payload(user))

@bp.delete("")
@protect_route
def remove_from_cart():
    """Body: { "productId": "<uuid>" } removes one product; no productId empties the cart."""
    data = json_body()
    user = current_user()
    if not data.get("productId"):
        user.cart_items.clear()
    else:
        product_id = _product_id_from(data.get("productId"))
        user.cart_items[:] = [i for i in user.cart_items if i.product_id != product_id]
    db.session.commit()
    return ok("Cart updated", _cart_payload(user))

@bp.put("/<pid>")
@protect_route
def update_quantity(pid):
    data = json_body()
    quantity = data.get("quantity")
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 0:
        raise ValidationError("quantity must be a non-negative integer")

    user = current_user()
    product_id = parse_guid(pid)
    item = _find_item(user, product_id) if product_id else None
    if not item:
        raise NotFoundError("Product not found")

    if quantity == 0:
        user.cart_items.remove(item)
    else:
        item.quantity = quantity
    db.session.commit()
    return ok("Cart updated", _cart_payload(user))
