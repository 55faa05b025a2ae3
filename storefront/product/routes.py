import structlog
from sqlalchemy import func

from . import bp
from ..errors import NotFoundError, ValidationError
from ..extensions import db
from ..model import CartItem, Product, parse_guid
from ..services.catalog_service import get_featured_products, refresh_featured_cache
from ..utils.api import ok
from ..utils.decorators import admin_route, protect_route
from ..utils.money import D, round_money
from ..utils.validation import json_body, str_field

logger = structlog.get_logger(__name__)

RECOMMENDED_COUNT = 4

# ---------- helpers ----------
def _parse_price(v):
    if isinstance(v, bool) or v is None or (isinstance(v, str) and not v.strip()):
        raise ValidationError("price is required")
    try:
        price = round_money(D(v))
    except (ArithmeticError, TypeError, ValueError):
        raise ValidationError("price must be numeric")
    if not price.is_finite() or price < 0:
        raise ValidationError("price must be >= 0")
    return price

def _get_product_or_404(pid):
    uid = parse_guid(pid)
    product = db.session.get(Product, uid) if uid else None
    if not product:
        raise NotFoundError("Product not found")
    return product

# ---------- routes ----------
# GET /api/products
@bp.get("")
def list_products():
    products = Product.query.order_by(Product.created_at.desc()).all()
    return ok("Products fetched", {"products": [p.as_api() for p in products]})

# GET /api/products/featured
@bp.get("/featured")
def featured_products():
    return ok("Featured products fetched", get_featured_products())

# GET /api/products/recommendations
@bp.get("/recommendations")
def recommended_products():
    sample = Product.query.order_by(func.random()).limit(RECOMMENDED_COUNT).all()
    items = [
        {k: v for k, v in p.as_api().items() if k in {"_id", "name", "description", "price", "image", "category"}}
        for p in sample
    ]
    return ok("Recommended products fetched", items)

# GET /api/products/category/<category>
@bp.get("/category/<category>")
def products_by_category(category):
    products = Product.query.filter_by(category=category).order_by(Product.created_at.desc()).all()
    return ok("Products fetched", {"products": [p.as_api() for p in products]})

# POST /api/products
@bp.post("")
@protect_route
@admin_route
def create_product():
    data = json_body()
    name = str_field(data, "name")
    description = str_field(data, "description")
    category = str_field(data, "category")
    image = str_field(data, "image")

    if not name:
        raise ValidationError("name is required")
    if not description:
        raise ValidationError("description is required")
    if not category:
        raise ValidationError("category is required")
    price = _parse_price(data.get("price"))

    product = Product(name=name, description=description, price=price, image=image, category=category)
    db.session.add(product)
    db.session.commit()
    logger.info("product_created", product_id=str(product.id))
    return ok("Product created", product.as_api(), status=201)

# DELETE /api/products/<id>
@bp.delete("/<pid>")
@protect_route
@admin_route
def delete_product(pid):
    product = _get_product_or_404(pid)
    was_featured = product.is_featured

    CartItem.query.filter_by(product_id=product.id).delete(synchronize_session=False)
    db.session.delete(product)
    db.session.commit()
    logger.info("product_deleted", product_id=pid)

    if was_featured:
        refresh_featured_cache()
    return ok("Product deleted successfully", {"_id": pid})

# PATCH /api/products/<id>  (toggle featured)
@bp.patch("/<pid>")
@protect_route
@admin_route
def toggle_featured_product(pid):
    product = _get_product_or_404(pid)
    product.is_featured = not product.is_featured
    db.session.commit()
    refresh_featured_cache()
    return ok("Product updated", product.as_api())
