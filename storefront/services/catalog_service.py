# storefront/services/catalog_service.py
import json

import structlog

from ..errors import UpstreamError
from ..extensions import cache
from ..model import Product

logger = structlog.get_logger(__name__)

FEATURED_KEY = "featured_products"


def _load_featured():
    return [p.as_api() for p in Product.query.filter_by(is_featured=True).order_by(Product.created_at.asc()).all()]


def get_featured_products():
    cached = cache.get(FEATURED_KEY)
    if cached is not None:
        return json.loads(cached)

    featured = _load_featured()
    cache.set(FEATURED_KEY, json.dumps(featured))
    return featured


def refresh_featured_cache():
    """Overwrite the featured snapshot; a cache outage must not undo the DB change."""
    try:
        cache.set(FEATURED_KEY, json.dumps(_load_featured()))
    except UpstreamError as e:
        logger.error("featured_cache_update_failed", error=e.error)
