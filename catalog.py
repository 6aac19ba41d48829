"""
Product catalog and store visibility.

Store status is advisory: it is shown next to each product but never stops
a product from being added to a cart or ordered.
"""

import logging
import math
from typing import Dict, List, Optional

from accounts import load_users
from database import PRODUCTS, RecordStore, create_document, find_document, new_id
from errors import ValidationError
from schemas import (
    ALL_CATEGORIES,
    CATEGORIES,
    UNCATEGORIZED,
    Product,
    ProductListing,
    ShopkeeperAccount,
)

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_URL = (
    "https://images.pexels.com/photos/4199091/pexels-photo-4199091.jpeg"
    "?auto=compress&cs=tinysrgb&w=600"
)


def load_products(store: RecordStore) -> List[Product]:
    return [Product.model_validate(r) for r in store.load_collection(PRODUCTS)]


def get_product(store: RecordStore, product_id: str) -> Optional[Product]:
    record = find_document(store, PRODUCTS, product_id)
    return Product.model_validate(record) if record else None


def image_for(product: Product) -> str:
    if product.image_url and product.image_url.strip():
        return product.image_url
    return DEFAULT_IMAGE_URL


def add_product(
    store: RecordStore,
    owner: ShopkeeperAccount,
    name: str,
    price,
    image_url: Optional[str] = None,
    category: Optional[str] = None,
) -> Product:
    name = (name or "").strip()
    try:
        price = float(price)
    except (TypeError, ValueError):
        price = 0.0
    if not name or not math.isfinite(price) or price <= 0 or not category:
        raise ValidationError("Enter name, price, and choose a category.")
    if category not in CATEGORIES:
        raise ValidationError(f"Category must be one of: {', '.join(CATEGORIES)}.")

    product = Product(
        id=new_id(),
        name=name,
        price=price,
        image_url=(image_url or "").strip(),
        category=category or UNCATEGORIZED,
        added_by_id=owner.id,
        added_by_name=owner.name,
    )
    create_document(store, PRODUCTS, product)
    logger.info("Shopkeeper %s added product %s (%s)", owner.id, product.id, product.name)
    return product


def store_statuses(store: RecordStore) -> Dict[str, str]:
    return {u.id: u.store_status for u in load_users(store) if isinstance(u, ShopkeeperAccount)}


def effective_status(product: Product, statuses: Dict[str, str]) -> str:
    """Owning shopkeeper's status, 'open' when that shopkeeper is unknown."""
    return statuses.get(product.added_by_id) or "open"


def list_products(
    store: RecordStore,
    category: Optional[str] = ALL_CATEGORIES,
    search: Optional[str] = None,
) -> List[ProductListing]:
    products = load_products(store)
    if category and category != ALL_CATEGORIES:
        products = [p for p in products if (p.category or UNCATEGORIZED) == category]
    term = (search or "").strip().lower()
    if term:
        products = [p for p in products if term in p.name.lower()]

    statuses = store_statuses(store)
    return [
        ProductListing(product=p, image_url=image_for(p), store_status=effective_status(p, statuses))
        for p in products
    ]


def products_of(store: RecordStore, shopkeeper_id: str) -> List[Product]:
    return [p for p in load_products(store) if p.added_by_id == shopkeeper_id]
