import logging
import random
import string
from typing import Any, Dict, List, Optional, Tuple

from .supabase_cache import get_cached
from .supabase_client import BACKEND_ERRORS, get_supabase_client
from .supabase_errors import user_facing_error

logger = logging.getLogger(__name__)

_CACHE_TTL = 300  # seconds

EDITABLE_FIELDS = (
    "name",
    "description",
    "category",
    "subcategory",
    "brand",
    "model_number",
    "specifications",
    "image_url",
)

SKU_PREFIXES = {
    "Office": "OFF",
    "IT Supplies": "ITS",
    "Breakroom": "BRK",
    "Janitorial": "JAN",
    "Maintenance": "MRO",
    "General": "GEN",
}


def generate_sku(category: str) -> str:
    """Return a model number suggestion such as ``OFF-4K2J9Q``."""
    prefix = SKU_PREFIXES.get(category) or (category or "GEN")[:3].upper()
    suffix = "".join(random.choices(string.ascii_uppercase + string.digits, k=6))
    return f"{prefix}-{suffix}"


def _clean(details: Dict[str, Any]) -> Dict[str, Any]:
    cleaned: Dict[str, Any] = {}
    for field in EDITABLE_FIELDS:
        if field not in details:
            continue
        value = details[field]
        if isinstance(value, str):
            value = value.strip() or None
        cleaned[field] = value
    return cleaned


def get_master_products(
    category: Optional[str] = None, search: Optional[str] = None
) -> List[Dict[str, Any]]:
    """Return master products ordered by name.

    ``category`` filters exactly, ``search`` matches names case-insensitively.
    """
    client = get_supabase_client()
    if client is None:
        return []
    try:
        query = client.table("master_products").select("*")
        if category:
            query = query.eq("category", category)
        if search:
            query = query.ilike("name", f"%{search}%")
        resp = query.order("name").execute()
    except BACKEND_ERRORS:
        logger.exception("Failed to fetch master products")
        return []
    return list(resp.data or [])


def get_master_product(product_id: str) -> Optional[Dict[str, Any]]:
    client = get_supabase_client()
    if client is None:
        return None
    try:
        resp = (
            client.table("master_products")
            .select("*")
            .eq("id", product_id)
            .limit(1)
            .execute()
        )
    except BACKEND_ERRORS:
        logger.exception("Failed to fetch master product %s", product_id)
        return None
    rows = resp.data or []
    return rows[0] if rows else None


def _load_categories() -> List[str]:
    client = get_supabase_client()
    if client is None:
        return []
    try:
        resp = client.table("master_products").select("category").execute()
    except BACKEND_ERRORS:
        logger.exception("Failed to fetch master product categories")
        return []
    return sorted({row["category"] for row in resp.data or [] if row.get("category")})


get_categories = get_cached(_load_categories, _CACHE_TTL)
get_categories.__doc__ = (
    "Return cached sorted category names, refreshing from Supabase if expired."
)


def get_subcategories(products: List[Dict[str, Any]], category: str) -> List[str]:
    return sorted(
        {
            p["subcategory"]
            for p in products
            if p.get("category") == category and (p.get("subcategory") or "").strip()
        }
    )


def create_master_product(
    details: Dict[str, Any]
) -> Tuple[bool, str, Optional[Dict[str, Any]]]:
    payload = _clean(details)
    if not payload.get("name"):
        return False, "Product name is required and cannot be empty.", None
    if not payload.get("category"):
        return False, "Product category is required.", None
    client = get_supabase_client()
    if client is None:
        return False, "Supabase is not configured.", None
    try:
        resp = client.table("master_products").insert(payload).execute()
    except BACKEND_ERRORS as exc:
        logger.error("Error creating master product: %s", exc)
        return False, user_facing_error(exc, "A database error occurred while adding the product."), None
    get_categories.invalidate()
    row = (resp.data or [None])[0]
    return True, f"Product '{payload['name']}' added to the master catalog.", row


def update_master_product(
    product_id: str, updates: Dict[str, Any]
) -> Tuple[bool, str]:
    payload = _clean(updates)
    if not payload:
        return False, "No valid fields provided for update."
    if "name" in payload and not payload["name"]:
        return False, "Product name is required and cannot be empty."
    client = get_supabase_client()
    if client is None:
        return False, "Supabase is not configured."
    try:
        resp = (
            client.table("master_products")
            .update(payload)
            .eq("id", product_id)
            .execute()
        )
    except BACKEND_ERRORS as exc:
        logger.error("Error updating master product %s: %s", product_id, exc)
        return False, user_facing_error(exc, "A database error occurred while updating the product.")
    if not resp.data:
        return False, f"Update failed: product {product_id} not found."
    get_categories.invalidate()
    return True, "Product updated successfully."


def delete_master_product(product_id: str) -> Tuple[bool, str]:
    client = get_supabase_client()
    if client is None:
        return False, "Supabase is not configured."
    try:
        client.table("master_products").delete().eq("id", product_id).execute()
    except BACKEND_ERRORS as exc:
        logger.error("Error deleting master product %s: %s", product_id, exc)
        return False, user_facing_error(exc, "Failed to delete the product.")
    get_categories.invalidate()
    return True, "Product deleted."


def add_to_my_products(
    supplier_id: str,
    master_product: Dict[str, Any],
    price: float,
    sku: Optional[str] = None,
    stock: Optional[int] = None,
) -> Tuple[bool, str, Optional[Dict[str, Any]]]:
    """Copy ``master_product`` into ``supplier_id``'s offered products.

    Products taken from the master catalog are approved immediately.
    """
    client = get_supabase_client()
    if client is None:
        return False, "Supabase is not configured.", None
    payload = {
        "supplier_id": supplier_id,
        "master_product_id": master_product["id"],
        "name": master_product["name"],
        "description": master_product.get("description") or "",
        "category": master_product.get("category"),
        "subcategory": master_product.get("subcategory"),
        "image": master_product.get("image_url") or "",
        "brand": master_product.get("brand"),
        "cost_price": price,
        "stock_quantity": stock or 0,
        "sku": sku or master_product.get("model_number"),
        "status": "APPROVED",
    }
    try:
        resp = client.table("products").insert(payload).execute()
    except BACKEND_ERRORS as exc:
        logger.error("Error adding master product %s for %s: %s", master_product["id"], supplier_id, exc)
        return False, user_facing_error(exc, "Failed to add the product."), None
    return True, "Product added to supplier catalog.", (resp.data or [None])[0]


def product_count() -> int:
    return len(get_master_products())
