import logging
from typing import Dict, Iterable, List, Optional

from bson import ObjectId
from bson.errors import InvalidId

from pharmaworld.core.errors import Internal
from pharmaworld.db.crud import serialize_doc

logger = logging.getLogger(__name__)

SKIP = "skip"
FAIL = "fail"


def _object_ids(orders: Iterable[dict]) -> List[ObjectId]:
    ids = set()
    for order in orders:
        for item in order.get("medicineItem") or []:
            try:
                ids.add(ObjectId(item.get("medicineId")))
            except (InvalidId, TypeError):
                continue
    return list(ids)


def load_medicines(db, orders: List[dict]) -> Dict[str, dict]:
    """Fetch every medicine referenced by ``orders`` in one query, keyed by id string."""
    ids = _object_ids(orders)
    if not ids:
        return {}
    return {str(m["_id"]): m for m in db.medicines.find({"_id": {"$in": ids}})}


def _unit_price(medicine: dict) -> float:
    try:
        return float(medicine.get("perUnitPrice") or 0)
    except (TypeError, ValueError):
        return 0.0


def enrich_order(
    order: dict,
    medicines: Dict[str, dict],
    seller_email: Optional[str] = None,
    policy: str = SKIP,
) -> Optional[dict]:
    """Attach current name, seller and line total to each item of ``order``.

    Returns ``None`` when a seller filter leaves the order with no items.
    Items whose medicine no longer exists are dropped and listed under
    ``missingItems`` (``skip``), or abort the request (``fail``).
    """
    items = []
    missing = []
    for item in order.get("medicineItem") or []:
        medicine_id = str(item.get("medicineId"))
        medicine = medicines.get(medicine_id)
        if medicine is None:
            if policy == FAIL:
                logger.error("Order %s references missing medicine %s", order.get("_id"), medicine_id)
                raise Internal("Order references a product that no longer exists.")
            logger.warning("Skipping missing medicine %s in order %s", medicine_id, order.get("_id"))
            missing.append(medicine_id)
            continue

        if seller_email is not None and medicine.get("email") != seller_email:
            continue

        try:
            quantity = int(item.get("quantity") or 0)
        except (TypeError, ValueError):
            logger.warning("Skipping item %s with bad quantity in order %s", medicine_id, order.get("_id"))
            continue
        items.append({
            **item,
            "quantity": quantity,
            "itemName": medicine.get("itemName"),
            "email": medicine.get("email"),
            "totalPrice": _unit_price(medicine) * quantity,
        })

    if seller_email is not None and not items:
        return None

    enriched = {**order, "medicineItem": items}
    if missing and seller_email is None:
        enriched["missingItems"] = missing
    return enriched


def enrich_orders(
    orders: List[dict],
    medicines: Dict[str, dict],
    seller_email: Optional[str] = None,
    policy: str = SKIP,
) -> List[dict]:
    results = []
    for order in orders:
        enriched = enrich_order(order, medicines, seller_email=seller_email, policy=policy)
        if enriched is not None:
            results.append(enriched)
    return results


def order_details(db, query: Optional[dict] = None, seller_email: Optional[str] = None, policy: str = SKIP) -> List[dict]:
    orders = list(db.orders.find(query or {}))
    medicines = load_medicines(db, orders)
    return serialize_doc(enrich_orders(orders, medicines, seller_email=seller_email, policy=policy))
