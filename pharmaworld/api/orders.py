from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, status

from pharmaworld.api.deps import ensure_same_email, get_app_settings, get_claims, require_admin, require_seller
from pharmaworld.core.config import Settings
from pharmaworld.core.errors import Forbidden, NotFound
from pharmaworld.core.security import Ok
from pharmaworld.db.crud import CollectionCrud
from pharmaworld.db.mongo import ORDERS, Database, get_db
from pharmaworld.models.schemas import OrderCreate, Role, StatusUpdate
from pharmaworld.services.orders_service import order_details

router = APIRouter()
orders = CollectionCrud(ORDERS, "Order", owner_field="buyer")


def _is_admin(db: Database, email: str) -> bool:
    user = db.users.find_one({"email": email})
    return bool(user) and user.get("role") == Role.admin.value


@router.get("/orders")
def list_orders(admin=Depends(require_admin), db: Database = Depends(get_db)):
    return orders.find(db)


@router.get("/orders/{order_id}")
def get_order(
    order_id: str,
    claims: Ok = Depends(get_claims),
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    query = orders.id_filter(order_id)
    if not _is_admin(db, claims.email):
        query["buyer"] = claims.email
    details = order_details(db, query, policy=settings.missing_product_policy)
    if not details:
        raise NotFound("Order not found.")
    return details[0]


@router.get("/order-details")
def get_order_details(
    email: Optional[str] = None,
    claims: Ok = Depends(get_claims),
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    """Orders with line items priced from the current catalog.

    Buyers only see their own orders; admins may see everyone's.
    """
    if not _is_admin(db, claims.email):
        if email:
            ensure_same_email(email, claims)
        email = claims.email
    query = {"buyer": email} if email else {}
    return order_details(db, query, policy=settings.missing_product_policy)


@router.get("/order-details-seller")
def get_seller_order_details(
    email: Optional[str] = None,
    seller=Depends(require_seller),
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    if email and email.strip().lower() != seller["email"].strip().lower():
        raise Forbidden("unauthorized access")
    return order_details(db, seller_email=seller["email"], policy=settings.missing_product_policy)


@router.post("/orders", status_code=status.HTTP_201_CREATED)
def create_order(body: OrderCreate, claims: Ok = Depends(get_claims), db: Database = Depends(get_db)):
    ensure_same_email(body.buyer, claims)
    order = body.model_dump()
    order["orderDate"] = datetime.now(timezone.utc)
    created = orders.create(db, order)
    return {"success": True, "orderId": created["insertedId"]}


@router.patch("/orders/{order_id}")
def update_order_status(
    order_id: str,
    body: StatusUpdate,
    admin=Depends(require_admin),
    db: Database = Depends(get_db),
):
    return orders.update(db, order_id, {"status": body.status})
