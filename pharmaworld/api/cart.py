from typing import Any

from fastapi import APIRouter, Depends

from pharmaworld.api.deps import ensure_same_email, get_claims
from pharmaworld.core.errors import InvalidArgument, NotFound
from pharmaworld.core.security import Ok
from pharmaworld.db.crud import CollectionCrud
from pharmaworld.db.mongo import CART, Database, get_db
from pharmaworld.models.schemas import CartItemIn, QuantityUpdate

router = APIRouter()
cart = CollectionCrud(CART, "Cart item", owner_field="email")


def line_total(price: Any, quantity: int) -> float:
    try:
        return float(price) * quantity
    except (TypeError, ValueError):
        raise InvalidArgument("Cart item has no usable price.")


@router.get("/cart/{email}")
def get_cart(email: str, claims: Ok = Depends(get_claims), db: Database = Depends(get_db)):
    ensure_same_email(email, claims)
    return cart.find(db, {"email": email})


@router.get("/cart/item/{item_id}")
def get_cart_item(item_id: str, claims: Ok = Depends(get_claims), db: Database = Depends(get_db)):
    return cart.get(db, item_id, owner=claims.email)


@router.post("/cart")
def add_to_cart(body: CartItemIn, claims: Ok = Depends(get_claims), db: Database = Depends(get_db)):
    item = body.model_dump()
    item["email"] = claims.email
    item["totalPrice"] = line_total(body.price, body.quantity)
    return cart.create(db, item)


@router.put("/cart/{item_id}")
def update_quantity(
    item_id: str,
    body: QuantityUpdate,
    claims: Ok = Depends(get_claims),
    db: Database = Depends(get_db),
):
    query = cart.id_filter(item_id, owner=claims.email)
    item = db.cart.find_one(query)
    if not item:
        raise NotFound("Item not found")

    total_price = line_total(item.get("price"), body.quantity)
    db.cart.update_one(query, {"$set": {"quantity": body.quantity, "totalPrice": total_price}})
    return {
        "success": True,
        "message": "Quantity updated successfully!",
        "quantity": body.quantity,
        "totalPrice": total_price,
    }


@router.delete("/cart/{item_id}")
def remove_item(item_id: str, claims: Ok = Depends(get_claims), db: Database = Depends(get_db)):
    return cart.delete(db, item_id, owner=claims.email)


@router.delete("/cart")
def clear_cart(claims: Ok = Depends(get_claims), db: Database = Depends(get_db)):
    return cart.delete_many(db, {"email": claims.email})
