from typing import Any, Optional

from fastapi import APIRouter, Depends

from pharmaworld.api.deps import require_seller
from pharmaworld.db.crud import CollectionCrud, serialize_doc
from pharmaworld.db.mongo import MEDICINES, Database, get_db
from pharmaworld.models.schemas import MedicineIn, MedicineUpdate

router = APIRouter()
medicines = CollectionCrud(MEDICINES, "Medicine", owner_field="email")


def parse_discount(value: Any) -> float:
    """Discounts were saved both as numbers and as strings like "15" or "15%"."""
    if isinstance(value, bool) or value is None:
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).strip().rstrip("%"))
    except ValueError:
        return 0.0


@router.get("/allMedicines")
def all_medicines(db: Database = Depends(get_db)):
    return medicines.find(db)


@router.get("/medicines")
def list_medicines(
    category: Optional[str] = None,
    email: Optional[str] = None,
    db: Database = Depends(get_db),
):
    query = {}
    if category:
        query["category"] = category
    if email:
        query["email"] = email
    return medicines.find(db, query)


@router.get("/discount-products")
def discount_products(db: Database = Depends(get_db)):
    docs = db.medicines.find({"discount": {"$exists": True}})
    return [serialize_doc(doc) for doc in docs if parse_discount(doc.get("discount")) > 0]


@router.get("/medicine/{medicine_id}")
def get_medicine(medicine_id: str, db: Database = Depends(get_db)):
    return medicines.get(db, medicine_id)


@router.post("/medicines")
def create_medicine(body: MedicineIn, seller=Depends(require_seller), db: Database = Depends(get_db)):
    doc = body.model_dump(mode="json")
    # a seller can only list products under their own account
    doc["email"] = seller["email"]
    return medicines.create(db, doc)


@router.put("/medicine/{medicine_id}")
def update_medicine(
    medicine_id: str,
    body: MedicineUpdate,
    seller=Depends(require_seller),
    db: Database = Depends(get_db),
):
    fields = body.model_dump(mode="json", exclude_unset=True)
    fields.pop("email", None)
    return medicines.update(db, medicine_id, fields, owner=seller["email"])


@router.delete("/medicine/{medicine_id}")
def delete_medicine(medicine_id: str, seller=Depends(require_seller), db: Database = Depends(get_db)):
    return medicines.delete(db, medicine_id, owner=seller["email"])
