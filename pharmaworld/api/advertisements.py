from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from pharmaworld.api.deps import get_claims, require_admin, require_seller
from pharmaworld.db.crud import CollectionCrud
from pharmaworld.db.mongo import ADVERTISEMENTS, Database, get_db
from pharmaworld.models.schemas import AdvertisementIn, StatusUpdate

router = APIRouter()
advertisements = CollectionCrud(ADVERTISEMENTS, "Advertisement", owner_field="seller")


@router.get("/advertisements", dependencies=[Depends(get_claims)])
def list_advertisements(db: Database = Depends(get_db)):
    return advertisements.find(db)


@router.get("/advertisements/{email}", dependencies=[Depends(get_claims)])
def seller_advertisements(email: str, db: Database = Depends(get_db)):
    return advertisements.find(db, {"seller": email})


@router.post("/advertisements")
def create_advertisement(
    body: AdvertisementIn,
    seller=Depends(require_seller),
    db: Database = Depends(get_db),
):
    """New ads wait in ``pending`` until an admin reviews them."""
    ad = body.model_dump()
    ad.update({
        "seller": seller["email"],
        "status": "pending",
        "createdAt": datetime.now(timezone.utc),
    })
    return advertisements.create(db, ad)


@router.patch("/advertisements/{ad_id}")
def update_advertisement_status(
    ad_id: str,
    body: StatusUpdate,
    admin=Depends(require_admin),
    db: Database = Depends(get_db),
):
    result = advertisements.update(db, ad_id, {"status": body.status})
    return {"success": True, "message": "Status updated successfully.", **result}


@router.get("/advertisement/{ad_id}", dependencies=[Depends(get_claims)])
def get_advertisement(ad_id: str, db: Database = Depends(get_db)):
    return advertisements.get(db, ad_id)


@router.delete("/advertisements/{ad_id}")
def withdraw_advertisement(ad_id: str, seller=Depends(require_seller), db: Database = Depends(get_db)):
    return advertisements.delete(db, ad_id, owner=seller["email"])
