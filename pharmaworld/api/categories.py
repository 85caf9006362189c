from fastapi import APIRouter, Depends

from pharmaworld.api.deps import require_admin
from pharmaworld.db.crud import CollectionCrud
from pharmaworld.db.mongo import CATEGORIES, Database, get_db
from pharmaworld.models.schemas import CategoryIn, CategoryUpdate

router = APIRouter()
categories = CollectionCrud(CATEGORIES, "Category")

# number of categories shown on the home page
FEATURED_LIMIT = 6


@router.get("/categories")
def featured_categories(db: Database = Depends(get_db)):
    return categories.find(db, limit=FEATURED_LIMIT)


@router.get("/category")
def list_categories(db: Database = Depends(get_db)):
    return categories.find(db)


@router.get("/category/{category_id}")
def get_category(category_id: str, db: Database = Depends(get_db)):
    return categories.get(db, category_id)


@router.post("/category")
def create_category(body: CategoryIn, admin=Depends(require_admin), db: Database = Depends(get_db)):
    return categories.create(db, body.model_dump())


@router.put("/category/{category_id}")
def update_category(
    category_id: str,
    body: CategoryUpdate,
    admin=Depends(require_admin),
    db: Database = Depends(get_db),
):
    return categories.update(db, category_id, body.model_dump(exclude_unset=True))


@router.delete("/category/{category_id}")
def delete_category(category_id: str, admin=Depends(require_admin), db: Database = Depends(get_db)):
    return categories.delete(db, category_id)
