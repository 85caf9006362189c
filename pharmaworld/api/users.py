from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Response, status

from pharmaworld.api.deps import ensure_same_email, get_claims, require_admin
from pharmaworld.core.errors import Forbidden, InvalidArgument, NotFound
from pharmaworld.core.security import Ok
from pharmaworld.db.crud import CollectionCrud, serialize_doc
from pharmaworld.db.mongo import USERS, Database, get_db
from pharmaworld.models.schemas import ProfileUpdate, Role, RoleUpdate, UserCreate

router = APIRouter()
users = CollectionCrud(USERS, "User", owner_field="email")


@router.get("/users")
def list_users(admin=Depends(require_admin), db: Database = Depends(get_db)):
    return users.find(db)


@router.post("/users", status_code=status.HTTP_201_CREATED)
def save_user(
    body: UserCreate,
    response: Response,
    claims: Ok = Depends(get_claims),
    db: Database = Depends(get_db),
):
    """
    Upsert-by-email. The first sign-in stores the user, every later call
    returns the stored record unchanged.
    """
    ensure_same_email(body.email, claims)
    if body.role == Role.admin:
        raise Forbidden("Admin role can only be granted by an admin.")

    new_user = body.model_dump(mode="json")
    new_user["createdAt"] = datetime.now(timezone.utc)
    # $setOnInsert leaves an existing record untouched
    result = db.users.update_one(
        {"email": body.email},
        {"$setOnInsert": new_user},
        upsert=True,
    )
    if result.upserted_id is None:
        response.status_code = status.HTTP_200_OK

    return serialize_doc(db.users.find_one({"email": body.email}))


@router.patch("/users/{user_id}")
def update_user_role(
    user_id: str,
    body: RoleUpdate,
    admin=Depends(require_admin),
    db: Database = Depends(get_db),
):
    return users.update(db, user_id, {"role": body.role.value})


@router.get("/users/admin/{email}")
def check_admin(email: str, claims: Ok = Depends(get_claims), db: Database = Depends(get_db)):
    ensure_same_email(email, claims)
    user = db.users.find_one({"email": email})
    return {"admin": bool(user) and user.get("role") == Role.admin.value}


@router.get("/users/seller/{email}")
def check_seller(email: str, claims: Ok = Depends(get_claims), db: Database = Depends(get_db)):
    ensure_same_email(email, claims)
    user = db.users.find_one({"email": email})
    return {"seller": bool(user) and user.get("role") == Role.seller.value}


@router.put("/user/updateProfile/{email}")
def update_profile(
    email: str,
    body: ProfileUpdate,
    claims: Ok = Depends(get_claims),
    db: Database = Depends(get_db),
):
    ensure_same_email(email, claims)
    fields = body.model_dump(exclude_none=True)
    if not fields:
        raise InvalidArgument("Nothing to update.")
    result = db.users.update_one({"email": email}, {"$set": fields})
    if result.matched_count == 0:
        raise NotFound("User not found.")
    return {"success": True, "message": "Profile updated successfully."}
