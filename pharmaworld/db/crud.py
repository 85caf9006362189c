from datetime import datetime
from typing import Any, Dict, List, Optional

from bson import ObjectId
from bson.errors import InvalidId

from pharmaworld.core.errors import InvalidArgument, NotFound


def parse_object_id(value: str, label: str = "id") -> ObjectId:
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise InvalidArgument(f"Invalid {label}.")


def serialize_doc(value: Any) -> Any:
    """Make a Mongo document JSON friendly: ObjectIds and datetimes become strings."""
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: serialize_doc(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [serialize_doc(v) for v in value]
    return value


class CollectionCrud:
    """CRUD surface shared by every resource collection.

    ``owner_field`` names the document field holding the owner's email. When a
    caller passes ``owner`` to ``update``/``delete`` the write only touches
    documents owned by that email.
    """

    def __init__(self, name: str, label: str, owner_field: Optional[str] = None):
        self.name = name
        self.label = label
        self.owner_field = owner_field

    def collection(self, db):
        return db[self.name]

    def id_filter(self, item_id: str, owner: Optional[str] = None) -> Dict[str, Any]:
        query = {"_id": parse_object_id(item_id, f"{self.label.lower()} ID")}
        if owner is not None and self.owner_field:
            query[self.owner_field] = owner
        return query

    def find(self, db, query: Optional[Dict[str, Any]] = None, limit: int = 0) -> List[dict]:
        cursor = self.collection(db).find(query or {})
        if limit:
            cursor = cursor.limit(limit)
        return [serialize_doc(doc) for doc in cursor]

    def get(self, db, item_id: str, owner: Optional[str] = None) -> dict:
        doc = self.collection(db).find_one(self.id_filter(item_id, owner))
        if not doc:
            raise NotFound(f"{self.label} not found.")
        return serialize_doc(doc)

    def create(self, db, doc: Dict[str, Any]) -> dict:
        doc = {k: v for k, v in doc.items() if k != "_id"}
        result = self.collection(db).insert_one(doc)
        return {"acknowledged": result.acknowledged, "insertedId": str(result.inserted_id)}

    def update(self, db, item_id: str, fields: Dict[str, Any], owner: Optional[str] = None) -> dict:
        fields = {k: v for k, v in fields.items() if k != "_id"}
        if not fields:
            raise InvalidArgument("No fields to update.")
        result = self.collection(db).update_one(self.id_filter(item_id, owner), {"$set": fields})
        if result.matched_count == 0:
            raise NotFound(f"{self.label} not found.")
        return {"matchedCount": result.matched_count, "modifiedCount": result.modified_count}

    def delete(self, db, item_id: str, owner: Optional[str] = None) -> dict:
        result = self.collection(db).delete_one(self.id_filter(item_id, owner))
        return {"deletedCount": result.deleted_count}

    def delete_many(self, db, query: Dict[str, Any]) -> dict:
        result = self.collection(db).delete_many(query)
        return {"deletedCount": result.deleted_count}
