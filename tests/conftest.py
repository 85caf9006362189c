import copy
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import parse_qs

import httpx
import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from pharmaworld.core.config import Settings
from pharmaworld.core.security import issue_token
from pharmaworld.db.mongo import Database
from pharmaworld.main import create_app
from pharmaworld.services.payments import PaymentGateway


# --- In-memory stand-in for a pymongo database ---

@dataclass
class InsertResult:
    inserted_id: Any
    acknowledged: bool = True


@dataclass
class UpdateResult:
    matched_count: int
    modified_count: int
    upserted_id: Optional[Any] = None


@dataclass
class DeleteResult:
    deleted_count: int


def _matches(doc, query):
    for key, cond in query.items():
        if isinstance(cond, dict) and any(k.startswith("$") for k in cond):
            for op, arg in cond.items():
                if op == "$exists":
                    if (key in doc) != bool(arg):
                        return False
                elif op == "$in":
                    if doc.get(key) not in arg:
                        return False
                else:
                    raise NotImplementedError(op)
        elif doc.get(key) != cond:
            return False
    return True


class FakeCursor(list):
    def limit(self, n):
        return FakeCursor(self[:n]) if n else self


class FakeCollection:
    def __init__(self, name):
        self.name = name
        self.docs = []

    def create_index(self, *args, **kwargs):
        return None

    def find(self, query=None):
        return FakeCursor(copy.deepcopy(d) for d in self.docs if _matches(d, query or {}))

    def find_one(self, query=None):
        for d in self.docs:
            if _matches(d, query or {}):
                return copy.deepcopy(d)
        return None

    def insert_one(self, doc):
        doc = copy.deepcopy(doc)
        doc.setdefault("_id", ObjectId())
        self.docs.append(doc)
        return InsertResult(doc["_id"])

    def update_one(self, query, update, upsert=False):
        for d in self.docs:
            if _matches(d, query):
                before = copy.deepcopy(d)
                d.update(copy.deepcopy(update.get("$set", {})))
                return UpdateResult(1, int(before != d))
        if upsert:
            doc = {k: v for k, v in query.items() if not isinstance(v, dict)}
            doc.update(update.get("$setOnInsert", {}))
            doc.update(update.get("$set", {}))
            return UpdateResult(0, 0, self.insert_one(doc).inserted_id)
        return UpdateResult(0, 0)

    def delete_one(self, query):
        for i, d in enumerate(self.docs):
            if _matches(d, query):
                del self.docs[i]
                return DeleteResult(1)
        return DeleteResult(0)

    def delete_many(self, query):
        keep = [d for d in self.docs if not _matches(d, query)]
        removed = len(self.docs) - len(keep)
        self.docs = keep
        return DeleteResult(removed)


class FakeMongoDatabase:
    name = "pharmaworld_test"

    def __init__(self):
        self.collections = {}

    def __getitem__(self, name):
        if name not in self.collections:
            self.collections[name] = FakeCollection(name)
        return self.collections[name]


# --- Fixtures ---

@pytest.fixture
def settings():
    return Settings(
        mongo_uri="mongodb://localhost:27017",
        db_name="pharmaworld_test",
        jwt_secret="test-secret",
        stripe_secret_key="sk_test_123",
    )


@pytest.fixture
def db():
    return Database(FakeMongoDatabase())


@pytest.fixture
def stripe_requests():
    return []


@pytest.fixture
def stripe_transport(stripe_requests):
    def handler(request: httpx.Request):
        stripe_requests.append({
            "headers": dict(request.headers),
            "form": {k: v[0] for k, v in parse_qs(request.content.decode()).items()},
            "url": str(request.url),
        })
        return httpx.Response(200, json={"id": "pi_123", "client_secret": "pi_123_secret_abc"})

    return httpx.MockTransport(handler)


@pytest.fixture
def app(settings, db, stripe_transport):
    gateway = PaymentGateway(settings.stripe_secret_key, transport=stripe_transport)
    return create_app(settings=settings, database=db, payment_gateway=gateway)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def auth_headers(settings):
    def make(email):
        return {"Authorization": f"Bearer {issue_token({'email': email}, settings)}"}

    return make


@pytest.fixture
def add_user(db):
    def add(email, role="guest", **fields):
        doc = {"email": email, "role": role, "name": email.split("@")[0], **fields}
        db.users.insert_one(doc)
        return db.users.find_one({"email": email})

    return add
