import logging
from typing import Optional

from fastapi import Request
from pymongo import ASCENDING, MongoClient
from pymongo.database import Database as MongoDatabase
from pymongo.errors import PyMongoError
from pymongo.server_api import ServerApi

logger = logging.getLogger(__name__)

USERS = "users"
MEDICINES = "medicine"
CATEGORIES = "category"
CART = "cart"
ADVERTISEMENTS = "advertisements"
ORDERS = "orders"


class Database:
    """Owns the Mongo client for the lifetime of the application.

    Built once by the app lifespan and handed to route handlers through the
    ``get_db`` dependency. Tests construct it around any object that behaves
    like a ``pymongo.database.Database``.
    """

    def __init__(self, db: MongoDatabase, client: Optional[MongoClient] = None):
        self._db = db
        self._client = client

    @classmethod
    def connect(cls, uri: str, name: str) -> "Database":
        client = MongoClient(uri, server_api=ServerApi("1"))
        return cls(client[name], client)

    @property
    def name(self) -> str:
        return self._db.name

    def __getitem__(self, collection: str):
        return self._db[collection]

    @property
    def users(self):
        return self._db[USERS]

    @property
    def medicines(self):
        return self._db[MEDICINES]

    @property
    def categories(self):
        return self._db[CATEGORIES]

    @property
    def cart(self):
        return self._db[CART]

    @property
    def advertisements(self):
        return self._db[ADVERTISEMENTS]

    @property
    def orders(self):
        return self._db[ORDERS]

    def ping(self) -> bool:
        if self._client is None:
            return True
        try:
            self._client.admin.command("ping")
            return True
        except PyMongoError as e:
            logger.error("Could not connect to MongoDB: %s", e)
            return False

    def ensure_indexes(self):
        try:
            self.users.create_index([("email", ASCENDING)], unique=True)
            self.medicines.create_index([("category", ASCENDING)])
            self.medicines.create_index([("email", ASCENDING)])
            self.cart.create_index([("email", ASCENDING)])
            self.orders.create_index([("buyer", ASCENDING)])
        except PyMongoError as e:
            logger.warning("Unable to ensure indexes: %s", e)

    def close(self):
        if self._client is not None:
            self._client.close()
            self._client = None


def get_db(request: Request) -> Database:
    return request.app.state.db
