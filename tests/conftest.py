import copy
from types import SimpleNamespace

import pytest
import pytest_asyncio
from bson import ObjectId
from httpx import AsyncClient, ASGITransport
from pymongo.errors import DuplicateKeyError

from app.db.mongo import get_db
from app.main import app
from app.repositories.client_repo import ClientRepository
from app.services.ledger_service import LedgerService


class FakeCursor:
    def __init__(self, docs):
        self._docs = docs

    async def to_list(self, length=None):
        return self._docs if length is None else self._docs[:length]


class FakeCollection:
    """In-memory stand-in for the Motor collection calls ClientRepository makes.

    Supports equality and $in filters, the $set/$inc/$push update operators and a
    unique index on ``phone``.
    """

    def __init__(self, unique_fields=("phone",)):
        self.docs = []
        self.unique_fields = unique_fields

    @staticmethod
    def _matches(doc, query):
        for key, value in query.items():
            if isinstance(value, dict) and "$in" in value:
                if doc.get(key) not in value["$in"]:
                    return False
            elif doc.get(key) != value:
                return False
        return True

    def find(self, query=None):
        query = query or {}
        return FakeCursor([copy.deepcopy(doc) for doc in self.docs if self._matches(doc, query)])

    async def find_one(self, query):
        for doc in self.docs:
            if self._matches(doc, query):
                return copy.deepcopy(doc)
        return None

    async def insert_one(self, doc):
        for field in self.unique_fields:
            if any(existing.get(field) == doc.get(field) for existing in self.docs):
                raise DuplicateKeyError(
                    f"E11000 duplicate key error collection: clients index: {field}_1"
                )
        stored = copy.deepcopy(doc)
        stored.setdefault("_id", ObjectId())
        self.docs.append(stored)
        return SimpleNamespace(inserted_id=stored["_id"])

    async def find_one_and_update(self, query, update, return_document=None):
        for doc in self.docs:
            if not self._matches(doc, query):
                continue
            for key, value in update.get("$set", {}).items():
                doc[key] = copy.deepcopy(value)
            for key, value in update.get("$inc", {}).items():
                doc[key] = doc.get(key, 0) + value
            for key, value in update.get("$push", {}).items():
                doc.setdefault(key, []).append(copy.deepcopy(value))
            return copy.deepcopy(doc)
        return None


class FakeDatabase(dict):
    def __missing__(self, name):
        collection = FakeCollection()
        self[name] = collection
        return collection


@pytest.fixture
def fake_db():
    return FakeDatabase()


@pytest.fixture
def ledger_service(fake_db):
    return LedgerService(ClientRepository(fake_db))


@pytest_asyncio.fixture
async def api_client(fake_db):
    """HTTP client against the app with the database swapped for the fake."""
    app.dependency_overrides[get_db] = lambda: fake_db
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            yield client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def sample_client_data():
    return {
        "name": "Amir",
        "phone": "0600000000",
        "initialDebt": 150,
        "initialProductName": "Phone case"
    }
