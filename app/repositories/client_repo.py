"""
ClientRepository - Persists client aggregates in the ``clients`` collection.

Write paths:
1. insert_client: one insert; the unique phone index rejects duplicates
2. push_debt: single atomic $push/$inc, safe under concurrent appends
3. save_debts: version-guarded replace of debts/totalDebt (optimistic lock)
"""

from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from app.db.mongo import CLIENTS_COLLECTION
from app.models.base import to_object_id
from app.models.client import Client, DebtEntry


class ClientRepository:
    """Repository for client documents and their embedded debts."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db[CLIENTS_COLLECTION]

    async def list_clients(self) -> List[Client]:
        """Get every client, debts included."""
        docs = await self.collection.find({}).to_list(None)
        return [Client(**doc) for doc in docs]

    async def get_client(self, client_id: str) -> Optional[Client]:
        oid = to_object_id(client_id)
        if oid is None:
            return None

        doc = await self.collection.find_one({"_id": oid})
        if doc:
            return Client(**doc)
        return None

    async def insert_client(self, client: Client) -> Client:
        """
        Insert a new client.

        Raises pymongo DuplicateKeyError when the phone is already taken.
        """
        doc = client.to_document()
        result = await self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        return Client(**doc)

    async def push_debt(self, client_id: str, entry: DebtEntry) -> Optional[Client]:
        """
        Append an entry and grow totalDebt in one update.

        Returns the updated client, or None if it does not exist.
        """
        oid = to_object_id(client_id)
        if oid is None:
            return None

        result = await self.collection.find_one_and_update(
            {"_id": oid},
            {
                "$push": {"debts": entry.model_dump(by_alias=True)},
                "$inc": {"totalDebt": entry.amount, "__v": 1}
            },
            return_document=ReturnDocument.AFTER
        )
        if result:
            return Client(**result)
        return None

    async def save_debts(self, client: Client) -> Optional[Client]:
        """
        Write back debts and totalDebt if nobody wrote since ``client`` was read.

        Returns the updated client, or None when the stored version moved
        (or the client vanished).
        """
        doc = client.to_document()
        # Documents written before versioning have no __v and load as 0
        version_filter = {"$in": [0, None]} if client.version == 0 else client.version
        result = await self.collection.find_one_and_update(
            {"_id": client.id, "__v": version_filter},
            {
                "$set": {
                    "debts": doc["debts"],
                    "totalDebt": doc["totalDebt"]
                },
                "$inc": {"__v": 1}
            },
            return_document=ReturnDocument.AFTER
        )
        if result:
            return Client(**result)
        return None
