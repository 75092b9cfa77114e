import logging
from typing import List, Optional

from fastapi import Depends, status
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError, PyMongoError

from app.core.exceptions import (
    ClientNotFoundError,
    ConcurrentUpdateError,
    DebtNotFoundError,
    DuplicateClientError,
    StorageError,
)
from app.db.mongo import get_db
from app.models.client import Client, DebtEntry, DEFAULT_PRODUCT_NAME
from app.repositories.client_repo import ClientRepository
from app.utils.ledger_validation import (
    parse_amount,
    parse_initial_debt,
    parse_positive_amount,
    require_text,
)

logger = logging.getLogger(__name__)


class LedgerService:
    """Client life cycle and the totalDebt invariant."""

    def __init__(self, repository: ClientRepository):
        self.repository = repository

    async def list_clients(self) -> List[Client]:
        try:
            return await self.repository.list_clients()
        except PyMongoError as exc:
            raise StorageError(str(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)

    async def create_client(
        self,
        name: Optional[str],
        phone: Optional[str],
        deposit=None,
        initial_debt=None,
        initial_product_name: Optional[str] = None
    ) -> Client:
        """
        Create a client, with at most one initial debt entry.

        No entry is created when initial_debt is missing or zero.
        """
        name = require_text(name, "name")
        phone = require_text(phone, "phone")
        deposit_amount = parse_amount(deposit, "deposit", required=False) or 0
        initial_amount = parse_initial_debt(initial_debt)

        client = Client(name=name, phone=phone, deposit=deposit_amount)
        if initial_amount is not None:
            product_name = (initial_product_name or "").strip() or DEFAULT_PRODUCT_NAME
            client.append_debt(initial_amount, product_name)

        try:
            created = await self.repository.insert_client(client)
        except DuplicateKeyError:
            raise DuplicateClientError(f"A client with phone {phone} already exists")
        except PyMongoError as exc:
            raise StorageError(str(exc), status.HTTP_400_BAD_REQUEST)

        logger.info("Created client %s (initial debt: %s)", created.id, created.total_debt)
        return created

    async def add_debt(self, client_id: str, amount, product_name: Optional[str]) -> Client:
        amount = parse_positive_amount(amount)
        product_name = require_text(product_name, "productName")
        entry = DebtEntry(amount=amount, product_name=product_name)

        try:
            updated = await self.repository.push_debt(client_id, entry)
        except PyMongoError as exc:
            raise StorageError(str(exc), status.HTTP_400_BAD_REQUEST)

        if updated is None:
            raise ClientNotFoundError()
        logger.info("Client %s: added debt %s of %s", client_id, entry.id, amount)
        return updated

    async def pay_debt(self, client_id: str, debt_id: str) -> Client:
        """
        Mark a debt paid and recompute totalDebt from the unpaid entries.

        Paying an already paid entry returns the client unchanged.
        """
        try:
            client = await self.repository.get_client(client_id)
        except PyMongoError as exc:
            raise StorageError(str(exc), status.HTTP_400_BAD_REQUEST)

        if client is None:
            raise ClientNotFoundError()

        debt = client.find_debt(debt_id)
        if debt is None:
            raise DebtNotFoundError()

        if not client.pay_debt(debt.id):
            return client

        try:
            updated = await self.repository.save_debts(client)
        except PyMongoError as exc:
            raise StorageError(str(exc), status.HTTP_400_BAD_REQUEST)

        if updated is None:
            raise ConcurrentUpdateError(
                "Client was modified by another request, reload and try again"
            )
        logger.info("Client %s: paid debt %s, total debt now %s", client_id, debt_id, updated.total_debt)
        return updated


def get_ledger_service(db: AsyncIOMotorDatabase = Depends(get_db)) -> LedgerService:
    return LedgerService(ClientRepository(db))
