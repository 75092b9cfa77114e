"""
Client model - a customer account with a cash deposit and credit purchases.

Design principles:
- One document per client; debt entries are embedded, in creation order
- Debt entries are addressed by an id local to their client (O(n) scan)
- Entries only ever transition unpaid -> paid; paid is terminal
- total_debt is derived: always the sum of unpaid entry amounts
"""

from datetime import datetime
from typing import List, Optional

from bson import ObjectId
from pydantic import BaseModel, Field, ConfigDict

from app.models.base import PyObjectId, _utcnow, to_object_id

DEFAULT_PRODUCT_NAME = "Produit initial"


class DebtEntry(BaseModel):
    """One purchase on credit, owned by exactly one client."""
    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    id: PyObjectId = Field(default_factory=ObjectId, alias="_id")
    amount: float
    product_name: str = Field(alias="productName")
    date: datetime = Field(default_factory=_utcnow)
    paid: bool = False


class Client(BaseModel):
    """
    Client aggregate as stored in the ``clients`` collection.

    Invariants:
    - total_debt == sum(amount of entries where paid is False)
    - deposit is never touched by ledger operations
    - version (stored as ``__v``) grows by one on every ledger write
    """
    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    id: PyObjectId = Field(default_factory=ObjectId, alias="_id")
    name: str
    phone: str
    deposit: float = 0
    total_debt: float = Field(default=0, alias="totalDebt")
    debts: List[DebtEntry] = Field(default_factory=list)
    version: int = Field(default=0, alias="__v")

    def unpaid_total(self) -> float:
        """Sum of amounts over entries not yet paid."""
        return sum(debt.amount for debt in self.debts if not debt.paid)

    def recompute_total_debt(self) -> float:
        self.total_debt = self.unpaid_total()
        return self.total_debt

    def find_debt(self, debt_id) -> Optional[DebtEntry]:
        oid = to_object_id(debt_id)
        if oid is None:
            return None
        for debt in self.debts:
            if debt.id == oid:
                return debt
        return None

    def append_debt(self, amount: float, product_name: str) -> DebtEntry:
        """Append an unpaid entry and grow total_debt by its amount."""
        entry = DebtEntry(amount=amount, product_name=product_name)
        self.debts.append(entry)
        self.total_debt += amount
        return entry

    def pay_debt(self, debt_id) -> bool:
        """
        Mark an entry paid and recompute total_debt from scratch.

        Returns False when the entry was already paid (nothing changes).
        Raises KeyError if no entry has this id.
        """
        debt = self.find_debt(debt_id)
        if debt is None:
            raise KeyError(str(debt_id))
        if debt.paid:
            return False
        debt.paid = True
        self.recompute_total_debt()
        return True

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True)
