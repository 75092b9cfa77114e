from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, Field, ConfigDict

from app.models.client import Client, DebtEntry


class ClientCreateRequest(BaseModel):
    """Request body to create a client, optionally with a first debt."""
    name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    # Amounts stay raw here; app.utils.ledger_validation parses them
    deposit: Any = None
    initial_debt: Any = Field(default=None, alias="initialDebt")
    initial_product_name: Optional[str] = Field(default=None, alias="initialProductName")

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)


class DebtCreateRequest(BaseModel):
    """Request body to record a purchase on credit."""
    amount: Any = None
    product_name: Optional[str] = Field(default=None, alias="productName")

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)


class DebtEntryResponse(BaseModel):
    id: str
    amount: float
    product_name: str = Field(serialization_alias="productName")
    date: datetime
    paid: bool

    @classmethod
    def from_entry(cls, entry: DebtEntry) -> "DebtEntryResponse":
        return cls(
            id=str(entry.id),
            amount=entry.amount,
            product_name=entry.product_name,
            date=entry.date,
            paid=entry.paid
        )


class ClientResponse(BaseModel):
    """Client as exposed on the wire (no internal version)."""
    id: str
    name: str
    phone: str
    deposit: float
    total_debt: float = Field(serialization_alias="totalDebt")
    debts: List[DebtEntryResponse]

    @classmethod
    def from_client(cls, client: Client) -> "ClientResponse":
        return cls(
            id=str(client.id),
            name=client.name,
            phone=client.phone,
            deposit=client.deposit,
            total_debt=client.total_debt,
            debts=[DebtEntryResponse.from_entry(debt) for debt in client.debts]
        )
