"""
Document the read-modify-write race on a single client.

Two writers on the same client document:
- appends go through one atomic $push/$inc update and never lose each other
- a pay based on a stale read is rejected instead of overwriting newer debts
"""
import asyncio

import pytest
from bson import ObjectId
from unittest.mock import AsyncMock, patch

from app.core.exceptions import ConcurrentUpdateError


@pytest.mark.asyncio
async def test_concurrent_appends_are_all_kept(ledger_service):
    client = await ledger_service.create_client(name="Amir", phone="0600000000")
    client_id = str(client.id)

    await asyncio.gather(*[
        ledger_service.add_debt(client_id, amount, f"Item {amount}")
        for amount in (10, 20, 30)
    ])

    (stored,) = await ledger_service.list_clients()
    assert len(stored.debts) == 3
    assert stored.total_debt == 60
    assert stored.version == 3


@pytest.mark.asyncio
async def test_stale_save_does_not_overwrite(ledger_service):
    client = await ledger_service.create_client(name="Amir", phone="0600000000", initial_debt=150)
    stale = await ledger_service.repository.get_client(str(client.id))

    await ledger_service.add_debt(str(client.id), 50, "Charger")
    stale.pay_debt(stale.debts[0].id)

    assert await ledger_service.repository.save_debts(stale) is None

    (stored,) = await ledger_service.list_clients()
    assert len(stored.debts) == 2
    assert stored.debts[0].paid is False
    assert stored.total_debt == 200


@pytest.mark.asyncio
async def test_pay_after_concurrent_append_is_conflict(ledger_service):
    client = await ledger_service.create_client(name="Amir", phone="0600000000", initial_debt=150)
    client_id = str(client.id)
    debt_id = str(client.debts[0].id)
    stale = await ledger_service.repository.get_client(client_id)
    await ledger_service.add_debt(client_id, 50, "Charger")

    with patch.object(ledger_service.repository, "get_client", new=AsyncMock(return_value=stale)):
        with pytest.raises(ConcurrentUpdateError) as exc_info:
            await ledger_service.pay_debt(client_id, debt_id)

    assert exc_info.value.status_code == 409

    paid = await ledger_service.pay_debt(client_id, debt_id)
    assert paid.total_debt == 50
    assert len(paid.debts) == 2


@pytest.mark.asyncio
async def test_pay_on_document_without_version(ledger_service, fake_db):
    client_id = ObjectId()
    debt_id = ObjectId()
    fake_db["clients"].docs.append({
        "_id": client_id,
        "name": "Sara",
        "phone": "0611111111",
        "deposit": 0,
        "totalDebt": 30,
        "debts": [{"_id": debt_id, "amount": 30, "productName": "Bread", "paid": False}]
    })

    paid = await ledger_service.pay_debt(str(client_id), str(debt_id))

    assert paid.total_debt == 0
    assert paid.debts[0].paid is True
    assert fake_db["clients"].docs[0]["__v"] == 1
