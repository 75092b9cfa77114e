from typing import List
from fastapi import APIRouter, Depends, status

from app.schemas.client import ClientCreateRequest, ClientResponse, DebtCreateRequest
from app.services.ledger_service import LedgerService, get_ledger_service

router = APIRouter()

@router.get("", response_model=List[ClientResponse])
async def list_clients(service: LedgerService = Depends(get_ledger_service)):
    """List all clients with their debts"""
    clients = await service.list_clients()
    return [ClientResponse.from_client(client) for client in clients]

@router.post("", response_model=ClientResponse, status_code=status.HTTP_201_CREATED)
async def create_client(
    payload: ClientCreateRequest,
    service: LedgerService = Depends(get_ledger_service)
):
    """Create a client, optionally with an initial debt"""
    client = await service.create_client(
        name=payload.name,
        phone=payload.phone,
        deposit=payload.deposit,
        initial_debt=payload.initial_debt,
        initial_product_name=payload.initial_product_name
    )
    return ClientResponse.from_client(client)

@router.post("/{client_id}/debts", response_model=ClientResponse)
async def add_debt(
    client_id: str,
    payload: DebtCreateRequest,
    service: LedgerService = Depends(get_ledger_service)
):
    """Record a purchase on credit for a client"""
    client = await service.add_debt(client_id, payload.amount, payload.product_name)
    return ClientResponse.from_client(client)

@router.put("/{client_id}/debts/{debt_id}/pay", response_model=ClientResponse)
async def pay_debt(
    client_id: str,
    debt_id: str,
    service: LedgerService = Depends(get_ledger_service)
):
    """Mark a debt as paid"""
    client = await service.pay_debt(client_id, debt_id)
    return ClientResponse.from_client(client)
