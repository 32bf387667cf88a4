"""
Client management endpoints
"""

from typing import List
from fastapi import APIRouter, Depends, status

from .dependencies import BankingSystem, get_banking_system
from .schemas import ClientRequest, ClientResponse


router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED, response_model=ClientResponse)
async def create_client(
    request: ClientRequest,
    system: BankingSystem = Depends(get_banking_system)
):
    """Create a client together with its person"""
    view = await system.client_service.create_client(request.to_person_client())
    return ClientResponse.from_view(view)


@router.get("", response_model=List[ClientResponse])
async def list_clients(system: BankingSystem = Depends(get_banking_system)):
    views = await system.client_service.get_clients()
    return [ClientResponse.from_view(v) for v in views]


@router.get("/{client_id}", response_model=ClientResponse)
async def get_client(
    client_id: int,
    system: BankingSystem = Depends(get_banking_system)
):
    view = await system.client_service.get_client(client_id)
    return ClientResponse.from_view(view)


@router.put("/{client_id}", response_model=ClientResponse)
async def update_client(
    client_id: int,
    request: ClientRequest,
    system: BankingSystem = Depends(get_banking_system)
):
    """Update person fields plus the client's password and status"""
    view = await system.client_service.update_client(client_id, request.to_person_client())
    return ClientResponse.from_view(view)


@router.delete("/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_client(
    client_id: int,
    system: BankingSystem = Depends(get_banking_system)
):
    """Delete a client and its person"""
    await system.client_service.delete_client(client_id)
