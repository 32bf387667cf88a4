"""
Account management endpoints
"""

from typing import List
from fastapi import APIRouter, Depends, status

from .dependencies import BankingSystem, get_banking_system
from .schemas import AccountRequest, AccountStatusRequest, AccountResponse


router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED, response_model=AccountResponse)
async def create_account(
    request: AccountRequest,
    system: BankingSystem = Depends(get_banking_system)
):
    """Create a new account"""
    account = await system.account_service.create_account(request.to_account())
    return AccountResponse.from_account(account)


@router.get("", response_model=List[AccountResponse])
async def list_accounts(system: BankingSystem = Depends(get_banking_system)):
    accounts = await system.account_service.get_accounts()
    return [AccountResponse.from_account(a) for a in accounts]


@router.get("/{account_id}", response_model=AccountResponse)
async def get_account(
    account_id: int,
    system: BankingSystem = Depends(get_banking_system)
):
    """Get account details"""
    account = await system.account_service.get_account(account_id)
    return AccountResponse.from_account(account)


@router.put("/{account_id}", response_model=AccountResponse)
async def update_account(
    account_id: int,
    request: AccountStatusRequest,
    system: BankingSystem = Depends(get_banking_system)
):
    """Change the account status; no other field is updatable"""
    account = await system.account_service.update_account(account_id, request.status)
    return AccountResponse.from_account(account)


@router.delete("/{account_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_account(
    account_id: int,
    system: BankingSystem = Depends(get_banking_system)
):
    await system.account_service.delete_account(account_id)
