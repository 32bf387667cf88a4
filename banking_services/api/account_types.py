"""
Account type lookup endpoints
"""

from typing import List
from fastapi import APIRouter, Depends, status

from .dependencies import BankingSystem, get_banking_system
from .schemas import AccountTypeRequest, AccountTypeResponse


router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED, response_model=AccountTypeResponse)
async def create_account_type(
    request: AccountTypeRequest,
    system: BankingSystem = Depends(get_banking_system)
):
    account_type = await system.account_type_service.create_account_type(request.description)
    return AccountTypeResponse.from_account_type(account_type)


@router.get("", response_model=List[AccountTypeResponse])
async def list_account_types(system: BankingSystem = Depends(get_banking_system)):
    account_types = await system.account_type_service.get_account_types()
    return [AccountTypeResponse.from_account_type(t) for t in account_types]


@router.get("/{account_type_id}", response_model=AccountTypeResponse)
async def get_account_type(
    account_type_id: int,
    system: BankingSystem = Depends(get_banking_system)
):
    account_type = await system.account_type_service.get_account_type(account_type_id)
    return AccountTypeResponse.from_account_type(account_type)
