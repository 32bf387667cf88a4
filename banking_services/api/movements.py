"""
Movement and account statement endpoints
"""

from datetime import datetime
from typing import List, Optional
from fastapi import APIRouter, Depends, status

from .dependencies import BankingSystem, get_banking_system
from .schemas import (
    MovementRequest,
    MovementUpdateRequest,
    MovementResponse,
    AccountStatementResponse
)


router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED, response_model=MovementResponse)
async def create_movement(
    request: MovementRequest,
    system: BankingSystem = Depends(get_banking_system)
):
    """Record a credit or debit; the running balance is computed server side"""
    movement = await system.movement_service.create_movement(
        request.account_movement_id, request.movement_value
    )
    return MovementResponse.from_movement(movement)


@router.get("", response_model=List[MovementResponse])
async def list_movements(system: BankingSystem = Depends(get_banking_system)):
    movements = await system.movement_service.get_movements()
    return [MovementResponse.from_movement(m) for m in movements]


# Declared before /{movement_id} so the literal path wins
@router.get("/account-status", response_model=List[AccountStatementResponse])
async def get_account_status(
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    client_id: Optional[int] = None,
    system: BankingSystem = Depends(get_banking_system)
):
    """Statement rows for a client's movements between two dates (inclusive)"""
    statements = await system.movement_service.get_account_status(
        start_date, end_date, client_id
    )
    return [AccountStatementResponse.from_statement(s) for s in statements]


@router.get("/{movement_id}", response_model=MovementResponse)
async def get_movement(
    movement_id: int,
    system: BankingSystem = Depends(get_banking_system)
):
    movement = await system.movement_service.get_movement(movement_id)
    return MovementResponse.from_movement(movement)


@router.put("/{movement_id}", response_model=MovementResponse)
async def update_movement(
    movement_id: int,
    request: MovementUpdateRequest,
    system: BankingSystem = Depends(get_banking_system)
):
    """Overwrite a movement verbatim; later balances are not recomputed"""
    movement = await system.movement_service.update_movement(movement_id, request.to_movement())
    return MovementResponse.from_movement(movement)


@router.delete("/{movement_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_movement(
    movement_id: int,
    system: BankingSystem = Depends(get_banking_system)
):
    await system.movement_service.delete_movement(movement_id)
