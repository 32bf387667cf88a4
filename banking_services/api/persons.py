"""
Person management endpoints
"""

from typing import List
from fastapi import APIRouter, Depends, status

from .dependencies import BankingSystem, get_banking_system
from .schemas import PersonRequest, PersonResponse


router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED, response_model=PersonResponse)
async def create_person(
    request: PersonRequest,
    system: BankingSystem = Depends(get_banking_system)
):
    """Create a person without a client"""
    person = await system.person_service.create_person(request.to_person())
    return PersonResponse.from_person(person)


@router.get("", response_model=List[PersonResponse])
async def list_persons(system: BankingSystem = Depends(get_banking_system)):
    persons = await system.person_service.get_persons()
    return [PersonResponse.from_person(p) for p in persons]


@router.get("/{person_id}", response_model=PersonResponse)
async def get_person(
    person_id: int,
    system: BankingSystem = Depends(get_banking_system)
):
    person = await system.person_service.get_person(person_id)
    return PersonResponse.from_person(person)


@router.put("/{person_id}", response_model=PersonResponse)
async def update_person(
    person_id: int,
    request: PersonRequest,
    system: BankingSystem = Depends(get_banking_system)
):
    """Replace every personal field"""
    person = await system.person_service.update_person(person_id, request.to_person())
    return PersonResponse.from_person(person)


@router.delete("/{person_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_person(
    person_id: int,
    system: BankingSystem = Depends(get_banking_system)
):
    """Delete a person; clients referencing it are kept"""
    await system.person_service.delete_person(person_id)
