"""
Pydantic schemas for API requests and responses
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field

from ..accounts import Account
from ..account_types import AccountType
from ..clients import PersonClient, PersonClientView
from ..movements import Movement
from ..persons import Person
from ..statements import AccountStatement


# Person schemas
class PersonRequest(BaseModel):
    name: str
    gender: Optional[str] = None
    age: Optional[int] = Field(None, ge=0)
    identification: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None

    def to_person(self) -> Person:
        return Person(**self.model_dump())


class PersonResponse(PersonRequest):
    person_id: int

    @classmethod
    def from_person(cls, person: Person) -> 'PersonResponse':
        return cls(**person.to_dict())


# Client schemas
class ClientRequest(PersonRequest):
    password: str = Field(..., min_length=1)
    status: bool = True

    def to_person_client(self) -> PersonClient:
        return PersonClient(**self.model_dump())


class ClientResponse(BaseModel):
    client_id: int
    person_id: int
    name: str
    address: Optional[str] = None
    phone: Optional[str] = None
    status: bool

    @classmethod
    def from_view(cls, view: PersonClientView) -> 'ClientResponse':
        return cls(
            client_id=view.client_id,
            person_id=view.person_id,
            name=view.name,
            address=view.address,
            phone=view.phone,
            status=view.status
        )


# Account type schemas
class AccountTypeRequest(BaseModel):
    description: str


class AccountTypeResponse(AccountTypeRequest):
    account_type_id: int

    @classmethod
    def from_account_type(cls, account_type: AccountType) -> 'AccountTypeResponse':
        return cls(**account_type.to_dict())


# Account schemas
class AccountRequest(BaseModel):
    client_id: int
    account_number: str
    account_type_id: int
    initial_balance: Decimal = Field(Decimal("0.00"), ge=0)
    status: bool = True

    def to_account(self) -> Account:
        return Account(**self.model_dump())


class AccountStatusRequest(BaseModel):
    status: bool


class AccountResponse(AccountRequest):
    account_id: int

    @classmethod
    def from_account(cls, account: Account) -> 'AccountResponse':
        return cls(
            account_id=account.account_id,
            client_id=account.client_id,
            account_number=account.account_number,
            account_type_id=account.account_type_id,
            initial_balance=account.initial_balance,
            status=account.status
        )


# Movement schemas
class MovementRequest(BaseModel):
    account_movement_id: int
    movement_value: Decimal = Field(..., description="Signed value: credits positive, debits negative")


class MovementUpdateRequest(BaseModel):
    account_movement_id: int
    movement_date: datetime
    movement_value: Decimal
    movement_balance: Decimal

    def to_movement(self) -> Movement:
        return Movement(**self.model_dump())


class MovementResponse(MovementUpdateRequest):
    movement_id: int

    @classmethod
    def from_movement(cls, movement: Movement) -> 'MovementResponse':
        return cls(
            movement_id=movement.movement_id,
            account_movement_id=movement.account_movement_id,
            movement_date=movement.movement_date,
            movement_value=movement.movement_value,
            movement_balance=movement.movement_balance
        )


class AccountStatementResponse(BaseModel):
    date: datetime
    client_name: str
    account_number: str
    account_type: str
    initial_balance: Decimal
    movement: Decimal
    status: bool
    final_balance: Decimal

    @classmethod
    def from_statement(cls, statement: AccountStatement) -> 'AccountStatementResponse':
        return cls(**statement.to_dict())
