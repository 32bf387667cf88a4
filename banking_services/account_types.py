"""
Account Type Lookup Module

Account types are a plain lookup table of descriptions referenced by accounts.
"""

from dataclasses import dataclass, asdict
from typing import Dict, List, Optional, Any

from .async_storage import AsyncStorageInterface
from .exceptions import NotFoundError


DEFAULT_ACCOUNT_TYPES = ("Savings", "Checking")


@dataclass
class AccountType:
    description: str
    account_type_id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AccountType':
        return cls(**data)


class AccountTypeStore:
    table_name = "account_types"

    def __init__(self, storage: AsyncStorageInterface):
        self.storage = storage

    async def save(self, account_type: AccountType) -> AccountType:
        if account_type.account_type_id is None:
            account_type.account_type_id = await self.storage.next_id(self.table_name)
        await self.storage.save(
            self.table_name, account_type.account_type_id, account_type.to_dict()
        )
        return account_type

    async def find_by_id(self, account_type_id: int) -> Optional[AccountType]:
        data = await self.storage.load(self.table_name, account_type_id)
        if data:
            return AccountType.from_dict(data)
        return None

    async def find_all(self) -> List[AccountType]:
        return [AccountType.from_dict(d) for d in await self.storage.load_all(self.table_name)]


class AccountTypeService:
    def __init__(self, store: AccountTypeStore):
        self.store = store

    async def create_account_type(self, description: str) -> AccountType:
        return await self.store.save(AccountType(description=description))

    async def get_account_type(self, account_type_id: int) -> AccountType:
        account_type = await self.store.find_by_id(account_type_id)
        if account_type is None:
            raise NotFoundError(f"Account type not found with id: {account_type_id}")
        return account_type

    async def get_account_types(self) -> List[AccountType]:
        return await self.store.find_all()

    async def seed_defaults(self) -> List[AccountType]:
        """Create the default account types when the table is empty"""
        existing = await self.store.find_all()
        if existing:
            return existing
        return [await self.create_account_type(d) for d in DEFAULT_ACCOUNT_TYPES]
