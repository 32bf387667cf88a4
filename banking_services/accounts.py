"""
Account Management Module

Accounts belong to a client, carry an account type and an initial balance.
The account id doubles as the account-group id that movements reference; the
initial balance is the baseline for the first movement of the group.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Optional, Any
import logging

from .async_storage import AsyncStorageInterface
from .exceptions import NotFoundError
from .logging_config import log_action

logger = logging.getLogger("banking.accounts")


@dataclass
class Account:
    """Bank account owned by a client"""
    client_id: int
    account_number: str
    account_type_id: int
    initial_balance: Decimal = Decimal("0.00")
    status: bool = True
    account_id: Optional[int] = None

    def __post_init__(self):
        if not isinstance(self.initial_balance, Decimal):
            self.initial_balance = Decimal(str(self.initial_balance))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "account_id": self.account_id,
            "client_id": self.client_id,
            "account_number": self.account_number,
            "account_type_id": self.account_type_id,
            "initial_balance": str(self.initial_balance),
            "status": self.status,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Account':
        return cls(
            account_id=data["account_id"],
            client_id=data["client_id"],
            account_number=data["account_number"],
            account_type_id=data["account_type_id"],
            initial_balance=Decimal(data["initial_balance"]),
            status=data.get("status", True),
        )


class AccountStore:
    """Persistence of Account records"""

    table_name = "accounts"

    def __init__(self, storage: AsyncStorageInterface):
        self.storage = storage

    async def save(self, account: Account) -> Account:
        if account.account_id is None:
            account.account_id = await self.storage.next_id(self.table_name)
        await self.storage.save(self.table_name, account.account_id, account.to_dict())
        return account

    async def find_by_id(self, account_id: int) -> Optional[Account]:
        data = await self.storage.load(self.table_name, account_id)
        if data:
            return Account.from_dict(data)
        return None

    async def find_all(self) -> List[Account]:
        return [Account.from_dict(d) for d in await self.storage.load_all(self.table_name)]

    async def find_by_client_id(self, client_id: int) -> List[Account]:
        matches = await self.storage.find(self.table_name, {"client_id": client_id})
        return [Account.from_dict(d) for d in matches]

    async def delete_by_id(self, account_id: int) -> bool:
        return await self.storage.delete(self.table_name, account_id)


class AccountService:
    """
    CRUD over accounts. Updates only ever touch the account status.
    """

    def __init__(self, store: AccountStore):
        self.store = store

    async def create_account(self, account: Account) -> Account:
        account.account_id = None
        saved = await self.store.save(account)
        log_action(
            logger, "info", f"Created account {saved.account_number}",
            action="create", resource="account", resource_id=saved.account_id,
            extra={"client_id": saved.client_id}
        )
        return saved

    async def get_account(self, account_id: int) -> Account:
        account = await self.store.find_by_id(account_id)
        if account is None:
            raise NotFoundError(f"Account not found with id: {account_id}")
        return account

    async def get_accounts(self) -> List[Account]:
        return await self.store.find_all()

    async def update_account(self, account_id: int, status: bool) -> Account:
        """Change the status of an existing account"""
        account = await self.get_account(account_id)
        account.status = status
        return await self.store.save(account)

    async def delete_account(self, account_id: int) -> None:
        """Delete an account. Its movements are kept."""
        await self.store.delete_by_id(account_id)
