"""
Movement Processing Module

Movements are signed credits and debits against an account group. Each one
stores the running balance at the moment it was created: the balance of the
most recent earlier movement of the group (or the account's initial balance)
plus its own value. Balances are snapshots and are never recomputed.
"""

from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Callable, Dict, List, Optional, Any, Hashable
import asyncio
import logging

from .accounts import AccountService, AccountStore
from .async_storage import AsyncStorageInterface
from .exceptions import BadRequestError, InsufficientFundsError, NotFoundError
from .logging_config import log_action
from .statements import AccountStatement, AccountStatusService

logger = logging.getLogger("banking.movements")


MOVEMENT_NOT_FOUND_MESSAGE = "Movement not found with id: "
NO_BALANCE_MESSAGE = "Insufficient balance"
MISSING_PARAMETER_MESSAGE = "Missing required parameters: start_date, end_date and client_id"


def as_naive(value: datetime) -> datetime:
    """Convert an aware datetime to naive local time, leave naive ones alone"""
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


@dataclass
class Movement:
    """A signed movement and the balance it left the account group with"""
    account_movement_id: int
    movement_value: Decimal
    movement_balance: Decimal = Decimal("0.00")
    movement_date: datetime = field(default_factory=datetime.now)
    movement_id: Optional[int] = None

    def __post_init__(self):
        if not isinstance(self.movement_value, Decimal):
            self.movement_value = Decimal(str(self.movement_value))
        if not isinstance(self.movement_balance, Decimal):
            self.movement_balance = Decimal(str(self.movement_balance))
        self.movement_date = as_naive(self.movement_date)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "movement_id": self.movement_id,
            "account_movement_id": self.account_movement_id,
            "movement_date": self.movement_date.isoformat(),
            "movement_value": str(self.movement_value),
            "movement_balance": str(self.movement_balance),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Movement':
        return cls(
            movement_id=data["movement_id"],
            account_movement_id=data["account_movement_id"],
            movement_date=datetime.fromisoformat(data["movement_date"]),
            movement_value=Decimal(data["movement_value"]),
            movement_balance=Decimal(data["movement_balance"]),
        )

    @property
    def sort_key(self):
        return (self.movement_date, self.movement_id or 0)


class MovementStore:
    """Persistence of Movement records plus the two specialised reads"""

    table_name = "movements"

    def __init__(self, storage: AsyncStorageInterface):
        self.storage = storage

    async def save(self, movement: Movement) -> Movement:
        if movement.movement_id is None:
            movement.movement_id = await self.storage.next_id(self.table_name)
        await self.storage.save(self.table_name, movement.movement_id, movement.to_dict())
        return movement

    async def find_by_id(self, movement_id: int) -> Optional[Movement]:
        data = await self.storage.load(self.table_name, movement_id)
        if data:
            return Movement.from_dict(data)
        return None

    async def find_all(self) -> List[Movement]:
        return [Movement.from_dict(d) for d in await self.storage.load_all(self.table_name)]

    async def find_by_account_movement_id(self, account_movement_id: int) -> List[Movement]:
        matches = await self.storage.find(
            self.table_name, {"account_movement_id": account_movement_id}
        )
        return [Movement.from_dict(d) for d in matches]

    async def find_latest(self, account_movement_id: int) -> Optional[Movement]:
        """Most recent movement of an account group; ties go to the newest id"""
        movements = await self.find_by_account_movement_id(account_movement_id)
        if not movements:
            return None
        return max(movements, key=lambda m: m.sort_key)

    async def find_for_client_between(
        self,
        start_date: datetime,
        end_date: datetime,
        client_id: int
    ) -> List[Movement]:
        """
        Movements of every account owned by a client with
        start_date <= movement_date <= end_date, ordered by date.
        """
        accounts = await self.storage.find(AccountStore.table_name, {"client_id": client_id})

        result = []
        for account in accounts:
            for movement in await self.find_by_account_movement_id(account["account_id"]):
                if start_date <= movement.movement_date <= end_date:
                    result.append(movement)

        result.sort(key=lambda m: m.sort_key)
        return result

    async def delete_by_id(self, movement_id: int) -> bool:
        return await self.storage.delete(self.table_name, movement_id)


class KeyedLock:
    """One asyncio.Lock per key, dropped once nobody holds or waits on it"""

    def __init__(self):
        self._locks: Dict[Hashable, asyncio.Lock] = {}
        self._users: Dict[Hashable, int] = {}

    @asynccontextmanager
    async def acquire(self, key: Hashable):
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if not self._users[key]:
                del self._users[key]
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)


class MovementService:
    """
    Creates, updates and deletes movements and produces account statements
    """

    def __init__(
        self,
        store: MovementStore,
        account_service: AccountService,
        account_status_service: AccountStatusService,
        clock: Callable[[], datetime] = datetime.now
    ):
        self.store = store
        self.account_service = account_service
        self.account_status_service = account_status_service
        self.clock = clock
        self._group_locks = KeyedLock()

    async def create_movement(self, account_movement_id: int, movement_value: Decimal) -> Movement:
        """
        Record a movement against an account group.

        Args:
            account_movement_id: Account group the movement belongs to
            movement_value: Signed value, positive credits and negative debits

        Returns:
            The persisted movement with its running balance

        Raises:
            NotFoundError: no earlier movement and no such account
            InsufficientFundsError: the resulting balance would be negative
        """
        movement_value = Decimal(str(movement_value))

        # Reading the previous balance and writing the new one must not
        # interleave with another creation on the same group
        async with self._group_locks.acquire(account_movement_id):
            previous_balance = await self._get_previous_balance(account_movement_id)
            current_balance = previous_balance + movement_value

            if current_balance < 0:
                log_action(
                    logger, "warning",
                    f"Rejected movement of {movement_value} on account {account_movement_id}",
                    action="create", resource="movement",
                    extra={"previous_balance": str(previous_balance)}
                )
                raise InsufficientFundsError(NO_BALANCE_MESSAGE)

            movement = await self.store.save(Movement(
                account_movement_id=account_movement_id,
                movement_value=movement_value,
                movement_balance=current_balance,
                movement_date=self.clock()
            ))

        log_action(
            logger, "info",
            f"Created movement {movement.movement_id} on account {account_movement_id}",
            action="create", resource="movement", resource_id=movement.movement_id,
            extra={"value": str(movement_value), "balance": str(current_balance)}
        )
        return movement

    async def update_movement(self, movement_id: int, movement: Movement) -> Movement:
        """
        Overwrite date, account group, value and balance of a movement.

        The caller supplies the balance; neighbouring movements are not
        recomputed.
        """
        existing = await self.store.find_by_id(movement_id)
        if existing is None:
            raise NotFoundError(MOVEMENT_NOT_FOUND_MESSAGE + str(movement_id))

        existing.movement_date = movement.movement_date
        existing.account_movement_id = movement.account_movement_id
        existing.movement_value = movement.movement_value
        existing.movement_balance = movement.movement_balance
        return await self.store.save(existing)

    async def get_movement(self, movement_id: int) -> Movement:
        movement = await self.store.find_by_id(movement_id)
        if movement is None:
            raise NotFoundError(MOVEMENT_NOT_FOUND_MESSAGE + str(movement_id))
        return movement

    async def get_movements(self) -> List[Movement]:
        return await self.store.find_all()

    async def delete_movement(self, movement_id: int) -> None:
        await self.store.delete_by_id(movement_id)

    async def get_account_status(
        self,
        start_date: Optional[datetime],
        end_date: Optional[datetime],
        client_id: Optional[int]
    ) -> List[AccountStatement]:
        """
        Statement rows for every movement of a client inside a date range.

        Raises:
            BadRequestError: any of the three parameters is missing
        """
        if start_date is None or end_date is None or client_id is None:
            raise BadRequestError(MISSING_PARAMETER_MESSAGE)

        movements = await self.store.find_for_client_between(
            as_naive(start_date), as_naive(end_date), client_id
        )
        return await self.account_status_service.get_account_status(movements, client_id)

    async def _get_previous_balance(self, account_movement_id: int) -> Decimal:
        latest = await self.store.find_latest(account_movement_id)
        if latest is not None:
            return latest.movement_balance

        account = await self.account_service.get_account(account_movement_id)
        return account.initial_balance
