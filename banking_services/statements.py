"""
Account Statement Module

Turns a client's movements into statement rows. Movements are grouped by
account, each group is enriched with its account and account type, and every
row reports the balance before the movement (the previous row's balance, or
the account's initial balance for the first row) and the balance after it.
"""

from dataclasses import dataclass, asdict
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Any, Iterable, TYPE_CHECKING
import asyncio
import logging

from .accounts import AccountService
from .account_types import AccountTypeService
from .client_directory import ClientDirectory
from .exceptions import NotFoundError

if TYPE_CHECKING:
    from .movements import Movement

logger = logging.getLogger("banking.statements")


@dataclass
class AccountStatement:
    """One statement row: a movement with its account and client context"""
    date: datetime
    client_name: str
    account_number: str
    account_type: str
    initial_balance: Decimal
    movement: Decimal
    status: bool
    final_balance: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def group_movements_by_account(movements: Iterable['Movement']) -> Dict[int, List['Movement']]:
    """
    Group movements by account group id.

    Groups keep the order in which they first appear; inside a group the
    movements are sorted by date, equal dates keeping their input order.
    """
    groups: Dict[int, List['Movement']] = {}
    for movement in movements:
        groups.setdefault(movement.account_movement_id, []).append(movement)

    for group in groups.values():
        group.sort(key=lambda m: m.movement_date)
    return groups


class AccountStatusService:
    """Builds account statements for a client"""

    def __init__(
        self,
        client_directory: ClientDirectory,
        account_service: AccountService,
        account_type_service: AccountTypeService,
        concurrency: int = 8
    ):
        self.client_directory = client_directory
        self.account_service = account_service
        self.account_type_service = account_type_service
        self.concurrency = max(1, concurrency)

    async def get_account_status(
        self,
        movements: List['Movement'],
        client_id: int
    ) -> List[AccountStatement]:
        """
        Build statement rows for a client's movements.

        Account and account type lookups run concurrently per group, bounded
        by ``concurrency``; rows come back group by group in the order the
        groups first appear in ``movements``.

        Args:
            movements: Movements already filtered to the client and date range
            client_id: Client the statement is for

        Returns:
            One AccountStatement per movement of every resolvable account
        """
        client_name = await self.client_directory.get_client_name(client_id)
        groups = group_movements_by_account(movements)
        semaphore = asyncio.Semaphore(self.concurrency)

        async def build_group(account_movement_id: int, group: List['Movement']):
            async with semaphore:
                return await self._build_group_rows(client_name, account_movement_id, group)

        results = await asyncio.gather(
            *(build_group(key, group) for key, group in groups.items())
        )
        return [row for rows in results for row in rows]

    async def _build_group_rows(
        self,
        client_name: str,
        account_movement_id: int,
        group: List['Movement']
    ) -> List[AccountStatement]:
        try:
            account = await self.account_service.get_account(account_movement_id)
            account_type = await self.account_type_service.get_account_type(
                account.account_type_id
            )
        except NotFoundError as e:
            logger.warning(
                f"Skipping {len(group)} movements of account {account_movement_id}: {e.message}"
            )
            return []

        rows = []
        previous_balance = account.initial_balance
        for movement in group:
            rows.append(AccountStatement(
                date=movement.movement_date,
                client_name=client_name,
                account_number=account.account_number,
                account_type=account_type.description,
                initial_balance=previous_balance,
                movement=movement.movement_value,
                status=account.status,
                final_balance=movement.movement_balance
            ))
            previous_balance = movement.movement_balance
        return rows
