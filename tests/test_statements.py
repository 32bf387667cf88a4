"""
Test suite for account statement generation
"""

import asyncio
from datetime import datetime
from decimal import Decimal

import pytest

from banking_services.accounts import Account
from banking_services.account_types import AccountType
from banking_services.exceptions import NotFoundError
from banking_services.movements import Movement
from banking_services.statements import AccountStatusService, group_movements_by_account


pytest_plugins = ('pytest_asyncio',)


def movement(group, value, balance, day, movement_id=None):
    return Movement(
        account_movement_id=group,
        movement_value=Decimal(value),
        movement_balance=Decimal(balance),
        movement_date=datetime(2022, 2, day, 10, 0),
        movement_id=movement_id
    )


class FakeDirectory:
    def __init__(self, names):
        self.names = names
        self.calls = 0

    async def get_client_name(self, client_id):
        self.calls += 1
        if client_id not in self.names:
            raise NotFoundError(f"Client not found with id: {client_id}")
        return self.names[client_id]


class FakeAccountService:
    """Account lookups with a per-account delay"""

    def __init__(self, accounts, delays=None):
        self.accounts = accounts
        self.delays = delays or {}
        self.active = 0
        self.peak = 0

    async def get_account(self, account_id):
        self.active += 1
        self.peak = max(self.peak, self.active)
        try:
            await asyncio.sleep(self.delays.get(account_id, 0))
        finally:
            self.active -= 1
        if account_id not in self.accounts:
            raise NotFoundError(f"Account not found with id: {account_id}")
        return self.accounts[account_id]


class FakeAccountTypeService:
    def __init__(self, types):
        self.types = types

    async def get_account_type(self, account_type_id):
        if account_type_id not in self.types:
            raise NotFoundError(f"Account type not found with id: {account_type_id}")
        return self.types[account_type_id]


ACCOUNTS = {
    1: Account(client_id=1, account_number="478758", account_type_id=1,
               initial_balance=Decimal("2000"), account_id=1),
    2: Account(client_id=1, account_number="225487", account_type_id=2,
               initial_balance=Decimal("100"), status=False, account_id=2),
}
TYPES = {
    1: AccountType(description="Savings", account_type_id=1),
    2: AccountType(description="Checking", account_type_id=2),
}


class TestGrouping:
    def test_groups_keep_first_seen_order(self):
        movements = [movement(2, "1", "1", 3), movement(1, "1", "1", 1), movement(2, "1", "2", 4)]

        groups = group_movements_by_account(movements)

        assert list(groups) == [2, 1]
        assert len(groups[2]) == 2

    def test_groups_are_sorted_by_date(self):
        late = movement(1, "5", "105", 9, movement_id=1)
        early = movement(1, "-50", "50", 2, movement_id=2)

        groups = group_movements_by_account([late, early])

        assert groups[1] == [early, late]

    def test_equal_dates_keep_input_order(self):
        a = movement(1, "1", "1", 5, movement_id=7)
        b = movement(1, "2", "3", 5, movement_id=3)

        assert group_movements_by_account([a, b])[1] == [a, b]


class TestAccountStatusService:
    """Test row construction and concurrent enrichment"""

    @pytest.mark.asyncio
    async def test_previous_balance_chain(self):
        service = AccountStatusService(
            FakeDirectory({1: "Jose Lema"}), FakeAccountService(ACCOUNTS), FakeAccountTypeService(TYPES)
        )
        movements = [
            movement(1, "-575", "1425", 1),
            movement(1, "600", "2025", 2),
            movement(1, "-25", "2000", 3),
        ]

        rows = await service.get_account_status(movements, 1)

        assert [r.initial_balance for r in rows] == [Decimal("2000"), Decimal("1425"), Decimal("2025")]
        assert [r.final_balance for r in rows] == [Decimal("1425"), Decimal("2025"), Decimal("2000")]
        assert [r.movement for r in rows] == [Decimal("-575"), Decimal("600"), Decimal("-25")]
        for previous, current in zip(rows, rows[1:]):
            assert current.initial_balance == previous.final_balance

    @pytest.mark.asyncio
    async def test_group_order_survives_slow_lookups(self):
        """The first group finishes last but its rows still come first"""
        accounts = FakeAccountService(ACCOUNTS, delays={1: 0.05, 2: 0})
        directory = FakeDirectory({1: "Jose Lema"})
        service = AccountStatusService(directory, accounts, FakeAccountTypeService(TYPES))
        movements = [
            movement(1, "-575", "1425", 1),
            movement(2, "-40", "60", 2),
            movement(1, "600", "2025", 3),
        ]

        rows = await service.get_account_status(movements, 1)

        assert [r.account_number for r in rows] == ["478758", "478758", "225487"]
        assert [r.account_type for r in rows] == ["Savings", "Savings", "Checking"]
        assert [r.status for r in rows] == [True, True, False]
        assert rows[2].initial_balance == Decimal("100")
        assert all(r.client_name == "Jose Lema" for r in rows)
        assert directory.calls == 1
        assert accounts.peak == 2

    @pytest.mark.asyncio
    async def test_concurrency_is_bounded(self):
        accounts = {
            i: Account(client_id=1, account_number=str(i), account_type_id=1,
                       initial_balance=Decimal("0"), account_id=i)
            for i in range(1, 7)
        }
        account_service = FakeAccountService(accounts, delays={i: 0.01 for i in accounts})
        service = AccountStatusService(
            FakeDirectory({1: "Jose Lema"}), account_service, FakeAccountTypeService(TYPES),
            concurrency=2
        )

        rows = await service.get_account_status(
            [movement(i, "1", "1", i) for i in accounts], 1
        )

        assert [r.account_number for r in rows] == [str(i) for i in accounts]
        assert account_service.peak <= 2

    @pytest.mark.asyncio
    async def test_missing_account_is_skipped(self):
        service = AccountStatusService(
            FakeDirectory({1: "Jose Lema"}), FakeAccountService(ACCOUNTS), FakeAccountTypeService(TYPES)
        )

        rows = await service.get_account_status(
            [movement(9, "1", "1", 1), movement(2, "-40", "60", 2)], 1
        )

        assert [r.account_number for r in rows] == ["225487"]

    @pytest.mark.asyncio
    async def test_missing_account_type_is_skipped(self):
        service = AccountStatusService(
            FakeDirectory({1: "Jose Lema"}), FakeAccountService(ACCOUNTS),
            FakeAccountTypeService({1: TYPES[1]})
        )

        rows = await service.get_account_status(
            [movement(1, "1", "2001", 1), movement(2, "-40", "60", 2)], 1
        )

        assert [r.account_type for r in rows] == ["Savings"]

    @pytest.mark.asyncio
    async def test_unknown_client(self):
        service = AccountStatusService(
            FakeDirectory({}), FakeAccountService(ACCOUNTS), FakeAccountTypeService(TYPES)
        )

        with pytest.raises(NotFoundError):
            await service.get_account_status([movement(1, "1", "1", 1)], 5)

    @pytest.mark.asyncio
    async def test_no_movements(self):
        service = AccountStatusService(
            FakeDirectory({1: "Jose Lema"}), FakeAccountService(ACCOUNTS), FakeAccountTypeService(TYPES)
        )

        assert await service.get_account_status([], 1) == []
