"""
Service container and FastAPI dependencies
"""

from typing import Optional
import logging

from fastapi import Request

from ..async_storage import AsyncStorageInterface, create_async_storage
from ..persons import PersonStore, PersonService
from ..clients import ClientStore, ClientService
from ..accounts import AccountStore, AccountService
from ..account_types import AccountTypeStore, AccountTypeService
from ..movements import MovementStore, MovementService
from ..statements import AccountStatusService
from ..client_directory import ClientDirectory, HttpClientDirectory, LocalClientDirectory
from ..config import BankingConfig, get_config

logger = logging.getLogger("banking.api")


class BankingSystem:
    """All stores and services wired against one storage backend"""

    def __init__(
        self,
        config: Optional[BankingConfig] = None,
        storage: Optional[AsyncStorageInterface] = None,
        client_directory: Optional[ClientDirectory] = None
    ):
        self.config = config or get_config()

        if storage is None:
            storage = create_async_storage(
                self.config.storage_type,
                self.config.database_url,
                self.config.database_pool_size
            )
        self.storage = storage

        self.person_service = PersonService(PersonStore(self.storage))
        self.client_service = ClientService(ClientStore(self.storage), self.person_service)
        self.account_type_service = AccountTypeService(AccountTypeStore(self.storage))
        self.account_service = AccountService(AccountStore(self.storage))

        self.client_directory = client_directory or self._create_client_directory()

        self.account_status_service = AccountStatusService(
            self.client_directory,
            self.account_service,
            self.account_type_service,
            concurrency=self.config.statement_concurrency
        )
        self.movement_service = MovementService(
            MovementStore(self.storage),
            self.account_service,
            self.account_status_service
        )

    def _create_client_directory(self) -> ClientDirectory:
        """Remote directory when a client API URL is configured, local otherwise"""
        if self.config.client_api_url:
            return HttpClientDirectory(
                self.config.client_api_url,
                timeout=self.config.client_api_timeout
            )
        return LocalClientDirectory(self.client_service)

    async def startup(self) -> None:
        await self.storage.initialize()
        if self.config.seed_account_types:
            await self.account_type_service.seed_defaults()
        logger.info(f"Banking services started with {type(self.storage).__name__}")

    async def shutdown(self) -> None:
        await self.client_directory.close()
        await self.storage.close()


def get_banking_system(request: Request) -> BankingSystem:
    return request.app.state.banking_system
