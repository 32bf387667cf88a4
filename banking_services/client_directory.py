"""
Client Directory Module

Resolves a client's display name for statements. The accounts side talks to
the client service either in-process or through its REST API.
"""

from abc import ABC, abstractmethod
import logging

import httpx

from .clients import ClientService
from .exceptions import NotFoundError, ServiceUnavailableError

logger = logging.getLogger("banking.client_directory")


class ClientDirectory(ABC):
    """Lookup of client display names"""

    @abstractmethod
    async def get_client_name(self, client_id: int) -> str:
        """Return the client's name or raise NotFoundError"""
        pass

    async def close(self) -> None:
        pass


class LocalClientDirectory(ClientDirectory):
    """Resolves clients through an in-process ClientService"""

    def __init__(self, client_service: ClientService):
        self.client_service = client_service

    async def get_client_name(self, client_id: int) -> str:
        client = await self.client_service.get_client(client_id)
        return client.name


class HttpClientDirectory(ClientDirectory):
    """REST client for the remote client service"""

    def __init__(self, base_url: str, timeout: float = 5.0, client: httpx.AsyncClient = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def get_client_name(self, client_id: int) -> str:
        """
        Fetch ``GET {base_url}/clients/{client_id}`` and return its name.

        Raises:
            NotFoundError: the client service answered 404
            ServiceUnavailableError: transport failure, any other status or
                a body without a name
        """
        url = f"{self.base_url}/clients/{client_id}"
        try:
            response = await self._client.get(url)
        except httpx.HTTPError as e:
            logger.error(f"Client service connection failed: {e}")
            raise ServiceUnavailableError("Client service unavailable") from e

        if response.status_code == 404:
            raise NotFoundError(f"Client not found with id: {client_id}")

        if response.status_code != 200:
            logger.warning(f"Client service returned {response.status_code}: {response.text}")
            raise ServiceUnavailableError(
                f"Client service returned {response.status_code}"
            )

        try:
            return response.json()["name"]
        except (ValueError, KeyError, TypeError) as e:
            logger.warning(f"Client service returned an invalid payload: {response.text}")
            raise ServiceUnavailableError("Client service returned an invalid payload") from e

    async def close(self) -> None:
        """Close the HTTP client if this directory created it"""
        if self._owns_client:
            await self._client.aclose()
