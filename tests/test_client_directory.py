"""
Tests for client name resolution, local and over HTTP
"""

import pytest
import pytest_asyncio
from unittest.mock import AsyncMock, patch
import httpx

from banking_services.async_storage import AsyncInMemoryStorage
from banking_services.client_directory import HttpClientDirectory, LocalClientDirectory
from banking_services.clients import ClientService, ClientStore, PersonClient
from banking_services.exceptions import NotFoundError, ServiceUnavailableError
from banking_services.persons import PersonService, PersonStore


pytest_plugins = ('pytest_asyncio',)


class TestLocalClientDirectory:
    @pytest_asyncio.fixture
    async def client_service(self):
        storage = AsyncInMemoryStorage()
        return ClientService(ClientStore(storage), PersonService(PersonStore(storage)))

    @pytest.mark.asyncio
    async def test_resolves_name(self, client_service):
        view = await client_service.create_client(PersonClient(name="Jose Lema", password="1234"))
        directory = LocalClientDirectory(client_service)

        assert await directory.get_client_name(view.client_id) == "Jose Lema"

    @pytest.mark.asyncio
    async def test_unknown_client(self, client_service):
        directory = LocalClientDirectory(client_service)

        with pytest.raises(NotFoundError):
            await directory.get_client_name(1)


class TestHttpClientDirectory:
    """Test the REST client against mocked responses"""

    @pytest_asyncio.fixture
    async def directory(self):
        directory = HttpClientDirectory("http://clients:8080/", timeout=1.0)
        yield directory
        await directory.close()

    @pytest.mark.asyncio
    async def test_success(self, directory):
        response = httpx.Response(200, json={"client_id": 3, "name": "Marianela Montalvo"})

        with patch.object(httpx.AsyncClient, "get", AsyncMock(return_value=response)) as mock_get:
            name = await directory.get_client_name(3)

        assert name == "Marianela Montalvo"
        mock_get.assert_called_once_with("http://clients:8080/clients/3")

    @pytest.mark.asyncio
    async def test_not_found(self, directory):
        response = httpx.Response(404, json={"status": 404, "message": "Client not found with id: 3"})

        with patch.object(httpx.AsyncClient, "get", AsyncMock(return_value=response)):
            with pytest.raises(NotFoundError):
                await directory.get_client_name(3)

    @pytest.mark.asyncio
    async def test_server_error(self, directory):
        response = httpx.Response(500, text="Internal Server Error")

        with patch.object(httpx.AsyncClient, "get", AsyncMock(return_value=response)):
            with pytest.raises(ServiceUnavailableError) as exc_info:
                await directory.get_client_name(3)

        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    async def test_connection_error(self, directory):
        error = httpx.ConnectError("Connection refused")

        with patch.object(httpx.AsyncClient, "get", AsyncMock(side_effect=error)):
            with pytest.raises(ServiceUnavailableError, match="Client service unavailable"):
                await directory.get_client_name(3)

    @pytest.mark.asyncio
    async def test_timeout(self, directory):
        error = httpx.ReadTimeout("timed out")

        with patch.object(httpx.AsyncClient, "get", AsyncMock(side_effect=error)):
            with pytest.raises(ServiceUnavailableError):
                await directory.get_client_name(3)


class TestHttpClientDirectoryPayloads:
    """Test malformed bodies and ownership of an injected HTTP client"""

    @staticmethod
    def directory_returning(response: httpx.Response) -> HttpClientDirectory:
        transport = httpx.MockTransport(lambda request: response)
        return HttpClientDirectory("http://clients:8080", client=httpx.AsyncClient(transport=transport))

    @pytest.mark.asyncio
    async def test_body_without_name(self):
        directory = self.directory_returning(httpx.Response(200, json={"id": 1}))

        with pytest.raises(ServiceUnavailableError, match="invalid payload") as exc_info:
            await directory.get_client_name(1)

        assert exc_info.value.status_code == 503
        assert isinstance(exc_info.value.__cause__, KeyError)

    @pytest.mark.asyncio
    async def test_body_is_not_json(self):
        directory = self.directory_returning(httpx.Response(200, text="<html>"))

        with pytest.raises(ServiceUnavailableError, match="invalid payload"):
            await directory.get_client_name(1)

    @pytest.mark.asyncio
    async def test_body_is_not_an_object(self):
        directory = self.directory_returning(httpx.Response(200, json=["Jose Lema"]))

        with pytest.raises(ServiceUnavailableError):
            await directory.get_client_name(1)

    @pytest.mark.asyncio
    async def test_injected_client_is_left_open(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"name": "Jose Lema"}))
        http_client = httpx.AsyncClient(transport=transport)
        directory = HttpClientDirectory("http://clients:8080", client=http_client)

        await directory.close()

        assert http_client.is_closed is False
        assert await directory.get_client_name(1) == "Jose Lema"
        await http_client.aclose()

    @pytest.mark.asyncio
    async def test_own_client_is_closed(self):
        directory = HttpClientDirectory("http://clients:8080")

        await directory.close()

        assert directory._client.is_closed is True
