"""
Client Management Module

A client is the account-holder side of a person: it references exactly one
Person, carries an opaque password and an active flag. Clients and their
persons are created together and deleted together.
"""

from dataclasses import dataclass, asdict
from typing import Dict, List, Optional, Any
import asyncio
import logging

from .async_storage import AsyncStorageInterface
from .exceptions import NotFoundError
from .logging_config import log_action
from .persons import Person, PersonService

logger = logging.getLogger("banking.clients")


@dataclass
class Client:
    """Account holder linked 1:1 to a Person"""
    person_id: int
    password: str
    status: bool = True
    client_id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Client':
        return cls(**data)


@dataclass
class PersonClient:
    """Combined person and client fields used to create or update a client"""
    name: str
    password: str
    gender: Optional[str] = None
    age: Optional[int] = None
    identification: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    status: bool = True

    def to_person(self) -> Person:
        return Person(
            name=self.name,
            gender=self.gender,
            age=self.age,
            identification=self.identification,
            address=self.address,
            phone=self.phone
        )


@dataclass
class PersonClientView:
    """Client joined with its person"""
    client_id: int
    person_id: int
    name: str
    address: Optional[str]
    phone: Optional[str]
    password: str
    status: bool

    @classmethod
    def build(cls, client: Client, person: Person) -> 'PersonClientView':
        return cls(
            client_id=client.client_id,
            person_id=person.person_id,
            name=person.name,
            address=person.address,
            phone=person.phone,
            password=client.password,
            status=client.status
        )


class ClientStore:
    """Persistence of Client records"""

    table_name = "clients"

    def __init__(self, storage: AsyncStorageInterface):
        self.storage = storage

    async def save(self, client: Client) -> Client:
        if client.client_id is None:
            client.client_id = await self.storage.next_id(self.table_name)
        await self.storage.save(self.table_name, client.client_id, client.to_dict())
        return client

    async def find_by_id(self, client_id: int) -> Optional[Client]:
        data = await self.storage.load(self.table_name, client_id)
        if data:
            return Client.from_dict(data)
        return None

    async def find_by_person_id(self, person_id: int) -> Optional[Client]:
        matches = await self.storage.find(self.table_name, {"person_id": person_id})
        if matches:
            return Client.from_dict(matches[0])
        return None

    async def find_all(self) -> List[Client]:
        return [Client.from_dict(data) for data in await self.storage.load_all(self.table_name)]

    async def delete_by_id(self, client_id: int) -> bool:
        return await self.storage.delete(self.table_name, client_id)


class ClientService:
    """
    Manages clients together with the persons they are built on
    """

    def __init__(self, store: ClientStore, person_service: PersonService):
        self.store = store
        self.person_service = person_service

    async def create_client(self, person_client: PersonClient) -> PersonClientView:
        """
        Create the person and then the client that references it.

        New clients are always active regardless of the requested status.
        """
        person = await self.person_service.create_person(person_client.to_person())
        client = await self.store.save(Client(
            person_id=person.person_id,
            password=person_client.password,
            status=True
        ))

        log_action(
            logger, "info", f"Created client {client.client_id}",
            action="create", resource="client", resource_id=client.client_id,
            extra={"person_id": person.person_id}
        )
        return PersonClientView.build(client, person)

    async def get_client(self, client_id: int) -> PersonClientView:
        client = await self._get(client_id)
        person = await self.person_service.get_person(client.person_id)
        return PersonClientView.build(client, person)

    async def get_clients(self) -> List[PersonClientView]:
        """All clients joined with their persons, skipping orphaned clients"""
        clients = await self.store.find_all()
        persons = await asyncio.gather(
            *(self.person_service.find_person(c.person_id) for c in clients)
        )
        return [
            PersonClientView.build(client, person)
            for client, person in zip(clients, persons)
            if person is not None
        ]

    async def update_client(self, client_id: int, person_client: PersonClient) -> PersonClientView:
        """
        Update every person field plus the client's password and status.

        ``client_id`` is the client's own id; the person is reached through
        the client's ``person_id``.
        """
        client = await self._get(client_id)
        person = await self.person_service.update_person(
            client.person_id, person_client.to_person()
        )

        client.password = person_client.password
        client.status = person_client.status
        client = await self.store.save(client)
        return PersonClientView.build(client, person)

    async def delete_client(self, client_id: int) -> None:
        """Delete a client and the person linked to it"""
        client = await self.store.find_by_id(client_id)
        if client is None:
            return

        await self.store.delete_by_id(client_id)
        await self.person_service.delete_person(client.person_id)

        log_action(
            logger, "info", f"Deleted client {client_id} and person {client.person_id}",
            action="delete", resource="client", resource_id=client_id
        )

    async def _get(self, client_id: int) -> Client:
        client = await self.store.find_by_id(client_id)
        if client is None:
            raise NotFoundError(f"Client not found with id: {client_id}")
        return client
