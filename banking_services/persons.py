"""
Person Management Module

Stores the identity records that back every client: name, gender, age,
identification number, address and phone.
"""

from dataclasses import dataclass, asdict
from typing import Dict, List, Optional, Any
import logging

from .async_storage import AsyncStorageInterface
from .exceptions import NotFoundError

logger = logging.getLogger("banking.persons")


@dataclass
class Person:
    """Identity record of an account holder"""
    name: str
    gender: Optional[str] = None
    age: Optional[int] = None
    identification: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    person_id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Person':
        return cls(**data)


class PersonStore:
    """Persistence of Person records"""

    table_name = "persons"

    def __init__(self, storage: AsyncStorageInterface):
        self.storage = storage

    async def save(self, person: Person) -> Person:
        """Insert (allocating an id) or replace a person"""
        if person.person_id is None:
            person.person_id = await self.storage.next_id(self.table_name)
        await self.storage.save(self.table_name, person.person_id, person.to_dict())
        return person

    async def find_by_id(self, person_id: int) -> Optional[Person]:
        data = await self.storage.load(self.table_name, person_id)
        if data:
            return Person.from_dict(data)
        return None

    async def find_all(self) -> List[Person]:
        return [Person.from_dict(data) for data in await self.storage.load_all(self.table_name)]

    async def delete_by_id(self, person_id: int) -> bool:
        return await self.storage.delete(self.table_name, person_id)


class PersonService:
    """CRUD operations over persons"""

    def __init__(self, store: PersonStore):
        self.store = store

    async def create_person(self, person: Person) -> Person:
        person.person_id = None
        saved = await self.store.save(person)
        logger.info(f"Created person {saved.person_id}")
        return saved

    async def get_person(self, person_id: int) -> Person:
        person = await self.store.find_by_id(person_id)
        if person is None:
            raise NotFoundError(f"Person not found with id: {person_id}")
        return person

    async def find_person(self, person_id: int) -> Optional[Person]:
        """Like get_person, but None when the person does not exist"""
        return await self.store.find_by_id(person_id)

    async def get_persons(self) -> List[Person]:
        return await self.store.find_all()

    async def update_person(self, person_id: int, person: Person) -> Person:
        """Overwrite every personal field of an existing person"""
        existing = await self.get_person(person_id)
        existing.name = person.name
        existing.gender = person.gender
        existing.age = person.age
        existing.identification = person.identification
        existing.address = person.address
        existing.phone = person.phone
        return await self.store.save(existing)

    async def delete_person(self, person_id: int) -> None:
        """Delete a person; clients that reference it are left untouched"""
        await self.store.delete_by_id(person_id)
