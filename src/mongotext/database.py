"""
Database handle: collection handles, administrative commands and the collection catalog.
"""

from typing import Any, Dict, List

from motor.motor_asyncio import AsyncIOMotorDatabase

from .codec import Text, decode_command, decode_document
from .collection import Collection
from .exceptions import server_errors


class Database:
    """Handle on one named database"""

    def __init__(self, database: AsyncIOMotorDatabase):
        self._db = database

    def __repr__(self) -> str:
        return f"Database({self.name!r})"

    @property
    def name(self) -> str:
        return self._db.name

    def get_connection(self) -> AsyncIOMotorDatabase:
        """Get the motor database"""
        return self._db

    def collection(self, name: str, **options: Any) -> Collection:
        """Return a new handle on the named collection. Handles are not cached."""
        return Collection(self._db.get_collection(name, **options))

    async def run_command(self, command: Text, **options: Any) -> Dict[str, Any]:
        """
        Run an administrative command and return the reply document.

        The command text is decoded with its key order kept, since the first
        key names the command (e.g. '{"count": "people", "query": {}}').
        This does not use the database's read preference; pass read_preference=
        to choose one.
        """
        cmd = decode_command(command)
        with server_errors("run_command"):
            return await self._db.command(cmd, **options)

    async def drop(self, **options: Any) -> None:
        """Drop the whole database. There is no confirmation step."""
        with server_errors("drop_database"):
            await self._db.client.drop_database(self._db.name, **options)

    async def list_collections(self, filter: Text = "{}", **options: Any) -> List[Dict[str, Any]]:
        """Return the catalog entries of collections matching the filter"""
        f = decode_document(filter)
        with server_errors("list_collections"):
            cursor = await self._db.list_collections(filter=f, **options)
            return await cursor.to_list(length=None)

    async def list_collection_names(self, filter: Text = "{}", **options: Any) -> List[str]:
        f = decode_document(filter)
        with server_errors("list_collection_names"):
            return await self._db.list_collection_names(filter=f, **options)
