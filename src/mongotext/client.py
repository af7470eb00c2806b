"""
Connection bootstrap.

MongoTextClient owns one motor client. ClientFactory keeps a process-wide
default client so the module-level use() can hand out database handles.

Usage:
    # Explicit client
    async with MongoTextClient("mongodb://localhost:27017") as client:
        people = client.use("test").collection("people")
        doc = await people.find_one('{"name": "Ann"}')

    # Process-wide default
    await ClientFactory.initialize()
    doc = await use("test").collection("people").find_one('{"name": "Ann"}')
"""

import asyncio
import logging
from typing import Any, Optional

from motor.motor_asyncio import AsyncIOMotorClient
from pymongo import ReadPreference
from pymongo.errors import PyMongoError

from .config import Config
from .database import Database
from .exceptions import ConnectError, NotConnectedError

logger = logging.getLogger(__name__)


class MongoTextClient:
    """Owned connection to a MongoDB deployment"""

    def __init__(self, uri: Optional[str] = None, timeout: Optional[float] = None, **client_options: Any):
        self.uri = uri or Config.mongo_uri()
        self.timeout = timeout if timeout is not None else Config.connect_timeout()
        self.client_options = client_options
        self._client: Optional[AsyncIOMotorClient] = None

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    async def connect(self) -> "MongoTextClient":
        """
        Connect and check that the primary answers ping.

        The whole step is bounded by ``timeout`` seconds. On failure the
        half-open driver client is closed and ConnectError is raised; the
        caller decides whether that is fatal.
        """
        if self._client is not None:
            logger.info("MongoTextClient: Already connected")
            return self

        if self.timeout <= 0:
            raise ConnectError(message=f"Connect timeout must be greater than 0, got {self.timeout}")

        timeout_ms = int(self.timeout * 1000)
        options = {
            'serverSelectionTimeoutMS': timeout_ms,
            'connectTimeoutMS': timeout_ms,
            **self.client_options,
        }

        client: Optional[AsyncIOMotorClient] = None
        try:
            client = AsyncIOMotorClient(self.uri, **options)
            await asyncio.wait_for(
                client.admin.command('ping', read_preference=ReadPreference.PRIMARY),
                timeout=self.timeout,
            )
        except (PyMongoError, ValueError, asyncio.TimeoutError) as e:
            if client is not None:
                client.close()
            logger.error(f"MongoTextClient: Failed to connect to {self.uri}: {e}")
            raise ConnectError(e, f"Failed to connect to MongoDB at {self.uri}: {e}") from e

        self._client = client
        logger.info(f"MongoTextClient: Connected to {self.uri}")
        return self

    def close(self) -> None:
        """Close the driver client"""
        if self._client is not None:
            self._client.close()
            self._client = None
            logger.info("MongoTextClient: Connection closed")

    def get_connection(self) -> AsyncIOMotorClient:
        """Get the motor client"""
        if self._client is None:
            raise NotConnectedError()
        return self._client

    def use(self, name: Optional[str] = None, **options: Any) -> Database:
        """
        Return a new handle on the named database (db_name from the config when omitted).

        Options (codec_options, read_preference, write_concern, read_concern)
        are passed to the driver unchanged. Handles are not cached.
        """
        return Database(self.get_connection().get_database(name or Config.db_name(), **options))

    async def __aenter__(self) -> "MongoTextClient":
        return await self.connect()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()


class ClientFactory:
    """
    Registry for the process-wide default client.

    Usage:
        await ClientFactory.initialize("mongodb://localhost:27017")
        db = use("test")
        ...
        ClientFactory.close()
    """

    _instance: Optional[MongoTextClient] = None

    @classmethod
    async def initialize(cls, uri: Optional[str] = None, timeout: Optional[float] = None) -> MongoTextClient:
        """Connect the default client. Already initialized returns the existing client."""
        if cls._instance is not None:
            logger.info("ClientFactory: Already initialized")
            return cls._instance

        client = MongoTextClient(uri, timeout)
        await client.connect()
        cls._instance = client
        return client

    @classmethod
    def get_instance(cls) -> MongoTextClient:
        """Get the default client"""
        if cls._instance is None:
            raise NotConnectedError(message="Client not initialized. Call ClientFactory.initialize() first.")
        return cls._instance

    @classmethod
    def set_instance(cls, instance: Optional[MongoTextClient]) -> None:
        """Set the default client (mainly for testing)"""
        cls._instance = instance

    @classmethod
    def close(cls) -> None:
        """Close the default client and forget it"""
        if cls._instance is not None:
            cls._instance.close()
            cls._instance = None

    @classmethod
    def is_initialized(cls) -> bool:
        return cls._instance is not None


def use(name: Optional[str] = None, **options: Any) -> Database:
    """Return a new handle on the named database of the default client"""
    return ClientFactory.get_instance().use(name, **options)
