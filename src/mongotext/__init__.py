"""
MongoDB database and collection handles that take their filter, update and
document arguments as JSON text.

Usage:
    from mongotext import ClientFactory, use

    await ClientFactory.initialize("mongodb://localhost:27017")
    people = use("test").collection("people")
    await people.insert_one('{"name": "Ann", "age": 30}')
    ann = await people.find_one('{"name": "Ann"}')
"""

__version__ = "0.1"

from .client import ClientFactory, MongoTextClient, use
from .collection import Collection
from .config import ClientSettings, Config
from .database import Database
from .exceptions import (
    ConnectError,
    DecodeError,
    DuplicateKeyError,
    MongoTextError,
    NilCollectionError,
    NilIdentifierError,
    NoMatch,
    NotConnectedError,
    ServerError,
)

__all__ = [
    "ClientFactory",
    "MongoTextClient",
    "use",
    "Database",
    "Collection",
    "Config",
    "ClientSettings",
    "MongoTextError",
    "DecodeError",
    "NilCollectionError",
    "NilIdentifierError",
    "NotConnectedError",
    "NoMatch",
    "ServerError",
    "DuplicateKeyError",
    "ConnectError",
]
