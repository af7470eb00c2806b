"""
Exceptions raised by the mongotext handles.
Organized by where they happen: argument decoding, handle checks, and driver/server failures.
"""

from contextlib import contextmanager
from typing import Iterator

from pymongo import errors


class MongoTextError(Exception):
    """Base class for every error raised by mongotext."""

    default_message = "mongotext error"

    def __init__(self, e=None, message=None):
        if message:
            super().__init__(message)
        elif e:
            super().__init__(str(e))
        else:
            super().__init__(self.default_message)
        self.error = e
        self.message = message


# ==================== Argument Exceptions ====================

class DecodeError(MongoTextError):
    """Raised when a textual argument is not a valid JSON document of the expected shape."""

    default_message = "Invalid document text"

    def __init__(self, text=None, e=None, message=None):
        super().__init__(e, message)
        self.text = text


class NilCollectionError(MongoTextError):
    """Raised when an operation is called on a collection handle that was never bound."""

    default_message = "collection is nil"


class NilIdentifierError(MongoTextError):
    """Raised when a document identifier argument is None."""

    default_message = "identifier is nil"


class NotConnectedError(MongoTextError):
    """Raised when a handle is requested from a client that is not connected."""

    default_message = "client is not connected"


# ==================== Result Exceptions ====================

class NoMatch(MongoTextError):
    """Raised when a single-document operation matches no document."""

    default_message = "no documents in result"


# ==================== Server Exceptions ====================

class ServerError(MongoTextError):
    """Raised for any failure reported by the driver or the server."""

    default_message = "Database error"


class DuplicateKeyError(ServerError):
    """Raised when a write violates a unique index."""

    default_message = "Duplicate key violation"


class ConnectError(ServerError):
    """Raised when the client cannot connect or the primary does not answer ping."""

    default_message = "Failed to connect to MongoDB"


DUPLICATE_KEY_CODES = {11000, 11001, 12582}


def _is_duplicate_bulk(e: errors.BulkWriteError) -> bool:
    write_errors = e.details.get('writeErrors', []) if e.details else []
    return bool(write_errors) and all(err.get('code') in DUPLICATE_KEY_CODES for err in write_errors)


@contextmanager
def server_errors(operation: str) -> Iterator[None]:
    """
    Translate driver failures raised inside the block into ServerError.

    ValueError is included because the driver validates update and replacement
    documents (operator keys, empty updates) before sending them.
    """
    try:
        yield
    except errors.DuplicateKeyError as e:
        raise DuplicateKeyError(e, f"{operation}: {e}") from e
    except errors.BulkWriteError as e:
        if _is_duplicate_bulk(e):
            raise DuplicateKeyError(e, f"{operation}: {e}") from e
        raise ServerError(e, f"{operation}: {e}") from e
    except (errors.PyMongoError, ValueError) as e:
        raise ServerError(e, f"{operation}: {e}") from e
