"""
Collection handle.
Every operation takes its filter/update/replacement/document arguments as JSON
text, decodes them, and forwards them to the motor collection. Keyword options
(session, projection, sort, upsert, collation, hint, ...) go to the driver unchanged.
"""

from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo.results import DeleteResult, InsertManyResult, InsertOneResult, UpdateResult

from .codec import Text, decode_document, decode_documents
from .exceptions import NilCollectionError, NilIdentifierError, NoMatch, server_errors


class Collection:
    """Handle on one named collection"""

    def __init__(self, collection: Optional[AsyncIOMotorCollection], name: Optional[str] = None):
        self._coll = collection
        self._name = collection.name if collection is not None else (name or "")

    def __repr__(self) -> str:
        return f"Collection({self.full_name!r})"

    @property
    def name(self) -> str:
        return self._name

    @property
    def full_name(self) -> str:
        if self._coll is None:
            return self._name
        return self._coll.full_name

    def _bound(self) -> AsyncIOMotorCollection:
        if self._coll is None:
            raise NilCollectionError()
        return self._coll

    # ============== COUNTS ==============

    async def count_documents(self, filter: Text = "{}", **options: Any) -> int:
        coll = self._bound()
        f = decode_document(filter)
        with server_errors("count_documents"):
            return await coll.count_documents(f, **options)

    async def estimated_document_count(self, **options: Any) -> int:
        """Count from collection metadata; no filter is applied"""
        coll = self._bound()
        with server_errors("estimated_document_count"):
            return await coll.estimated_document_count(**options)

    # ============== READS ==============

    async def find(self, filter: Text = "{}", **options: Any) -> List[Dict[str, Any]]:
        """
        Run a find and return every matching document.

        The cursor is drained before returning; an empty list means nothing matched.
        """
        coll = self._bound()
        f = decode_document(filter)
        with server_errors("find"):
            cursor = coll.find(f, **options)
            return await cursor.to_list(length=None)

    async def find_one(self, filter: Text = "{}", **options: Any) -> Dict[str, Any]:
        """
        Return one document matching the filter.

        Raises NoMatch when nothing matches. If several documents match,
        the driver picks one (use sort= to choose).
        """
        coll = self._bound()
        f = decode_document(filter)
        with server_errors("find_one"):
            doc = await coll.find_one(f, **options)
        if doc is None:
            raise NoMatch()
        return doc

    async def distinct(self, field_name: str, filter: Text = "{}", **options: Any) -> List[Any]:
        coll = self._bound()
        f = decode_document(filter)
        with server_errors("distinct"):
            return await coll.distinct(field_name, f, **options)

    # ============== FIND AND MODIFY ==============
    # All three return the document as it was before the change unless
    # return_document=ReturnDocument.AFTER is passed through. NoMatch is
    # raised whenever the driver reports no document, including an upsert
    # that inserted with the default pre-image.

    async def find_one_and_delete(self, filter: Text, **options: Any) -> Dict[str, Any]:
        coll = self._bound()
        f = decode_document(filter)
        with server_errors("find_one_and_delete"):
            doc = await coll.find_one_and_delete(f, **options)
        if doc is None:
            raise NoMatch()
        return doc

    async def find_one_and_replace(self, filter: Text, replacement: Text, **options: Any) -> Dict[str, Any]:
        """The replacement must not contain update operators; the driver rejects it otherwise"""
        coll = self._bound()
        f = decode_document(filter)
        r = decode_document(replacement)
        with server_errors("find_one_and_replace"):
            doc = await coll.find_one_and_replace(f, r, **options)
        if doc is None:
            raise NoMatch()
        return doc

    async def find_one_and_update(self, filter: Text, update: Text, **options: Any) -> Dict[str, Any]:
        """The update must be a non-empty document of update operators"""
        coll = self._bound()
        f = decode_document(filter)
        u = decode_document(update)
        with server_errors("find_one_and_update"):
            doc = await coll.find_one_and_update(f, u, **options)
        if doc is None:
            raise NoMatch()
        return doc

    # ============== WRITES ==============

    async def insert_one(self, document: Text, **options: Any) -> InsertOneResult:
        coll = self._bound()
        d = decode_document(document)
        with server_errors("insert_one"):
            return await coll.insert_one(d, **options)

    async def insert_many(self, documents: Text, **options: Any) -> InsertManyResult:
        """
        Insert a JSON array of documents.

        Partial failures are reported by the driver (BulkWriteError, wrapped in
        ServerError); documents written before the failure are not rolled back.
        """
        coll = self._bound()
        docs = decode_documents(documents)
        with server_errors("insert_many"):
            return await coll.insert_many(docs, **options)

    async def update_one(self, filter: Text, update: Text, **options: Any) -> UpdateResult:
        coll = self._bound()
        f = decode_document(filter)
        u = decode_document(update)
        with server_errors("update_one"):
            return await coll.update_one(f, u, **options)

    async def update_many(self, filter: Text, update: Text, **options: Any) -> UpdateResult:
        coll = self._bound()
        f = decode_document(filter)
        u = decode_document(update)
        with server_errors("update_many"):
            return await coll.update_many(f, u, **options)

    async def update_by_id(self, id: Any, update: Text, **options: Any) -> UpdateResult:
        """Same as update_one with the filter {"_id": id}. The id is already typed, not text."""
        if id is None:
            raise NilIdentifierError()
        coll = self._bound()
        u = decode_document(update)
        with server_errors("update_by_id"):
            return await coll.update_one({"_id": id}, u, **options)

    async def replace_one(self, filter: Text, replacement: Text, **options: Any) -> UpdateResult:
        coll = self._bound()
        f = decode_document(filter)
        r = decode_document(replacement)
        with server_errors("replace_one"):
            return await coll.replace_one(f, r, **options)

    async def delete_one(self, filter: Text, **options: Any) -> DeleteResult:
        coll = self._bound()
        f = decode_document(filter)
        with server_errors("delete_one"):
            return await coll.delete_one(f, **options)

    async def delete_many(self, filter: Text, **options: Any) -> DeleteResult:
        coll = self._bound()
        f = decode_document(filter)
        with server_errors("delete_many"):
            return await coll.delete_many(f, **options)

    async def drop(self, **options: Any) -> None:
        """Drop the collection. There is no confirmation step."""
        coll = self._bound()
        with server_errors("drop"):
            await coll.drop(**options)
