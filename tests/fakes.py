"""In-memory stand-ins for the motor client, database and collection objects."""

import copy
from typing import Any, Dict, List, Optional

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.common import validate_ok_for_replace, validate_ok_for_update
from pymongo.errors import BulkWriteError, DuplicateKeyError, OperationFailure
from pymongo.results import DeleteResult, InsertManyResult, InsertOneResult, UpdateResult

_MISSING = object()

COMPARISONS = {
    "$eq": lambda value, arg: value == arg,
    "$ne": lambda value, arg: value != arg,
    "$gt": lambda value, arg: value is not _MISSING and value is not None and value > arg,
    "$gte": lambda value, arg: value is not _MISSING and value is not None and value >= arg,
    "$lt": lambda value, arg: value is not _MISSING and value is not None and value < arg,
    "$lte": lambda value, arg: value is not _MISSING and value is not None and value <= arg,
    "$in": lambda value, arg: value in arg,
    "$exists": lambda value, arg: (value is not _MISSING) == bool(arg),
}


def matches(doc: Dict[str, Any], filter: Dict[str, Any]) -> bool:
    for key, cond in filter.items():
        value = doc.get(key, _MISSING)
        if isinstance(cond, dict) and cond and all(k.startswith("$") for k in cond):
            for op, arg in cond.items():
                if op not in COMPARISONS:
                    raise OperationFailure(f"unknown operator: {op}", code=2)
                if not COMPARISONS[op](value, arg):
                    return False
        elif value is _MISSING or value != cond:
            return False
    return True


def apply_update(doc: Dict[str, Any], update: Dict[str, Any]) -> bool:
    before = copy.deepcopy(doc)
    for op, fields in update.items():
        if op == "$set":
            doc.update(fields)
        elif op == "$inc":
            for key, amount in fields.items():
                doc[key] = doc.get(key, 0) + amount
        elif op == "$unset":
            for key in fields:
                doc.pop(key, None)
        else:
            raise OperationFailure(f"Unknown modifier: {op}", code=9)
    return doc != before


class FakeCursor:
    def __init__(self, docs: List[Dict[str, Any]]):
        self.docs = docs

    async def to_list(self, length: Optional[int] = None) -> List[Dict[str, Any]]:
        return list(self.docs) if length is None else list(self.docs[:length])


class FakeCollection:
    """Records every driver call in ``calls`` and keeps documents in ``docs``."""

    def __init__(self, database: "FakeDatabase", name: str):
        self.database = database
        self.name = name
        self.full_name = f"{database.name}.{name}"
        self.docs: List[Dict[str, Any]] = []
        self.calls: List[tuple] = []
        self.fail_with: Optional[BaseException] = None

    def _record(self, operation: str, *args: Any, **kwargs: Any) -> None:
        self.calls.append((operation, args, kwargs))
        if self.fail_with is not None:
            raise self.fail_with

    def _matching(self, filter: Dict[str, Any]) -> List[Dict[str, Any]]:
        return [doc for doc in self.docs if matches(doc, filter)]

    async def count_documents(self, filter, **kwargs):
        self._record("count_documents", filter, **kwargs)
        return len(self._matching(filter))

    async def estimated_document_count(self, **kwargs):
        self._record("estimated_document_count", **kwargs)
        return len(self.docs)

    def find(self, filter, **kwargs):
        self._record("find", filter, **kwargs)
        found = [copy.deepcopy(doc) for doc in self._matching(filter)]
        if "limit" in kwargs and kwargs["limit"]:
            found = found[:kwargs["limit"]]
        return FakeCursor(found)

    async def find_one(self, filter, **kwargs):
        self._record("find_one", filter, **kwargs)
        found = self._matching(filter)
        return copy.deepcopy(found[0]) if found else None

    async def distinct(self, key, filter=None, **kwargs):
        self._record("distinct", key, filter, **kwargs)
        values: List[Any] = []
        for doc in self._matching(filter or {}):
            if key in doc and doc[key] not in values:
                values.append(doc[key])
        return values

    async def find_one_and_delete(self, filter, **kwargs):
        self._record("find_one_and_delete", filter, **kwargs)
        found = self._matching(filter)
        if not found:
            return None
        self.docs.remove(found[0])
        return found[0]

    async def find_one_and_replace(self, filter, replacement, return_document=ReturnDocument.BEFORE, **kwargs):
        validate_ok_for_replace(replacement)
        self._record("find_one_and_replace", filter, replacement, **kwargs)
        found = self._matching(filter)
        if not found:
            return None
        before = copy.deepcopy(found[0])
        found[0].clear()
        found[0].update({"_id": before["_id"], **replacement})
        return before if return_document == ReturnDocument.BEFORE else copy.deepcopy(found[0])

    async def find_one_and_update(self, filter, update, return_document=ReturnDocument.BEFORE, **kwargs):
        validate_ok_for_update(update)
        self._record("find_one_and_update", filter, update, **kwargs)
        found = self._matching(filter)
        if not found:
            return None
        before = copy.deepcopy(found[0])
        apply_update(found[0], update)
        return before if return_document == ReturnDocument.BEFORE else copy.deepcopy(found[0])

    def _insert(self, document):
        document.setdefault("_id", ObjectId())
        if any(doc["_id"] == document["_id"] for doc in self.docs):
            raise DuplicateKeyError(
                f"E11000 duplicate key error collection: {self.full_name} index: _id_",
                code=11000,
            )
        self.docs.append(copy.deepcopy(document))
        return document["_id"]

    async def insert_one(self, document, **kwargs):
        self._record("insert_one", document, **kwargs)
        return InsertOneResult(self._insert(document), True)

    async def insert_many(self, documents, **kwargs):
        """Ordered insert: stops at the first duplicate, keeping what was written before it."""
        self._record("insert_many", documents, **kwargs)
        inserted = []
        for index, doc in enumerate(documents):
            try:
                inserted.append(self._insert(doc))
            except DuplicateKeyError as e:
                raise BulkWriteError({
                    "writeErrors": [{"index": index, "code": e.code, "errmsg": str(e), "op": doc}],
                    "writeConcernErrors": [],
                    "nInserted": len(inserted),
                    "nUpserted": 0,
                    "nMatched": 0,
                    "nModified": 0,
                    "nRemoved": 0,
                    "upserted": [],
                }) from e
        return InsertManyResult(inserted, True)

    async def _update(self, operation, filter, update, multi, **kwargs):
        self._record(operation, filter, update, **kwargs)
        found = self._matching(filter)
        if not multi:
            found = found[:1]
        modified = sum(1 for doc in found if apply_update(doc, update))
        return UpdateResult({"n": len(found), "nModified": modified}, True)

    async def update_one(self, filter, update, **kwargs):
        validate_ok_for_update(update)
        return await self._update("update_one", filter, update, False, **kwargs)

    async def update_many(self, filter, update, **kwargs):
        validate_ok_for_update(update)
        return await self._update("update_many", filter, update, True, **kwargs)

    async def replace_one(self, filter, replacement, **kwargs):
        validate_ok_for_replace(replacement)
        self._record("replace_one", filter, replacement, **kwargs)
        found = self._matching(filter)[:1]
        modified = 0
        for doc in found:
            new_doc = {"_id": doc["_id"], **replacement}
            if new_doc != doc:
                modified = 1
            doc.clear()
            doc.update(new_doc)
        return UpdateResult({"n": len(found), "nModified": modified}, True)

    async def delete_one(self, filter, **kwargs):
        self._record("delete_one", filter, **kwargs)
        found = self._matching(filter)[:1]
        for doc in found:
            self.docs.remove(doc)
        return DeleteResult({"n": len(found)}, True)

    async def delete_many(self, filter, **kwargs):
        self._record("delete_many", filter, **kwargs)
        found = self._matching(filter)
        for doc in found:
            self.docs.remove(doc)
        return DeleteResult({"n": len(found)}, True)

    async def drop(self, **kwargs):
        self._record("drop", **kwargs)
        self.docs.clear()
        self.database.collections.pop(self.name, None)


class FakeDatabase:
    def __init__(self, name: str = "test", client: Optional["FakeMotorClient"] = None):
        self.name = name
        self.client = client or FakeMotorClient()
        self.collections: Dict[str, FakeCollection] = {}
        self.commands: List[tuple] = []
        self.options: Dict[str, Any] = {}

    def get_collection(self, name: str, **options: Any) -> FakeCollection:
        if name not in self.collections:
            self.collections[name] = FakeCollection(self, name)
        self.collections[name].options = options
        return self.collections[name]

    async def command(self, command, **kwargs):
        self.commands.append((command, kwargs))
        name = next(iter(command))
        if name == "ping":
            return {"ok": 1.0}
        if name == "count":
            coll = self.collections.get(command[name])
            query = command.get("query", {})
            return {"n": len(coll._matching(query)) if coll else 0, "ok": 1.0}
        raise OperationFailure(f"no such command: '{name}'", code=59)

    async def list_collections(self, filter=None, **kwargs):
        self.commands.append(({"listCollections": 1, "filter": filter}, kwargs))
        infos = [{"name": name, "type": "collection"} for name in self.collections]
        return FakeCursor([info for info in infos if matches(info, filter or {})])

    async def list_collection_names(self, filter=None, **kwargs):
        cursor = await self.list_collections(filter, **kwargs)
        return [info["name"] for info in await cursor.to_list()]


class FakeAdmin:
    def __init__(self, client: "FakeMotorClient"):
        self.client = client

    async def command(self, command, **kwargs):
        self.client.pings.append((command, kwargs))
        if self.client.ping_error is not None:
            raise self.client.ping_error
        return {"ok": 1.0}


class FakeMotorClient:
    """Replaces AsyncIOMotorClient; ``ping_error`` makes the liveness check fail."""

    ping_error: Optional[BaseException] = None
    instances: List["FakeMotorClient"] = []

    def __init__(self, uri: str = "mongodb://fake", **options: Any):
        self.uri = uri
        self.options = options
        self.closed = False
        self.pings: List[tuple] = []
        self.dropped: List[str] = []
        self.databases: Dict[str, FakeDatabase] = {}
        self.admin = FakeAdmin(self)
        FakeMotorClient.instances.append(self)

    def get_database(self, name: str, **options: Any) -> FakeDatabase:
        if name not in self.databases:
            self.databases[name] = FakeDatabase(name, self)
        self.databases[name].options = options
        return self.databases[name]

    async def drop_database(self, name, **kwargs):
        self.dropped.append(name)
        self.databases.pop(name, None)

    def close(self) -> None:
        self.closed = True
