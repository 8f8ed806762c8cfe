"""
In-memory stand-ins for the Motor collection and the database manager.

Only the query language the services actually use is understood:

- equality filters on top-level keys and on `array.field` (matches any element)
- `$set`, `$inc`, `$push` and `$setOnInsert`, including the positional `array.$.field`
  form resolved against the first element matched by the filter
- `find().sort(key, direction).limit(n).to_list(length)`
- unique indexes (raise `DuplicateKeyError`)

Documents are deep-copied in and out so tests cannot mutate stored state by accident.
"""

import copy
from types import SimpleNamespace
from typing import Any, Dict, List, Optional, Tuple

from bson import ObjectId
from pymongo.errors import DuplicateKeyError


def _matches(document: Dict[str, Any], query: Dict[str, Any]) -> bool:
    for key, expected in query.items():
        if "." in key:
            array_key, field = key.split(".", 1)
            items = document.get(array_key) or []
            if not any(isinstance(item, dict) and item.get(field) == expected for item in items):
                return False
        elif document.get(key) != expected:
            return False
    return True


def _positional_index(document: Dict[str, Any], query: Dict[str, Any], array_key: str) -> int:
    for key, expected in query.items():
        if key.startswith(f"{array_key}."):
            field = key.split(".", 1)[1]
            for index, item in enumerate(document.get(array_key) or []):
                if item.get(field) == expected:
                    return index
    raise ValueError(f"No positional match for {array_key} in {query}")


def _resolve(document: Dict[str, Any], query: Dict[str, Any], path: str) -> Tuple[Dict[str, Any], str]:
    """Container dict and final key for `path`, resolving `array.$.field`."""
    parts = path.split(".")
    if len(parts) == 1:
        return document, path
    if len(parts) == 3 and parts[1] == "$":
        index = _positional_index(document, query, parts[0])
        return document[parts[0]][index], parts[2]
    raise NotImplementedError(f"Unsupported update path: {path}")


class FakeCursor:
    def __init__(self, documents: List[Dict[str, Any]]):
        self._documents = documents
        self._limit: Optional[int] = None

    def sort(self, key: str, direction: int = 1) -> "FakeCursor":
        self._documents.sort(key=lambda doc: doc.get(key, 0), reverse=direction < 0)
        return self

    def limit(self, count: int) -> "FakeCursor":
        self._limit = count
        return self

    async def to_list(self, length: Optional[int] = None) -> List[Dict[str, Any]]:
        documents = self._documents
        if self._limit:
            documents = documents[: self._limit]
        if length is not None:
            documents = documents[:length]
        return copy.deepcopy(documents)


class FakeCollection:
    def __init__(self, name: str):
        self.name = name
        self.documents: List[Dict[str, Any]] = []
        self.unique_fields: List[str] = []
        self.indexes: List[Tuple[Any, Dict[str, Any]]] = []

    async def create_index(self, keys, **kwargs):
        self.indexes.append((keys, kwargs))
        if kwargs.get("unique"):
            self.unique_fields.append(keys[0][0])
        return "_".join(str(part) for key in keys for part in key)

    def _check_unique(self, document: Dict[str, Any]) -> None:
        for field in self.unique_fields:
            if any(other.get(field) == document.get(field) and other is not document for other in self.documents):
                raise DuplicateKeyError(f"E11000 duplicate key error collection: {self.name} index: {field}_1")

    async def insert_one(self, document: Dict[str, Any]):
        stored = copy.deepcopy(document)
        stored.setdefault("_id", ObjectId())
        self._check_unique(stored)
        self.documents.append(stored)
        return SimpleNamespace(acknowledged=True, inserted_id=stored["_id"])

    def find(self, query: Optional[Dict[str, Any]] = None) -> FakeCursor:
        return FakeCursor([doc for doc in self.documents if _matches(doc, query or {})])

    async def find_one(self, query: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        for document in self.documents:
            if _matches(document, query):
                return copy.deepcopy(document)
        return None

    async def count_documents(self, query: Dict[str, Any]) -> int:
        return sum(1 for doc in self.documents if _matches(doc, query))

    async def update_one(self, query: Dict[str, Any], update: Dict[str, Any], upsert: bool = False):
        target = next((doc for doc in self.documents if _matches(doc, query)), None)
        upserted_id = None

        if target is None:
            if not upsert:
                return SimpleNamespace(matched_count=0, modified_count=0, upserted_id=None)
            target = {key: value for key, value in query.items() if "." not in key}
            target["_id"] = ObjectId()
            target.update(copy.deepcopy(update.get("$setOnInsert", {})))
            self._check_unique(target)
            self.documents.append(target)
            upserted_id = target["_id"]
            matched = 0
        else:
            matched = 1

        before = copy.deepcopy(target)
        for path, value in update.get("$set", {}).items():
            container, key = _resolve(target, query, path)
            container[key] = copy.deepcopy(value)
        for path, amount in update.get("$inc", {}).items():
            container, key = _resolve(target, query, path)
            container[key] = container.get(key, 0) + amount
        for path, value in update.get("$push", {}).items():
            container, key = _resolve(target, query, path)
            container.setdefault(key, []).append(copy.deepcopy(value))

        modified = 1 if matched and target != before else 0
        return SimpleNamespace(matched_count=matched, modified_count=modified, upserted_id=upserted_id)

    async def delete_one(self, query: Dict[str, Any]):
        for index, document in enumerate(self.documents):
            if _matches(document, query):
                del self.documents[index]
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)


class FakeDatabaseManager:
    """Quacks like `DatabaseManager` for services and routes."""

    def __init__(self, healthy: bool = True):
        self.collections: Dict[str, FakeCollection] = {}
        self.healthy = healthy

    def get_collection(self, collection_name: str) -> FakeCollection:
        if collection_name not in self.collections:
            self.collections[collection_name] = FakeCollection(collection_name)
        return self.collections[collection_name]

    async def health_check(self) -> bool:
        return self.healthy

    async def create_indexes(self) -> None:
        await self.get_collection("contributors").create_index([("name", 1)], unique=True)
