"""
In-memory store backend.

Used for development (STORE_BACKEND=memory) and throughout the test suite.
Values are deep-copied on the way in and out so callers can never mutate
stored state without writing it back, the same contract a remote store
gives.
"""

import copy
import logging
from typing import Any, Dict, List, Optional

from tutor_admin.store.base import DocumentStore, LiveStore, StoreClient


logger = logging.getLogger("tutor_admin.store.memory")


class InMemoryDocumentStore(DocumentStore):
    """Dict-of-dicts document store: collection -> id -> document."""

    def __init__(self):
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {}

    async def get_document(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        doc = self._collections.get(collection, {}).get(doc_id)
        return copy.deepcopy(doc) if doc is not None else None

    async def set_document(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        self._collections.setdefault(collection, {})[doc_id] = copy.deepcopy(data)

    async def delete_document(self, collection: str, doc_id: str) -> None:
        self._collections.get(collection, {}).pop(doc_id, None)

    async def query_documents(
        self,
        collection: str,
        order_by: Optional[str] = None,
        limit: Optional[int] = None,
        descending: bool = False,
    ) -> List[Dict[str, Any]]:
        docs = list(self._collections.get(collection, {}).values())

        if order_by:
            present = [d for d in docs if d.get(order_by) is not None]
            missing = [d for d in docs if d.get(order_by) is None]
            present.sort(key=lambda d: str(d[order_by]), reverse=descending)
            docs = present + missing

        if limit is not None:
            docs = docs[:limit]

        return copy.deepcopy(docs)


class InMemoryLiveStore(LiveStore):
    """Flat path -> value map standing in for the live tree."""

    def __init__(self):
        self._nodes: Dict[str, Any] = {}

    async def get_value(self, path: str) -> Optional[Any]:
        value = self._nodes.get(path)
        return copy.deepcopy(value) if value is not None else None

    async def set_value(self, path: str, value: Any) -> None:
        self._nodes[path] = copy.deepcopy(value)

    async def update_value(self, path: str, fields: Dict[str, Any]) -> None:
        current = self._nodes.get(path)
        merged = dict(current) if isinstance(current, dict) else {}
        merged.update(copy.deepcopy(fields))
        self._nodes[path] = merged

    async def remove_value(self, path: str) -> None:
        self._nodes.pop(path, None)


def create_memory_store() -> StoreClient:
    logger.info("Using in-memory store backend")
    return StoreClient(documents=InMemoryDocumentStore(), live=InMemoryLiveStore())
