"""
Store Client - abstract interface over the two backing stores.

The action handlers never talk to a database directly. They go through a
StoreClient, which bundles:

- DocumentStore: durable per-entity documents grouped in collections
  (users, ai_interactions)
- LiveStore: the live key/value tree holding frequently rewritten state
  (users/{id}, system_settings)

Design Pattern: Strategy Pattern
================================
Each store is an ABC with get/set/delete/query primitives, implemented once
in memory (tutor_admin.store.memory) and once over SQLAlchemy
(tutor_admin.store.sql). Handlers are written against the ABCs only and do
not depend on any backend transaction feature.

All methods are coroutines: a dispatch call suspends only at these I/O
boundaries. Implementations raise StoreError when the backend fails and
return None (never raise) for a missing document or path.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional


class DocumentStore(ABC):
    """Durable document collections."""

    @abstractmethod
    async def get_document(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """Return the document, or None if it does not exist."""

    @abstractmethod
    async def set_document(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        """Create or fully replace a document."""

    @abstractmethod
    async def delete_document(self, collection: str, doc_id: str) -> None:
        """Delete a document. Deleting a missing document is not an error."""

    @abstractmethod
    async def query_documents(
        self,
        collection: str,
        order_by: Optional[str] = None,
        limit: Optional[int] = None,
        descending: bool = False,
    ) -> List[Dict[str, Any]]:
        """
        Return documents of a collection.

        Args:
            collection: Collection name
            order_by: Document field to sort on (documents lacking it sort last)
            limit: Maximum number of documents returned
            descending: Sort direction when order_by is given
        """


class LiveStore(ABC):
    """The live key/value tree, addressed by slash-separated paths."""

    @abstractmethod
    async def get_value(self, path: str) -> Optional[Any]:
        """Return the value at path, or None if absent."""

    @abstractmethod
    async def set_value(self, path: str, value: Any) -> None:
        """Replace the value at path."""

    @abstractmethod
    async def update_value(self, path: str, fields: Dict[str, Any]) -> None:
        """Shallow-merge fields into the mapping at path (creating it if absent)."""

    @abstractmethod
    async def remove_value(self, path: str) -> None:
        """Remove the value at path. Removing a missing path is not an error."""


@dataclass
class StoreClient:
    """Both stores, handed to handlers as one dependency."""

    documents: DocumentStore
    live: LiveStore


def live_path(*parts: str) -> str:
    """Join path segments into a live tree path ("users", "u-1" -> "users/u-1")."""
    return "/".join(part.strip("/") for part in parts if part)
