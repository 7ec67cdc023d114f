"""
SQLAlchemy store backend.

Both stores live in the same database (see tutor_admin.models.record):
documents in the 'documents' table, the live tree in 'live_nodes'. Every
method opens its own short session, commits its single write and closes,
so one handler round trip maps to one transaction. There is no
cross-call locking: concurrent writers to the same row race and the last
commit wins.

Sessions are synchronous. Each session block runs in a worker thread via
asyncio.to_thread(), so a dispatch suspends at the store call and the event
loop keeps serving other requests meanwhile.

SQLAlchemyError is translated into StoreError at this boundary; nothing
SQLAlchemy-specific escapes to the handlers.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tutor_admin.core.exceptions import StoreError
from tutor_admin.models.record import DocumentRecord, LiveNode
from tutor_admin.store.base import DocumentStore, LiveStore, StoreClient


logger = logging.getLogger("tutor_admin.store.sql")

SessionFactory = Callable[[], Session]

T = TypeVar("T")


def _store_error(action: str, target: str, exc: SQLAlchemyError) -> StoreError:
    logger.error(f"Store {action} failed for {target}: {exc}")
    return StoreError(f"Store {action} failed for {target}: {exc.__class__.__name__}")


async def _run(action: str, target: str, work: Callable[[], T]) -> T:
    """Run one blocking session block off the event loop."""
    try:
        return await asyncio.to_thread(work)
    except SQLAlchemyError as e:
        raise _store_error(action, target, e) from e


class SqlDocumentStore(DocumentStore):
    """
    Document collections in the 'documents' table.

    order_field names the document field copied into the indexed order_key
    column on every write; queries ordered on that field sort in SQL, any
    other order_by sorts in Python.
    """

    def __init__(self, session_factory: SessionFactory, order_field: str = "timestamp"):
        self._session_factory = session_factory
        self._order_field = order_field

    def _order_key(self, data: Dict[str, Any]) -> Optional[str]:
        value = data.get(self._order_field)
        return str(value) if value is not None else None

    async def get_document(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        def work():
            with self._session_factory() as session:
                record = session.get(DocumentRecord, (collection, doc_id))
                return dict(record.data) if record else None

        return await _run("read", f"{collection}/{doc_id}", work)

    async def set_document(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        def work():
            with self._session_factory() as session:
                record = session.get(DocumentRecord, (collection, doc_id))
                if record is None:
                    record = DocumentRecord(collection=collection, id=doc_id)
                    session.add(record)
                record.data = dict(data)
                record.order_key = self._order_key(data)
                session.commit()

        await _run("write", f"{collection}/{doc_id}", work)

    async def delete_document(self, collection: str, doc_id: str) -> None:
        def work():
            with self._session_factory() as session:
                record = session.get(DocumentRecord, (collection, doc_id))
                if record is not None:
                    session.delete(record)
                    session.commit()

        await _run("delete", f"{collection}/{doc_id}", work)

    async def query_documents(
        self,
        collection: str,
        order_by: Optional[str] = None,
        limit: Optional[int] = None,
        descending: bool = False,
    ) -> List[Dict[str, Any]]:
        stmt = select(DocumentRecord).where(DocumentRecord.collection == collection)
        sql_ordered = order_by is not None and order_by == self._order_field

        if sql_ordered:
            key = DocumentRecord.order_key.desc() if descending else DocumentRecord.order_key.asc()
            stmt = stmt.order_by(DocumentRecord.order_key.is_(None), key)
            if limit is not None:
                stmt = stmt.limit(limit)

        def work():
            with self._session_factory() as session:
                return [dict(r.data) for r in session.scalars(stmt).all()]

        docs = await _run("query", collection, work)

        if order_by and not sql_ordered:
            present = [d for d in docs if d.get(order_by) is not None]
            missing = [d for d in docs if d.get(order_by) is None]
            present.sort(key=lambda d: str(d[order_by]), reverse=descending)
            docs = present + missing

        if limit is not None and not sql_ordered:
            docs = docs[:limit]

        return docs


class SqlLiveStore(LiveStore):
    """The live tree as one 'live_nodes' row per path."""

    def __init__(self, session_factory: SessionFactory):
        self._session_factory = session_factory

    async def get_value(self, path: str) -> Optional[Any]:
        def work():
            with self._session_factory() as session:
                node = session.get(LiveNode, path)
                return node.value if node else None

        return await _run("read", path, work)

    async def set_value(self, path: str, value: Any) -> None:
        def work():
            with self._session_factory() as session:
                node = session.get(LiveNode, path)
                if node is None:
                    session.add(LiveNode(path=path, value=value))
                else:
                    node.value = value
                session.commit()

        await _run("write", path, work)

    async def update_value(self, path: str, fields: Dict[str, Any]) -> None:
        def work():
            with self._session_factory() as session:
                node = session.get(LiveNode, path)
                if node is None:
                    session.add(LiveNode(path=path, value=dict(fields)))
                else:
                    current = node.value if isinstance(node.value, dict) else {}
                    # New dict so the JSON column registers the change
                    node.value = {**current, **fields}
                session.commit()

        await _run("update", path, work)

    async def remove_value(self, path: str) -> None:
        def work():
            with self._session_factory() as session:
                node = session.get(LiveNode, path)
                if node is not None:
                    session.delete(node)
                    session.commit()

        await _run("remove", path, work)


def create_sql_store(session_factory: SessionFactory) -> StoreClient:
    return StoreClient(
        documents=SqlDocumentStore(session_factory),
        live=SqlLiveStore(session_factory),
    )
