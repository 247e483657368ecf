"""Read and write JSON snapshots of the flat document collection."""

import json
from pathlib import Path
from typing import Any

from loguru import logger

from pagetree.models.document import Document

_ID_KEYS = ("_id", "id")
_PARENT_KEYS = ("parentId", "parent_id")
_TREE_KEYS = {*_ID_KEYS, *_PARENT_KEYS, "title", "order"}


def _first(raw: dict[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        if key in raw:
            return raw[key]
    return None


def parse_document(raw: Any) -> Document:
    """Parse one stored document object into a Document.

    Keys other than id, title, parent and order are kept as opaque payload.
    """
    if not isinstance(raw, dict):
        msg = f"Document entry is not an object: {raw!r}"
        raise ValueError(msg)

    doc_id = _first(raw, _ID_KEYS)
    if not isinstance(doc_id, str) or not doc_id:
        msg = f"Document without a string id: {raw!r}"
        raise ValueError(msg)

    title = raw.get("title")
    if title is None:
        title = ""
    elif not isinstance(title, str):
        msg = f"Document {doc_id} has a non-string title: {title!r}"
        raise ValueError(msg)

    parent_id = _first(raw, _PARENT_KEYS) or None
    if parent_id is not None and not isinstance(parent_id, str):
        msg = f"Document {doc_id} has a non-string parent id: {parent_id!r}"
        raise ValueError(msg)

    order = raw.get("order")
    if order is not None and (isinstance(order, bool) or not isinstance(order, int)):
        msg = f"Document {doc_id} has a non-integer order: {order!r}"
        raise ValueError(msg)

    return Document(
        id=doc_id,
        title=title,
        parent_id=parent_id,
        order=order,
        payload={k: v for k, v in raw.items() if k not in _TREE_KEYS},
    )


def parse_snapshot(data: Any) -> list[Document]:
    """Parse a list of documents or a ``{"documents": [...]}`` response."""
    if isinstance(data, dict):
        data = data.get("documents")
    if not isinstance(data, list):
        msg = "Snapshot must be a list of documents or an object with a 'documents' list"
        raise ValueError(msg)

    documents = [parse_document(raw) for raw in data]
    seen: set[str] = set()
    for doc in documents:
        if doc.id in seen:
            msg = f"Duplicate document id {doc.id!r}"
            raise ValueError(msg)
        seen.add(doc.id)
    return documents


def dump_snapshot(documents: list[Document]) -> list[dict[str, Any]]:
    """Convert documents back to stored objects, always using ``_id``/``parentId`` keys."""
    return [
        {
            "_id": doc.id,
            "title": doc.title,
            "parentId": doc.parent_id,
            "order": doc.order,
            **doc.payload,
        }
        for doc in documents
    ]


def load_snapshot(path: Path) -> list[Document]:
    documents = parse_snapshot(json.loads(path.read_text(encoding="utf-8")))
    logger.debug("Loaded {} documents from {}", len(documents), path)
    return documents


def save_snapshot(path: Path, documents: list[Document]) -> None:
    """Write the documents to ``path``.

    An existing ``{"documents": [...]}`` file keeps its wrapper and any other
    top-level keys; everything else is written as a bare list.
    """
    data: Any = dump_snapshot(documents)
    if path.is_file():
        existing = json.loads(path.read_text(encoding="utf-8"))
        if isinstance(existing, dict):
            data = {**existing, "documents": data}

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    logger.info("Wrote {} documents to {}", len(documents), path)
