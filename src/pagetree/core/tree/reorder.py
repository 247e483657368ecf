"""Compute the patches for moving, nesting, renaming and deleting pages.

Every function here works on a snapshot of the flat document collection and
returns patches; nothing is persisted. The host applies a patch set as a whole
and refreshes its snapshot before computing the next one.
"""

from collections.abc import Iterable, Sequence
from dataclasses import replace
from typing import Any

from loguru import logger

from pagetree.core.tree.builder import (
    build_tree,
    collect_descendant_ids,
    flatten,
    group_by_parent,
    sort_siblings,
)
from pagetree.models.document import (
    CYCLE,
    SELF_PARENT,
    UNKNOWN_DOCUMENT,
    UNKNOWN_PARENT,
    DeletePlan,
    Document,
    MoveIntent,
    MoveResult,
    Patch,
)

CASCADE = "cascade"
LIFT = "lift"


def _renumber(siblings: Iterable[Document]) -> list[Patch]:
    """Order patches that turn ``siblings`` into a contiguous 0-based run."""
    return [
        Patch(id=doc.id, order=position)
        for position, doc in enumerate(siblings)
        if doc.order != position
    ]


def _rejection(documents: Sequence[Document], intent: MoveIntent) -> str | None:
    known = {doc.id for doc in documents}
    target = intent.destination_parent_id
    if intent.moving_id not in known:
        return UNKNOWN_DOCUMENT
    if target == intent.moving_id:
        return SELF_PARENT
    if target is not None and target not in known:
        return UNKNOWN_PARENT
    if target is not None and target in collect_descendant_ids(intent.moving_id, documents):
        return CYCLE
    return None


def plan_move(documents: Sequence[Document], intent: MoveIntent) -> MoveResult:
    """Compute the patches that place a document under a new parent and position.

    ``intent.destination_index`` is the position among the destination's other
    children, clamped to the valid range; ``None`` appends. Rejected moves
    return no patches. Repeating a move after its patches were applied returns
    no patches.
    """
    docs = list(documents)
    reason = _rejection(docs, intent)
    if reason is not None:
        logger.debug(
            "Rejected move of {} under {}: {}", intent.moving_id, intent.destination_parent_id, reason
        )
        return MoveResult(rejection=reason)

    moving = next(doc for doc in docs if doc.id == intent.moving_id)
    old_parent_id = moving.parent_id
    new_parent_id = intent.destination_parent_id

    destination = sort_siblings(
        doc for doc in docs if doc.parent_id == new_parent_id and doc.id != moving.id
    )
    if intent.destination_index is None:
        index = len(destination)
    else:
        index = max(0, min(intent.destination_index, len(destination)))
    destination.insert(index, moving)

    patches: list[Patch] = []
    for position, doc in enumerate(destination):
        if doc.id == moving.id:
            if doc.order != position or doc.parent_id != new_parent_id:
                patches.append(
                    Patch(id=doc.id, order=position, parent_id=new_parent_id, reparent=True)
                )
        elif doc.order != position:
            patches.append(Patch(id=doc.id, order=position))

    if old_parent_id != new_parent_id:
        source = sort_siblings(
            doc for doc in docs if doc.parent_id == old_parent_id and doc.id != moving.id
        )
        patches.extend(_renumber(source))

    logger.debug(
        "Move {} under {} at {}: {} patches", moving.id, new_parent_id, index, len(patches)
    )
    return MoveResult(patches=tuple(patches))


def plan_drop(
    documents: Sequence[Document],
    moving_id: str,
    parent_id: str | None,
    index: int,
) -> MoveResult:
    """Drag-and-drop between siblings: place ``moving_id`` at ``index`` under ``parent_id``."""
    return plan_move(documents, MoveIntent(moving_id, parent_id, index))


def plan_nest(documents: Sequence[Document], moving_id: str, parent_id: str | None) -> MoveResult:
    """Drop onto a page or confirm the move dialog: append as the last child."""
    return plan_move(documents, MoveIntent(moving_id, parent_id))


def apply_patches(documents: Iterable[Document], patches: Iterable[Patch]) -> list[Document]:
    """Return a new collection with the patches merged in."""
    result = list(documents)
    positions = {doc.id: i for i, doc in enumerate(result)}
    for patch in patches:
        if patch.id not in positions:
            msg = f"Patch for unknown document {patch.id!r}"
            raise KeyError(msg)
        changes: dict[str, Any] = {}
        if patch.reparent:
            changes["parent_id"] = patch.parent_id
        if patch.order is not None:
            changes["order"] = patch.order
        if patch.title is not None:
            changes["title"] = patch.title
        i = positions[patch.id]
        result[i] = replace(result[i], **changes)
    return result


def normalize_orders(documents: Iterable[Document]) -> tuple[Patch, ...]:
    """Patches that make every sibling group a contiguous 0..n-1 range."""
    patches: list[Patch] = []
    for group in group_by_parent(documents).values():
        patches.extend(_renumber(sort_siblings(group)))
    return tuple(patches)


def next_order(documents: Iterable[Document], parent_id: str | None) -> int:
    """Order for a new document appended under ``parent_id``."""
    orders = [
        doc.order for doc in documents if doc.parent_id == parent_id and doc.order is not None
    ]
    return max(orders) + 1 if orders else 0


def plan_rename(document: Document, new_title: str) -> Patch | None:
    """Title patch for a rename, or None when there is nothing to store.

    An empty title after trimming means the edit is discarded.
    """
    title = new_title.strip()
    if not title or title == document.title:
        return None
    return Patch(id=document.id, title=title)


def plan_delete(
    documents: Sequence[Document],
    document_id: str,
    *,
    policy: str = CASCADE,
) -> DeletePlan:
    """Plan the removal of a document without leaving dangling parents.

    Args:
        documents: Current flat collection.
        document_id: Document to delete.
        policy: ``"cascade"`` removes all descendants too; ``"lift"`` moves the
            direct children into the deleted document's place.

    Returns:
        DeletePlan with the ids to delete (reading order) and the patches for
        the remaining documents.
    """
    if policy not in (CASCADE, LIFT):
        msg = f"Unknown delete policy {policy!r}"
        raise ValueError(msg)

    docs = list(documents)
    target = next((doc for doc in docs if doc.id == document_id), None)
    if target is None:
        msg = f"Unknown document {document_id!r}"
        raise KeyError(msg)

    descendants = collect_descendant_ids(document_id, docs)
    siblings = sort_siblings(doc for doc in docs if doc.parent_id == target.parent_id)

    if policy == CASCADE:
        removed = descendants | {document_id}
        deleted = tuple(doc.id for doc in flatten(build_tree(docs)) if doc.id in removed)
        remaining = [doc for doc in siblings if doc.id not in removed]
        logger.debug("Delete {} with {} descendants", document_id, len(descendants))
        return DeletePlan(deleted_ids=deleted, patches=tuple(_renumber(remaining)))

    # A parent inside the subtree only happens with cyclic input; lift to root then.
    new_parent_id = None if target.parent_id in descendants else target.parent_id
    children = sort_siblings(doc for doc in docs if doc.parent_id == document_id)
    child_ids = {doc.id for doc in children}
    if new_parent_id != target.parent_id:
        siblings = sort_siblings(doc for doc in docs if doc.parent_id == new_parent_id)

    lifted: list[Document] = []
    for doc in siblings:
        if doc.id == document_id:
            lifted.extend(children)
        elif doc.id not in child_ids:
            lifted.append(doc)
    if document_id not in {doc.id for doc in siblings}:
        lifted.extend(children)

    patches: list[Patch] = []
    for position, doc in enumerate(lifted):
        if doc.id in child_ids:
            patches.append(Patch(id=doc.id, order=position, parent_id=new_parent_id, reparent=True))
        elif doc.order != position:
            patches.append(Patch(id=doc.id, order=position))

    logger.debug("Delete {} lifting {} children", document_id, len(children))
    return DeletePlan(deleted_ids=(document_id,), patches=tuple(patches))
