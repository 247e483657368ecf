"""Consistency checks for a flat document collection."""

from collections import Counter
from collections.abc import Sequence

from pagetree.core.tree.builder import group_by_parent
from pagetree.models.document import Document


def _cycle_members(documents: Sequence[Document]) -> set[str]:
    by_id = {doc.id: doc for doc in documents}
    members: set[str] = set()
    for doc in documents:
        chain: list[str] = [doc.id]
        on_chain = {doc.id}
        current = doc
        while current.parent_id is not None and current.parent_id in by_id:
            if current.parent_id in on_chain:
                members.update(chain[chain.index(current.parent_id) :])
                break
            current = by_id[current.parent_id]
            chain.append(current.id)
            on_chain.add(current.id)
    return members


def check_invariants(documents: Sequence[Document]) -> list[str]:
    """Describe every way the collection breaks the tree invariants.

    Returns an empty list for a consistent forest: unique ids, no dangling or
    cyclic parents, and contiguous 0-based orders in each sibling group.
    """
    problems: list[str] = []

    counts = Counter(doc.id for doc in documents)
    problems.extend(f"Duplicate document id {doc_id}" for doc_id, n in counts.items() if n > 1)

    known = set(counts)
    problems.extend(
        f"Document {doc.id} has missing parent {doc.parent_id}"
        for doc in documents
        if doc.parent_id is not None and doc.parent_id not in known
    )

    problems.extend(
        f"Document {doc_id} is in a parent cycle" for doc_id in sorted(_cycle_members(documents))
    )

    for parent_id, group in group_by_parent(documents).items():
        label = "root" if parent_id is None else parent_id
        missing = [doc.id for doc in group if doc.order is None]
        if missing:
            problems.append(f"Documents under {label} have no order: {', '.join(missing)}")
            continue
        orders = sorted(doc.order for doc in group if doc.order is not None)
        if orders != list(range(len(group))):
            problems.append(f"Orders under {label} are {orders}, expected 0..{len(group) - 1}")

    return problems
