"""Tree navigation: reading order, expansion state, selection and move targets."""

from collections.abc import Iterable, Sequence

from pagetree.core.tree.builder import (
    build_tree,
    collect_descendant_ids,
    find_ancestor_ids,
    flatten,
)
from pagetree.models.document import Document, TreeNode


def ordered_selection(documents: Sequence[Document], selected_ids: Iterable[str]) -> list[str]:
    """Return the selected ids in reading order.

    This is the order documents are handed to the PDF export. Ids that are not
    in the collection are dropped.
    """
    wanted = set(selected_ids)
    return [doc.id for doc in flatten(build_tree(documents)) if doc.id in wanted]


def blocked_destinations(documents: Sequence[Document], moving_id: str) -> frozenset[str]:
    """Ids that cannot become the new parent of ``moving_id``."""
    return frozenset({moving_id} | collect_descendant_ids(moving_id, documents))


def toggle_expanded(expanded_ids: frozenset[str], document_id: str) -> frozenset[str]:
    if document_id in expanded_ids:
        return expanded_ids - {document_id}
    return expanded_ids | {document_id}


def visible_rows(
    forest: Sequence[TreeNode],
    expanded_ids: Iterable[str],
    forced_ids: Iterable[str] = frozenset(),
) -> list[tuple[int, Document]]:
    """Return ``(depth, document)`` rows a sidebar shows.

    Children are listed only below documents that are expanded or forced open
    (for example by a search).
    """
    open_ids = set(expanded_ids) | set(forced_ids)
    rows: list[tuple[int, Document]] = []
    stack = [(0, node) for node in reversed(forest)]
    while stack:
        depth, node = stack.pop()
        rows.append((depth, node.document))
        if node.id in open_ids:
            stack.extend((depth + 1, child) for child in reversed(node.children))
    return rows


def expanded_for_selection(
    documents: Sequence[Document],
    selected_ids: Iterable[str],
) -> frozenset[str]:
    """Ids that are selected or have a selected descendant."""
    known = {doc.id for doc in documents}
    expanded: set[str] = set()
    for selected in selected_ids:
        if selected not in known:
            continue
        expanded.add(selected)
        expanded.update(find_ancestor_ids(documents, selected))
    return frozenset(expanded)


def toggle_subtree_selection(
    documents: Sequence[Document],
    selected_ids: Iterable[str],
    document_id: str,
    *,
    checked: bool,
) -> frozenset[str]:
    """Select or deselect a document together with all of its descendants."""
    subtree = {document_id} | collect_descendant_ids(document_id, documents)
    if checked:
        return frozenset(set(selected_ids) | subtree)
    return frozenset(set(selected_ids) - subtree)
