"""Build the page forest from the flat document collection."""

from collections import defaultdict
from collections.abc import Iterable, Iterator, Sequence

from loguru import logger

from pagetree.models.document import Document, TreeNode


def _sibling_key(doc: Document) -> tuple[bool, int, str]:
    # Missing order sorts after every defined order.
    return (doc.order is None, doc.order or 0, doc.title.casefold())


def sort_siblings(documents: Iterable[Document]) -> list[Document]:
    """Sort documents by order, then casefolded title, then input position."""
    return sorted(documents, key=_sibling_key)


def group_by_parent(documents: Iterable[Document]) -> dict[str | None, list[Document]]:
    """Group documents by their raw ``parent_id``, keeping input order."""
    groups: dict[str | None, list[Document]] = defaultdict(list)
    for doc in documents:
        groups[doc.parent_id].append(doc)
    return groups


def _display_groups(documents: list[Document]) -> dict[str | None, list[Document]]:
    """Sorted sibling groups, with dangling parents degraded to the root level."""
    known = {doc.id for doc in documents}
    groups: dict[str | None, list[Document]] = defaultdict(list)
    for doc in documents:
        parent_id = doc.parent_id
        if parent_id is not None and parent_id not in known:
            logger.warning("Document {} has missing parent {}, showing it at root", doc.id, parent_id)
            parent_id = None
        groups[parent_id].append(doc)
    return {parent_id: sort_siblings(group) for parent_id, group in groups.items()}


def _cycle_entry(doc: Document, by_id: dict[str, Document]) -> Document:
    """Walk up from ``doc`` until an id repeats; that document sits on the cycle."""
    visited = {doc.id}
    current = doc
    while current.parent_id is not None and current.parent_id in by_id:
        parent = by_id[current.parent_id]
        if parent.id in visited:
            return parent
        visited.add(parent.id)
        current = parent
    return current


def _build_subtree(
    root: Document,
    groups: dict[str | None, list[Document]],
    seen: set[str],
) -> TreeNode:
    """Build one subtree with an explicit stack, never entering an id twice."""
    seen.add(root.id)
    stack: list[tuple[Document, Iterator[Document], list[TreeNode]]] = [
        (root, iter(groups.get(root.id, ())), [])
    ]
    while True:
        doc, pending, built = stack[-1]
        child = next((c for c in pending if c.id not in seen), None)
        if child is not None:
            seen.add(child.id)
            stack.append((child, iter(groups.get(child.id, ())), []))
            continue
        stack.pop()
        node = TreeNode(document=doc, children=tuple(built))
        if not stack:
            return node
        stack[-1][2].append(node)


def build_tree(
    documents: Iterable[Document],
    root_parent_id: str | None = None,
) -> tuple[TreeNode, ...]:
    """Build the ordered forest below ``root_parent_id``.

    A document whose parent is missing from the collection is treated as a
    root. The walk never enters an id twice, so cyclic ``parent_id`` chains
    terminate, and deep chains do not hit the recursion limit. When the whole
    forest is built, documents that are only reachable through a cycle are
    added as extra roots so nothing vanishes.
    """
    docs = list(documents)
    groups = _display_groups(docs)
    seen: set[str] = set()
    if root_parent_id is not None:
        seen.add(root_parent_id)

    roots = [
        _build_subtree(doc, groups, seen)
        for doc in groups.get(root_parent_id, ())
        if doc.id not in seen
    ]

    if root_parent_id is None and len(seen) < len({doc.id for doc in docs}):
        by_id = {doc.id: doc for doc in docs}
        for doc in docs:
            if doc.id in seen:
                continue
            entry = _cycle_entry(doc, by_id)
            logger.warning("Parent cycle through document {}, showing it at root", entry.id)
            roots.append(_build_subtree(entry, groups, seen))

    return tuple(roots)


def collect_descendant_ids(
    node_or_id: TreeNode | Document | str,
    documents: Iterable[Document],
) -> set[str]:
    """Return every id reachable below the node via ``parent_id``, excluding itself."""
    root_id = node_or_id if isinstance(node_or_id, str) else node_or_id.id
    children = group_by_parent(documents)

    found: set[str] = set()
    stack = [root_id]
    while stack:
        current = stack.pop()
        for child in children.get(current, ()):
            if child.id == root_id or child.id in found:
                continue
            found.add(child.id)
            stack.append(child.id)
    return found


def find_ancestor_ids(documents: Iterable[Document], document_id: str) -> tuple[str, ...]:
    """Return the ancestor chain of a document, root first.

    Stops at a missing parent or when the chain loops back on itself.
    """
    by_id = {doc.id: doc for doc in documents}
    chain: list[str] = []
    visited = {document_id}
    current = by_id.get(document_id)
    while current is not None and current.parent_id is not None:
        if current.parent_id in visited:
            break
        parent = by_id.get(current.parent_id)
        if parent is None:
            break
        visited.add(parent.id)
        chain.append(parent.id)
        current = parent
    chain.reverse()
    return tuple(chain)


def walk(forest: Sequence[TreeNode]) -> Iterator[tuple[int, TreeNode]]:
    """Yield ``(depth, node)`` pairs in pre-order."""
    stack = [(0, node) for node in reversed(forest)]
    while stack:
        depth, node = stack.pop()
        yield depth, node
        stack.extend((depth + 1, child) for child in reversed(node.children))


def flatten(forest: Sequence[TreeNode]) -> list[Document]:
    """Return the documents of the forest in reading order."""
    return [node.document for _depth, node in walk(forest)]
