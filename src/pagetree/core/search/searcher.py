"""Title search with ancestor expansion."""

from collections.abc import Iterator, Sequence

from loguru import logger

from pagetree.models.document import Document, SearchResult, TreeNode


def search_documents(documents: Sequence[Document], query: str) -> SearchResult | None:
    """Find documents whose title contains the query, ignoring case.

    Args:
        documents: Current flat collection.
        query: Free text. Empty or whitespace-only means no filtering.

    Returns:
        None when there is no filter. Otherwise a SearchResult with the
        matching ids and every ancestor of every match in ``expand_ids``
        (a match only appears there if it is also another match's ancestor).
    """
    needle = query.strip().casefold()
    if not needle:
        return None

    by_id = {doc.id: doc for doc in documents}
    matches = {doc.id for doc in documents if needle in doc.title.strip().casefold()}

    expand: set[str] = set()
    for match_id in matches:
        visited = {match_id}
        parent_id = by_id[match_id].parent_id
        while parent_id is not None and parent_id in by_id and parent_id not in visited:
            visited.add(parent_id)
            expand.add(parent_id)
            parent_id = by_id[parent_id].parent_id

    logger.debug("Search {!r}: {} matches, {} to expand", query, len(matches), len(expand))
    return SearchResult(match_ids=frozenset(matches), expand_ids=frozenset(expand))


def prune_forest(
    forest: Sequence[TreeNode],
    result: SearchResult | None,
) -> tuple[TreeNode, ...]:
    """Keep only matching nodes and the nodes leading to them.

    A matching node keeps only the children that themselves lead to matches.
    Without a filter the forest is returned unchanged.
    """
    if result is None:
        return tuple(forest)

    roots: list[TreeNode] = []
    for root in forest:
        # Post-order with an explicit stack; each frame collects its kept children.
        stack: list[tuple[TreeNode, Iterator[TreeNode], list[TreeNode]]] = [
            (root, iter(root.children), [])
        ]
        while stack:
            node, pending, kept = stack[-1]
            child = next(pending, None)
            if child is not None:
                stack.append((child, iter(child.children), []))
                continue
            stack.pop()
            if kept or node.id in result.match_ids:
                pruned = TreeNode(document=node.document, children=tuple(kept))
                (stack[-1][2] if stack else roots).append(pruned)
    return tuple(roots)
