"""In-memory page tree: build, reorder, reparent and search document hierarchies."""

from pagetree.core.search.searcher import search_documents
from pagetree.core.tree.builder import build_tree, collect_descendant_ids, flatten
from pagetree.core.tree.reorder import apply_patches, plan_move
from pagetree.models.document import Document, MoveIntent, MoveResult, Patch, TreeNode

__all__ = [
    "Document",
    "MoveIntent",
    "MoveResult",
    "Patch",
    "TreeNode",
    "apply_patches",
    "build_tree",
    "collect_descendant_ids",
    "flatten",
    "plan_move",
    "search_documents",
]
