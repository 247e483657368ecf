"""Render page forests as markdown."""

import io
from collections.abc import Sequence

from pagetree.core.tree.builder import walk
from pagetree.models.document import TreeNode


def render_forest_as_markdown(
    forest: Sequence[TreeNode],
    *,
    max_depth: int | None = None,
    show_ids: bool = False,
) -> str:
    """Render a forest as an indented bullet list of display titles.

    Args:
        forest: Root nodes to render.
        max_depth: Deepest level to include, 0 being the roots (None = unlimited).
        show_ids: Append each document's id.

    Returns:
        Markdown string with bullet-list hierarchy.
    """
    out = io.StringIO()
    for depth, node in walk(forest):
        if max_depth is not None and depth > max_depth:
            continue

        indent = "    " * depth
        line = f"{indent}- {node.document.display_title}"
        if show_ids:
            line += f"  [id={node.id}]"
        out.write(line + "\n")

        # Truncation indicator when children are cut off by max_depth
        if max_depth is not None and depth == max_depth and node.children:
            count = len(node.children)
            noun = "child" if count == 1 else "children"
            out.write(f"{indent}    - ... ({count} more {noun}, id={node.id})\n")

    return out.getvalue()
