"""Domain models for the page tree."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from pagetree.config import UNTITLED

# Move rejection reasons
SELF_PARENT = "self_parent"
CYCLE = "cycle"
UNKNOWN_DOCUMENT = "unknown_document"
UNKNOWN_PARENT = "unknown_parent"


@dataclass(frozen=True)
class Document:
    """A page in the flat document collection."""

    id: str
    title: str = ""
    parent_id: str | None = None
    order: int | None = None
    payload: Mapping[str, Any] = field(default_factory=dict, compare=False)

    @property
    def display_title(self) -> str:
        return self.title.strip() or UNTITLED


@dataclass(frozen=True)
class TreeNode:
    """A document with its ordered children. Rebuilt on every query."""

    document: Document
    children: tuple["TreeNode", ...] = ()

    @property
    def id(self) -> str:
        return self.document.id


@dataclass(frozen=True)
class Patch:
    """A partial update for the host to persist.

    ``parent_id`` only counts when ``reparent`` is set, so that a patch can
    move a document to the root level.
    """

    id: str
    order: int | None = None
    parent_id: str | None = None
    reparent: bool = False
    title: str | None = None

    def as_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"id": self.id}
        if self.reparent:
            out["parentId"] = self.parent_id
        if self.order is not None:
            out["order"] = self.order
        if self.title is not None:
            out["title"] = self.title
        return out


@dataclass(frozen=True)
class MoveIntent:
    """Drop/move request. ``destination_index=None`` nests at the end."""

    moving_id: str
    destination_parent_id: str | None
    destination_index: int | None = None


@dataclass(frozen=True)
class MoveResult:
    """Outcome of a move. A rejected move never carries patches."""

    patches: tuple[Patch, ...] = ()
    rejection: str | None = None

    @property
    def accepted(self) -> bool:
        return self.rejection is None


@dataclass(frozen=True)
class DeletePlan:
    """Documents to remove plus the patches that keep the tree consistent."""

    deleted_ids: tuple[str, ...]
    patches: tuple[Patch, ...] = ()


@dataclass(frozen=True)
class SearchResult:
    """Title matches and the ancestors that must be expanded to show them."""

    match_ids: frozenset[str]
    expand_ids: frozenset[str]
