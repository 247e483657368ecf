"""Shared test fixtures."""

import json
from pathlib import Path

import pytest

from pagetree.models.document import Document

# Example from the move walkthrough: B is dropped as first child of A.
SCENARIO_DOCS = [
    Document(id="A", title="Intro", parent_id=None, order=0),
    Document(id="B", title="Rules", parent_id=None, order=1),
    Document(id="C", title="Sub", parent_id="A", order=0),
]

# lore
#   gods
#     sun
#   heroes
#   wars
# maps
#   north
# misc
WORLD_DOCS = [
    Document(id="lore", title="Lore", parent_id=None, order=0),
    Document(id="maps", title="Maps", parent_id=None, order=1),
    Document(id="misc", title="Misc", parent_id=None, order=2),
    Document(id="gods", title="Gods", parent_id="lore", order=0),
    Document(id="heroes", title="Heroes", parent_id="lore", order=1),
    Document(id="wars", title="Wars", parent_id="lore", order=2),
    Document(id="sun", title="Sun God", parent_id="gods", order=0),
    Document(id="north", title="North", parent_id="maps", order=0),
]

WORLD_SNAPSHOT = {
    "documents": [
        {"_id": "lore", "title": "Lore", "parentId": None, "order": 0, "icon": "📜"},
        {"_id": "maps", "title": "Maps", "parentId": None, "order": 1, "icon": "🗺️"},
        {"_id": "misc", "title": "", "parentId": None, "order": 2},
        {"_id": "gods", "title": "Gods", "parentId": "lore", "order": 0},
        {"_id": "heroes", "title": "Heroes", "parentId": "lore", "order": 1},
        {"_id": "wars", "title": "Wars", "parentId": "lore", "order": 2},
        {"_id": "sun", "title": "Sun God", "parentId": "gods", "order": 0},
        {"_id": "north", "title": "North", "parentId": "maps", "order": 0},
    ]
}


@pytest.fixture
def scenario() -> list[Document]:
    return list(SCENARIO_DOCS)


@pytest.fixture
def world() -> list[Document]:
    return list(WORLD_DOCS)


@pytest.fixture
def snapshot_file(tmp_path: Path) -> Path:
    """Write the world snapshot in the stored document shape."""
    path = tmp_path / "pages.json"
    path.write_text(json.dumps(WORLD_SNAPSHOT, ensure_ascii=False), encoding="utf-8")
    return path
