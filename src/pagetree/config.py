"""Configuration constants for pagetree."""

import os
from pathlib import Path

# Display fallback for empty titles. Never written back to storage.
UNTITLED: str = "Untitled"

# Environment variable that overrides the snapshot location.
SNAPSHOT_ENV_VAR: str = "PAGETREE_SNAPSHOT"

# Snapshot file locations. First file found is used.
SNAPSHOT_FILES: list[Path] = [
    Path("pagetree.json"),
    Path("~/.config/pagetree/documents.json").expanduser(),
    Path("~/.local/share/pagetree/documents.json").expanduser(),
]


def resolve_snapshot_path() -> Path:
    """Return the snapshot file to use.

    The environment variable wins; otherwise the first existing candidate,
    falling back to the first candidate when none exists yet.
    """
    override = os.environ.get(SNAPSHOT_ENV_VAR)
    if override:
        return Path(override).expanduser()
    for candidate in SNAPSHOT_FILES:
        if candidate.is_file():
            return candidate
    return SNAPSHOT_FILES[0]
