"""CLI for pagetree: inspect and rearrange a JSON snapshot of pages."""

import json
from pathlib import Path
from typing import Annotated

import typer
from loguru import logger

from pagetree.config import resolve_snapshot_path
from pagetree.core.importer.snapshot import load_snapshot, save_snapshot
from pagetree.core.search.searcher import prune_forest, search_documents
from pagetree.core.tree.builder import build_tree
from pagetree.core.tree.markdown import render_forest_as_markdown
from pagetree.core.tree.navigation import ordered_selection
from pagetree.core.tree.reorder import apply_patches, normalize_orders, plan_move
from pagetree.core.tree.validation import check_invariants
from pagetree.logging_config import configure_logging
from pagetree.models.document import Document, MoveIntent, Patch

app = typer.Typer(help="pagetree: arrange pages into trees, reorder and search them.")

SnapshotOption = Annotated[
    Path | None,
    typer.Option("--snapshot", "-s", help="JSON file with the flat document list"),
]


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log warnings and errors"),
) -> None:
    configure_logging(verbose=verbose, quiet=quiet)


def _load(snapshot: Path | None) -> tuple[Path, list[Document]]:
    """Load the snapshot, exiting with an error if it is missing or malformed."""
    path = snapshot or resolve_snapshot_path()
    if not path.is_file():
        logger.error("Snapshot not found: {}", path)
        raise typer.Exit(1)
    try:
        return path, load_snapshot(path)
    except ValueError as e:
        logger.error("Cannot read snapshot {}: {}", path, e)
        raise typer.Exit(1) from e


def _emit_patches(
    path: Path,
    documents: list[Document],
    patches: tuple[Patch, ...],
    *,
    apply: bool,
    output_json: bool,
) -> None:
    if output_json:
        typer.echo(json.dumps({"patches": [p.as_dict() for p in patches]}, indent=2))
    elif not patches:
        typer.echo("Nothing to change.")
    else:
        for patch in patches:
            fields = ", ".join(f"{k}={v!r}" for k, v in patch.as_dict().items() if k != "id")
            typer.echo(f"  {patch.id}: {fields}")

    if apply and patches:
        save_snapshot(path, apply_patches(documents, patches))


@app.command()
def tree(
    snapshot: SnapshotOption = None,
    max_depth: Annotated[
        int | None,
        typer.Option("--max-depth", "-m", help="Max depth levels to render"),
    ] = None,
    show_ids: bool = typer.Option(False, "--ids", help="Show document ids"),
) -> None:
    """Print the page tree as markdown."""
    _path, documents = _load(snapshot)
    md = render_forest_as_markdown(build_tree(documents), max_depth=max_depth, show_ids=show_ids)
    typer.echo(md.rstrip("\n") if md else "No pages yet.")


@app.command()
def move(
    document_id: str = typer.Argument(..., help="Page to move"),
    parent: Annotated[
        str | None,
        typer.Option("--parent", "-p", help="New parent id (omit for root level)"),
    ] = None,
    index: Annotated[
        int | None,
        typer.Option("--index", "-i", help="Position among the new siblings (omit to append)"),
    ] = None,
    snapshot: SnapshotOption = None,
    apply: bool = typer.Option(False, "--apply", "-a", help="Write the result to the snapshot"),
    output_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
) -> None:
    """Move a page under a new parent and position."""
    path, documents = _load(snapshot)
    result = plan_move(documents, MoveIntent(document_id, parent, index))
    if not result.accepted:
        logger.error("Cannot move {} under {}: {}", document_id, parent or "root", result.rejection)
        if output_json:
            typer.echo(json.dumps({"rejection": result.rejection, "patches": []}, indent=2))
        raise typer.Exit(1)
    _emit_patches(path, documents, result.patches, apply=apply, output_json=output_json)


@app.command()
def normalize(
    snapshot: SnapshotOption = None,
    apply: bool = typer.Option(False, "--apply", "-a", help="Write the result to the snapshot"),
    output_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
) -> None:
    """Renumber every sibling group to 0..n-1."""
    path, documents = _load(snapshot)
    _emit_patches(path, documents, normalize_orders(documents), apply=apply, output_json=output_json)


@app.command()
def search(
    query: str = typer.Argument(..., help="Text to find in page titles"),
    snapshot: SnapshotOption = None,
    output_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
) -> None:
    """Search page titles and show the matches in their tree."""
    _path, documents = _load(snapshot)
    result = search_documents(documents, query)

    if output_json:
        data = {
            "filtered": result is not None,
            "matches": sorted(result.match_ids) if result else [],
            "expand": sorted(result.expand_ids) if result else [],
        }
        typer.echo(json.dumps(data, indent=2))
        return

    if result is not None and not result.match_ids:
        typer.echo("No pages found.")
        return
    forest = prune_forest(build_tree(documents), result)
    typer.echo(render_forest_as_markdown(forest, show_ids=True).rstrip("\n"))


@app.command(name="export-order")
def export_order(
    document_ids: Annotated[
        list[str] | None,
        typer.Argument(help="Selected page ids (all pages when omitted)"),
    ] = None,
    snapshot: SnapshotOption = None,
) -> None:
    """Print the selected page ids in reading order, one per line."""
    _path, documents = _load(snapshot)
    selected = document_ids or [doc.id for doc in documents]
    for doc_id in ordered_selection(documents, selected):
        typer.echo(doc_id)


@app.command()
def check(snapshot: SnapshotOption = None) -> None:
    """Report documents that break the tree invariants."""
    _path, documents = _load(snapshot)
    problems = check_invariants(documents)
    if not problems:
        typer.echo(f"{len(documents)} documents, tree is consistent.")
        return
    for problem in problems:
        typer.echo(f"  {problem}")
    raise typer.Exit(1)
