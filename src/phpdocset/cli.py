"""Command line interface for phpdocset."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from phpdocset.config import LANG_CODES, AppConfig, normalize_lang_code
from phpdocset.docset import build_docset, index_path
from phpdocset.index.diagnostics import DropCollector, chain_observers, log_drop
from phpdocset.index.storage import IndexLoadError, SearchIndexStore
from phpdocset.metadata.store import MetadataQueryError

console = Console()
app = typer.Typer(help="phpdocset - Dash docsets for the PHP manual")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _resolve_langs(langs: List[str]) -> List[str]:
    resolved = []
    for lang in langs:
        code = normalize_lang_code(lang)
        if code not in LANG_CODES:
            raise typer.BadParameter(
                f"Unsupported language: {lang}. Supported languages: {' '.join(LANG_CODES)}"
            )
        if code not in resolved:
            resolved.append(code)
    return resolved


def _resolve_index(docset: Path) -> Path:
    if docset.suffix == ".dsidx":
        return docset
    return index_path(docset)


@app.command()
def build(
    source: Path = typer.Argument(
        ..., help="Renderer output root, one sub-directory per language.", resolve_path=True
    ),
    langs: List[str] = typer.Option(["en"], "--lang", "-l", help="Language code, repeatable"),
    output: Path = typer.Option(AppConfig().output_dir, "--output", "-o", help="Output directory"),
    user_notes: bool = typer.Option(
        False, "--user-notes/--no-user-notes", help="Rendered pages include user notes"
    ),
    jobs: int = typer.Option(1, "--jobs", "-j", min=1, help="Parallel extraction tasks"),
    icons: Optional[Path] = typer.Option(None, "--icons", help="Directory with icon.png and icon@2x.png"),
    sql: bool = typer.Option(False, "--sql", help="Also write the index as a sqlite3 load script"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging, lists skipped entries"),
) -> None:
    """Build docsets with a search index from rendered manuals."""
    _setup_logging(verbose)
    failed: List[str] = []

    for lang in _resolve_langs(langs):
        config = AppConfig(
            source_dir=source,
            output_dir=output,
            lang=lang,
            user_notes=user_notes,
            jobs=jobs,
        )
        collector = DropCollector()
        console.print(f"Building [bold]{config.docset_name}.docset[/bold]...")
        try:
            docset, stats = build_docset(
                config,
                base_dir=Path.cwd(),
                icons_dir=icons,
                write_script=sql,
                on_drop=chain_observers([collector, log_drop]),
            )
        except (MetadataQueryError, IndexLoadError, OSError) as exc:
            console.print(f"[red]Failed to build {config.docset_name}: {exc}[/red]")
            failed.append(lang)
            continue

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Type")
        table.add_column("Candidates", justify="right")
        table.add_column("Written", justify="right")
        table.add_column("Skipped", justify="right")
        skipped = collector.by_type()
        for entry_type in sorted(set(stats.by_type) | set(skipped), key=lambda item: item.value):
            table.add_row(
                entry_type.value,
                str(stats.by_type[entry_type]),
                str(stats.written_by_type.get(entry_type.value, 0)),
                str(skipped[entry_type]),
            )
        console.print(table)
        console.print(
            f"Indexed: {stats.written}, duplicates: {stats.duplicates}, skipped: {len(collector)}"
        )
        console.print(f"Created docset at [bold]{docset}[/bold]")

    if failed:
        console.print(f"[red]Failed languages: {' '.join(failed)}[/red]")
        raise typer.Exit(code=1)


@app.command()
def search(
    query: str = typer.Argument(..., help="Symbol name or part of it"),
    docset: Path = typer.Option(..., "--docset", help="Docset directory or docSet.dsidx file"),
    limit: int = typer.Option(20, help="Number of results to display"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Look up entries in a built search index."""
    _setup_logging(verbose)
    db_path = _resolve_index(docset)
    if not db_path.exists():
        raise typer.BadParameter(f"Search index not found: {db_path}")

    store = SearchIndexStore(db_path)
    try:
        results = store.search(query, limit=limit)
    finally:
        store.close()

    if not results:
        console.print("[yellow]No matches found.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Name")
    table.add_column("Type")
    table.add_column("Path")
    for entry in results:
        table.add_row(entry.name, entry.type.value, entry.path)
    console.print(table)


@app.command()
def web(
    docset: Path = typer.Option(..., "--docset", help="Docset directory"),
    host: str = typer.Option("127.0.0.1", help="Host interface"),
    port: int = typer.Option(8000, help="Server port"),
) -> None:
    """Serve a docset's pages and search index over HTTP."""
    try:
        import uvicorn
    except ImportError as exc:  # pragma: no cover
        raise typer.BadParameter(
            "uvicorn is not installed. Install the web extras with \"python -m pip install '.[web]'\""
        ) from exc

    from phpdocset.web.app import create_app

    if not index_path(docset).exists():
        console.print("[yellow]Warning: search index not found, searches will fail.[/yellow]")

    console.print(f"Serving {docset} on http://{host}:{port}")
    uvicorn.run(
        create_app(docset),
        host=host,
        port=port,
        reload=False,
        log_level="info",
    )


if __name__ == "__main__":  # pragma: no cover
    app()
