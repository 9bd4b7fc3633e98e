"""Scan command implementation.

Measures directories and shows their contents as a size-annotated tree.
"""

import json
from pathlib import Path
from typing import Annotated

import typer

from declutter.cli.display import create_node_tree, node_to_dict
from declutter.cli.options import build_scan_options, load_settings
from declutter.models.node import Node
from declutter.models.options import ScanOptions
from declutter.scanning.filters import compile_filter
from declutter.scanning.scanner import DirectoryScanner
from declutter.utils.formatting import console, format_size, print_error, print_warning


def scan_directories(
    paths: Annotated[
        list[Path],
        typer.Argument(
            help="Directories to scan.",
            exists=True,
            file_okay=False,
            dir_okay=True,
            resolve_path=True,
        ),
    ],
    depth: Annotated[
        int,
        typer.Option("--depth", "-d", min=1, help="Levels to expand below each root."),
    ] = 1,
    files: Annotated[
        bool | None,
        typer.Option("--files/--no-files", help="List files as well as directories."),
    ] = None,
    parallel: Annotated[
        bool,
        typer.Option("--parallel/--sequential", help="Measure subdirectories in parallel."),
    ] = True,
    min_file_mb: Annotated[
        int | None,
        typer.Option("--min-file-mb", help="Hide files smaller than this (MB, 0 = off)."),
    ] = None,
    min_dir_mb: Annotated[
        int | None,
        typer.Option("--min-dir-mb", help="Hide directories smaller than this (MB, 0 = off)."),
    ] = None,
    older_than_months: Annotated[
        int | None,
        typer.Option(
            "--older-than-months",
            help="Hide entries modified within this many months (0 = off).",
        ),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON."),
    ] = False,
) -> None:
    """Scan directories and show what takes up space.

    Each root is measured in full; its contents are listed down to
    --depth levels, largest first.

    Examples:
        declutter scan ~/Downloads
        declutter scan ~/projects --depth 2 --min-dir-mb 100
        declutter scan ~ --no-files --older-than-months 6 --json
    """
    settings = load_settings()
    options = build_scan_options(
        paths,
        settings.scan,
        include_files=files,
        min_file_mb=min_file_mb,
        min_dir_mb=min_dir_mb,
        older_than_months=older_than_months,
    )

    scanner = DirectoryScanner()
    with console.status("Scanning...", spinner="dots"):
        roots = scanner.scan(options, parallel=parallel)
        if depth > 1:
            _expand_deeper(scanner, roots, options, depth, parallel)

    if not roots:
        print_error("No directory could be scanned.")
        raise typer.Exit(code=1)
    skipped = len(options.directories_to_scan) - len(roots)
    if skipped:
        print_warning(f"{skipped} root(s) could not be scanned.")

    if json_output:
        console.print_json(json.dumps([node_to_dict(root) for root in roots]))
        return

    for root in roots:
        console.print(create_node_tree(root))

    total = sum(root.size for root in roots)
    console.print(f"\n[dim]Scanned {len(roots)} root(s), {format_size(total)} total[/dim]")


def _expand_deeper(
    scanner: DirectoryScanner,
    roots: list[Node],
    options: ScanOptions,
    depth: int,
    parallel: bool,
) -> None:
    """Expand each first-level directory down to ``depth`` levels below its root."""
    predicate = compile_filter(options)
    for root in roots:
        for child in list(root.children):
            if not child.is_directory:
                continue
            for _node in scanner.expand_all(
                child, predicate, options.include_files, max_depth=depth - 1, parallel=parallel
            ):
                pass
