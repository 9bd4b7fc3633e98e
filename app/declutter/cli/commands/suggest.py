"""Suggest command implementation.

Ranks the entries of a directory as cleanup candidates.
"""

import json
from pathlib import Path
from typing import Annotated

import typer

from declutter.cli.display import create_candidates_table, score_to_dict
from declutter.cli.options import build_scan_options, build_scorer_options, load_settings
from declutter.scanning.filters import compile_filter
from declutter.scanning.scanner import DirectoryScanner, ScanError
from declutter.selection.service import SelectionService
from declutter.utils.formatting import console, format_size, print_error, print_info


def suggest(
    path: Annotated[
        Path,
        typer.Argument(
            help="Directory whose entries are ranked.",
            exists=True,
            file_okay=False,
            dir_okay=True,
            resolve_path=True,
        ),
    ],
    top: Annotated[
        float | None,
        typer.Option("--top", "-t", help="Fraction of candidates to select (0-1]."),
    ] = None,
    weight_age: Annotated[
        float | None,
        typer.Option("--weight-age", help="Relative weight of the age score."),
    ] = None,
    weight_size: Annotated[
        float | None,
        typer.Option("--weight-size", help="Relative weight of the size score."),
    ] = None,
    min_file_mb: Annotated[
        int | None,
        typer.Option("--min-file-mb", help="Size threshold in MB used for scoring (0 = off)."),
    ] = None,
    older_than_months: Annotated[
        int | None,
        typer.Option("--older-than-months", help="Age cutoff in months used for scoring (0 = off)."),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON."),
    ] = False,
) -> None:
    """Rank the entries of a directory as cleanup candidates.

    Entries larger than the size threshold and older than the age cutoff
    score highest. The top fraction is selected, marked with '*' and
    summed up as reclaimable space.

    Examples:
        declutter suggest ~/Downloads
        declutter suggest ~/projects --min-file-mb 100 --older-than-months 12 --top 0.2
    """
    settings = load_settings()
    scan_options = build_scan_options(
        [path],
        settings.scan,
        min_file_mb=min_file_mb,
        older_than_months=older_than_months,
    )
    scorer_options = build_scorer_options(
        settings.scorer, top=top, weight_age=weight_age, weight_size=weight_size
    )

    scanner = DirectoryScanner()
    try:
        with console.status("Scanning...", spinner="dots"):
            root = scanner.create_root(path, scan_options.include_files)
            for _child in scanner.expand(
                root,
                compile_filter(scan_options),
                scan_options.include_files,
                parallel=True,
            ):
                pass
    except ScanError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    service = SelectionService()
    ranked = service.rank(root, scan_options, scorer_options)
    if not ranked:
        print_info(f"Nothing to suggest in {root.full_path}.")
        return
    selected = service.select(root, scan_options, scorer_options)

    if json_output:
        chosen = {id(node) for node in selected}
        console.print_json(json.dumps([score_to_dict(s, id(s.node) in chosen) for s in ranked]))
        return

    console.print(create_candidates_table(ranked, selected))
    reclaimable = sum(node.size for node in selected)
    console.print(
        f"\n[dim]{len(selected)} of {len(ranked)} entries selected, "
        f"{format_size(reclaimable)} reclaimable[/dim]"
    )
