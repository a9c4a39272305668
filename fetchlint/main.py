"""fetchlint CLI - contract checks for fetch() calls in JavaScript and TypeScript."""
from dataclasses import replace
from pathlib import Path
from typing import Iterable, List, Optional, Tuple
import typer
from rich.table import Table
from rich.markup import escape

from fetchlint.utils.safe_console import SafeConsole
from fetchlint.utils.logger import sanitize_for_terminal
from fetchlint.analyzer.diagnostics import Diagnostic
from fetchlint.analyzer.engine import FetchContractAnalyzer
from fetchlint.analyzer.fixes import apply_fixes
from fetchlint.analyzer.parser import LanguageParser
from fetchlint.config import __version__, get_config
from fetchlint.rules.registry import ALL_DETECTORS, DETECTORS_BY_ID

app = typer.Typer(
    name="fetchlint",
    help="Static contract checks for fetch() calls",
    add_completion=False
)
console = SafeConsole()

EXCLUDED_DIRS = {'node_modules', '.git', 'dist', 'build'}


def discover_files(paths: Iterable[Path]) -> List[Path]:
    """Expand files and directories into the list of sources to analyze.

    Directories are searched recursively for supported extensions, skipping
    dependency and build output folders. Files named explicitly are kept
    as long as their extension is supported.

    Args:
        paths: Files and directories given on the command line

    Returns:
        Sorted, de-duplicated list of source files
    """
    found = set()
    for path in paths:
        if path.is_file():
            if path.suffix.lower() in LanguageParser.SUPPORTED_LANGUAGES:
                found.add(path)
            continue

        for candidate in path.rglob('*'):
            if not candidate.is_file():
                continue
            if candidate.suffix.lower() not in LanguageParser.SUPPORTED_LANGUAGES:
                continue
            relative_parts = candidate.relative_to(path).parts
            if any(part in EXCLUDED_DIRS for part in relative_parts):
                continue
            found.add(candidate)
    return sorted(found)


def display_path(path: Path) -> str:
    try:
        return str(path.resolve().relative_to(Path.cwd().resolve()))
    except ValueError:
        return str(path)


def fix_file(analyzer: FetchContractAnalyzer, path: Path,
             diagnostics: List[Diagnostic]) -> Tuple[int, List[Diagnostic]]:
    """Apply the fixes of one pass to ``path`` and re-analyze it.

    Returns:
        (number of fixes offered, diagnostics remaining after the rewrite)
    """
    fixes = [d.fix for d in diagnostics if d.fix is not None]
    if not fixes:
        return 0, diagnostics

    source = path.read_bytes()
    path.write_bytes(apply_fixes(source, fixes))
    remaining = analyzer.analyze_file(path)
    return len(fixes), remaining if remaining is not None else diagnostics


def build_table(diagnostics: List[Diagnostic]) -> Table:
    table = Table(title=sanitize_for_terminal("🔍 fetch() contract violations", markup=True))
    table.add_column("File", style="cyan", no_wrap=False)
    table.add_column("Line", style="green", justify="right")
    table.add_column("Col", style="green", justify="right")
    table.add_column("Rule", style="magenta", no_wrap=True)
    table.add_column("Message", style="white")

    ordered = sorted(diagnostics, key=lambda d: (d.file_path or '', d.line, d.column, d.rule_id))
    for diagnostic in ordered:
        table.add_row(
            escape(display_path(Path(diagnostic.file_path)) if diagnostic.file_path else '<source>'),
            str(diagnostic.line),
            str(diagnostic.column),
            diagnostic.rule_id,
            escape(diagnostic.message),
        )
    return table


def version_callback(value: bool):
    if value:
        console.print(f"fetchlint {__version__}")
        raise typer.Exit()


@app.command()
def check(
    paths: List[str] = typer.Argument(..., help="Files or directories to analyze"),
    rule: Optional[List[str]] = typer.Option(None, "--rule", "-r", help="Enable only this rule (repeatable)"),
    no_require_query_builder: bool = typer.Option(False, "--no-require-query-builder", help="Accept hand-encoded query strings"),
    target: Optional[str] = typer.Option(None, "--target", "-t", help="Name of the request function (default: fetch)"),
    fix: bool = typer.Option(False, "--fix", help="Apply available fixes in place"),
):
    """Analyze JavaScript/TypeScript sources and report contract violations."""
    try:
        config = get_config()
    except ValueError as e:
        console.print(f"[bold red]Configuration error:[/bold red] {escape(str(e))}")
        raise typer.Exit(2)

    if rule:
        unknown = [r for r in rule if r not in DETECTORS_BY_ID]
        if unknown:
            raise typer.BadParameter(f"unknown rule(s): {', '.join(unknown)}", param_hint="--rule")
    enabled = rule or config.enabled_rules

    options = config.analysis_options()
    if no_require_query_builder:
        options = replace(options, require_query_builder=False)
    if target:
        options = replace(options, target_name=target)
    analyzer = FetchContractAnalyzer(options=options, rules=enabled)

    roots = [Path(p) for p in paths]
    for root in roots:
        if not root.exists():
            console.print(f"[bold red]Error:[/bold red] Path does not exist: {escape(str(root))}")
            raise typer.Exit(1)

    files = discover_files(roots)
    all_diagnostics: List[Diagnostic] = []
    fixed_count = 0

    for file_path in files:
        diagnostics = analyzer.analyze_file(file_path)
        if diagnostics is None:
            console.print(f"[yellow]⚠ Skipped unreadable file:[/yellow] {escape(display_path(file_path))}")
            continue
        if fix:
            applied, diagnostics = fix_file(analyzer, file_path, diagnostics)
            fixed_count += applied
        all_diagnostics.extend(diagnostics)

    if fix and fixed_count:
        console.print(f"[bold blue]🔧 Applied {fixed_count} fix(es)[/bold blue]")

    if not all_diagnostics:
        console.print(f"[bold green]✓ No problems found in {len(files)} file(s)[/bold green]")
        return

    console.print(build_table(all_diagnostics))
    affected = len({d.file_path for d in all_diagnostics})
    console.print(f"\n[bold red]✗ {len(all_diagnostics)} problem(s) in {affected} file(s)[/bold red]")
    raise typer.Exit(1)


@app.command()
def rules():
    """List the available rules and their messages."""
    table = Table(title="fetchlint rules", show_header=True, header_style="bold cyan")
    table.add_column("Rule", style="magenta", no_wrap=True)
    table.add_column("Message IDs", style="yellow")
    table.add_column("Description", style="white", no_wrap=False)

    for detector in ALL_DETECTORS:
        table.add_row(detector.rule_id, ", ".join(detector.messages), escape(detector.description))

    console.print(table)


@app.callback()
def main(
    version: bool = typer.Option(False, "--version", callback=version_callback, is_eager=True,
                                 help="Show the version and exit"),
):
    """fetchlint - static contract checks for fetch() calls."""
    pass


if __name__ == "__main__":
    app()
