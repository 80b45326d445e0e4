"""
DevInsight - Main CLI
Repository analyzer and developer productivity dashboard.
"""

import asyncio
import json
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from analyzers.dependency_parser import (
    analyze_dependency_health,
    get_dependencies_summary,
    get_project_name,
    has_package_json,
)
from analyzers.git_activity import GitRepository, GitSnapshot
from analyzers.health_checker import HealthChecker
from analyzers.insights import (
    build_suggestions,
    find_refactor_candidates,
    modification_insight,
    size_insight,
)
from analyzers.tag_scanner import scan_for_tags, summarize, top_files_by_tag_count
from core.config import AnalyzerConfig, load_config
from core.scanner import (
    detect_languages,
    format_bytes,
    get_largest_directories,
    get_largest_files,
    get_top_level_directories,
    scan_directory,
)
from utils.markdown_report_generator import MarkdownReportGenerator, ReportData
from utils.time_format import time_ago

app = typer.Typer(help="Repository Analyzer and Developer Productivity Dashboard")
console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger(__name__)

LEVEL_STYLES = {"high": "red", "medium": "yellow", "ok": "green"}

PATH_OPTION = typer.Option(Path("."), "--path", "-p", help="Project root to analyze")
EXCLUDE_OPTION = typer.Option(None, "--exclude", "-x", help="Extra directory name to skip (repeatable)")
MAX_DEPTH_OPTION = typer.Option(None, "--max-depth", min=0, help="Maximum directory depth to scan")


def setup_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def load_settings(path: Path, exclude: Optional[List[str]], max_depth: Optional[int]):
    """Resolve the project root and merge file config with CLI options."""
    root = path.resolve()
    config = load_config(root)
    extra = set(exclude or [])
    return root, config.with_overrides(
        exclude_dirs=config.exclude_dirs | extra if extra else None,
        max_depth=max_depth,
    )


@contextmanager
def command_errors():
    """Report failures the way every command does: red message, exit 1."""
    try:
        yield
    except (RuntimeError, ValueError, OSError) as e:
        logger.debug("Command failed", exc_info=True)
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)


def simple_table(*columns: str, **kwargs) -> Table:
    table = Table(header_style="cyan", **kwargs)
    for column in columns:
        table.add_column(column)
    return table


async def collect_git_snapshot(repo: GitRepository, include_history: bool = False) -> GitSnapshot:
    branch, today, week, last, files = await asyncio.gather(
        asyncio.to_thread(repo.current_branch),
        asyncio.to_thread(repo.commits_today),
        asyncio.to_thread(repo.commits_this_week),
        asyncio.to_thread(repo.last_commit),
        asyncio.to_thread(repo.last_commit_files),
    )
    most_modified = await asyncio.to_thread(repo.most_modified_files, 10) if include_history else []
    return GitSnapshot(branch, today, week, last, files, most_modified)


# ── analyze ───────────────────────────────────────────────

def run_analyze(root: Path, config: AnalyzerConfig):
    console.print("\n[bold cyan]Repository Analysis[/bold cyan]\n")

    if not GitRepository(root, config.git_timeout_seconds).is_repository():
        console.print("[yellow]Warning: Not a Git repository. Some features may be limited.[/yellow]\n")

    console.print("[bold blue]═══ Project Overview ═══[/bold blue]\n")
    console.print(f"Project Name: [bold green]{escape(get_project_name(root))}[/bold green]")

    console.print("[dim]Scanning directory...[/dim]")
    scan = scan_directory(root, config.scan_options())
    console.print(f"Total Files: [green]{len(scan.files)}[/green]")
    console.print(f"Total Directories: [green]{len(scan.directories)}[/green]")

    languages = detect_languages(scan.files)
    if languages:
        console.print("\nProgramming Languages Detected:")
        table = simple_table("Language", "Files")
        for lang in languages:
            table.add_row(lang.language, str(lang.count))
        console.print(table)

    console.print("\nLargest Directories by File Count:")
    largest_dirs = get_largest_directories(root, 5, config.scan_options())
    if largest_dirs:
        table = simple_table("Directory", "Files", "Size")
        for d in largest_dirs:
            table.add_row(escape(d.name), str(d.file_count), format_bytes(d.size))
        console.print(table)
    else:
        console.print("[dim]  No subdirectories found[/dim]")

    console.print("\n[bold blue]═══ Folder Structure Summary ═══[/bold blue]\n")
    top_dirs = get_top_level_directories(root)
    if top_dirs:
        table = simple_table("Directory", "Description")
        for d in top_dirs:
            table.add_row(escape(d.name), d.description)
        console.print(table)
    else:
        console.print("[dim]No top-level directories found[/dim]")

    console.print("\n[bold blue]═══ Dependency Summary ═══[/bold blue]\n")
    if not has_package_json(root):
        console.print("[yellow]  No package.json found[/yellow]")
    else:
        deps = get_dependencies_summary(root)
        console.print(f"Total Dependencies: [bold green]{deps.total_count}[/bold green]")
        console.print(f"  • Dependencies: [green]{deps.dependency_count}[/green]")
        console.print(f"  • Dev Dependencies: [green]{deps.dev_dependency_count}[/green]")
        if deps.peer_dependency_count:
            console.print(f"  • Peer Dependencies: [green]{deps.peer_dependency_count}[/green]")

        for title, items in (("Main Dependencies", deps.dependencies), ("Dev Dependencies", deps.dev_dependencies)):
            if not items:
                continue
            console.print(f"\n{title}:")
            table = simple_table("Package", "Version")
            for dep in items[:10]:
                table.add_row(escape(dep.name), escape(dep.version))
            console.print(table)
            if len(items) > 10:
                console.print(f"[dim]  ... and {len(items) - 10} more[/dim]")

        issues = analyze_dependency_health(root)
        if issues:
            console.print()
        for issue in issues:
            style = "yellow" if issue.type == "warning" else "dim"
            console.print(f"[{style}]  {escape(issue.message)}[/{style}]")

    console.print("\n[green]✓ Analysis complete![/green]\n")


# ── dashboard ─────────────────────────────────────────────

async def run_dashboard(root: Path, config: AnalyzerConfig, as_json: bool = False):
    repo = GitRepository(root, config.git_timeout_seconds)
    repo.require_repository()

    snapshot, scan = await asyncio.gather(
        collect_git_snapshot(repo),
        asyncio.to_thread(scan_directory, root, config.scan_options()),
    )
    tags = scan_for_tags(scan.files)
    summary = summarize(tags)

    if as_json:
        payload = {"git": snapshot.to_dict(), "tasks": summary.to_dict()}
        typer.echo(json.dumps(payload, indent=2))
        return

    console.print("\n[bold cyan]Developer Productivity Dashboard[/bold cyan]\n")
    console.print("[bold blue]═══ Git Activity ═══[/bold blue]\n")

    table = simple_table("Metric", "Value")
    table.add_row("Current Branch", f"[green]{escape(snapshot.current_branch)}[/green]")
    table.add_row("Commits Today", f"[yellow]{snapshot.commits_today}[/yellow]")
    table.add_row("Commits This Week", f"[yellow]{snapshot.commits_this_week}[/yellow]")
    last = snapshot.last_commit
    if last:
        message = last.message if len(last.message) <= 45 else last.message[:45] + "..."
        table.add_row("Last Commit", time_ago(last.date))
        table.add_row("Last Commit Message", escape(message))
        table.add_row("Last Commit Author", escape(last.author))
    console.print(table)

    console.print("\n[bold blue]═══ File Activity (Last Commit) ═══[/bold blue]\n")
    stat = snapshot.last_commit_files
    if stat.files:
        console.print(f"Files Modified: [green]{len(stat.files)}[/green]")
        console.print(f"Lines Added: [green]+{stat.additions}[/green]")
        console.print(f"Lines Removed: [red]-{stat.deletions}[/red]")
        console.print("\nModified Files:")
        for name in stat.files[:10]:
            console.print(f"[dim]  • {escape(name)}[/dim]")
        if len(stat.files) > 10:
            console.print(f"[dim]  ... and {len(stat.files) - 10} more[/dim]")
    else:
        console.print("[dim]No file changes detected in last commit[/dim]")

    console.print("\n[bold blue]═══ Task Detection ═══[/bold blue]\n")
    table = simple_table("Type", "Count")
    table.add_row("TODO", f"[yellow]{summary.todos}[/yellow]")
    table.add_row("FIXME", f"[red]{summary.fixmes}[/red]")
    table.add_row("HACK", f"[magenta]{summary.hacks}[/magenta]")
    table.add_row("Total", f"[bold]{summary.total}[/bold]")
    console.print(table)
    console.print(f"\nFiles Containing Tasks: [green]{summary.file_count}[/green]")

    if tags.todos:
        console.print("\nRecent TODOs:")
        for todo in tags.todos[:5]:
            console.print(f"[dim]  • {escape(f'[{todo.file}] {todo.comment}')}[/dim]")
        if len(tags.todos) > 5:
            console.print(f"[dim]  ... and {len(tags.todos) - 5} more[/dim]")

    console.print("\n[green]✓ Dashboard generated![/green]\n")


# ── insights ──────────────────────────────────────────────

def run_insights(root: Path, config: AnalyzerConfig):
    console.print("\n[bold cyan]💡 Smart Insights[/bold cyan]\n")

    repo = GitRepository(root, config.git_timeout_seconds)
    repo.require_repository()

    console.print("[bold blue]═══ Most Frequently Modified Files ═══[/bold blue]\n")
    console.print("[dim]Analyzing Git history...[/dim]")
    most_modified = repo.most_modified_files(10)
    if most_modified:
        table = simple_table("File", "Edit Count", "Insight")
        for path, count in most_modified:
            level, text = modification_insight(count)
            table.add_row(escape(path[:38]), str(count), f"[{LEVEL_STYLES[level]}]{text}[/{LEVEL_STYLES[level]}]")
        console.print(table)
    else:
        console.print("[dim]No modification history found[/dim]")

    console.print("\n[bold blue]═══ Largest Files ═══[/bold blue]\n")
    console.print("[dim]Scanning files...[/dim]")
    scan = scan_directory(root, config.scan_options())
    largest = get_largest_files(scan.files, 10, config.largest_files_min_size)
    if largest:
        table = simple_table("File", "Size", "Insight")
        for f in largest:
            level, text = size_insight(f.size)
            table.add_row(escape(f.name[:38]), f.size_formatted, f"[{LEVEL_STYLES[level]}]{text}[/{LEVEL_STYLES[level]}]")
        console.print(table)
    else:
        console.print("[dim]No large files detected[/dim]")

    console.print("\n[bold blue]═══ Refactor Candidates ═══[/bold blue]\n")
    console.print("[dim]Analyzing code complexity...[/dim]")
    tags = scan_for_tags(scan.files)
    top_tag_files = top_files_by_tag_count(tags, 5)
    candidates = find_refactor_candidates(top_tag_files, largest, most_modified)
    if candidates:
        table = simple_table("File", "Reason", "Priority")
        for c in candidates:
            priority = "[red]High[/red]" if c.severity == "high" else "[yellow]Medium[/yellow]"
            table.add_row(escape(c.file[:33]), escape(c.reason), priority)
        console.print(table)
    else:
        console.print("[green]✓ No immediate refactor candidates detected[/green]")

    console.print("\n[bold blue]═══ Suggestions ═══[/bold blue]\n")
    suggestions = build_suggestions(most_modified, largest, tags, top_tag_files, candidates)
    if suggestions:
        for i, suggestion in enumerate(suggestions, 1):
            console.print(f"[yellow]{i}. {escape(suggestion)}[/yellow]")
    else:
        console.print("[green]✓ Your codebase looks healthy! Keep up the good work.[/green]")

    console.print("\n[green]✓ Insights analysis complete![/green]\n")


# ── health ────────────────────────────────────────────────

def run_health(root: Path, config: AnalyzerConfig):
    console.print("\n[bold cyan]Repository Health Check[/bold cyan]\n")

    is_git = GitRepository(root, config.git_timeout_seconds).is_repository()
    console.print("[dim]Scanning for large files...[/dim]")
    scan = scan_directory(root, config.scan_options())
    report = HealthChecker(root, is_git, scan).run()

    if report.passed:
        console.print("[bold green]✓ Passed Checks:[/bold green]\n")
        for check in report.passed:
            console.print(f"[green]  ✓ {check}[/green]")
        console.print()

    if report.warnings:
        console.print("[bold yellow]Warnings:[/bold yellow]\n")
        icons = {"error": "❌", "warning": "⚠️", "info": "ℹ️"}
        for warning in report.warnings:
            console.print(f"[yellow]{icons.get(warning.type, '•')} {warning.message}[/yellow]")
            console.print(f"[dim]   → {warning.suggestion}[/dim]\n")

    if report.suggestions:
        console.print("[bold cyan]Suggestions:[/bold cyan]\n")
        for suggestion in report.suggestions:
            console.print(f"[cyan]  • {suggestion}[/cyan]")
        console.print()

    score = report.score
    style, verdict = "green", "Excellent! Your repository is in great shape!"
    if score < 50:
        style, verdict = "red", "Needs attention. Please review the warnings above."
    elif score < 75:
        style, verdict = "yellow", "Needs attention. Please review the warnings above."
    elif score < 100:
        style, verdict = "green", "Good! Address the warnings to improve further."

    console.print(Panel(
        f"[bold {style}]{score}%[/bold {style}] ({len(report.passed)}/{report.total_checks} checks passed)\n\n{verdict}",
        title="[bold]Health Score[/bold]",
        expand=False,
        border_style=style,
    ))


# ── report ────────────────────────────────────────────────

async def run_report(root: Path, config: AnalyzerConfig, output: Optional[Path] = None) -> Path:
    console.print("\n[bold cyan]Generating Report...[/bold cyan]\n")
    report_path = output or root / config.report_filename

    repo = GitRepository(root, config.git_timeout_seconds)
    is_git = repo.is_repository()

    if is_git:
        snapshot, scan = await asyncio.gather(
            collect_git_snapshot(repo, include_history=True),
            asyncio.to_thread(scan_directory, root, config.scan_options()),
        )
    else:
        snapshot, scan = None, await asyncio.to_thread(scan_directory, root, config.scan_options())

    tags = scan_for_tags(scan.files)
    data = ReportData(
        project_name=get_project_name(root),
        scan=scan,
        tags=tags,
        languages=detect_languages(scan.files),
        largest_directories=get_largest_directories(root, 5, config.scan_options()),
        top_level_directories=get_top_level_directories(root),
        dependencies=get_dependencies_summary(root) if has_package_json(root) else None,
        largest_files=get_largest_files(scan.files, 10, config.largest_files_min_size),
        top_tag_files=top_files_by_tag_count(tags, 5),
        git=snapshot,
        health_checks=HealthChecker(root, is_git, scan).basic_checks(),
        todo_list_limit=config.todo_list_limit,
    )
    MarkdownReportGenerator().generate(data, report_path)

    console.print("[green]✓ Report generated successfully![/green]")
    console.print(f"\nReport saved to: [cyan]{escape(str(report_path))}[/cyan]\n")
    return report_path


# ── commands ──────────────────────────────────────────────

@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """
    Run a command, or pick one from the interactive menu when none is given.
    """
    setup_logging(verbose)
    if ctx.invoked_subcommand is None:
        interactive_menu()


@app.command()
def analyze(path: Path = PATH_OPTION, exclude: Optional[List[str]] = EXCLUDE_OPTION,
            max_depth: Optional[int] = MAX_DEPTH_OPTION):
    """Analyze the repository structure and dependencies."""
    with command_errors():
        run_analyze(*load_settings(path, exclude, max_depth))


@app.command()
def dashboard(
    path: Path = PATH_OPTION,
    exclude: Optional[List[str]] = EXCLUDE_OPTION,
    max_depth: Optional[int] = MAX_DEPTH_OPTION,
    as_json: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Display the developer productivity dashboard."""
    with command_errors():
        root, config = load_settings(path, exclude, max_depth)
        asyncio.run(run_dashboard(root, config, as_json))


@app.command()
def insights(path: Path = PATH_OPTION, exclude: Optional[List[str]] = EXCLUDE_OPTION,
             max_depth: Optional[int] = MAX_DEPTH_OPTION):
    """Analyze patterns and provide smart insights."""
    with command_errors():
        run_insights(*load_settings(path, exclude, max_depth))


@app.command()
def health(path: Path = PATH_OPTION, exclude: Optional[List[str]] = EXCLUDE_OPTION,
           max_depth: Optional[int] = MAX_DEPTH_OPTION):
    """Perform repository health checks."""
    with command_errors():
        run_health(*load_settings(path, exclude, max_depth))


@app.command()
def report(
    path: Path = PATH_OPTION,
    exclude: Optional[List[str]] = EXCLUDE_OPTION,
    max_depth: Optional[int] = MAX_DEPTH_OPTION,
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Report file path"),
):
    """Generate a comprehensive Markdown report."""
    with command_errors():
        root, config = load_settings(path, exclude, max_depth)
        asyncio.run(run_report(root, config, output))


MENU_ACTIONS = {
    "1": ("Analyze Repository", run_analyze),
    "2": ("Developer Dashboard", lambda root, config: asyncio.run(run_dashboard(root, config))),
    "3": ("Smart Insights", run_insights),
    "4": ("Health Check", run_health),
    "5": ("Generate Report", lambda root, config: asyncio.run(run_report(root, config))),
}


def interactive_menu():
    while True:
        menu = Table.grid(padding=(0, 1))
        menu.add_column(style="cyan", justify="right")
        menu.add_column(style="white")
        for key, (label, _) in MENU_ACTIONS.items():
            menu.add_row(f"{key}.", label)
        menu.add_row("6.", "Exit")

        console.print(Panel(
            menu,
            title="[bold green]DevInsight CLI - Interactive Mode[/bold green]",
            expand=False,
            border_style="green",
        ))

        choice = Prompt.ask("What would you like to do?", choices=["1", "2", "3", "4", "5", "6"], default="1")
        if choice == "6":
            break

        _, action = MENU_ACTIONS[choice]
        try:
            with command_errors():
                action(*load_settings(Path("."), None, None))
        except typer.Exit:
            pass  # already reported, keep the menu open

        if not Confirm.ask("Would you like to perform another action?", default=True):
            break

    console.print("\n[yellow]Goodbye![/yellow]\n")


if __name__ == "__main__":
    app()
