"""Console helpers for simbot-codegen.

Rich-based status messages, summary tables and a tree preview of generated
files.  Only the outer pipeline and the CLI print; generation itself is
silent.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import PurePosixPath

from rich.console import Console
from rich.table import Table
from rich.tree import Tree

console = Console()


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def format_size(num_bytes: int) -> str:
    """Format a byte count for display.

    Examples::

        format_size(512)     -> "512 B"
        format_size(2048)    -> "2.0 KiB"
        format_size(3 << 20) -> "3.0 MiB"
    """
    if num_bytes < 1024:
        return f"{num_bytes} B"
    size = float(num_bytes)
    for unit in ("KiB", "MiB", "GiB"):
        size /= 1024
        if size < 1024 or unit == "GiB":
            break
    return f"{size:.1f} {unit}"


def build_file_tree(paths: Iterable[str], title: str | None = None) -> Tree:
    """Build a Rich tree from slash-separated file paths.

    Folders are listed before files at every level; both are sorted by name.

    Args:
        paths: File paths, e.g. ``"demo/src/main/resources/application.yml"``.
        title: Label of the root node.  Defaults to ``"."``.

    Returns:
        A ``Tree`` ready for ``console.print``.
    """
    nested: dict[str, dict] = {}
    for path in paths:
        node = nested
        for part in PurePosixPath(path).parts:
            node = node.setdefault(part, {})

    root = Tree(title or ".", guide_style="dim")

    def _add(branch: Tree, children: dict[str, dict]) -> None:
        folders = sorted(name for name, sub in children.items() if sub)
        files = sorted(name for name, sub in children.items() if not sub)
        for name in folders:
            _add(branch.add(f"[bold blue]{name}/[/bold blue]"), children[name])
        for name in files:
            branch.add(name)

    _add(root, nested)
    return root


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column key/value summary table.

    Args:
        data: Mapping of label -> value.
        title: Table title.
    """
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, str(value))

    console.print(table)
    console.print()


def print_file_tree(paths: Iterable[str], title: str | None = None) -> None:
    """Print the generated files as a tree."""
    console.print(build_file_tree(paths, title))


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{message}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{message}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{message}[/bold yellow]")
