"""bz dependency management commands."""

import sys

import click

from ..core.project import find_project_dir, resolve_project
from ..deps.dependency_graph import ResolvedDependency
from ..errors import BzError
from ..factory import get_app_context
from ..utils.console import _rich_success, _rich_error, _rich_info


@click.group(help="🔗 Manage project dependencies")
def deps():
    """bz dependency management commands."""
    pass


def _add_branches(branch, node: ResolvedDependency):
    for child in node.sub:
        label = f"[green]{child.get_display_name()}[/green]"
        if child.triggers.pre_run_script or child.triggers.install_script:
            label += " [dim](triggers)[/dim]"
        _add_branches(branch.add(label), child)


def _echo_branches(node: ResolvedDependency, prefix: str = ""):
    for i, child in enumerate(node.sub):
        is_last = i == len(node.sub) - 1
        click.echo(f"{prefix}{'└── ' if is_last else '├── '}{child.get_display_name()}")
        _echo_branches(child, prefix + ("    " if is_last else "│   "))


@deps.command(help="🌳 Show dependency tree structure")
@click.pass_context
def tree(ctx):
    """Display the resolved dependencies of the project as a tree."""
    try:
        root = resolve_project(get_app_context(ctx.obj))
    except BzError as e:
        _rich_error(f"Error resolving dependencies: {e}", symbol="error")
        sys.exit(1)

    try:
        from rich.tree import Tree
        from rich.console import Console
        console = Console()
        has_rich = True
    except ImportError:
        has_rich = False
        console = None

    if has_rich:
        root_tree = Tree(f"[bold cyan]{root.dir}[/bold cyan] (local)")
        if not root.sub:
            root_tree.add("[dim]No dependencies declared[/dim]")
        _add_branches(root_tree, root)
        console.print(root_tree)
    else:
        click.echo(f"{root.dir} (local)")
        if not root.sub:
            click.echo("└── No dependencies declared")
        _echo_branches(root)

    summary = root.get_summary()
    _rich_info(
        f"{summary['direct_dependencies']} direct, {summary['unique_dependencies']} unique, "
        f"max depth {summary['max_depth']}",
        symbol="tree",
    )


@deps.command(help="🔒 Re-resolve dependencies and rewrite the lock file")
@click.pass_context
def lock(ctx):
    """Ignore the existing lock file, resolve the project config again and rewrite the lock."""
    try:
        app_context = get_app_context(ctx.obj)
        project_dir = find_project_dir(app_context)
        root = resolve_project(app_context, project_dir, force_fuzzy=True)
    except BzError as e:
        _rich_error(f"Error resolving dependencies: {e}", symbol="error")
        sys.exit(1)

    for child in root.sub:
        _rich_info(f"  {child.get_display_name()}")
    _rich_success(f"Locked {len(root.sub)} dependencies in {project_dir}", symbol="lock")
