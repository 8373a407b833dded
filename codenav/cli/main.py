"""
Codenav CLI - query a language server from the terminal.

Positions on the command line are 1-indexed, as editors show them;
they are converted to the protocol's 0-indexed positions internally.
"""

from __future__ import annotations

import os
import re
import shlex
from dataclasses import dataclass, replace
from pathlib import Path

import click

from codenav import __version__
from codenav.cli._context import client_scope
from codenav.config import ClientSettings
from codenav.lsp.client import LspClient
from codenav.lsp.utils import relative_to_root
from codenav.navigation.graph import CallHierarchyGraph
from codenav.navigation.references import ReferenceList
from codenav.types.errors import MSG_NO_REFERENCES, CodenavError
from codenav.utils.logger import configure_logging, logger

_IDENTIFIER = re.compile(r"\w+")


@dataclass
class CliState:
    settings: ClientSettings
    root: str


def _symbol_at(content: str, line: int, column: int) -> str:
    """Identifier under a 0-indexed position, or an empty string."""
    lines = content.split("\n")
    if line >= len(lines):
        return ""
    for match in _IDENTIFIER.finditer(lines[line]):
        if match.start() <= column < match.end():
            return match.group()
    return ""


def _fail(ctx: click.Context, error: CodenavError) -> None:
    logger.debug(f"{type(error).__name__}: {error}")
    click.echo(error.user_message, err=True)
    ctx.exit(1)


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, message="Codenav v%(version)s")
@click.option("--debug", is_flag=True, help="Log wire traffic to stderr.")
@click.option(
    "--root",
    type=click.Path(exists=True, file_okay=False),
    default=None,
    help="Project root passed to the server (default: current directory).",
)
@click.option("--timeout", type=float, default=None, help="Seconds to wait per request.")
@click.option("--server", default=None, help="Server command line (overrides CODENAV_SERVER).")
@click.pass_context
def cli(
    ctx: click.Context,
    debug: bool,
    root: str | None,
    timeout: float | None,
    server: str | None,
) -> None:
    """Codenav - references and call hierarchy from a language server."""
    configure_logging(debug)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        return

    try:
        settings = ClientSettings.from_env()
        if server:
            settings = replace(settings, server_command=shlex.split(server))
        if timeout is not None:
            settings = replace(settings, timeout=timeout)
    except CodenavError as e:
        _fail(ctx, e)
        return

    ctx.obj = CliState(settings=settings, root=str(Path(root or os.getcwd()).resolve()))


def _open_source(client: LspClient, path: Path) -> str:
    content = path.read_text(encoding=client.settings.encoding, errors="replace")
    client.did_open(str(path), content)
    return content


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.argument("line", type=click.IntRange(min=1))
@click.argument("column", type=click.IntRange(min=1))
@click.option("--filter", "pattern", default=None, help="Glob on file paths; prefix with ! to exclude.")
@click.pass_obj
def references(state: CliState, file: str, line: int, column: int, pattern: str | None) -> None:
    """Find references to the symbol at FILE:LINE:COLUMN."""
    ctx = click.get_current_context()
    path = Path(file).resolve()
    try:
        with client_scope(state.root, state.settings) as client:
            content = _open_source(client, path)
            found = client.find_references(str(path), line - 1, column - 1)
    except CodenavError as e:
        _fail(ctx, e)
        return

    ref_list = ReferenceList.from_references(_symbol_at(content, line - 1, column - 1), found)
    if pattern:
        ref_list.apply_filter(pattern)

    if ref_list.visible_count() == 0:
        click.echo(MSG_NO_REFERENCES)
        return

    for ref in ref_list.visible():
        location = f"{relative_to_root(ref.file_path, state.root)}:{ref.line + 1}:{ref.column + 1}"
        click.echo(f"{location}: {ref.snippet.strip()}")


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.argument("line", type=click.IntRange(min=1))
@click.argument("column", type=click.IntRange(min=1))
@click.option("--dot", is_flag=True, help="Print Graphviz DOT instead of a text tree.")
@click.option("--strict", is_flag=True, help="Fail when several symbols match the position.")
@click.pass_obj
def calls(state: CliState, file: str, line: int, column: int, dot: bool, strict: bool) -> None:
    """Show callers and callees of the symbol at FILE:LINE:COLUMN."""
    ctx = click.get_current_context()
    path = Path(file).resolve()
    try:
        with client_scope(state.root, state.settings) as client:
            _open_source(client, path)
            root, incoming, outgoing = client.get_call_hierarchy(
                str(path), line - 1, column - 1, strict=strict
            )
    except CodenavError as e:
        _fail(ctx, e)
        return

    if root is None:
        click.echo("no symbol at position")
        return

    graph = CallHierarchyGraph()
    graph.build_from_call_hierarchy(root, incoming, outgoing)
    click.echo(graph.to_dot() if dot else graph.to_text_tree(), nl=False)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
