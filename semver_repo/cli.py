"""semver-repo CLI — manage and serve a crate repository."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from semver_repo import __version__
from semver_repo.errors import RepoError
from semver_repo.models import Crate, CrateKind, Metadata
from semver_repo.semver import ParseError, SemVer

console = Console()
err_console = Console(stderr=True)


class SemVerParam(click.ParamType):
    name = "version"

    def convert(self, value, param, ctx):
        if isinstance(value, SemVer):
            return value
        try:
            return SemVer.parse(value)
        except ParseError as e:
            self.fail(str(e), param, ctx)


SEMVER = SemVerParam()

store_option = click.option(
    "--store",
    "-s",
    envvar="REPO_STORE",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Path of the JSON store file [env: REPO_STORE]",
)

kind_option = click.option(
    "--kind",
    "-k",
    default="binary",
    type=click.Choice(["binary", "library"], case_sensitive=False),
)


def _configure_logging(verbose: bool) -> None:
    level = "DEBUG" if verbose else (os.environ.get("REPO_LOG_LEVEL") or "WARNING")
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )


def _require_store(store: Path | None) -> Path:
    if store is None:
        raise click.UsageError("missing store path. Pass --store or set REPO_STORE, e.g. REPO_STORE=/tmp/store.json")
    return store


def _metadata(name: str, author: str, kind: str) -> Metadata:
    try:
        return Metadata(name, author, CrateKind[kind.upper()])
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="NAME") from None


def _fail(error: object) -> None:
    console.print(f"[red]Error:[/] {error}")
    raise SystemExit(1)


def _print_crate(crate: Crate) -> None:
    releases = ", ".join(str(v) for v in crate.releases)
    console.print(f"  [cyan]{crate.name}[/] {crate.latest} ({crate.metadata.kind.value})")
    console.print(f"    author: {crate.metadata.author}")
    console.print(f"    releases: {releases}")


def _print_crates(crates: list[Crate], title: str) -> None:
    if not crates:
        console.print("[yellow]No matching crates found.[/]")
        return

    table = Table(title=f"{title} ({len(crates)} crates)")
    table.add_column("Name", style="cyan")
    table.add_column("Latest", style="green")
    table.add_column("Kind")
    table.add_column("Author")
    table.add_column("Releases", justify="right")

    for crate in sorted(crates, key=lambda c: c.name.lower()):
        table.add_row(
            crate.name,
            str(crate.latest),
            crate.metadata.kind.value,
            crate.metadata.author,
            str(len(crate.releases)),
        )

    console.print(table)


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Log debug output")
def main(verbose: bool):
    """semver-repo — a minimal crate registry.

    Crates carry metadata and a strictly increasing release history. The
    local commands edit a JSON store directly; `remote` talks to a running
    `serve` process.
    """
    _configure_logging(verbose)


# ── Serve ────────────────────────────────────────────────────────────


@main.command()
@store_option
@click.option("--host", envvar="REPO_HOST", default="127.0.0.1", show_default=True)
@click.option("--port", "-p", envvar="REPO_PORT", default=7878, type=int, show_default=True)
def serve(store: Path | None, host: str, port: int):
    """Serve the repository over TCP until interrupted."""
    from semver_repo.config import Settings, parse_port
    from semver_repo.server import serve as run_server

    try:
        port = parse_port(port)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--port") from None

    settings = Settings(store=_require_store(store), host=host, port=port)
    console.print(f"\n[bold blue]semver-repo[/] — serving {settings.store} on {host}:{port}\n")
    run_server(settings)


# ── Local store ──────────────────────────────────────────────────────


@main.command()
@click.argument("name")
@store_option
def show(name: str, store: Path | None):
    """Show the crate called NAME (exact, case-sensitive)."""
    from semver_repo.repository import Repository

    with Repository.open(_require_store(store)) as repo:
        crate = repo.find_exact(name)

    if crate is None:
        console.print(f"[yellow]No crate named {name!r}.[/]")
        return
    _print_crate(crate)


@main.command()
@click.argument("query", default="")
@store_option
def search(query: str, store: Path | None):
    """List crates whose name contains QUERY (case-insensitive).

    With no QUERY every crate is listed.
    """
    from semver_repo.repository import Repository

    with Repository.open(_require_store(store)) as repo:
        crates = repo.find_containing(query)

    _print_crates(crates, title="Crates")


@main.command()
@click.argument("name")
@click.option("--author", "-a", required=True)
@kind_option
@click.option("--version", "version", type=SEMVER, default="1.0.0", show_default=True)
@store_option
def add(name: str, author: str, kind: str, version: SemVer, store: Path | None):
    """Register a new crate NAME with its first release."""
    from semver_repo.repository import Repository

    with Repository.open(_require_store(store)) as repo:
        try:
            repo.add_crate(_metadata(name, author, kind), version)
        except RepoError as e:
            _fail(e)

    console.print(f"  Added: [cyan]{name}[/] {version}")


@main.command()
@click.argument("name")
@click.argument("version", type=SEMVER)
@store_option
def release(name: str, version: SemVer, store: Path | None):
    """Add VERSION to the release history of crate NAME."""
    from semver_repo.repository import Repository

    with Repository.open(_require_store(store)) as repo:
        try:
            repo.add_release(name, version)
        except RepoError as e:
            _fail(e)

    console.print(f"  Released: [cyan]{name}[/] {version}")


# ── Remote ───────────────────────────────────────────────────────────


@main.group()
@click.option("--host", envvar="REPO_HOST", default="127.0.0.1", show_default=True)
@click.option("--port", "-p", envvar="REPO_PORT", default=7878, type=int, show_default=True)
@click.option("--timeout", default=5.0, type=float, show_default=True)
@click.pass_context
def remote(ctx: click.Context, host: str, port: int, timeout: float):
    """Talk to a running `semver-repo serve` process."""
    from semver_repo.client import RepositoryClient

    ctx.obj = RepositoryClient(host, port, timeout=timeout)


def _call(fn, *args):
    from semver_repo.client import ApiInternalError

    try:
        return fn(*args)
    except (RepoError, ApiInternalError) as e:
        _fail(e)
    except OSError as e:
        _fail(f"could not reach server: {e}")


@remote.command(name="show")
@click.argument("name")
@click.pass_obj
def remote_show(client, name: str):
    """Show the crate called NAME."""
    crate = _call(client.find_exact, name)
    if crate is None:
        console.print(f"[yellow]No crate named {name!r}.[/]")
        return
    _print_crate(crate)


@remote.command(name="search")
@click.argument("query", default="")
@click.pass_obj
def remote_search(client, query: str):
    """List crates whose name contains QUERY."""
    _print_crates(_call(client.find_containing, query), title="Crates")


@remote.command(name="add")
@click.argument("name")
@click.option("--author", "-a", required=True)
@kind_option
@click.option("--version", "version", type=SEMVER, default="1.0.0", show_default=True)
@click.pass_obj
def remote_add(client, name: str, author: str, kind: str, version: SemVer):
    """Register a new crate NAME with its first release."""
    _call(client.add_crate, _metadata(name, author, kind), version)
    console.print(f"  Added: [cyan]{name}[/] {version}")


@remote.command(name="release")
@click.argument("name")
@click.argument("version", type=SEMVER)
@click.pass_obj
def remote_release(client, name: str, version: SemVer):
    """Add VERSION to the release history of crate NAME."""
    _call(client.add_release, name, version)
    console.print(f"  Released: [cyan]{name}[/] {version}")


if __name__ == "__main__":
    main()
