"""sigdelta subtract command - drop signatures another tree already declares."""

from pathlib import Path

import click
import structlog
from rich.console import Console
from rich.markup import escape

from sigdelta.config.models import SigDeltaConfig
from sigdelta.core.errors import SigDeltaError
from sigdelta.core.logging import clear_run_id, get_log_file_path, set_run_id
from sigdelta.signature.ast import Declaration, count_nodes
from sigdelta.signature.documents import (
    collect_documents,
    dump_document,
    load_document,
    write_document,
)
from sigdelta.signature.index import SignatureIndex
from sigdelta.subtract.subtractor import subtract

log = structlog.get_logger(__name__)


@click.command()
@click.argument("minuends", nargs=-1, required=True, type=click.Path(exists=True, path_type=Path))
@click.option(
    "-s",
    "--subtrahend",
    "subtrahends",
    multiple=True,
    required=True,
    type=click.Path(exists=True, path_type=Path),
    help="Signature file or directory to subtract (repeatable)",
)
@click.option("--write", is_flag=True, help="Rewrite minuend files in place")
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["json", "yaml"]),
    default=None,
    help="Output format for stdout (default: output.format from config)",
)
@click.pass_context
def subtract_command(
    ctx: click.Context,
    minuends: tuple[Path, ...],
    subtrahends: tuple[Path, ...],
    write: bool,
    fmt: str | None,
) -> None:
    """Remove from MINUENDS every declaration the subtrahends already have.

    MINUENDS are signature documents (.json, .yaml, .yml) or directories of
    them. Results go to stdout unless --write is given.
    """
    ctx.ensure_object(dict)
    config: SigDeltaConfig = ctx.obj.get("config") or SigDeltaConfig()
    fmt = fmt or config.output.format

    console = Console(stderr=True)
    set_run_id()
    try:
        minuend_paths = collect_documents(minuends)
        subtrahend_paths = collect_documents(subtrahends)

        overlap = {p.resolve() for p in minuend_paths} & {p.resolve() for p in subtrahend_paths}
        if overlap:
            shown = ", ".join(sorted(str(p) for p in overlap))
            raise click.UsageError(f"Paths given as both minuend and subtrahend: {shown}")

        index = SignatureIndex.from_documents(load_document(p) for p in subtrahend_paths)
        log.debug("subtrahend_loaded", files=len(subtrahend_paths), index=repr(index))

        for path in minuend_paths:
            doc = load_document(path)
            result = subtract(doc.declarations, index, accessor_policy=config.subtract.accessor_policy)

            if write:
                _write_result(console, path, tuple(result), doc.declarations, config)
                continue

            if len(minuend_paths) > 1:
                click.echo(f"# {path}")
            click.echo(dump_document(result, fmt=fmt, indent=config.output.indent), nl=False)
    except SigDeltaError as e:
        log.error("subtract_failed", **e.to_dict())
        raise click.ClickException(_error_message(e)) from e
    finally:
        clear_run_id()


def _write_result(
    console: Console,
    path: Path,
    result: tuple[Declaration, ...],
    original: tuple[Declaration, ...],
    config: SigDeltaConfig,
) -> None:
    # Subtraction only removes nodes, so an equal count means nothing was dropped.
    if count_nodes(result) == count_nodes(original):
        console.print(f"[dim]Unchanged[/dim] {escape(str(path))}", soft_wrap=True)
        return
    if not result and config.output.remove_empty:
        path.unlink()
        console.print(f"[red]Removed[/red] {escape(str(path))}", soft_wrap=True)
        return
    write_document(path, result, indent=config.output.indent)
    console.print(f"[green]Updated[/green] {escape(str(path))}", soft_wrap=True)


def _error_message(error: SigDeltaError) -> str:
    log_file = get_log_file_path()
    if log_file is None:
        return str(error)
    return f"{error}. See {log_file} for details."
