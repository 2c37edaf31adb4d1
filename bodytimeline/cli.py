"""Command line interface for body-timeline."""

from __future__ import annotations

import io
import json
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import click

from .bodyfile.stream import BodyFileStream
from .collector import write_body_file
from .core.config import TimelineConfig, get_config
from .core.errors import (
    EXIT_FILTER,
    EXIT_ITERATE,
    EXIT_MATERIALIZE,
    EXIT_USAGE,
    FilterCompilationError,
    InvalidDateFormat,
    OutputOpenError,
    StreamReadError,
)
from .core.logger import EntryErrorLog, get_module_logger, setup_logging
from .core.time_utils import utc_isoformat
from .filters.compiler import compile_filter
from .platform import get_stat_provider
from .timeline import SCOPE_NAMES, emit_timeline, filter_help

logger = get_module_logger("cli")

FILTER_EXAMPLES = """
\b
Filter examples:
  --filter "hour > 12"                  (after noon)
  --filter "hour >= 9 && hour <= 17"    (9 AM to 5 PM)
  --filter "day == 19"                  (on the 19th)
  --filter 'weekday == "Monday"'        (on Mondays)
  --filter 'date > "2025-06-19 13:47:35"'
  --filter 'date > "2025/06/19"'        (slash format also supported)

\b
Timestamp-specific filters (only show entries of that timestamp type):
  --modified 'date < "2025-06-17"'
  --access 'date > "2025-06-19"'
  --ctime 'date == "2025-06-16"'

--filter checks all timestamp types. Use --strict to show only the matching
timestamps instead of all timestamps of a matching file.
"""


def _emit_status(
    ctx: click.Context,
    command: str,
    *,
    status: str,
    message: str | None = None,
    details: list[str] | None = None,
    data: Dict[str, Any] | None = None,
    exit_code: int | None = None,
) -> None:
    """Emit a status payload respecting ``--json`` and ``--quiet`` flags."""

    payload: Dict[str, Any] = {
        "command": command,
        "status": status,
        "timestamp": utc_isoformat(),
    }
    if message is not None:
        payload["message"] = message
    if data:
        payload["data"] = data

    json_mode = ctx.obj.get("json_mode", False)
    quiet = ctx.obj.get("quiet", False)

    if json_mode:
        indent = None if quiet else 2
        click.echo(
            json.dumps(payload, indent=indent, sort_keys=True),
            err=status == "error",
        )
    else:
        if message and (not quiet or status != "success"):
            click.echo(message, err=status != "success")
        if not quiet:
            for line in details or []:
                click.echo(line, err=status != "success")

    if exit_code is not None:
        ctx.exit(exit_code)


def _timeline_output(encoding: str) -> io.TextIOWrapper:
    """Return a text view of stdout that writes undecodable path bytes back unchanged."""

    sys.stdout.flush()
    return io.TextIOWrapper(
        sys.stdout.buffer,
        encoding=encoding,
        errors="surrogateescape",
        newline="\n",
        write_through=True,
    )


def _release_output(output: io.TextIOWrapper) -> None:
    """Detach the timeline view so stdout itself stays open for click."""

    try:
        output.detach()
    except OSError as exc:
        # The reader went away; the bytes it did not take are dropped.
        logger.debug(f"Discarding unwritten timeline output: {exc}")


@click.group()
@click.option(
    "--config",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML configuration file",
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Also write DEBUG logs to this file",
)
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.option("--json", "json_mode", is_flag=True, help="Emit JSON status objects")
@click.option("--quiet", is_flag=True, help="Suppress human-readable output")
@click.pass_context
def cli(
    ctx: click.Context,
    config: Path | None,
    log_file: Path | None,
    verbose: bool,
    json_mode: bool,
    quiet: bool,
) -> None:
    """Create and process forensic body files."""

    ctx.ensure_object(dict)

    # Quiet mode takes precedence over verbose output to avoid mixed messaging.
    if quiet:
        log_level = "ERROR"
    elif verbose:
        log_level = "DEBUG"
    else:
        log_level = None

    settings = get_config(
        config_file=config,
        overrides={"log_level": log_level, "log_file": str(log_file) if log_file else None},
    )
    setup_logging(
        level=settings.log_level,
        log_file=Path(settings.log_file) if settings.log_file else None,
    )

    ctx.obj["config"] = settings
    ctx.obj["json_mode"] = json_mode
    ctx.obj["quiet"] = quiet


@cli.command("body")
@click.option(
    "--directory",
    "-d",
    "directory",
    required=True,
    help="Directory containing the files to collect metadata from.",
)
@click.option("--output", "-o", "output", required=True, help="Output body file.")
@click.option(
    "--sid",
    "short_sid",
    is_flag=True,
    help="Windows only: keep just the last component of owner/group SIDs.",
)
@click.option(
    "--force",
    is_flag=True,
    help="Overwrite an existing output file without asking.",
)
@click.pass_context
def body(
    ctx: click.Context,
    directory: str,
    output: str,
    short_sid: bool,
    force: bool,
) -> None:
    """Collect inode metadata below DIRECTORY into a body file."""

    settings: TimelineConfig = ctx.obj["config"]
    output_path = Path(output)

    if not os.path.exists(directory):
        _emit_status(
            ctx,
            "body",
            status="error",
            message=f"The directory doesn't exist! => {directory}",
            exit_code=EXIT_USAGE,
        )

    if output_path.exists():
        confirmed = force or not settings.confirm_overwrite
        if not confirmed:
            confirmed = click.confirm(
                f"File '{output}' already exists. Do you want to overwrite it?",
                default=False,
                err=True,
            )
        if not confirmed:
            _emit_status(
                ctx,
                "body",
                status="error",
                message="Exiting the program.",
                exit_code=EXIT_USAGE,
            )
        try:
            output_path.unlink()
        except OSError as exc:
            _emit_status(
                ctx,
                "body",
                status="error",
                message=f"Could not remove {output}: {exc}",
                exit_code=EXIT_USAGE,
            )

    provider = get_stat_provider(short_sid=short_sid or settings.short_sid)
    error_log_path = settings.error_log_path(output_path)

    try:
        with EntryErrorLog(error_log_path) as error_log:
            summary = write_body_file(
                directory,
                output_path,
                provider,
                error_log=error_log,
                encoding=settings.encoding,
            )
    except OutputOpenError as exc:
        _emit_status(
            ctx,
            "body",
            status="error",
            message=str(exc),
            exit_code=EXIT_USAGE,
        )
        return

    details = []
    if summary.errors:
        details.append(f"{summary.errors} entries logged to {error_log_path}")

    _emit_status(
        ctx,
        "body",
        status="success" if not summary.errors else "warning",
        message=f"Wrote {summary.written} records to {output_path}",
        details=details,
        data={**summary.as_dict(), "provider": provider.name},
    )


@cli.command("process", epilog=FILTER_EXAMPLES)
@click.argument("bodyfile", required=False, default=None)
@click.option(
    "--strict",
    is_flag=True,
    help="Only show the timestamps matching the filter.",
)
@click.option("--filter", "filter_expr", default=None, help="Event filter (all timestamp types).")
@click.option("--modified", default=None, help="Filter on modification time only.")
@click.option("--access", default=None, help="Filter on access time only.")
@click.option("--ctime", default=None, help="Filter on change time only.")
@click.option("--tz", "timezone", default=None, help="Display timezone (default: config, UTC).")
@click.pass_context
def process(
    ctx: click.Context,
    bodyfile: Optional[str],
    strict: bool,
    filter_expr: Optional[str],
    modified: Optional[str],
    access: Optional[str],
    ctime: Optional[str],
    timezone: Optional[str],
) -> None:
    """Render BODYFILE (or standard input) as a MACB timeline."""

    settings: TimelineConfig = ctx.obj["config"]
    display_tz = timezone or settings.timezone

    supplied = {
        name: value
        for name, value in (
            ("filter", filter_expr),
            ("modified", modified),
            ("access", access),
            ("ctime", ctime),
        )
        if value
    }
    if len(supplied) > 1:
        _emit_status(
            ctx,
            "process",
            status="error",
            message="Use at most one of --filter, --modified, --access, --ctime.",
            exit_code=EXIT_USAGE,
        )

    scope_name, raw_filter = next(iter(supplied.items()), (None, None))
    scope = SCOPE_NAMES.get(scope_name) if scope_name else None

    stdin = sys.stdin.buffer
    if bodyfile is None and stdin.isatty():
        click.echo(ctx.get_help(), err=True)
        ctx.exit(EXIT_USAGE)

    compiled = None
    if raw_filter:
        try:
            compiled = compile_filter(raw_filter)
        except InvalidDateFormat as exc:
            _emit_status(
                ctx,
                "process",
                status="error",
                message=f"Filter error: invalid date format in filter: {exc}",
                exit_code=EXIT_FILTER,
            )

    if bodyfile in (None, "-"):
        stream = BodyFileStream(
            stdin, strict=strict, timezone=display_tz, encoding=settings.encoding
        )
    else:
        try:
            stream = BodyFileStream.open(
                bodyfile, strict=strict, timezone=display_tz, encoding=settings.encoding
            )
        except OSError as exc:
            _emit_status(
                ctx,
                "process",
                status="error",
                message=f"Could not open {bodyfile}: {exc}",
                exit_code=EXIT_USAGE,
            )
            return

    with stream:
        if compiled:
            try:
                stream.add_filter(compiled)
            except FilterCompilationError as exc:
                _emit_status(
                    ctx,
                    "process",
                    status="error",
                    message=f"Could not add filter: {exc}",
                    exit_code=EXIT_FILTER,
                )

        try:
            stream.materialize()
        except StreamReadError as exc:
            _emit_status(
                ctx,
                "process",
                status="error",
                message=f"Could not read all the content: {exc}",
                exit_code=EXIT_MATERIALIZE,
            )

        output = _timeline_output(settings.encoding)
        try:
            lines = emit_timeline(stream, output, scope=scope, timezone=display_tz)
            output.flush()
        except (OSError, UnicodeError) as exc:
            _release_output(output)
            _emit_status(
                ctx,
                "process",
                status="error",
                message=f"Error while writing the timeline: {exc}",
                exit_code=EXIT_ITERATE,
            )
            return
        _release_output(output)

    if lines == 0 and raw_filter:
        click.echo(filter_help(raw_filter), err=True)


def main() -> None:
    """Entry point for console scripts."""

    cli(prog_name="body-timeline")


if __name__ == "__main__":  # pragma: no cover - manual execution
    main()
