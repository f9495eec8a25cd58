"""
CLI Error Reporting
===================

Shared by scas and scdis: exit statuses, logging setup, and the mapping
from exceptions to terminal messages.

Exit statuses
-------------
0  success
1  the configuration or settings file is bad (assembly or decode error)
2  the command line is bad (missing file, unreadable path)
3  a bug in sctools
"""

import logging
import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click

from sctools.errors import AssemblerError, SCError


class ExitCode(IntEnum):
    SUCCESS = 0
    BUILD_ERROR = 1
    INVALID_ARGS = 2
    INTERNAL_ERROR = 3


def setup_logging(verbose: bool) -> None:
    """Send log records to stderr; debug detail only with -v."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s: %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING, format="%(message)s")


def format_assembler_error(error: AssemblerError) -> str:
    """
    Render an assembler error the way scas prints it.

    Example output:
        error at layout.sc:12: invalid arguments: unknown key 'CAPSLOK'
            CAPSLOK ESC
        hint: key names are case-sensitive
    """
    if error.location:
        head = f"error at {error.location}"
    else:
        head = "error"
    out = [f"{head}: {error.category.message}: {error.message}"]
    if error.location and error.source_line is not None:
        out.append("    " + error.source_line)
    if error.hint:
        out.append("hint: " + error.hint)
    return "\n".join(out)


def handle_cli_exception(
    error: Exception,
    verbose: bool = False,
    error_type: str | None = None
) -> NoReturn:
    """
    Report error on stderr and exit with the matching ExitCode.

    error_type prefixes messages for non-assembler sctools errors, e.g.
    "Decode" gives "Decode error: ...". With verbose, unexpected errors
    also print their traceback.
    """
    if isinstance(error, AssemblerError):
        click.echo(format_assembler_error(error), err=True)
        code = ExitCode.BUILD_ERROR
    elif isinstance(error, SCError):
        label = f"{error_type} error" if error_type else "Error"
        click.echo(f"{label}: {error}", err=True)
        code = ExitCode.BUILD_ERROR
    elif isinstance(error, (click.BadParameter, FileNotFoundError, PermissionError)):
        click.echo(f"Error: {error}", err=True)
        code = ExitCode.INVALID_ARGS
    else:
        click.echo(f"Internal error: {type(error).__name__}: {error}", err=True)
        if verbose:
            traceback.print_exc()
        code = ExitCode.INTERNAL_ERROR
    sys.exit(code)
