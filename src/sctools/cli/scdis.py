"""
scdis - Settings Disassembler Command-Line Interface
====================================================

Decodes a binary settings file into configuration text that scas
accepts.

Usage Examples
--------------
Print to the terminal:
    $ scdis layout.bin

Write to a file:
    $ scdis layout.bin layout.sc

Text is written as it is decoded, so everything before a failure is
kept. Problems found while decoding are written into the output as
``# ERROR:`` comments, and scdis exits with status 1.
"""

import sys
from pathlib import Path
from typing import Optional

import click

from sctools import __version__
from sctools.cli.errors import ExitCode, handle_cli_exception, setup_logging
from sctools.disassembler import disassemble


BANNER = f"scdis v{__version__}"


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.argument(
    "output_file",
    required=False,
    type=click.Path(dir_okay=False, path_type=Path),
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="scdis")
def main(
    input_file: Path,
    output_file: Optional[Path],
    verbose: bool,
) -> None:
    """
    Disassemble a keyboard converter settings file.

    INPUT_FILE is the binary settings file. The configuration text goes
    to OUTPUT_FILE, or to standard output when it is omitted.

    \b
    Examples:
        scdis layout.bin             # Print to terminal
        scdis layout.bin layout.sc   # Write to file
    """
    setup_logging(verbose)
    click.echo(BANNER, err=True)

    try:
        data = input_file.read_bytes()
    except IOError as e:
        click.echo(f"Error reading {input_file}: {e}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    if verbose:
        click.echo(f"Input file: {input_file} ({len(data)} bytes)", err=True)

    try:
        if output_file:
            with open(output_file, "w", encoding="utf-8") as f:
                result = disassemble(data, f)
            if verbose:
                click.echo(f"Output written to: {output_file}", err=True)
        else:
            result = disassemble(data, sys.stdout)
    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Decode")

    if not result.ok:
        click.echo("errors encountered, see output", err=True)
        sys.exit(ExitCode.BUILD_ERROR)


if __name__ == "__main__":
    main()
