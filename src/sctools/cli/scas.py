"""
scas - Configuration Assembler Command-Line Interface
=====================================================

Compiles one or more configuration text files into a binary settings
file. The last argument is the output file; every argument before it is
a source, and all sources are compiled as one document in the order
given.

Usage Examples
--------------
Basic assembly:
    $ scas layout.sc layout.bin

Several sources:
    $ scas base.sc macros.sc layout.bin

With include path:
    $ scas -I ./common layout.sc layout.bin

Verbose mode:
    $ scas -v layout.sc layout.bin
"""

from pathlib import Path

import click

from sctools import __version__
from sctools.assembler import Assembler
from sctools.cli.errors import handle_cli_exception, setup_logging
from sctools.config import AssemblerConfig


BANNER = f"scas v{__version__}"


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "files",
    nargs=-1,
    required=True,
    type=click.Path(dir_okay=False, path_type=Path),
)
@click.option(
    "-I", "--include",
    multiple=True,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Add include search path (can be repeated)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="scas")
def main(
    files: tuple[Path, ...],
    include: tuple[Path, ...],
    verbose: bool,
) -> None:
    """
    Assemble keyboard converter configuration text.

    FILES are one or more configuration sources followed by the binary
    settings file to write.

    \b
    Examples:
        scas layout.sc layout.bin            # One source
        scas base.sc macros.sc layout.bin    # Two sources, one document
        scas -I common/ layout.sc layout.bin # Add include path

    Include paths are also read from the SCAS_INCLUDE_PATH environment
    variable.
    """
    setup_logging(verbose)
    click.echo(BANNER)

    if len(files) < 2:
        raise click.UsageError("need at least one input file and an output file")
    *sources, output = files

    config = AssemblerConfig.from_env(include_paths=list(include), verbose=verbose)
    asm = Assembler(config)

    try:
        if verbose:
            click.echo(f"Assembling {', '.join(str(s) for s in sources)}...")

        asm.assemble_files(sources)
        asm.write_image(output)

        if verbose:
            click.echo(f"Wrote {len(asm.get_image())} bytes, {asm.block_count()} blocks")

    except Exception as e:
        handle_cli_exception(e, verbose=verbose)

    click.echo(f"No errors. Wrote: {output}", err=True)


if __name__ == "__main__":
    main()
