"""
Configuration Assembler - Main Interface
========================================

This module provides the Assembler class, the primary interface for
compiling configuration text into a binary settings file. It owns the
CompilerContext for one run, feeds it the source files, and builds the
file image from the finished blocks.

Example Usage
-------------
>>> from sctools.assembler import Assembler
>>>
>>> asm = Assembler()
>>> image = asm.assemble_string('''
... ifset set2
... remapblock
... layer 0
...     CAPS_LOCK LCTRL
... endblock
... ''')
>>> asm.block_count()
1
>>> asm.write_image("layout.bin")

Several sources are compiled as one document: condition settings and
an open block carry over from one file into the next, exactly as if
the files had been concatenated.

Command-Line Usage
------------------
    $ scas base.sc macros.sc layout.bin

Options:
    -I, --include PATH     Add include search path
    -v, --verbose          Verbose output
"""

from pathlib import Path
from typing import Callable, Iterable, Optional
import logging

from sctools.assembler.codegen import build_image
from sctools.assembler.commands import process_file, process_source
from sctools.assembler.context import CompilerContext
from sctools.config import AssemblerConfig
from sctools.errors import InvalidCommandError, OutputWriteError, SourceLocation

logger = logging.getLogger(__name__)


class Assembler:
    """
    Main configuration assembler class.

    Each assemble call is a complete, independent run: the compilation
    state starts from defaults and every working list is released when
    the run ends, whether it succeeds or fails. The image of the last
    successful run stays available through get_image().

    Attributes:
        config: Include paths and verbosity
    """

    def __init__(self, config: Optional[AssemblerConfig] = None):
        self.config = config if config is not None else AssemblerConfig()
        self._image: Optional[bytes] = None
        self._block_count = 0

    def add_include_path(self, path: str | Path) -> None:
        """Add a directory searched by ``include`` directives."""
        self.config.add_include_path(path)

    # =========================================================================
    # Assembly Methods
    # =========================================================================

    def _run(self, sources: Iterable[Callable[[CompilerContext], tuple[str, int]]]) -> bytes:
        """
        Compile a sequence of sources with one fresh context.

        Each source is a callable that feeds its lines to the context and
        returns (filename, lines read), which locates an unterminated
        block at end of input.
        """
        self._image = None
        self._block_count = 0
        ctx = CompilerContext(config=self.config)
        try:
            last = SourceLocation("<input>", 0)
            for source in sources:
                last = SourceLocation(*source(ctx))

            if ctx.macro is not None:
                raise InvalidCommandError(
                    "end of input inside a macro definition",
                    location=last,
                    hint="missing 'endmacro'",
                )
            if ctx.in_block():
                raise InvalidCommandError(
                    f"end of input inside an open {ctx.block_kind.directive}",
                    location=last,
                    hint="missing 'endblock'",
                )

            image = build_image(ctx.force, ctx.blocks)
            self._image = image
            self._block_count = len(ctx.blocks)
            logger.debug(f"Assembled {self._block_count} blocks, {len(image)} bytes")
            return image
        finally:
            ctx.release()

    def assemble_files(self, filepaths: Iterable[str | Path]) -> bytes:
        """
        Compile several source files as one document.

        Args:
            filepaths: Source files, processed in order

        Returns:
            The binary settings image

        Raises:
            AssemblerError: On the first error in any file
        """
        def reader(path: Path) -> Callable[[CompilerContext], tuple[str, int]]:
            return lambda ctx: (str(path), process_file(ctx, path))

        return self._run([reader(Path(p)) for p in filepaths])

    def assemble_file(self, filepath: str | Path) -> bytes:
        """
        Compile one source file.

        Args:
            filepath: Path to the configuration text

        Returns:
            The binary settings image

        Raises:
            SourceFileError: If the file cannot be read
            AssemblerError: On the first invalid line
        """
        return self.assemble_files([filepath])

    def assemble_string(self, source: str, filename: str = "<input>") -> bytes:
        """
        Compile configuration text held in a string.

        Args:
            source: Configuration text
            filename: Name used in error messages

        Returns:
            The binary settings image
        """
        lines = source.splitlines()
        return self._run([lambda ctx: (filename, process_source(ctx, lines, filename))])

    # =========================================================================
    # Output Methods
    # =========================================================================

    def get_image(self) -> bytes:
        """
        Get the image built by the last successful run.

        Raises:
            RuntimeError: If nothing has been assembled yet
        """
        if self._image is None:
            raise RuntimeError("No image assembled")
        return self._image

    def block_count(self) -> int:
        """Number of blocks in the last successful run."""
        return self._block_count

    def write_image(self, filepath: str | Path) -> None:
        """
        Write the image to a binary settings file.

        Raises:
            OutputWriteError: If the file cannot be written
        """
        image = self.get_image()
        try:
            with open(filepath, "wb") as f:
                f.write(image)
        except OSError as e:
            raise OutputWriteError(str(filepath), e.strerror or str(e))
        logger.debug(f"Wrote {len(image)} bytes to {filepath}")


# =============================================================================
# Convenience Functions
# =============================================================================

def assemble(
    sources: Iterable[str | Path],
    output: str | Path,
    config: Optional[AssemblerConfig] = None,
) -> bytes:
    """
    Compile source files and write the binary settings file.

    Nothing is written unless every source compiles.

    Args:
        sources: Source files, processed in order as one document
        output: Binary file to write
        config: Include paths and verbosity (optional)

    Returns:
        The image that was written

    Raises:
        AssemblerError: On the first compile error or a write failure
    """
    asm = Assembler(config)
    image = asm.assemble_files(sources)
    asm.write_image(output)
    return image


def assemble_string(source: str, filename: str = "<input>") -> bytes:
    """Compile configuration text held in a string."""
    return Assembler().assemble_string(source, filename)
