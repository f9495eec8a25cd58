"""
sctools Configuration
=====================

Assembler settings that do not come from the configuration text itself.
Values come from:
- Default values (defined here)
- Command-line options
- Environment variables

Environment
-----------
SCAS_INCLUDE_PATH
    Extra directories searched by the ``include`` directive, separated by
    os.pathsep. They are searched after the including file's own directory
    and after any directories given on the command line.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional
import os


INCLUDE_PATH_ENV = "SCAS_INCLUDE_PATH"


@dataclass
class AssemblerConfig:
    """
    Configuration for an assembler run.

    Attributes:
        include_paths: Directories searched for ``include`` targets that are
            not found next to the including file
        verbose: Log progress at DEBUG level
    """

    include_paths: list[Path] = field(default_factory=list)
    verbose: bool = False

    def add_include_path(self, path: str | Path) -> None:
        path = Path(path)
        if path not in self.include_paths:
            self.include_paths.append(path)

    @classmethod
    def from_env(
        cls,
        include_paths: Optional[list[str | Path]] = None,
        verbose: bool = False,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "AssemblerConfig":
        """
        Build a configuration from explicit values plus the environment.

        Explicit include paths come first, environment paths after.
        """
        environ = os.environ if environ is None else environ
        config = cls(verbose=verbose)

        for path in include_paths or []:
            config.add_include_path(path)

        for entry in environ.get(INCLUDE_PATH_ENV, "").split(os.pathsep):
            if entry.strip():
                config.add_include_path(entry.strip())

        return config
