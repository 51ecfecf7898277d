"""Result file discovery."""
import glob
import logging
from pathlib import Path
from typing import List

from ..errors import ConfigurationError, ResultsDirectoryError
from ..models import FileSet

log = logging.getLogger(__name__)


class FileCollector:
    """Collects result files from the configured results directory."""

    @staticmethod
    def resolve_directory(pattern: str) -> Path:
        """
        Resolve a path or glob pattern to exactly one directory.

        Raises:
            ResultsDirectoryError: nothing matches, or the match is not a directory
            ConfigurationError: the pattern matches several directories
        """
        expanded = str(Path(pattern).expanduser())
        if glob.has_magic(expanded):
            matches = sorted(glob.glob(expanded))
            directories = [m for m in matches if Path(m).is_dir()]
            if not directories:
                raise ResultsDirectoryError(
                    f"no directory matches results pattern: {pattern}", path=pattern
                )
            if len(directories) > 1:
                raise ConfigurationError(
                    f"results pattern {pattern!r} matches {len(directories)} directories: "
                    + ", ".join(directories)
                )
            return Path(directories[0]).resolve()
        return Path(expanded).resolve()

    @classmethod
    def collect_files(cls, pattern: str) -> FileSet:
        """
        List the immediate files of the results directory.

        Args:
            pattern: Directory path or glob pattern matching one directory

        Returns:
            FileSet sorted by file name; subdirectories are not descended into
        """
        directory = cls.resolve_directory(pattern)
        try:
            entries = list(directory.iterdir())
        except OSError as exc:
            raise ResultsDirectoryError(
                f"cannot read results directory {directory}: {exc}", path=str(directory)
            ) from exc

        files: List[Path] = sorted(
            (entry for entry in entries if entry.is_file()), key=lambda p: p.name
        )
        skipped = len(entries) - len(files)
        if skipped:
            log.debug("Ignoring %d non-file entries in %s", skipped, directory)
        return FileSet(directory=directory, paths=tuple(files))
