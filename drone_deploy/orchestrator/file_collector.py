"""File collection utilities for deploy runs."""
from pathlib import Path
from typing import Iterable, List

ARCHIVE_SUFFIX = ".jar"


class FileCollector:
    """Collects build output archives from files and folders."""

    @staticmethod
    def collect_files(paths: Iterable[Path]) -> List[Path]:
        """
        Expand the given paths into a list of files.

        Args:
            paths: Files (kept as given) and folders (scanned recursively for jars)

        Returns:
            Files in first-seen order, without duplicates
        """
        files: List[Path] = []
        seen = set()
        for path in paths:
            path = Path(path)
            if path.is_dir():
                candidates = sorted(
                    item for item in path.rglob(f"*{ARCHIVE_SUFFIX}") if item.is_file()
                )
            else:
                candidates = [path]
            for candidate in candidates:
                key = candidate.resolve()
                if key in seen:
                    continue
                seen.add(key)
                files.append(candidate)
        return files
