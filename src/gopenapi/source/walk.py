"""Source file discovery."""

import os
from collections.abc import Iterator
from pathlib import Path

from gopenapi.errors import TraversalError

SOURCE_SUFFIX = ".go"


def iter_source_files(root: Path) -> Iterator[Path]:
    """Yield the Go files under ``root`` in sorted path order.

    ``root`` may also be a single file, which is yielded if it is a Go file.
    """
    root = Path(root)
    if not root.exists():
        raise TraversalError(str(root), FileNotFoundError(f"no such file or directory: {root}"))
    if root.is_file():
        if root.suffix == SOURCE_SUFFIX:
            yield root
        return

    def _raise(error: OSError) -> None:
        raise TraversalError(str(root), error)

    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise):
        dirnames.sort()
        for filename in sorted(filenames):
            path = Path(dirpath) / filename
            if path.suffix == SOURCE_SUFFIX and path.is_file():
                yield path
