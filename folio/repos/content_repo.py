import logging
from pathlib import Path
from typing import List, Union

from folio.errors import IoFailure

logger = logging.getLogger(__name__)


class FilesystemContentRepo:
    """Enumerates content files under a directory and reads their bytes."""

    def __init__(self, root: Union[str, Path], extension: str = ".md"):
        self.root = Path(root)
        self.extension = extension

    def list_identities(self) -> List[str]:
        """Relative POSIX paths of every content file, sorted."""
        if not self.root.exists():
            raise IoFailure(str(self.root), "content directory does not exist")
        if not self.root.is_dir():
            raise IoFailure(str(self.root), "content path is not a directory")

        try:
            paths = [
                path
                for path in self.root.rglob(f"*{self.extension}")
                if path.is_file() and not self._is_hidden(path)
            ]
        except OSError as e:
            raise IoFailure(str(self.root), f"cannot list directory: {e}") from e

        identities = sorted(path.relative_to(self.root).as_posix() for path in paths)
        logger.debug(f"Found {len(identities)} content files under {self.root}")
        return identities

    def read(self, identity: str) -> bytes:
        path = self.root / identity
        try:
            return path.read_bytes()
        except OSError as e:
            raise IoFailure(identity, f"cannot read file: {e.strerror or e}") from e

    def _is_hidden(self, path: Path) -> bool:
        return any(part.startswith(".") for part in path.relative_to(self.root).parts)
