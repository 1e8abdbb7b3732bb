from pathlib import Path
from typing import List, Iterable
import asyncio

from reworkit.common.config.constants import RESERVED_TREE_DIRS, VCS_METADATA_SEGMENT
from reworkit.common.config.logging_config import get_logger


logger = get_logger(__name__)


class PackageLister:
    """Finds buildable packages in a tree laid out as ``<tree>/<section>/<package>``."""

    def __init__(
        self,
        tree_dir: Path,
        reserved_dirs: Iterable[str] = RESERVED_TREE_DIRS,
    ):
        self._tree_dir = Path(tree_dir)
        self._reserved = [self._tree_dir / name for name in reserved_dirs]

    def list_packages(self) -> List[str]:
        packages = []

        for section in self._iter_dirs(self._tree_dir):
            for entry in self._iter_dirs(section):
                if self._is_excluded(entry):
                    continue
                packages.append(entry.name)

        packages.sort()
        logger.debug(f"Found {len(packages)} packages under {self._tree_dir}")
        return packages

    async def list_packages_async(self) -> List[str]:
        return await asyncio.get_event_loop().run_in_executor(None, self.list_packages)

    def _is_excluded(self, path: Path) -> bool:
        relative = "/" + path.relative_to(self._tree_dir).as_posix()
        if VCS_METADATA_SEGMENT in relative:
            return True

        for reserved in self._reserved:
            if path == reserved or reserved in path.parents:
                return True

        return False

    @staticmethod
    def _iter_dirs(path: Path) -> List[Path]:
        try:
            return [p for p in path.iterdir() if p.is_dir() and not p.is_symlink()]
        except OSError as e:
            logger.warning(f"Cannot read directory {path}: {e}")
            return []
