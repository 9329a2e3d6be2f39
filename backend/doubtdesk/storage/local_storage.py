"""
Local disk storage for doubt data.
Every path is relative to a root directory; nothing outside it is touched.
"""

import logging
import uuid
from pathlib import Path
from typing import Optional, List

import aiofiles
import aiofiles.os

from .interface import StorageInterface

logger = logging.getLogger(__name__)


class LocalStorage(StorageInterface):
    """
    StorageInterface over a directory on the server.
    I/O failures are logged and reported through the return value.
    """

    def __init__(self, base_dir: str = "./data"):
        """
        Args:
            base_dir: Root directory, created if missing
        """
        self.root = Path(base_dir).resolve()
        self.root.mkdir(parents=True, exist_ok=True)

    def _resolve(self, path: str) -> Path:
        """Absolute path for ``path``; ValueError if it escapes the root."""
        target = (self.root / path).resolve()
        if target != self.root and self.root not in target.parents:
            raise ValueError(f"Path {path!r} escapes storage root")
        return target

    async def save(self, path: str, content: bytes | str) -> bool:
        data = content.encode('utf-8') if isinstance(content, str) else content
        try:
            target = self._resolve(path)
            target.parent.mkdir(parents=True, exist_ok=True)

            # Write next to the target, then swap it in
            tmp = target.with_name(f".{target.name}.{uuid.uuid4().hex}.tmp")
            async with aiofiles.open(tmp, 'wb') as f:
                await f.write(data)
            await aiofiles.os.replace(tmp, target)
            return True
        except (OSError, ValueError) as e:
            logger.error(f"Could not save {path}: {e}")
            return False

    async def load(self, path: str) -> Optional[bytes]:
        try:
            target = self._resolve(path)
            if not target.is_file():
                return None
            async with aiofiles.open(target, 'rb') as f:
                return await f.read()
        except (OSError, ValueError) as e:
            logger.error(f"Could not load {path}: {e}")
            return None

    async def exists(self, path: str) -> bool:
        try:
            return self._resolve(path).exists()
        except ValueError:
            return False

    async def list(self, path: str, pattern: str = "*") -> List[str]:
        try:
            directory = self._resolve(path)
            if not directory.is_dir():
                return []
            return sorted(
                p.relative_to(self.root).as_posix()
                for p in directory.glob(pattern)
                if p.is_file() and not p.name.startswith('.')
            )
        except (OSError, ValueError) as e:
            logger.error(f"Could not list {path}: {e}")
            return []

    async def append(self, path: str, content: str) -> bool:
        try:
            target = self._resolve(path)
            target.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(target, 'a', encoding='utf-8') as f:
                await f.write(content)
            return True
        except (OSError, ValueError) as e:
            logger.error(f"Could not append to {path}: {e}")
            return False
