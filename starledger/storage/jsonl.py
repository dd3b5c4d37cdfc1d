# starledger/storage/jsonl.py
import json
import logging
from pathlib import Path
from typing import IO, List, Optional, Union

from starledger.core.canon import canonical_line
from starledger.core.errors import StorageError
from starledger.core.types import Block
from . import StorageBackend

logger = logging.getLogger(__name__)


class JSONLStorage(StorageBackend):
    """One canonical-JSON block per line, append-only."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._fh: Optional[IO[str]] = None

    @property
    def fh(self) -> IO[str]:
        if self._fh is None:
            self._fh = open(self.path, "a", encoding="utf-8")
        return self._fh

    def append(self, block: Block) -> None:
        if not block.hash:
            raise ValueError("Cannot persist unsealed block")
        try:
            self.fh.write(canonical_line(block.to_dict()))
            self.fh.flush()
        except OSError as e:
            raise StorageError(f"Failed to write block {block.height} to {self.path}: {e}") from e

    def load_blocks(self) -> List[Block]:
        """
        Read every block in file order. Content is not trusted here:
        callers validate the chain before using it.
        """
        if not self.path.exists():
            return []
        blocks = []
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                for lineno, line in enumerate(f, start=1):
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        blocks.append(Block.from_dict(json.loads(line)))
                    except (KeyError, TypeError, ValueError) as e:
                        raise StorageError(f"{self.path}:{lineno}: unreadable block: {e}") from e
        except OSError as e:
            raise StorageError(f"Failed to read {self.path}: {e}") from e
        logger.debug("Loaded %d blocks from %s", len(blocks), self.path)
        return blocks

    def close(self) -> None:
        if self._fh:
            self._fh.close()
            self._fh = None
