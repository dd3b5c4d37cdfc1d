# starledger/storage/__init__.py
"""
Storage backends for chain snapshots.
The engine keeps the chain in memory; a backend only mirrors sealed blocks.
"""

from abc import ABC, abstractmethod
from typing import List
from pathlib import Path
from starledger.core.types import Block


class StorageBackend(ABC):
    """Abstract base for all persistent storage implementations."""

    @abstractmethod
    def append(self, block: Block) -> None:
        pass

    @abstractmethod
    def load_blocks(self) -> List[Block]:
        pass

    @abstractmethod
    def close(self) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def create_storage(uri: str) -> StorageBackend:
    """Accepts "jsonl:<path>" or a plain file path."""
    stripped = uri.strip()
    if not stripped:
        raise ValueError("Empty storage URI")
    if stripped.startswith("jsonl:"):
        raw_path = stripped[len("jsonl:"):]
    elif "://" in stripped:
        raise ValueError(f"Unsupported storage URI: {uri}")
    else:
        raw_path = stripped

    from .jsonl import JSONLStorage
    return JSONLStorage(Path(raw_path).expanduser().resolve())


from .jsonl import JSONLStorage

__all__ = ["StorageBackend", "create_storage", "JSONLStorage"]
