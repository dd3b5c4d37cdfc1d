# tests/test_storage.py
import json
from pathlib import Path

import pytest

from starledger.chain.blockchain import Blockchain
from starledger.config import RegistryConfig
from starledger.core.errors import ChainCorruptedError, StorageError
from starledger.core.types import Block
from starledger.storage import JSONLStorage, StorageBackend, create_storage

from conftest import FakeClock


@pytest.fixture
def chain_path(tmp_path: Path) -> Path:
    return tmp_path / "chains" / "test.jsonl"


@pytest.fixture
def storage(chain_path: Path) -> JSONLStorage:
    return JSONLStorage(chain_path)


def test_create_storage_routing(chain_path: Path):
    for uri in (f"jsonl:{chain_path}", str(chain_path)):
        storage = create_storage(uri)
        assert isinstance(storage, JSONLStorage)
        assert isinstance(storage, StorageBackend)
        assert storage.path == chain_path.resolve()

    with pytest.raises(ValueError):
        create_storage("sqlite:///tmp/chain.db")
    with pytest.raises(ValueError):
        create_storage("   ")


def test_missing_file_loads_empty(storage: JSONLStorage):
    assert storage.load_blocks() == []


def test_blockchain_writes_through(storage: JSONLStorage, chain_path: Path):
    bc = Blockchain(clock=FakeClock(), storage=storage)
    bc.append({"n": 1})
    bc.close()

    lines = chain_path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    assert [json.loads(line)["height"] for line in lines] == [0, 1]


def test_reload_keeps_chain(chain_path: Path):
    clock = FakeClock()
    with JSONLStorage(chain_path) as storage:
        first = Blockchain(clock=clock, storage=storage)
        first.append({"n": 1})
        original = first.get_chain()

    clock.advance(100)
    second = Blockchain(clock=clock, storage=f"jsonl:{chain_path}")
    assert second.get_chain() == original
    second.append({"n": 2})
    assert second.height == 2
    assert second.validate_chain() == []
    second.close()


def test_storage_from_config(chain_path: Path):
    bc = Blockchain(config=RegistryConfig(storage_uri=str(chain_path)), clock=FakeClock())
    bc.close()
    assert JSONLStorage(chain_path).load_blocks()[0].height == 0


def test_corrupted_file_refused(chain_path: Path):
    bc = Blockchain(clock=FakeClock(), storage=JSONLStorage(chain_path))
    bc.append({"owner": "addr1"})
    bc.close()

    lines = chain_path.read_text(encoding="utf-8").splitlines()
    record = json.loads(lines[1])
    record["time"] = 1
    lines[1] = json.dumps(record)
    chain_path.write_text("\n".join(lines) + "\n", encoding="utf-8")

    with pytest.raises(ChainCorruptedError) as exc_info:
        Blockchain(clock=FakeClock(), storage=JSONLStorage(chain_path))
    assert exc_info.value.errors[0].height == 1


def test_unreadable_line(chain_path: Path, storage: JSONLStorage):
    chain_path.parent.mkdir(parents=True, exist_ok=True)
    chain_path.write_text('{"height": 0}\nnot json\n', encoding="utf-8")
    with pytest.raises(StorageError):
        storage.load_blocks()


def test_refuses_unsealed_block(storage: JSONLStorage):
    with pytest.raises(ValueError):
        storage.append(Block(height=0, time=1, body="e30"))


class FlakyStorage(JSONLStorage):
    """Fails the next `failures` writes, then behaves normally."""

    def __init__(self, path, failures=1):
        super().__init__(path)
        self.failures = failures

    def append(self, block: Block) -> None:
        if self.failures:
            self.failures -= 1
            raise StorageError("disk full")
        super().append(block)


def test_failed_write_rolls_back_append(chain_path: Path):
    storage = FlakyStorage(chain_path, failures=0)
    bc = Blockchain(clock=FakeClock(), storage=storage)
    storage.failures = 1

    with pytest.raises(StorageError):
        bc.append({"n": 1})
    assert bc.height == 0
    assert not bc.halted

    bc.append({"n": 2})
    bc.close()

    reloaded = Blockchain(clock=FakeClock(), storage=JSONLStorage(chain_path))
    assert reloaded.height == 1
    assert reloaded.get_block_by_height(1).decoded() == {"n": 2}
    assert reloaded.validate_chain() == []


@pytest.mark.parametrize("field, value", [
    ("time", "1000"),
    ("height", 1.0),
    ("height", True),
    ("body", 42),
    ("previous_block_hash", 7),
])
def test_retyped_fields_refused(chain_path: Path, field, value):
    bc = Blockchain(clock=FakeClock(), storage=JSONLStorage(chain_path))
    bc.append({"owner": "addr1"})
    bc.close()

    lines = chain_path.read_text(encoding="utf-8").splitlines()
    record = json.loads(lines[1])
    record[field] = value
    lines[1] = json.dumps(record)
    chain_path.write_text("\n".join(lines) + "\n", encoding="utf-8")

    with pytest.raises(StorageError):
        JSONLStorage(chain_path).load_blocks()
    with pytest.raises(StorageError):
        Blockchain(clock=FakeClock(), storage=JSONLStorage(chain_path))
