# tests/test_cli.py
import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from starledger.chain.blockchain import Blockchain, unix_now
from starledger.cli.main import app
from starledger.crypto.keys import WalletKeyPair
from starledger.ownership.challenge import request_challenge
from starledger.storage import JSONLStorage

runner = CliRunner()


@pytest.fixture
def chain_file(tmp_path: Path) -> Path:
    return tmp_path / "cli-chain.jsonl"


@pytest.fixture
def populated_chain(chain_file: Path, star: dict):
    """Chain with genesis + one star registered by a fresh wallet."""
    keys = WalletKeyPair.generate()
    bc = Blockchain(storage=JSONLStorage(chain_file))
    message = bc.request_message_ownership_verification(keys.address)
    result = bc.submit_star(keys.address, message, keys.sign(message), star)
    assert result.ok
    bc.close()
    return chain_file, keys, result.block


def test_height_no_chain(chain_file: Path):
    result = runner.invoke(app, ["height", "--chain", str(chain_file)])
    assert result.exit_code == 1
    assert "not found" in result.stdout.lower()
    assert "to get started" in result.stdout.lower()


def test_keygen_to_file(tmp_path: Path):
    key_file = tmp_path / "wallet.key"
    result = runner.invoke(app, ["keygen", "--output", str(key_file)])
    assert result.exit_code == 0
    wallet = WalletKeyPair.from_private_b64url(key_file.read_text(encoding="utf-8"))
    assert wallet.address in result.stdout


def test_challenge_format():
    result = runner.invoke(app, ["challenge", "addr1"])
    assert result.exit_code == 0
    address, issued_at, tag = result.stdout.strip().split(":")
    assert address == "addr1"
    assert int(issued_at) > 0
    assert tag == "starRegistry"


def test_sign_then_submit(tmp_path: Path, chain_file: Path):
    wallet = WalletKeyPair.generate()
    key_file = tmp_path / "wallet.key"
    key_file.write_text(wallet.private_key_b64url(), encoding="utf-8")
    message = request_challenge(wallet.address, unix_now())

    signed = runner.invoke(app, ["sign", message, "--key", str(key_file)])
    assert signed.exit_code == 0
    signature = signed.stdout.strip()
    assert signature == wallet.sign(message)

    result = runner.invoke(app, [
        "submit", wallet.address, message, signature,
        "--dec", "68° 52' 56.9", "--ra", "16h 29m 1.0s", "--story", "cli star",
        "--chain", str(chain_file),
    ])
    assert result.exit_code == 0, result.stdout
    assert "height 1" in result.stdout
    assert len(JSONLStorage(chain_file).load_blocks()) == 2


def test_submit_bad_signature(chain_file: Path):
    wallet = WalletKeyPair.generate()
    message = request_challenge(wallet.address, unix_now())
    result = runner.invoke(app, [
        "submit", wallet.address, message, WalletKeyPair.generate().sign(message),
        "--dec", "1", "--ra", "2", "--chain", str(chain_file),
    ])
    assert result.exit_code == 1
    assert "signature does not match" in result.stdout.lower()


def test_height_and_block_lookup(populated_chain):
    chain_file, _, block = populated_chain
    height = runner.invoke(app, ["height", "--chain", str(chain_file)])
    assert height.stdout.strip() == "1"

    by_height = runner.invoke(app, ["block", "--height", "1", "--chain", str(chain_file)])
    assert by_height.exit_code == 0
    assert block.hash in by_height.stdout

    by_hash = runner.invoke(app, ["block", "--hash", block.hash, "--chain", str(chain_file)])
    assert by_hash.exit_code == 0
    assert "test" in by_hash.stdout

    missing = runner.invoke(app, ["block", "--height", "-1", "--chain", str(chain_file)])
    assert missing.exit_code == 1
    assert "no matching block" in missing.stdout.lower()


def test_stars_lists_owner_records(populated_chain):
    chain_file, keys, _ = populated_chain
    result = runner.invoke(app, ["stars", keys.address, "--chain", str(chain_file)])
    assert result.exit_code == 0
    assert "test" in result.stdout

    nobody = runner.invoke(app, ["stars", "nobody", "--chain", str(chain_file)])
    assert nobody.exit_code == 0
    assert "no stars found" in nobody.stdout.lower()


def test_blocks_table(populated_chain):
    chain_file, _, _ = populated_chain
    result = runner.invoke(app, ["blocks", "--chain", str(chain_file)])
    assert result.exit_code == 0
    assert "genesis" in result.stdout


def test_verify_valid_and_tampered(populated_chain):
    chain_file, _, _ = populated_chain
    ok = runner.invoke(app, ["verify", "--chain", str(chain_file)])
    assert ok.exit_code == 0
    assert "valid" in ok.stdout.lower()

    lines = chain_file.read_text(encoding="utf-8").splitlines()
    record = json.loads(lines[1])
    record["time"] = 0
    lines[1] = json.dumps(record)
    chain_file.write_text("\n".join(lines) + "\n", encoding="utf-8")

    bad = runner.invoke(app, ["verify", "--chain", str(chain_file)])
    assert bad.exit_code == 2
    assert "invalid_hash" in bad.stdout

    refused = runner.invoke(app, ["height", "--chain", str(chain_file)])
    assert refused.exit_code == 2
    assert "contact support" in refused.stdout.lower()
