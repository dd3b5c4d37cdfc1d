# starledger/cli/main.py
"""
CLI for registering, inspecting and verifying stars in a starledger chain file.
"""

import json
import os
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from starledger.chain.blockchain import Blockchain, unix_now
from starledger.config import RegistryConfig
from starledger.core.errors import ChainCorruptedError, FailureKind, StorageError
from starledger.crypto.keys import WalletKeyPair
from starledger.ownership.challenge import request_challenge
from starledger.storage import JSONLStorage
from starledger.verify.validator import validation_report

app = typer.Typer(
    name="starledger",
    help="Register, inspect and verify stars in a tamper-evident registry",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()


def get_chain_path(chain_flag: Optional[Path] = None) -> Path:
    """Resolve chain file path in this order:
    1. --chain flag
    2. STARLEDGER_CHAIN_PATH environment variable
    3. Default: ~/.starledger/chain.jsonl
    """
    if chain_flag:
        path = chain_flag.resolve()
    else:
        env_path = os.environ.get("STARLEDGER_CHAIN_PATH")
        if env_path:
            path = Path(env_path).resolve()
        else:
            path = Path.home() / ".starledger" / "chain.jsonl"

    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def open_chain(chain_flag: Optional[Path], must_exist: bool = True) -> Blockchain:
    path = get_chain_path(chain_flag)

    if must_exist and not path.exists():
        console.print(f"[red]Chain file not found: {path}[/]")
        console.print("[yellow]To get started:[/]")
        console.print("  • Submit a star first (creates the chain with its genesis block)")
        console.print("  • Set env var: export STARLEDGER_CHAIN_PATH=/path/to/chain.jsonl")
        console.print("  • Or use --chain: starledger height --chain /custom/chain.jsonl")
        raise typer.Exit(1)

    try:
        return Blockchain(config=RegistryConfig.from_env(), storage=JSONLStorage(path))
    except ChainCorruptedError as e:
        console.print(f"[red]✗ {FailureKind.CHAIN_CORRUPTED.client_message}[/]")
        for error in e.errors:
            console.print(f"  • {error}")
        raise typer.Exit(2)
    except (StorageError, ValueError) as e:
        console.print(f"[red]Failed to open chain: {str(e)}[/]")
        raise typer.Exit(1)


def print_block(block) -> None:
    console.print(f"[bold cyan]{block.height:4d} | {block.time} | {block.hash}[/]")
    console.print(f"  previous: {block.previous_block_hash or '—'}")
    console.print(f"  {json.dumps(block.decoded(), ensure_ascii=False)}")


@app.command()
def keygen(
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the private key to this file"),
):
    """Generate a new wallet and print its address."""
    wallet = WalletKeyPair.generate()
    console.print(f"Address: [bold]{wallet.address}[/]")
    if output:
        output.write_text(wallet.private_key_b64url() + "\n", encoding="utf-8")
        console.print(f"[green]Private key written to {output}[/]")
    else:
        console.print(f"Private key: {wallet.private_key_b64url()}")
        console.print("[yellow]Keep the private key secret; it is not stored anywhere.[/]")


@app.command()
def challenge(
    address: str = typer.Argument(..., help="Wallet address requesting ownership verification"),
):
    """Print the ownership message to sign before submitting a star."""
    config = RegistryConfig.from_env()
    try:
        console.print(request_challenge(address, unix_now(), tag=config.challenge_tag), soft_wrap=True)
    except ValueError as e:
        console.print(f"[red]{str(e)}[/]")
        raise typer.Exit(1)


@app.command()
def sign(
    message: str = typer.Argument(..., help="Ownership message returned by `challenge`"),
    key_file: Path = typer.Option(..., "--key", "-k", help="File holding the base64url private key"),
):
    """Sign an ownership message with a wallet private key."""
    try:
        wallet = WalletKeyPair.from_private_b64url(key_file.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        console.print(f"[red]Failed to load private key: {str(e)}[/]")
        raise typer.Exit(1)
    console.print(wallet.sign(message), soft_wrap=True)


@app.command()
def submit(
    address: str = typer.Argument(..., help="Wallet address"),
    message: str = typer.Argument(..., help="Ownership message that was signed"),
    signature: str = typer.Argument(..., help="base64url signature of the message"),
    dec: str = typer.Option(..., "--dec", help="Declination"),
    ra: str = typer.Option(..., "--ra", help="Right ascension"),
    story: str = typer.Option("", "--story", help="Story attached to the star"),
    chain: Optional[Path] = typer.Option(None, "--chain", help="Chain file (overrides STARLEDGER_CHAIN_PATH)"),
):
    """Register a star after proving wallet ownership."""
    bc = open_chain(chain, must_exist=False)
    try:
        result = bc.submit_star(address, message, signature, {"dec": dec, "ra": ra, "story": story})
    finally:
        bc.close()

    if not result.ok:
        console.print(f"[red]✗ {result.failure}[/]")
        raise typer.Exit(2 if result.kind is FailureKind.CHAIN_CORRUPTED else 1)

    console.print(f"[green]✓ Star registered at height {result.block.height}[/]")
    print_block(result.block)


@app.command()
def height(
    chain: Optional[Path] = typer.Option(None, "--chain", help="Chain file (overrides STARLEDGER_CHAIN_PATH)"),
):
    """Print the current chain height."""
    bc = open_chain(chain)
    console.print(str(bc.height))
    bc.close()


@app.command()
def block(
    at_height: Optional[int] = typer.Option(None, "--height", help="Look up by height"),
    block_hash: Optional[str] = typer.Option(None, "--hash", help="Look up by block hash"),
    chain: Optional[Path] = typer.Option(None, "--chain", help="Chain file (overrides STARLEDGER_CHAIN_PATH)"),
):
    """Show one block, by height or by hash."""
    if (at_height is None) == (block_hash is None):
        console.print("[red]Pass exactly one of --height or --hash[/]")
        raise typer.Exit(1)

    bc = open_chain(chain)
    found = bc.get_block_by_height(at_height) if block_hash is None else bc.get_block_by_hash(block_hash)
    bc.close()

    if found is None:
        console.print(f"[yellow]{FailureKind.NOT_FOUND.client_message}[/]")
        raise typer.Exit(1)
    print_block(found)


@app.command()
def stars(
    address: str = typer.Argument(..., help="Wallet address"),
    chain: Optional[Path] = typer.Option(None, "--chain", help="Chain file (overrides STARLEDGER_CHAIN_PATH)"),
):
    """List the decoded stars owned by a wallet address."""
    bc = open_chain(chain)
    records = bc.get_stars_by_wallet_address(address)
    bc.close()

    if not records:
        console.print(f"[yellow]No stars found for '{address}'[/]")
        return

    table = Table(title=f"Stars owned by {address}")
    table.add_column("Dec")
    table.add_column("RA")
    table.add_column("Story")
    for record in records:
        table.add_row(
            str(record.star.get("dec", "—")),
            str(record.star.get("ra", "—")),
            str(record.star.get("story", "")),
        )
    console.print(table)


@app.command()
def blocks(
    chain: Optional[Path] = typer.Option(None, "--chain", help="Chain file (overrides STARLEDGER_CHAIN_PATH)"),
    limit: int = typer.Option(20, "--limit", "-n", help="Number of most recent blocks to show"),
):
    """Show the most recent blocks of the chain."""
    bc = open_chain(chain)
    recent = bc.get_chain()[-limit:] if limit > 0 else []
    bc.close()

    table = Table(title="Blocks")
    table.add_column("Height")
    table.add_column("Time")
    table.add_column("Hash")
    table.add_column("Owner")
    for b in recent:
        owner = "genesis" if b.is_genesis else str(b.decoded().get("owner", "—"))
        table.add_row(str(b.height), str(b.time), b.hash[:16], owner)
    console.print(table)


@app.command()
def verify(
    chain: Optional[Path] = typer.Option(None, "--chain", help="Chain file (overrides STARLEDGER_CHAIN_PATH)"),
):
    """Check every stored block hash and link without loading it into the registry."""
    path = get_chain_path(chain)
    if not path.exists():
        console.print(f"[red]Chain file not found: {path}[/]")
        raise typer.Exit(1)

    try:
        loaded = JSONLStorage(path).load_blocks()
    except StorageError as e:
        console.print(f"[red]Verification failed: {str(e)}[/]")
        raise typer.Exit(1)

    report = validation_report(loaded)
    if report.is_valid:
        console.print(f"[green]✓ Chain '{path.name}' is valid[/]")
        console.print(f"  {report.checked} blocks checked")
    else:
        console.print(f"[red]✗ Verification failed for chain '{path.name}'[/]")
        for error in report.errors:
            console.print(f"  • {error}")
        raise typer.Exit(2)


if __name__ == "__main__":
    app()
