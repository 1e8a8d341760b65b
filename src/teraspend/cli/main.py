"""
Command-line interface for the UTXO record module.

Records live as JSON files in the configured store directory. ``apply``
loads one record, runs a single module function against it and saves it.
"""
import json
import logging
import sys
from pathlib import Path
from typing import Optional

import dotenv
import typer

from teraspend.core.config import load_config_from_env
from teraspend.core.hooks import UTXOModule
from teraspend.core.store import RecordStore, RecordStoreError

logger = logging.getLogger("teraspend.cli")

app = typer.Typer(help="Single-record UTXO state machine")


def _setup(store: Optional[Path]):
    dotenv.load_dotenv()
    cfg = load_config_from_env()
    logging.basicConfig(
        level=cfg.log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stderr)]
    )
    return cfg, RecordStore(store or cfg.store_path)


@app.command()
def create(
    key: str,
    outputs: int = typer.Option(1, help="Number of unspent outputs in the new record"),
    owner: Optional[str] = typer.Option(None, help="Initial owner of every output"),
    store: Optional[Path] = typer.Option(None, help="Record store directory"),
):
    """Create a record with all outputs unspent."""
    _, record_store = _setup(store)
    try:
        record_store.create(key, outputs, owner=owner)
    except RecordStoreError as e:
        typer.echo(f"❌ {str(e)}", err=True)
        raise typer.Exit(1)
    typer.echo(f"✅ Created record {key} with {outputs} outputs")


@app.command()
def apply(
    key: str,
    function: str,
    args: str = typer.Argument("[]", help="JSON list of positional arguments"),
    store: Optional[Path] = typer.Option(None, help="Record store directory"),
):
    """Run one module function against a stored record."""
    cfg, record_store = _setup(store)

    try:
        arg_list = json.loads(args)
    except json.JSONDecodeError as e:
        typer.echo(f"❌ Arguments are not valid JSON: {str(e)}", err=True)
        raise typer.Exit(2)
    if not isinstance(arg_list, list):
        typer.echo("❌ Arguments must be a JSON list", err=True)
        raise typer.Exit(2)

    try:
        record = record_store.load(key)
    except RecordStoreError as e:
        typer.echo(f"❌ {str(e)}", err=True)
        raise typer.Exit(1)

    module = UTXOModule(cfg)
    result = module.apply_record(function, record, arg_list)

    if not result.success:
        typer.echo(f"❌ {result.value}", err=True)
        raise typer.Exit(1)

    record_store.save(key, record)
    typer.echo(json.dumps(result.value, sort_keys=True))


@app.command()
def show(
    key: str,
    store: Optional[Path] = typer.Option(None, help="Record store directory"),
):
    """Print the bins of a stored record."""
    _, record_store = _setup(store)
    try:
        record = record_store.load(key)
    except RecordStoreError as e:
        typer.echo(f"❌ {str(e)}", err=True)
        raise typer.Exit(1)
    typer.echo(json.dumps(record, indent=2, sort_keys=True))


@app.command("functions")
def list_functions():
    """List the function names the module dispatches."""
    for name in UTXOModule().functions():
        typer.echo(name)


if __name__ == "__main__":
    app()
