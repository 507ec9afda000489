"""Command line interface for running the bot and inspecting seller records."""

from __future__ import annotations

import asyncio
import json
import logging
from datetime import timedelta
from pathlib import Path
from typing import Optional

import typer

from trinketbot.config import load_config
from trinketbot.errors import GatewayFatalError
from trinketbot.persistence import SellerLedger, get_store

app = typer.Typer(help="CLI for the trinketbot marketplace bot")

seller_app = typer.Typer(help="Commands for inspecting seller records")

app.add_typer(seller_app, name="seller")


@app.callback()
def main() -> None:
    """trinketbot CLI entry point."""
    pass


@app.command("run")
def run(
    log_level: str = typer.Option("INFO", help="Logging level"),
    config_path: Optional[Path] = typer.Option(None, "--config", help="Path to config.yaml"),
) -> None:
    """
    Connect to the gateway and serve interactions until interrupted.

    The bot token is read from MARKETPLACE_TOKEN or the config file.

    Example:
        trinketbot run --log-level DEBUG
    """
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    config = load_config(str(config_path) if config_path else None)
    if not config.token:
        typer.secho("MARKETPLACE_TOKEN is not set", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    from trinketbot.app import TrinketBot

    bot = TrinketBot(config)
    try:
        asyncio.run(bot.run())
    except GatewayFatalError as e:
        typer.secho(str(e), fg=typer.colors.RED)
        raise typer.Exit(code=2)
    except KeyboardInterrupt:
        typer.echo("Stopped")


def _ledger() -> SellerLedger:
    config = load_config()
    return SellerLedger(get_store(), cooldown=timedelta(days=config.marketplace.cooldown_days))


@seller_app.command("list")
def seller_list() -> None:
    """List every seller with their active thread and last listing time."""
    records = _ledger().all()
    if not records:
        typer.echo("No sellers found")
        return
    for user_id, record in sorted(records.items(), key=lambda kv: kv[1].listed_at):
        typer.echo(f"{user_id}\t{record.thread_id or '-'}\t{record.listed_at.isoformat()}")


@seller_app.command("show")
def seller_show(user_id: str) -> None:
    """Show one seller's record and when they may list again."""
    ledger = _ledger()
    record = ledger.get(user_id)
    if record is None:
        typer.echo("Seller not found")
        raise typer.Exit(code=1)

    typer.echo(f"Seller: {user_id}")
    typer.echo(f"Thread: {record.thread_id or '-'}")
    typer.echo(f"Listed at: {record.listed_at.isoformat()}")
    eligible = ledger.next_eligible(user_id)
    typer.echo(f"Next listing: {eligible.isoformat() if eligible else 'now'}")


@seller_app.command("import-legacy")
def seller_import_legacy(
    cooldowns: Path = typer.Option(..., help="JSON file mapping user id to last listing time"),
    threads: Optional[Path] = typer.Option(None, help="JSON file mapping user id to thread id"),
) -> None:
    """Merge the old cooldown and thread files into seller records."""
    for path in (cooldowns, threads):
        if path is not None and not path.exists():
            typer.secho(f"{path} does not exist", fg=typer.colors.RED)
            raise typer.Exit(code=1)

    cooldown_data = json.loads(cooldowns.read_text() or "{}")
    thread_data = json.loads(threads.read_text() or "{}") if threads else {}
    imported = _ledger().import_legacy(cooldown_data, thread_data)
    typer.echo(f"Imported {imported} seller records")


if __name__ == "__main__":
    app()
