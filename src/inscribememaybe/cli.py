"""CLI entry point for inscribememaybe."""

from __future__ import annotations

import asyncio
import logging
import sys

import click

from inscribememaybe.config import load_config
from inscribememaybe.errors import ConfigurationError, InscriptionError
from inscribememaybe.ethereum.chains import chain_name, tx_url
from inscribememaybe.models.config import InscriberConfig
from inscribememaybe.models.inscription import Deploy, Mint, parse_inscription
from inscribememaybe.runner import run_mint
from inscribememaybe.storage.sqlite import SQLiteInscriptionStore

MAINNET_PROMPT = (
    "it looks like you're targeting ethereum mainnet. "
    "To proceed, please acknowledge that you're a degenerate"
)


class InscriptionParamType(click.ParamType):
    """Parses an inscription JSON argument. A leading `data:,` is stripped."""

    def __init__(self, kind=None) -> None:
        self.kind = kind
        self.name = kind.__name__.lower() if kind else "inscription"

    def convert(self, value, param, ctx):
        if self.kind is not None and isinstance(value, self.kind):
            return value
        try:
            if self.kind is None:
                return parse_inscription(value)
            return self.kind.from_json(value)
        except InscriptionError as exc:
            self.fail(str(exc), param, ctx)


def _load(ctx: click.Context) -> InscriberConfig:
    try:
        cfg = load_config(ctx.obj["config_path"])
    except ConfigurationError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)
    if not ctx.obj["verbose"]:
        logging.getLogger().setLevel(cfg.log_level.upper())
    return cfg


def _require_key(cfg: InscriberConfig) -> None:
    """Exit with error if no private key is configured."""
    if not cfg.private_key:
        click.echo("Error: No private key configured.", err=True)
        click.echo(
            "Pass --private-key, set INSCRIBEMEMAYBE_PRIVATE_KEY, or private_key in config.",
            err=True,
        )
        sys.exit(1)


def _apply_overrides(cfg: InscriberConfig, **overrides) -> None:
    for name, value in overrides.items():
        if value is not None:
            setattr(cfg, name, value)


def _inscribe(cfg: InscriberConfig, payload: bytes, yes: bool) -> None:
    """Run the engine for `payload` and report the result."""

    def _confirm() -> bool:
        return yes or click.confirm(MAINNET_PROMPT, default=False)

    try:
        summary = asyncio.run(run_mint(cfg, payload, _confirm))
    except ConfigurationError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)
    except KeyboardInterrupt:
        click.echo("\nInterrupted.", err=True)
        sys.exit(130)
    except Exception as exc:
        click.echo(f"\nMint failed: {exc}", err=True)
        sys.exit(1)

    if summary.aborted:
        click.echo("Aborted, nothing sent.")
        return

    click.echo(
        f"Sent {summary.minted} inscription(s) from {summary.sender} "
        f"on {chain_name(summary.chain_id)}"
    )


@click.group()
@click.option("-c", "--config", "config_path", default=None, help="Path to config TOML file")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """inscribememaybe - send EVM inscriptions in bulk."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["verbose"] = verbose

    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


# ── Sending ────────────────────────────────────────────


@cli.command()
@click.argument("message", type=InscriptionParamType(Mint))
@click.option("--private-key", "--pk", "private_key", default=None,
              help="The private key to use for signing transactions")
@click.option("--rpc-url", default=None, help="The RPC URL where the transactions will be sent")
@click.option("--transactions", type=click.IntRange(min=1), default=None,
              help="The number of transactions to send [default: 1]")
@click.option("--concurrency", type=click.IntRange(min=1), default=None,
              help="The number of mints to send concurrently [default: 16]")
@click.option("--yes", "-y", is_flag=True, help="Skip the mainnet confirmation prompt")
@click.pass_context
def mint(
    ctx: click.Context,
    message: Mint,
    private_key: str | None,
    rpc_url: str | None,
    transactions: int | None,
    concurrency: int | None,
    yes: bool,
) -> None:
    """Mint tokens. MESSAGE must be a valid mint JSON string."""
    cfg = _load(ctx)
    _apply_overrides(
        cfg,
        private_key=private_key,
        rpc_url=rpc_url,
        transactions=transactions,
        concurrency=concurrency,
    )
    _require_key(cfg)

    click.echo(f"Minting {message} x{cfg.transactions} (concurrency {cfg.concurrency})")
    _inscribe(cfg, message.calldata(), yes)


@cli.command()
@click.argument("message", type=InscriptionParamType(Deploy))
@click.option("--private-key", "--pk", "private_key", default=None,
              help="The private key to use for signing transactions")
@click.option("--rpc-url", default=None, help="The RPC URL where the transaction will be sent")
@click.option("--yes", "-y", is_flag=True, help="Skip the mainnet confirmation prompt")
@click.pass_context
def deploy(
    ctx: click.Context,
    message: Deploy,
    private_key: str | None,
    rpc_url: str | None,
    yes: bool,
) -> None:
    """Deploy a token. MESSAGE must be a valid deploy JSON string."""
    cfg = _load(ctx)
    _apply_overrides(cfg, private_key=private_key, rpc_url=rpc_url)
    cfg.transactions = 1
    cfg.concurrency = 1
    _require_key(cfg)

    click.echo(f"Deploying {message}")
    _inscribe(cfg, message.calldata(), yes)


# ── Info ───────────────────────────────────────────────


@cli.command()
@click.argument("message", type=InscriptionParamType())
def encode(message) -> None:
    """Print the calldata for any inscription operation."""
    calldata = message.calldata()
    click.echo(f"Calldata: {message.calldata_string()}")
    click.echo(f"Hex:      0x{calldata.hex()}")
    click.echo(f"Bytes:    {len(calldata)}")


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show the effective configuration."""
    cfg = _load(ctx)
    click.echo(f"RPC URL:      {cfg.rpc_url}")
    click.echo(f"Chain ID:     {cfg.chain_id if cfg.chain_id is not None else '(from RPC)'}")
    click.echo(f"Transactions: {cfg.transactions}")
    click.echo(f"Concurrency:  {cfg.concurrency}")
    click.echo(f"Gas limit:    {cfg.gas_limit}")
    click.echo(f"Receipts:     timeout {cfg.receipt_timeout}s, poll {cfg.poll_interval}s")
    click.echo(f"Retry:        {cfg.retry.strategy.value}")
    click.echo(f"DB path:      {cfg.db_path}")
    click.echo(f"Private key:  {'***configured***' if cfg.private_key else '(not set)'}")


@cli.command()
@click.option("--sender", default=None, help="Only show inscriptions from this address")
@click.option("--chain-id", type=int, default=None, help="Only show inscriptions on this chain")
@click.option("-n", "--limit", type=int, default=20, help="Number of recent inscriptions to show")
@click.pass_context
def history(ctx: click.Context, sender: str | None, chain_id: int | None, limit: int) -> None:
    """List recorded inscriptions, newest first."""
    cfg = _load(ctx)

    async def _history():
        store = SQLiteInscriptionStore(cfg.db_path)
        await store.initialize()
        try:
            records = await store.get_inscriptions(sender, chain_id, limit)
            total = await store.count(sender, chain_id)
        finally:
            await store.close()

        if not records:
            click.echo("No inscriptions recorded.")
            return

        for r in records:
            link = tx_url(r.chain_id, r.tx_hash) or r.tx_hash
            click.echo(
                f"  #{r.id} {chain_name(r.chain_id)} nonce={r.nonce} "
                f"block={r.block_number} {link}"
            )
            click.echo(f"      {r.calldata_text}")
        click.echo(f"Showing {len(records)} of {total}")

    asyncio.run(_history())


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
