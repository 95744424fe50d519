import asyncio
import json
import logging
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler

from attestind.constants import DEFAULT_BATCH_SIZE, EAS_ADDRESS, SCHEMA_REGISTRY_ADDRESS
from attestind.core.errors import ExternalCallError, JoinInvariantViolation

console = Console()


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def _parse_block(value: str) -> int | str:
    if value.lower() in ("latest", "earliest", "genesis"):
        return value.lower()
    try:
        return int(value)
    except ValueError as e:
        raise click.BadParameter(f"Not a block number or tag: {value}") from e


@click.group()
@click.option("--log-level", default="info", show_default=True, type=click.Choice(["debug", "info", "warning", "error"]))
def cli(log_level: str) -> None:
    """attestind: EAS attestation indexer with schema-driven payload decoding."""
    _setup_logging(log_level)


@cli.command("index")
@click.option("--rpc", required=True, envvar="JSON_RPC_URL", help="RPC endpoint URL (or JSON_RPC_URL)")
@click.option("--from-block", "from_block", required=True, help="First block (number or 'earliest')")
@click.option("--to-block", "to_block", default="latest", show_default=True, help="Last block (number or 'latest')")
@click.option("--step", type=int, default=2_000, show_default=True, help="Blocks per eth_getLogs request")
@click.option("--batch-size", type=int, default=DEFAULT_BATCH_SIZE, show_default=True, help="Read-only calls per wave")
@click.option("--concurrency", type=int, default=16, show_default=True, help="Max in-flight calls")
@click.option("--timeout", "timeout_s", type=int, default=20, show_default=True, help="RPC timeout in seconds")
@click.option("--jsonl-out", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Write records as NDJSON")
@click.option("--eas-address", default=EAS_ADDRESS, show_default=True)
@click.option("--schema-registry-address", default=SCHEMA_REGISTRY_ADDRESS, show_default=True)
def index_cmd(
    rpc: str,
    from_block: str,
    to_block: str,
    step: int,
    batch_size: int,
    concurrency: int,
    timeout_s: int,
    jsonl_out: Path | None,
    eas_address: str,
    schema_registry_address: str,
) -> None:
    """Index EAS events over a block range and decode attestation payloads."""
    from attestind.core.config import EnrichConfig, IndexerConfig
    from attestind.orchestration.orchestrator import run_indexer

    try:
        config = IndexerConfig(
            rpc_url=rpc,
            start_block=_parse_block(from_block),
            end_block=_parse_block(to_block),
            step=step,
            timeout_s=timeout_s,
            jsonl_out=jsonl_out,
            enrich=EnrichConfig(
                eas_address=eas_address.lower(),
                schema_registry_address=schema_registry_address.lower(),
                batch_size=batch_size,
                concurrency=concurrency,
            ),
        )
        stats = asyncio.run(run_indexer(config))
    except (ExternalCallError, JoinInvariantViolation, ValueError) as e:
        raise click.ClickException(str(e)) from e

    console.print(
        f"[bold]summary[/]: "
        f"[green]attested[/]={stats.attested}  "
        f"revoked={stats.revoked}  "
        f"revoked_offchain={stats.revoked_offchain}  "
        f"timestamped={stats.timestamped}  "
        f"[red]decode_failures[/]={stats.decode_failures}  "
        f"(blocks={stats.blocks}, logs={stats.logs}, chunks={stats.chunks})"
    )


@cli.command("decode")
@click.option("--schema", required=True, help='Schema signature, e.g. "uint256 id, string name"')
@click.option("--data", "data_hex", required=True, help="0x-hex ABI-encoded payload")
def decode_cmd(schema: str, data_hex: str) -> None:
    """Decode a single payload against a schema signature and print JSON."""
    from attestind.schema.codec import decode_data_or_error

    raw = data_hex[2:] if data_hex.lower().startswith("0x") else data_hex
    try:
        data = bytes.fromhex(raw)
    except ValueError as e:
        raise click.BadParameter(f"--data is not hex: {e}") from e
    console.print_json(json.dumps(decode_data_or_error(data, schema)))


if __name__ == "__main__":
    cli()
