"""Block-range indexer: fetch EAS logs → extract → enrich → sink.

This module provides two layers:

1) `index_range(...)`:
   - Pure application-layer use case.
   - Depends ONLY on interfaces (IEvmLogsProvider, IReadOnlyCaller, IEventSink).
   - Does NOT manage lifecycle (e.g., closing RPC).

2) `run_indexer(...)` (convenience wrapper):
   - Wires concrete implementations (RPC, JsonlSink) for CLI / script usage.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, replace

from attestind.clients.rpc import RPC
from attestind.core.config import IndexerConfig
from attestind.core.interfaces import IEventSink, IEvmLogsProvider, IReadOnlyCaller
from attestind.core.models import (
    AttestedEvent,
    BlockEvents,
    EventLog,
    EventRecord,
    RevokedEvent,
    RevokedOffchainEvent,
    TimestampedEvent,
)
from attestind.core.use_cases.enrich import AttestationEnricher
from attestind.eas.events import EAS_TOPIC0S, extract_block_events
from attestind.orchestration.utils import iter_chunks
from attestind.storage.jsonl import JsonlSink, MemorySink

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Stats
# ---------------------------------------------------------------------------


@dataclass(kw_only=True)
class IndexStats:
    """Aggregated counters for one indexing run."""

    chunks: int = 0
    logs: int = 0
    blocks: int = 0
    attested: int = 0
    revoked: int = 0
    revoked_offchain: int = 0
    timestamped: int = 0
    decode_failures: int = 0

    @property
    def records(self) -> int:
        return self.attested + self.revoked + self.revoked_offchain + self.timestamped


async def _resolve_block_range(
    logs_provider: IEvmLogsProvider,
    start_block: int | str,
    end_block: int | str,
) -> tuple[int, int]:
    """Resolve start and end blocks, handling special values like 'latest'."""
    if isinstance(start_block, str) and start_block.lower() in ("earliest", "genesis"):
        start = 0
    else:
        start = int(start_block)

    if isinstance(end_block, str) and end_block.lower() == "latest":
        end = await logs_provider.latest_block()
    else:
        end = int(end_block)

    if start > end:
        raise ValueError("start_block must be <= end_block")

    return start, end


def group_logs_by_block(logs: Iterable[EventLog]) -> dict[int, list[EventLog]]:
    """Group logs by block number; blocks ascending, logs by log index."""
    by_block: dict[int, list[EventLog]] = defaultdict(list)
    for log in logs:
        by_block[log.block_number].append(log)
    return {b: sorted(by_block[b], key=lambda lg: lg.log_index) for b in sorted(by_block)}


async def _fill_block_timestamp(
    logs_provider: IEvmLogsProvider,
    block_number: int,
    logs: list[EventLog],
) -> list[EventLog]:
    """Fill `block_timestamp` when the node omitted it from eth_getLogs."""
    if all(lg.block_timestamp is not None for lg in logs):
        return logs
    ts = await logs_provider.block_timestamp(block_number)
    return [lg if lg.block_timestamp is not None else replace(lg, block_timestamp=ts) for lg in logs]


def _count(stats: IndexStats, rec: EventRecord) -> None:
    match rec:
        case AttestedEvent():
            stats.attested += 1
        case RevokedEvent():
            stats.revoked += 1
        case RevokedOffchainEvent():
            stats.revoked_offchain += 1
        case TimestampedEvent():
            stats.timestamped += 1


def merge_block_records(events: BlockEvents, attested: list[AttestedEvent]) -> list[EventRecord]:
    """All records of one block in log order."""
    records: list[EventRecord] = [*attested, *events.revoked, *events.revoked_offchain, *events.timestamped]
    return sorted(records, key=lambda r: r.meta.log_index)


async def process_block(
    *,
    block_number: int,
    logs: list[EventLog],
    logs_provider: IEvmLogsProvider,
    enricher: AttestationEnricher,
    eas_address: str,
) -> list[EventRecord]:
    """Extract and enrich the EAS events of one block."""
    logs = await _fill_block_timestamp(logs_provider, block_number, logs)
    events = extract_block_events(logs, eas_address=eas_address, block_number=block_number)
    if events.is_empty():
        return []
    attested = await enricher.enrich(events.attested, block_identifier=block_number)
    return merge_block_records(events, attested)


async def index_range(
    *,
    config: IndexerConfig,
    logs_provider: IEvmLogsProvider,
    caller: IReadOnlyCaller,
    sink: IEventSink,
) -> IndexStats:
    """Index every EAS event in ``[config.start_block, config.end_block]``.

    Chunks are processed sequentially and blocks in ascending order, so records
    reach the sink in (block, log index) order. Any `ExternalCallError` or
    `JoinInvariantViolation` aborts the run.
    """
    start, end = await _resolve_block_range(logs_provider, config.start_block, config.end_block)
    eas_address = config.enrich.eas_address
    enricher = AttestationEnricher(caller, config.enrich)
    stats = IndexStats()

    for a, b in iter_chunks(start, end, config.step):
        logs = await logs_provider.get_logs(
            address=eas_address,
            topic0s=EAS_TOPIC0S,
            from_block=a,
            to_block=b,
        )
        stats.chunks += 1
        stats.logs += len(logs)

        for block_number, block_logs in group_logs_by_block(logs).items():
            records = await process_block(
                block_number=block_number,
                logs=block_logs,
                logs_provider=logs_provider,
                enricher=enricher,
                eas_address=eas_address,
            )
            if not records:
                continue
            stats.blocks += 1
            for rec in records:
                await sink.write(rec)
                _count(stats, rec)

        logger.info("Blocks %d-%d: %d logs, %d records so far", a, b, len(logs), stats.records)

    stats.decode_failures = enricher.stats.decode_failures
    return stats


# ---------------------------------------------------------------------------
# Convenience wrapper (concrete wiring)
# ---------------------------------------------------------------------------


async def run_indexer(config: IndexerConfig, sink: IEventSink | None = None) -> IndexStats:
    """Wire an `RPC` client and a sink, run `index_range` and close the client.

    Without an explicit `sink`, records go to ``config.jsonl_out`` if set,
    otherwise they are collected in memory and discarded.
    """
    if sink is None:
        sink = JsonlSink(config.jsonl_out) if config.jsonl_out else MemorySink()

    rpc = RPC(
        config.rpc_url,
        timeout_s=config.timeout_s,
        max_connections=max(32, 2 * config.enrich.concurrency),
    )
    try:
        return await index_range(config=config, logs_provider=rpc, caller=rpc, sink=sink)
    finally:
        await rpc.aclose()
