from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from attestind.constants import DEFAULT_BATCH_SIZE, EAS_ADDRESS, SCHEMA_REGISTRY_ADDRESS


@dataclass(frozen=True)
class EnrichConfig:
    """Domain-level configuration for attestation enrichment (no infrastructure)."""

    eas_address: str = EAS_ADDRESS
    schema_registry_address: str = SCHEMA_REGISTRY_ADDRESS
    batch_size: int = DEFAULT_BATCH_SIZE
    concurrency: int = 16

    def __post_init__(self) -> None:
        if self.batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        if self.concurrency < 1:
            raise ValueError("concurrency must be >= 1")


@dataclass(frozen=True)
class IndexerConfig:
    """Configuration for the block-range indexer (CLI)."""

    rpc_url: str
    start_block: int | str
    end_block: int | str
    step: int = 2_000
    timeout_s: int = 20
    jsonl_out: Path | None = None
    enrich: EnrichConfig = EnrichConfig()
