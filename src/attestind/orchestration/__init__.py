"""Orchestration for indexing EAS events over block ranges.

This package provides:
- Block-range indexer (`attestind.orchestration.orchestrator.index_range`)
- Chunking / batching utilities, including the group-fetch-join combinator
"""

from attestind.orchestration.utils import fetch_grouped, iter_batches, iter_chunks

__all__ = [
    "fetch_grouped",
    "iter_batches",
    "iter_chunks",
]
