"""Output sinks for decoded event records.

This package provides:
- JsonlSink: append-only JSONL writer
- MemorySink: in-memory collector
"""

from attestind.storage.jsonl import JsonlSink, MemorySink

__all__ = [
    "JsonlSink",
    "MemorySink",
]
