from __future__ import annotations

import asyncio
import os
from pathlib import Path

from attestind.core.models import EventRecord


class JsonlSink:
    """Append-only JSONL writer for output event records.

    Provides atomic append operations with an asyncio lock; file writes run
    in a worker thread.
    """

    def __init__(self, path: str | Path) -> None:
        """Initialize the sink at the given path.

        Args:
            path: File path for the JSONL output file
        """
        self.path = str(path)
        parent = os.path.dirname(self.path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        open(self.path, "a").close()
        self._lock = asyncio.Lock()
        self.written = 0

    async def write(self, record: EventRecord) -> None:
        """Append one record as a JSON line.

        Args:
            record: Event record to serialize
        """
        line = record.to_json_line()
        async with self._lock:
            await asyncio.to_thread(self._write_line, self.path, line)
            self.written += 1

    @staticmethod
    def _write_line(path: str, line: str) -> None:
        """Write a line to file with immediate flush and sync."""
        with open(path, "a", buffering=1) as f:
            f.write(line)
            f.flush()
            os.fsync(f.fileno())


class MemorySink:
    """Collects records in a list (tests, notebooks)."""

    def __init__(self) -> None:
        self.records: list[EventRecord] = []

    async def write(self, record: EventRecord) -> None:
        self.records.append(record)
