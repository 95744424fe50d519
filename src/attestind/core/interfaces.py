from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, List, Protocol, runtime_checkable

from attestind.core.models import EventLog, EventRecord

if TYPE_CHECKING:
    from attestind.eas.functions import ContractFunction


# ---------------------------------------------------------------------------
# IReadOnlyCaller
# ---------------------------------------------------------------------------

@runtime_checkable
class IReadOnlyCaller(Protocol):
    """
    Read-only contract call interface.

    Domain expectations:
    - Each call is independent; no server-side state is assumed.
    - The result is the decoded output tuple of `function`.
    - Failures raise; the caller never retries.
    """

    async def call(
        self,
        function: ContractFunction,
        args: Sequence[Any],
        to: str,
        *,
        block_identifier: int | str = "latest",
    ) -> tuple[Any, ...]:
        """
        Call `function(*args)` on contract `to` and return its decoded outputs.

        Implementations:
        - JSON-RPC `eth_call` (current `RPC` class)
        - In-memory fake for testing
        """
        ...


# ---------------------------------------------------------------------------
# IEvmLogsProvider
# ---------------------------------------------------------------------------

@runtime_checkable
class IEvmLogsProvider(Protocol):
    """
    Abstract provider for fetching EVM logs.

    Domain expectations:
    - It returns EventLog objects already mapped into internal domain models.
    - It hides the underlying RPC / DB / archive technology.
    """

    async def get_logs(
        self,
        *,
        address: str,
        topic0s: list[str],
        from_block: int,
        to_block: int,
    ) -> List[EventLog]:
        """Return all logs for (address, topic0s) over the inclusive block range."""
        ...

    async def latest_block(self) -> int:
        """Return the current chain head height."""
        ...

    async def block_timestamp(self, block_number: int) -> int:
        """Return the UNIX timestamp of a block."""
        ...


# ---------------------------------------------------------------------------
# IEventSink
# ---------------------------------------------------------------------------

@runtime_checkable
class IEventSink(Protocol):
    """
    Append-only destination for output records.

    Implementations:
    - JSONL file writer
    - In-memory list for testing
    """

    async def write(self, record: EventRecord) -> None:
        ...
