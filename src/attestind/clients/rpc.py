"""Lightweight JSON-RPC client for Ethereum-compatible nodes.

This module provides:
- `RPC`: an async client with sane timeouts/connection limits
- Helper utilities to format block numbers and topics

It serves both external interfaces of the indexer: `eth_getLogs` (returning
`EventLog` records) and read-only contract calls through `eth_call`.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import httpx
from pydantic import BaseModel, ValidationError

from attestind.core.errors import ExternalCallError
from attestind.core.models import EventLog
from attestind.eas.functions import ContractFunction


class RPCError(RuntimeError):
    """JSON-RPC level failure (error object or malformed envelope)."""


class JsonRpcErrorBody(BaseModel):
    code: int
    message: str
    data: Any = None


class JsonRpcResponse(BaseModel):
    jsonrpc: str = "2.0"
    id: int | str | None = None
    result: Any = None
    error: JsonRpcErrorBody | None = None


def to_hex_block(x: int | str) -> str:
    """Return a 0x-prefixed hex block number, or pass a tag ("latest") through."""
    if isinstance(x, int):
        return hex(x)
    return x


def topics_param(topic0s: Sequence[str]) -> list[list[str]]:
    """Format topic0 signatures for eth_getLogs RPC call."""
    return [[t.lower() for t in topic0s]]


def _hex_to_int(value: Any) -> int | None:
    if isinstance(value, str) and value.startswith("0x"):
        return int(value, 16)
    if isinstance(value, int):
        return value
    return None


class RPC:
    """Minimal async RPC client.

    Parameters
    ----------
    url : str
        RPC endpoint URL.
    timeout_s : int
        Per-operation timeout in seconds (connect/read/write).
    max_connections : int
        Maximum concurrent connections to keep in the pool.
    transport : httpx.AsyncBaseTransport | None
        Optional transport override (tests use `httpx.MockTransport`).
    """

    def __init__(
        self,
        url: str,
        *,
        timeout_s: int = 20,
        max_connections: int = 64,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self.client = httpx.AsyncClient(
            timeout=httpx.Timeout(
                connect=timeout_s,
                read=timeout_s,
                write=timeout_s,
                pool=max(30, timeout_s * 3),
            ),
            limits=httpx.Limits(
                max_connections=max_connections,
                max_keepalive_connections=max(1, max_connections // 2),
            ),
            http2=transport is None,
            transport=transport,
        )
        self._next_id = 0

    async def _request(self, method: str, params: list[Any]) -> Any:
        self._next_id += 1
        payload = {"jsonrpc": "2.0", "id": self._next_id, "method": method, "params": params}
        r = await self.client.post(self.url, json=payload)
        r.raise_for_status()
        try:
            data = JsonRpcResponse.model_validate(r.json())
        except (ValueError, ValidationError) as e:
            raise RPCError(f"Malformed JSON-RPC response to {method}: {e}") from e
        if data.error is not None:
            raise RPCError(f"RPC error: {data.error.code} {data.error.message}")
        return data.result

    async def latest_block(self) -> int:
        """Return the latest block number as an int."""
        return int(await self._request("eth_blockNumber", []), 16)

    async def block_timestamp(self, block_number: int) -> int:
        """Return the UNIX timestamp of a block."""
        block = await self._request("eth_getBlockByNumber", [to_hex_block(block_number), False])
        if not isinstance(block, dict) or "timestamp" not in block:
            raise RPCError(f"Block {block_number} not found")
        return int(block["timestamp"], 16)

    async def get_logs(
        self,
        *,
        address: str,
        topic0s: Sequence[str],
        from_block: int,
        to_block: int,
    ) -> list[EventLog]:
        """Fetch logs for an address and a set of topic0 signatures within a block range."""
        params = [
            {
                "address": address.lower(),
                "fromBlock": to_hex_block(from_block),
                "toBlock": to_hex_block(to_block),
                "topics": topics_param(topic0s),
            }
        ]
        result = await self._request("eth_getLogs", params)

        out: list[EventLog] = []
        for rl in result or []:
            topics = tuple((t if isinstance(t, str) else t.decode()).lower() for t in rl.get("topics", []))
            out.append(
                EventLog(
                    address=rl["address"].lower(),
                    topics=topics,
                    data_hex=str(rl.get("data") or "0x"),
                    block_number=int(rl["blockNumber"], 16),
                    tx_hash=(rl.get("transactionHash") or rl.get("transaction_hash") or "").lower(),
                    log_index=int(rl["logIndex"], 16),
                    block_timestamp=_hex_to_int(rl.get("blockTimestamp")),
                )
            )
        return out

    async def call(
        self,
        function: ContractFunction,
        args: Sequence[Any],
        to: str,
        *,
        block_identifier: int | str = "latest",
    ) -> tuple[Any, ...]:
        """Execute a read-only contract call with `eth_call` and decode its outputs.

        :raise ExternalCallError:
            On transport, JSON-RPC or output decoding failures.
        """
        calldata = function.encode_input(args)
        params = [{"to": to, "data": "0x" + calldata.hex()}, to_hex_block(block_identifier)]
        try:
            result = await self._request("eth_call", params)
            if not isinstance(result, str):
                raise RPCError(f"eth_call returned {result!r}")
            raw = bytes.fromhex(result[2:] if result.startswith("0x") else result)
            return function.decode_output(raw)
        except ExternalCallError:
            raise
        except Exception as e:
            raise ExternalCallError(function.name, to, f"{type(e).__name__}: {e}") from e

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.aclose()
