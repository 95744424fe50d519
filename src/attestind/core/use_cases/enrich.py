from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from attestind.core.config import EnrichConfig
from attestind.core.errors import ExternalCallError, JoinInvariantViolation
from attestind.core.interfaces import IReadOnlyCaller
from attestind.core.models import AttestationRecord, AttestedEvent, AttestedStub
from attestind.eas.functions import (
    GET_ATTESTATION,
    GET_SCHEMA,
    ContractFunction,
    parse_attestation,
    parse_schema_record,
    uid_to_bytes,
)
from attestind.orchestration.utils import fetch_grouped, iter_batches
from attestind.schema.codec import try_decode_data

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Stats
# ---------------------------------------------------------------------------


@dataclass(kw_only=True)
class EnrichStats:
    """
    Counters accumulated across `enrich` calls.

    - how many attestation / schema lookups were issued
    - how many payloads degraded to an error marker
    """

    attestations_fetched: int = 0
    schemas_fetched: int = 0
    records: int = 0
    decode_failures: int = 0


# ---------------------------------------------------------------------------
# Domain service – AttestationEnricher
# ---------------------------------------------------------------------------


class AttestationEnricher:
    """
    Turn `Attested` stubs into full `AttestedEvent` records.

    For each batch of stubs (``config.batch_size``, order preserved):

    1) fetch every attestation by uid (one wave, awaited together); a uid
       repeated within a batch is fetched once and shared by its stubs
    2) collect the distinct schema ids not seen yet in this block
    3) fetch their schema texts (bounded waves)
    4) join in stub order and decode each payload against its schema

    External-call failures abort the whole `enrich` call; undecodable payloads
    only degrade their own record's ``decoded_data`` to an error marker.
    """

    def __init__(self, caller: IReadOnlyCaller, config: EnrichConfig | None = None) -> None:
        self._caller = caller
        self._config = config or EnrichConfig()
        self._sem = asyncio.Semaphore(self._config.concurrency)
        self.stats = EnrichStats()

    async def _call(
        self,
        function: ContractFunction,
        uid: str,
        to: str,
        block_identifier: int | str,
    ) -> tuple[Any, ...]:
        args = [uid_to_bytes(uid)]
        async with self._sem:
            try:
                return await self._caller.call(function, args, to, block_identifier=block_identifier)
            except ExternalCallError:
                raise
            except Exception as e:
                raise ExternalCallError(function.name, to, f"{type(e).__name__}: {e}") from e

    async def _fetch_attestation(self, uid: str, block_identifier: int | str) -> AttestationRecord:
        target = self._config.eas_address
        result = await self._call(GET_ATTESTATION, uid, target, block_identifier)
        self.stats.attestations_fetched += 1
        return parse_attestation(result, target=target)

    async def _fetch_schema_text(self, schema_id: str, block_identifier: int | str) -> str:
        target = self._config.schema_registry_address
        result = await self._call(GET_SCHEMA, schema_id, target, block_identifier)
        self.stats.schemas_fetched += 1
        return parse_schema_record(result, target=target).schema

    async def enrich(
        self,
        stubs: Sequence[AttestedStub],
        *,
        block_identifier: int | str = "latest",
    ) -> list[AttestedEvent]:
        """
        Enrich one block's stubs.

        Parameters
        ----------
        stubs : Sequence[AttestedStub]
            Stubs in log order.
        block_identifier : int | str
            Block the read-only calls are executed against.

        Returns
        -------
        list[AttestedEvent]
            One record per stub, same order as `stubs`.

        Raises
        ------
        ExternalCallError
            A read-only call failed or returned malformed data.
        JoinInvariantViolation
            A fetched attestation references a schema id with no fetched text.
        """
        batch_size = self._config.batch_size
        schema_cache: dict[str, str] = {}
        out: list[AttestedEvent] = []

        async def fetch_attestation(uid: str) -> AttestationRecord:
            return await self._fetch_attestation(uid, block_identifier)

        async def fetch_schema_text(schema_id: str) -> str:
            return await self._fetch_schema_text(schema_id, block_identifier)

        def missing_schema(schema_id: str) -> Exception:
            return JoinInvariantViolation(f"No schema text fetched for schema id {schema_id}")

        for batch_no, batch in enumerate(iter_batches(stubs, batch_size)):
            records = await fetch_grouped(
                batch,
                key=lambda s: s.uid,
                fetch=fetch_attestation,
                batch_size=batch_size,
            )
            schemas = await fetch_grouped(
                records,
                key=lambda r: r.schema_id,
                fetch=fetch_schema_text,
                batch_size=batch_size,
                cache=schema_cache,
                on_missing=missing_schema,
            )
            logger.debug(
                "Batch %d: %d attestations, %d distinct schemas known",
                batch_no,
                len(records),
                len(schema_cache),
            )

            for stub, record, schema in zip(batch, records, schemas):
                decoded, ok = try_decode_data(record.data, schema)
                if not ok:
                    logger.warning("Attestation %s kept with an error marker", stub.uid)
                    self.stats.decode_failures += 1
                out.append(
                    AttestedEvent(
                        meta=stub.meta,
                        attester=stub.attester,
                        recipient=stub.recipient,
                        schema_id=stub.schema_id,
                        uid=stub.uid,
                        data=record.data,
                        schema=schema,
                        decoded_data=decoded,
                    )
                )

        self.stats.records += len(out)
        if out:
            logger.info(
                "Enriched %d attestations at block %s using %d schemas",
                len(out),
                block_identifier,
                len(schema_cache),
            )
        return out
