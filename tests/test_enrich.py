import pytest
from eth_abi import encode

from attestind.core.config import EnrichConfig
from attestind.core.errors import ExternalCallError
from attestind.core.use_cases.enrich import AttestationEnricher
from fakes import FakeCaller, make_id

SCHEMA_TEXTS = {
    make_id(900_001): "uint256 value",
    make_id(900_002): "uint256 value, bool flag",
    make_id(900_003): "tuple(uint256 value, string tag) item",
}


def _payload(schema_no: int, i: int) -> bytes:
    if schema_no == 0:
        return encode(["uint256"], [i])
    if schema_no == 1:
        return encode(["uint256", "bool"], [i, i % 2 == 0])
    return encode(["(uint256,string)"], [(i, f"tag-{i}")])


def _fixture(n: int) -> tuple[dict[str, tuple[str, bytes]], list[str]]:
    schema_ids = list(SCHEMA_TEXTS)
    attestations = {}
    for i in range(n):
        attestations[make_id(i)] = (schema_ids[i % 3], _payload(i % 3, i))
    return attestations, schema_ids


@pytest.mark.asyncio
async def test_batches_deduplicate_schema_lookups(make_stub) -> None:
    attestations, schema_ids = _fixture(250)
    caller = FakeCaller(attestations, SCHEMA_TEXTS)
    stubs = [make_stub(i, schema_id=schema_ids[i % 3]) for i in range(250)]

    enricher = AttestationEnricher(caller, EnrichConfig(batch_size=100))
    out = await enricher.enrich(stubs, block_identifier=100)

    assert caller.count("getAttestation") == 250
    assert caller.count("getSchema") == 3
    assert enricher.stats.attestations_fetched == 250
    assert enricher.stats.schemas_fetched == 3
    assert len(out) == 250
    assert all(block == 100 for _, _, block in caller.calls)


@pytest.mark.asyncio
async def test_output_preserves_stub_order(make_stub) -> None:
    n = 30
    attestations, schema_ids = _fixture(n)
    # later uids answer first
    caller = FakeCaller(attestations, SCHEMA_TEXTS, delay=lambda key: (n - int(key, 16) % n) * 0.001)
    stubs = [make_stub(i, schema_id=schema_ids[i % 3]) for i in range(n)]

    out = await AttestationEnricher(caller, EnrichConfig(batch_size=7)).enrich(stubs)

    assert [r.uid for r in out] == [s.uid for s in stubs]
    assert [r.meta.log_index for r in out] == list(range(n))


@pytest.mark.asyncio
async def test_decoded_record_fields(make_stub) -> None:
    attestations, schema_ids = _fixture(3)
    caller = FakeCaller(attestations, SCHEMA_TEXTS)
    stubs = [make_stub(i, schema_id=schema_ids[i % 3]) for i in range(3)]

    first, second, third = await AttestationEnricher(caller).enrich(stubs)

    assert first.schema == "uint256 value"
    assert first.decoded_data == {"value": "0"}
    assert first.data == attestations[make_id(0)][1]
    assert second.decoded_data == {"value": "1", "flag": False}
    assert third.decoded_data == {"item": {"value": "2", "tag": "tag-2"}}
    assert third.schema_id == schema_ids[2]


@pytest.mark.asyncio
async def test_undecodable_payload_only_degrades_its_record(make_stub) -> None:
    attestations, schema_ids = _fixture(100)
    bad_uid = make_id(42)
    attestations[bad_uid] = (attestations[bad_uid][0], b"\x01")
    caller = FakeCaller(attestations, SCHEMA_TEXTS)
    stubs = [make_stub(i, schema_id=schema_ids[i % 3]) for i in range(100)]

    enricher = AttestationEnricher(caller)
    out = await enricher.enrich(stubs)

    assert len(out) == 100
    errors = [r for r in out if "error" in r.decoded_data]
    assert [r.uid for r in errors] == [bad_uid]
    assert errors[0].data == b"\x01"
    assert enricher.stats.decode_failures == 1


@pytest.mark.asyncio
async def test_malformed_schema_text_degrades_records(make_stub) -> None:
    schema_id = make_id(777)
    caller = FakeCaller({make_id(0): (schema_id, b"")}, {schema_id: "uint7 nope"})

    (rec,) = await AttestationEnricher(caller).enrich([make_stub(0, schema_id=schema_id)])

    assert list(rec.decoded_data) == ["error"]
    assert rec.schema == "uint7 nope"


@pytest.mark.asyncio
async def test_call_failure_aborts_block(make_stub) -> None:
    attestations, schema_ids = _fixture(10)
    caller = FakeCaller(attestations, SCHEMA_TEXTS, fail_on={make_id(5)})
    stubs = [make_stub(i, schema_id=schema_ids[i % 3]) for i in range(10)]

    with pytest.raises(ExternalCallError) as exc:
        await AttestationEnricher(caller).enrich(stubs)
    assert exc.value.function == "getAttestation"


@pytest.mark.asyncio
async def test_schema_call_failure_aborts_block(make_stub) -> None:
    attestations, schema_ids = _fixture(3)
    caller = FakeCaller(attestations, SCHEMA_TEXTS, fail_on={schema_ids[1]})
    stubs = [make_stub(i, schema_id=schema_ids[i % 3]) for i in range(3)]

    with pytest.raises(ExternalCallError) as exc:
        await AttestationEnricher(caller).enrich(stubs)
    assert exc.value.function == "getSchema"


@pytest.mark.asyncio
async def test_malformed_call_result_is_an_external_call_error(make_stub) -> None:
    class GarbageCaller:
        async def call(self, function, args, to, *, block_identifier="latest"):
            return ("not an attestation",)

    with pytest.raises(ExternalCallError):
        await AttestationEnricher(GarbageCaller()).enrich([make_stub(0, schema_id=make_id(1))])


@pytest.mark.asyncio
async def test_no_stubs_no_calls() -> None:
    caller = FakeCaller({}, {})

    assert await AttestationEnricher(caller).enrich([]) == []
    assert caller.calls == []


@pytest.mark.asyncio
async def test_repeated_uid_in_a_batch_is_fetched_once(make_stub) -> None:
    schema_id = make_id(900_001)
    caller = FakeCaller({make_id(0): (schema_id, encode(["uint256"], [9]))}, {schema_id: "uint256 value"})
    stub = make_stub(0, schema_id=schema_id)

    out = await AttestationEnricher(caller).enrich([stub, stub])

    assert caller.count("getAttestation") == 1
    assert [r.decoded_data for r in out] == [{"value": "9"}, {"value": "9"}]


@pytest.mark.asyncio
async def test_field_named_error_is_not_a_failure(make_stub) -> None:
    schema_id = make_id(900_001)
    caller = FakeCaller({make_id(0): (schema_id, encode(["uint256"], [3]))}, {schema_id: "uint256 error"})

    enricher = AttestationEnricher(caller)
    (rec,) = await enricher.enrich([make_stub(0, schema_id=schema_id)])

    assert rec.decoded_data == {"error": "3"}
    assert enricher.stats.decode_failures == 0
