import json

from eth_abi import encode

from attestind.schema.codec import decode_data, decode_data_or_error, try_decode_data
from attestind.schema.parser import MAX_NESTING_DEPTH


def test_decode_data_end_to_end() -> None:
    schema = "uint256 eventId, string name, tuple(address who, bool ok)[] entries, bytes32 ref, bytes memo"
    who = "0x" + "9f" * 20
    data = encode(
        ["uint256", "string", "(address,bool)[]", "bytes32", "bytes"],
        [2**70, "ticket", [(who, True)], b"\xaa" * 32, b""],
    )

    out = decode_data(data, schema)

    assert out == {
        "eventId": str(2**70),
        "name": "ticket",
        "entries": [{"who": who, "ok": True}],
        "ref": "0x" + "aa" * 32,
        "memo": "",
    }
    # integers are never JSON numbers
    assert '"eventId":"' + str(2**70) + '"' in json.dumps(out, separators=(",", ":"))


def test_schema_error_becomes_marker() -> None:
    out = decode_data_or_error(b"", "uint7 broken")

    assert list(out) == ["error"]
    assert "uint7" in out["error"]


def test_decode_error_becomes_marker() -> None:
    out = decode_data_or_error(b"\x01", "uint256 a")

    assert list(out) == ["error"]
    assert "uint256 a" in out["error"]


def test_try_decode_data_flags_failures() -> None:
    decoded, ok = try_decode_data(encode(["uint256"], [5]), "uint256 error")
    assert ok
    assert decoded == {"error": "5"}

    decoded, ok = try_decode_data(b"\x01", "uint256 error")
    assert not ok
    assert list(decoded) == ["error"]


def test_deeply_nested_schema_degrades_to_marker() -> None:
    depth = 40
    schema = "tuple(" * depth + "uint8 a" + ")" * depth + " x"

    out = decode_data_or_error(b"\x00" * 32, schema)

    assert list(out) == ["error"]
    assert "Nesting" in out["error"]


def test_schema_at_nesting_limit_decodes() -> None:
    depth = MAX_NESTING_DEPTH
    schema = "tuple(" * depth + "uint8 a" + ")" * depth + " x"

    out = decode_data((7).to_bytes(32, "big"), schema)

    expected: object = "7"
    for _ in range(depth):
        expected = {"a": expected}
    assert out == {"x": expected}
