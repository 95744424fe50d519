"""Projection tests build decoded value trees directly, without an encoder."""

from attestind.schema.parser import parse_schema
from attestind.schema.projector import leaf_to_json, project


class TestLeafRules:
    def test_large_uint_is_a_lossless_decimal_string(self):
        value = 2**53 + 1
        assert leaf_to_json(value) == "9007199254740993"
        assert leaf_to_json(2**256 - 1) == str(2**256 - 1)

    def test_signed_integers(self):
        assert leaf_to_json(-(2**255)) == str(-(2**255))
        assert leaf_to_json(0) == "0"

    def test_address_is_lowercase_hex(self):
        out = leaf_to_json(bytes.fromhex("AB" * 20))
        assert out == "0x" + "ab" * 20
        assert len(out) == 42

    def test_empty_bytes_projects_to_empty_string(self):
        assert leaf_to_json(b"") == ""

    def test_booleans_and_strings_pass_through(self):
        assert leaf_to_json(True) is True
        assert leaf_to_json(False) is False
        assert leaf_to_json("héllo") == "héllo"


def test_projection_mirrors_schema_shape() -> None:
    fields = parse_schema("tuple(uint8 a, tuple(bool x, bytes32 h)[] ys) t, string s, uint256[] ns")
    values = [
        (7, [(True, b"\x01" * 32), (False, b"\x02" * 32)]),
        "note",
        [1, 2**64],
    ]

    out = project(fields, values)

    assert out == {
        "t": {
            "a": "7",
            "ys": [
                {"x": True, "h": "0x" + "01" * 32},
                {"x": False, "h": "0x" + "02" * 32},
            ],
        },
        "s": "note",
        "ns": ["1", str(2**64)],
    }
    assert list(out) == ["t", "s", "ns"]


def test_tuple_field_with_scalar_value_is_null() -> None:
    fields = parse_schema("tuple(uint8 a) t, uint8 b")

    assert project(fields, [5, 6]) == {"t": None, "b": "6"}


def test_array_field_with_tuple_value_is_null() -> None:
    fields = parse_schema("uint8[] xs, bool ok")

    assert project(fields, [(1, 2), True]) == {"xs": None, "ok": True}


def test_mismatch_inside_array_only_nulls_the_element() -> None:
    fields = parse_schema("tuple(uint8 a)[] xs")

    assert project(fields, [[(1,), 2]]) == {"xs": [{"a": "1"}, None]}


def test_duplicate_names_keep_last_value() -> None:
    fields = parse_schema("uint8, uint8")

    assert project(fields, [1, 2]) == {"field": "2"}
