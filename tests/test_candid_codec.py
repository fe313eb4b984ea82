import pytest

from nns_offline.candid import CandidDecodeError, CandidEncodeError, decode, encode, idl_hash
from nns_offline.candid.codec import encode_leb128, encode_sleb128
from nns_offline.candid.types import (
    INT,
    INT8,
    NAT,
    NAT8,
    NAT16,
    NAT64,
    NULL,
    PRINCIPAL,
    TEXT,
    OptType,
    TypeEnv,
    VarType,
    VecType,
    record,
    tuple_record,
    variant,
)
from nns_offline.principal import Principal


@pytest.mark.parametrize(
    "value, expected",
    [(0, "00"), (127, "7f"), (128, "8001"), (624485, "e58e26")],
)
def test_leb128_vectors(value: int, expected: str) -> None:
    assert encode_leb128(value).hex() == expected


@pytest.mark.parametrize(
    "value, expected",
    [(0, "00"), (-1, "7f"), (63, "3f"), (64, "c000"), (-123456, "c0bb78")],
)
def test_sleb128_vectors(value: int, expected: str) -> None:
    assert encode_sleb128(value).hex() == expected


def test_field_hash_matches_reference_value() -> None:
    assert idl_hash("foo") == 5097222
    assert idl_hash("") == 0


@pytest.mark.parametrize(
    "types, values, expected",
    [
        ([], [], "4449444c0000"),
        ([NAT], [0], "4449444c00017d00"),
        ([TEXT], ["Hi"], "4449444c0001710248 69".replace(" ", "")),
        ([INT], [-123456], "4449444c00017cc0bb78"),
        ([NAT16], [258], "4449444c00017a0201"),
        ([PRINCIPAL], [Principal.management()], "4449444c0001680100"),
    ],
)
def test_encode_reference_messages(types, values, expected: str) -> None:
    assert encode(types, values).hex() == expected


def test_opt_and_record_round_trip_untyped() -> None:
    ty = record({"id": NAT64, "name": OptType(TEXT)})
    data = encode([ty], [{"id": 7, "name": "neuron"}])

    decoded = decode(data)

    assert decoded.to_python() == [{idl_hash("id"): 7, idl_hash("name"): "neuron"}]


def test_typed_decode_recovers_field_names() -> None:
    ty = record({"id": NAT64, "name": OptType(TEXT)})
    data = encode([ty], [{"id": 7, "name": None}])

    decoded = decode(data, [ty])

    assert decoded.to_python() == [{"id": 7, "name": None}]


def test_typed_decode_defaults_missing_optional_fields_and_skips_extra() -> None:
    wire = record({"id": NAT64, "extra": TEXT})
    expected = record({"id": NAT64, "memo": OptType(NAT64)})
    data = encode([wire], [{"id": 1, "extra": "ignored"}])

    decoded = decode(data, [expected])

    assert decoded.to_python() == [{"id": 1, "memo": None}]


def test_typed_decode_requires_non_optional_fields() -> None:
    data = encode([record({"id": NAT64})], [{"id": 1}])

    with pytest.raises(CandidDecodeError):
        decode(data, [record({"id": NAT64, "memo": NAT64})])


def test_nat_is_accepted_where_int_is_expected() -> None:
    data = encode([NAT], [5])

    assert decode(data, [INT]).args[0].kind == "int"
    assert decode(data, [INT]).to_python() == [5]


def test_mismatched_primitive_is_an_error() -> None:
    data = encode([TEXT], ["five"])

    with pytest.raises(CandidDecodeError):
        decode(data, [NAT])


def test_opt_with_incompatible_payload_becomes_null() -> None:
    data = encode([OptType(TEXT)], ["five"])

    assert decode(data, [OptType(NAT)]).to_python() == [None]


def test_non_opt_value_is_wrapped_for_opt_type() -> None:
    data = encode([NAT8], [9])

    decoded = decode(data, [OptType(NAT8)])

    assert decoded.args[0].kind == "opt"
    assert decoded.to_python() == [9]


def test_missing_trailing_optional_argument_defaults_to_null() -> None:
    data = encode([NAT], [1])

    assert decode(data, [NAT, OptType(TEXT)]).to_python() == [1, None]
    with pytest.raises(CandidDecodeError):
        decode(data, [NAT, TEXT])


def test_extra_wire_arguments_are_ignored() -> None:
    data = encode([NAT, TEXT], [1, "extra"])

    assert decode(data, [NAT]).to_python() == [1]


def test_variant_round_trip() -> None:
    ty = variant({"Ok": NULL, "Err": TEXT})

    assert decode(encode([ty], [{"Err": "boom"}]), [ty]).to_python() == [{"Err": "boom"}]
    assert decode(encode([ty], [{"Ok": None}]), [ty]).to_python() == [{"Ok": None}]


def test_variant_tag_unknown_to_expected_type_is_an_error() -> None:
    wire = variant({"Ok": NULL, "Other": NULL})
    expected = variant({"Ok": NULL})

    with pytest.raises(CandidDecodeError):
        decode(encode([wire], [{"Other": None}]), [expected])


def test_recursive_named_type_round_trip() -> None:
    env = TypeEnv()
    env.define("List", OptType(record({"head": NAT, "tail": VarType("List")})))
    value = {"head": 1, "tail": {"head": 2, "tail": None}}

    data = encode([VarType("List")], [value], env)

    assert decode(data, [VarType("List")], env).to_python() == [value]


def test_blob_accepts_bytes_and_tuple_records_accept_sequences() -> None:
    ty = tuple_record(VecType(NAT8), INT8)

    data = encode([ty], [(b"\x01\x02", -3)])

    assert decode(data, [ty]).to_python() == [{0: b"\x01\x02", 1: -3}]


@pytest.mark.parametrize(
    "types, values",
    [
        ([NAT], [-1]),
        ([NAT8], [256]),
        ([TEXT], [5]),
        ([record({"id": NAT64})], [{}]),
        ([variant({"A": NULL})], [{"B": None}]),
        ([NAT, NAT], [1]),
    ],
)
def test_encode_rejects_values_that_do_not_fit(types, values) -> None:
    with pytest.raises(CandidEncodeError):
        encode(types, values)


@pytest.mark.parametrize(
    "data",
    [
        b"",
        b"DIDX\x00\x00",
        bytes.fromhex("4449444c00017d"),
        bytes.fromhex("4449444c00017d0000"),
        bytes.fromhex("4449444c00017102ff"),
        bytes.fromhex("4449444c0001710180"),
        bytes.fromhex("4449444c000105"),
    ],
)
def test_decode_rejects_malformed_messages(data: bytes) -> None:
    with pytest.raises(CandidDecodeError):
        decode(data)


# One type table entry: record { 0 : table0 }, used as the only argument.
SELF_CONTAINED_RECORD = bytes.fromhex("4449444c016c0100000100")
# record { 0 : table1 } and record { 0 : table0 }.
MUTUALLY_CONTAINED_RECORDS = bytes.fromhex("4449444c026c0100016c0100000100")
# variant { 0 : table0; 1 : null }, a chain that ends in tag 1.
NESTED_VARIANT_TABLE = bytes.fromhex("4449444c016b020000017f0100")


@pytest.mark.parametrize("data", [SELF_CONTAINED_RECORD, MUTUALLY_CONTAINED_RECORDS])
def test_records_that_contain_themselves_are_rejected(data: bytes) -> None:
    with pytest.raises(CandidDecodeError, match="contains itself"):
        decode(data)


def test_record_recursion_through_opt_is_accepted() -> None:
    # record { 0 : table1 }, opt table0, followed by an empty opt.
    data = bytes.fromhex("4449444c026c0100016e00010000")

    assert decode(data).to_python() == [{0: None}]


def test_shallow_recursive_variant_decodes() -> None:
    data = NESTED_VARIANT_TABLE + bytes([0, 0, 1])

    assert decode(data).to_python() == [{0: {0: {1: None}}}]


def test_deeply_nested_values_are_rejected() -> None:
    data = NESTED_VARIANT_TABLE + bytes([0] * 500 + [1])

    with pytest.raises(CandidDecodeError, match="nested deeper"):
        decode(data)


def test_short_vector_of_nulls_decodes() -> None:
    data = bytes.fromhex("4449444c016d7f010003")

    assert decode(data).to_python() == [[None, None, None]]


HUGE_LENGTH = bytes([0x80] * 5 + [0x20])


@pytest.mark.parametrize(
    "data",
    [
        bytes.fromhex("4449444c016d7f0100") + HUGE_LENGTH,
        bytes.fromhex("4449444c026c006d000101") + HUGE_LENGTH,
        bytes.fromhex("4449444c026c02007f017f6d000101") + HUGE_LENGTH,
    ],
)
def test_oversized_vectors_of_zero_sized_elements_are_rejected(data: bytes) -> None:
    with pytest.raises(CandidDecodeError, match="zero-sized"):
        decode(data)


def test_typed_decode_bounds_vectors_of_nulls() -> None:
    data = bytes.fromhex("4449444c016d7f0100") + HUGE_LENGTH

    with pytest.raises(CandidDecodeError, match="zero-sized"):
        decode(data, [VecType(NULL)])


def test_vector_longer_than_the_remaining_input_is_rejected() -> None:
    data = bytes.fromhex("4449444c016d7b0100" + "05" + "0102")

    with pytest.raises(CandidDecodeError, match="bytes left"):
        decode(data)
