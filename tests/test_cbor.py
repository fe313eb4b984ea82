import pytest

from nns_offline.cbor import CBORError, dumps


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (0, "00"),
        (23, "17"),
        (24, "1818"),
        (1000, "1903e8"),
        (-1, "20"),
        (None, "f6"),
        (True, "f5"),
        ("a", "6161"),
        (b"", "40"),
        ([1, 2], "820102"),
        ({"b": 1, "a": 2}, "a2616102616201"),
        ({"aa": 1, "b": 2}, "a2616202626161" + "01"),
    ],
)
def test_known_encodings(value, expected) -> None:
    assert dumps(value).hex() == expected


def test_self_describe_tag_prefixes_the_item() -> None:
    assert dumps({}, self_describe=True).hex() == "d9d9f7a0"


def test_unsupported_values_are_rejected() -> None:
    with pytest.raises(CBORError):
        dumps(1.5)
