import pytest

from dacnode import hexutil


@pytest.mark.parametrize("value", [0, 1, 255, 2**32, 2**64 - 1])
def test_uint64_round_trip(value):
    assert hexutil.decode_uint64(hexutil.encode_uint64(value)) == value


def test_encode_uint64_zero():
    assert hexutil.encode_uint64(0) == "0x0"


def test_decode_uint64_accepts_missing_prefix():
    assert hexutil.decode_uint64("ff") == hexutil.decode_uint64("0xff")


@pytest.mark.parametrize("text", ["", "0x", "0xzz", "0x0x1", "0x1" + "0" * 16, "0x 1"])
def test_decode_uint64_rejects(text):
    with pytest.raises(ValueError):
        hexutil.decode_uint64(text)


def test_encode_uint64_rejects_negative():
    with pytest.raises(ValueError):
        hexutil.encode_uint64(-1)


@pytest.mark.parametrize("data", [b"", b"\x00", b"\x01\x02\x03", bytes(range(256))])
def test_bytes_round_trip(data):
    assert hexutil.decode_bytes(hexutil.encode_bytes(data)) == data


def test_encode_empty_bytes():
    assert hexutil.encode_bytes(b"") == "0x"


def test_decode_bytes_pads_odd_length():
    assert hexutil.decode_bytes("0x1") == b"\x01"


def test_decode_bytes_rejects_invalid():
    with pytest.raises(ValueError):
        hexutil.decode_bytes("0xgg")


@pytest.mark.parametrize(
    "text,expected",
    [("0x00", True), ("abcDEF0123", True), ("", True), ("0xg1", False), ("12 3", False)],
)
def test_hex_is_valid(text, expected):
    assert hexutil.hex_is_valid(text) is expected


def test_hex_encode_big_zero():
    assert hexutil.hex_encode_big(0) == "0x0"


@pytest.mark.parametrize("value", [1, 16, 2**200 + 5])
def test_hex_encode_big_parses_back(value):
    encoded = hexutil.hex_encode_big(value)
    assert encoded.startswith("0x")
    assert int(encoded, 16) == value


@pytest.mark.parametrize("value", [0, 7, 2**64, 2**255 - 19])
def test_big_round_trip(value):
    assert hexutil.decode_big(hexutil.encode_big(value)) == value


def test_parse_hash_short_input():
    assert hexutil.parse_hash("0x00") == bytes(32)


def test_parse_hash_rejects_non_hex():
    with pytest.raises(ValueError, match="invalid hash"):
        hexutil.parse_hash("0xnothex")


def test_parse_hash_full_length_round_trip():
    digest = bytes(range(32))
    assert hexutil.parse_hash(hexutil.encode_bytes(digest)) == digest


def test_hex_to_hash_left_pads():
    result = hexutil.hex_to_hash("0xFFFF")
    assert len(result) == 32
    assert result[-2:] == b"\xff\xff"
    assert result[:-2] == bytes(30)


def test_hex_to_address_keeps_rightmost_bytes():
    data = bytes(range(1, 26))
    assert hexutil.hex_to_address(data.hex()) == data[-20:]


def test_hex_to_address_stops_at_invalid_digit():
    result = hexutil.hex_to_address("0x345678934t567889137")
    assert len(result) == 20
    assert result[-5:] == bytes.fromhex("0345678934")