import pytest

from linksim.link import (
    ERROR_DETECTED,
    ESC,
    FLAG,
    MAX_BYTES,
    count_bytes,
    crc,
    crc32,
    deframe_count,
    deframe_insert,
    detect_crc,
    detect_hamming,
    detect_parity,
    encode_message,
    escape_flags,
    frame_flags,
    hamming,
    insert_bytes,
    parity,
)
from linksim.settings import ErrorControl, Framing


class _Reader:
    def __init__(self, data):
        self._data = bytes(data)
        self._pos = 0

    def __call__(self):
        byte = self._data[self._pos]
        self._pos += 1
        return byte

    @property
    def exhausted(self):
        return self._pos >= len(self._data)


_DEFRAME = {Framing.BYTE_COUNT: deframe_count, Framing.BYTE_INSERTION: deframe_insert}
_DETECT = {
    ErrorControl.NONE: lambda frame: frame,
    ErrorControl.PARITY_BIT: detect_parity,
    ErrorControl.CRC: detect_crc,
    ErrorControl.HAMMING: detect_hamming,
}


def _decode_all(stream, framing, error_mode):
    reader = _Reader(stream)
    messages = []
    while not reader.exhausted:
        frame = _DEFRAME[framing](reader)
        messages.append(_DETECT[error_mode](frame))
    return messages


def _flip(data, index):
    flipped = bytearray(data)
    flipped[index // 8] ^= 1 << (7 - index % 8)
    return bytes(flipped)


MESSAGES = [
    b"hello",
    b"~}~} flags and escapes ~",
    bytes(range(40)),
    bytes([FLAG, ESC, 0xFF, 0x00]),
]


@pytest.mark.parametrize("framing", list(Framing))
@pytest.mark.parametrize("error_mode", list(ErrorControl))
@pytest.mark.parametrize("message", MESSAGES)
def test_encode_decode_round_trip(framing, error_mode, message):
    encoded = encode_message(message, framing, error_mode)
    assert b"".join(_decode_all(encoded, framing, error_mode)) == message


def test_long_message_is_split_into_chunks():
    message = bytes(range(40))
    frames = _decode_all(
        encode_message(message, Framing.BYTE_COUNT, ErrorControl.NONE),
        Framing.BYTE_COUNT,
        ErrorControl.NONE,
    )
    assert [len(frame) for frame in frames] == [MAX_BYTES, MAX_BYTES, 40 - 2 * MAX_BYTES]


def test_count_bytes_prefixes_length():
    assert count_bytes(b"abc") == bytes([3]) + b"abc"


def test_count_bytes_rejects_oversized_message():
    with pytest.raises(ValueError):
        count_bytes(bytes(256))


def test_frame_flags_surrounds_with_flag():
    framed = frame_flags(b"x")
    assert framed == bytes([FLAG]) + b"x" + bytes([FLAG])


def test_escape_flags_precedes_special_bytes_with_escape():
    assert escape_flags(bytes([FLAG, 0x41, ESC])) == bytes([ESC, FLAG, 0x41, ESC, ESC])


def test_insert_bytes_inner_has_no_unescaped_flag():
    framed = insert_bytes(bytes([FLAG, FLAG, ESC]))
    assert framed[0] == FLAG and framed[-1] == FLAG
    assert deframe_insert(_Reader(framed)) == bytes([FLAG, FLAG, ESC])


def test_deframe_insert_without_opening_flag_is_empty():
    assert deframe_insert(_Reader(b"abc")) == b""


def test_deframe_count_reads_exactly_count_bytes():
    reader = _Reader(bytes([2]) + b"abcd")
    assert deframe_count(reader) == b"ab"
    assert reader() == ord("c")


@pytest.mark.parametrize("message", [b"", b"a", b"abc", bytes(range(16))])
def test_parity_makes_total_parity_even(message):
    encoded = parity(message)
    assert encoded[:-1] == message
    assert sum(bin(byte).count("1") for byte in encoded) % 2 == 0


@pytest.mark.parametrize("bit", range(24))
def test_detect_parity_flags_single_bit_error(bit):
    encoded = parity(b"ab")
    assert detect_parity(_flip(encoded, bit)) == ERROR_DETECTED


def test_crc32_of_zero_bytes_is_zero():
    assert crc32(b"\x00\x00\x00") == 0


def test_crc32_fits_in_31_bits():
    assert 0 <= crc32(b"any message at all") < 1 << 31


def test_crc32_is_linear():
    first, second = b"link", b"mesh"
    combined = bytes(a ^ b for a, b in zip(first, second))
    assert crc32(first) ^ crc32(second) == crc32(combined)


def test_crc_appends_big_endian_check_value():
    encoded = crc(b"ab")
    assert encoded[:2] == b"ab"
    assert int.from_bytes(encoded[2:], "big") == crc32(b"ab")


@pytest.mark.parametrize("bit", range(0, 16))
def test_detect_crc_flags_message_bit_error(bit):
    encoded = crc(b"ab")
    assert detect_crc(_flip(encoded, bit)) == ERROR_DETECTED


def test_detect_crc_rejects_short_frame():
    assert detect_crc(b"ab") == ERROR_DETECTED


def test_hamming_of_zero_is_zero():
    assert hamming(b"\x00") == b"\x00\x00"


@pytest.mark.parametrize("length", range(1, MAX_BYTES + 1))
def test_hamming_round_trip(length):
    message = bytes((7 * index + 3) & 0xFF for index in range(length))
    encoded = hamming(message)
    assert len(encoded) > length
    assert detect_hamming(encoded) == message


@pytest.mark.parametrize("message", [b"a", b"ok", b"\xff\x00\x7e"])
def test_hamming_corrects_any_single_bit_error(message):
    encoded = hamming(message)
    for bit in range(len(encoded) * 8):
        assert detect_hamming(_flip(encoded, bit)) == message


def test_hamming_of_empty_is_empty():
    assert hamming(b"") == b""
    assert detect_hamming(b"") == b""