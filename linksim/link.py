"""Link layer: framing and error control of byte messages."""

from collections.abc import Callable
from itertools import islice

from .settings import ErrorControl, Framing

MAX_BYTES = 16
FLAG = 0x7E
ESC = 0x7D
CRC_POLYNOMIAL = 0x04C11DB7
ERROR_DETECTED = b"\nERROR DETECTED"

ByteReader = Callable[[], int]


def _get_bit(data: bytes, index: int) -> bool:
    return bool((data[index >> 3] >> (7 - (index & 7))) & 1)


def _set_bit(data: bytearray, index: int, bit: bool) -> None:
    mask = 1 << (7 - (index & 7))
    if bit:
        data[index >> 3] |= mask
    else:
        data[index >> 3] &= ~mask & 0xFF


def _ones(data: bytes) -> int:
    return int.from_bytes(data, "big").bit_count()


def encode_message(message: bytes, framing: Framing, error_mode: ErrorControl) -> bytes:
    """Split the message into chunks of at most MAX_BYTES, protect and frame each one."""
    message = bytes(message)
    chunks = [message[start:start + MAX_BYTES] for start in range(0, len(message), MAX_BYTES)]
    return b"".join(
        _frame(_protect(chunk, error_mode), framing) for chunk in chunks or [b""]
    )


def _protect(message: bytes, error_mode: ErrorControl) -> bytes:
    if error_mode is ErrorControl.NONE:
        return message
    if error_mode is ErrorControl.PARITY_BIT:
        return parity(message)
    if error_mode is ErrorControl.CRC:
        return crc(message)
    if error_mode is ErrorControl.HAMMING:
        return hamming(message)
    raise ValueError(f"unknown error control: {error_mode!r}")


def _frame(data: bytes, framing: Framing) -> bytes:
    if framing is Framing.BYTE_COUNT:
        return count_bytes(data)
    if framing is Framing.BYTE_INSERTION:
        return insert_bytes(data)
    raise ValueError(f"unknown framing: {framing!r}")


def count_bytes(message: bytes) -> bytes:
    """Prefix the message with a one-byte length."""
    message = bytes(message)
    if len(message) > 0xFF:
        raise ValueError("message too long for a one-byte count")
    return bytes([len(message)]) + message


def insert_bytes(message: bytes) -> bytes:
    """Escape flag bytes in the message and surround it with flags."""
    return frame_flags(escape_flags(message))


def escape_flags(message: bytes) -> bytes:
    """Put an escape byte before every flag or escape byte."""
    escaped = bytearray()
    for byte in bytes(message):
        if byte in (FLAG, ESC):
            escaped.append(ESC)
        escaped.append(byte)
    return bytes(escaped)


def frame_flags(data: bytes) -> bytes:
    """Surround the data with flag bytes."""
    return bytes([FLAG]) + bytes(data) + bytes([FLAG])


def parity(message: bytes) -> bytes:
    """Append a whole byte holding the even-parity bit of the message."""
    message = bytes(message)
    return message + bytes([_ones(message) % 2])


def crc32(message: bytes) -> int:
    """Return the 32-bit check value of the message, as the link computes it."""
    padded = b"\x00" * 4 + bytes(message) + b"\x00" * 4
    nbits = len(padded) * 8
    value = int.from_bytes(padded, "big")
    for position in range(nbits - 32):
        shift = nbits - 32 - position
        if (value >> shift) & 0x80000000:
            value ^= CRC_POLYNOMIAL << shift
    return (value & 0xFFFFFFFF) >> 1


def crc(message: bytes) -> bytes:
    """Append the big-endian check value to the message."""
    message = bytes(message)
    return message + crc32(message).to_bytes(4, "big")


def _parity_bit_count(message_bits: int) -> int:
    return (message_bits + message_bits.bit_length()).bit_length()


def hamming(message: bytes) -> bytes:
    """Encode the message with a Hamming code, padding to whole bytes."""
    message = bytes(message)
    message_bits = len(message) * 8
    parity_bits = _parity_bit_count(message_bits)
    total_bits = message_bits + parity_bits
    result = bytearray((total_bits + 7) // 8)

    for index in range(message_bits):
        if _get_bit(message, index):
            _set_bit(result, index + _parity_bit_count(index + 1), True)

    result_bits = len(result) * 8
    for power in reversed(range(parity_bits)):
        covered = 1 << power
        ones = sum(
            _get_bit(result, index)
            for index in range(result_bits)
            if (index + 1) & covered
        )
        _set_bit(result, covered - 1, bool(ones % 2))
    return bytes(result)


def deframe_count(read_byte: ByteReader) -> bytes:
    """Read a length byte and then that many bytes."""
    head = read_byte()
    return bytes([read_byte() for _ in range(head)])


def deframe_insert(read_byte: ByteReader) -> bytes:
    """Read a flag-delimited frame; return empty bytes if no flag opens it."""
    if read_byte() != FLAG:
        return b""
    result = bytearray()
    while True:
        byte = read_byte()
        if byte == FLAG:
            return bytes(result)
        if byte == ESC:
            byte = read_byte()
        result.append(byte)


def detect_parity(frame: bytes) -> bytes:
    """Strip the parity byte, or return ERROR_DETECTED if the parity is odd."""
    frame = bytes(frame)
    if _ones(frame) % 2:
        return ERROR_DETECTED
    return frame[:-1]


def detect_crc(frame: bytes) -> bytes:
    """Strip the check value, or return ERROR_DETECTED if it does not match."""
    frame = bytes(frame)
    if len(frame) < 4:
        return ERROR_DETECTED
    message, received = frame[:-4], frame[-4:]
    if crc32(message) != int.from_bytes(received, "big"):
        return ERROR_DETECTED
    return message


def _parity_positions(nbits: int) -> list[int]:
    positions = []
    power = 0
    while (1 << power) - 1 < nbits:
        positions.append((1 << power) - 1)
        power += 1
    return positions


def _read_positions(data: bytes, positions: list[int]) -> int:
    nbits = len(data) * 8
    value = 0
    for power, position in enumerate(positions):
        if position < nbits and _get_bit(data, position):
            value |= 1 << power
    return value


def detect_hamming(data: bytes) -> bytes:
    """Decode a Hamming-coded frame, correcting a single flipped data bit."""
    data = bytes(data)
    nbits = len(data) * 8
    positions = _parity_positions(nbits)
    skipped = set(positions)

    message_len = (nbits - len(positions)) // 8
    message_bits = message_len * 8
    message = bytearray(message_len)
    data_positions = (index for index in range(nbits) if index not in skipped)
    for target, source in enumerate(islice(data_positions, message_bits)):
        _set_bit(message, target, _get_bit(data, source))

    received = _read_positions(data, positions)
    expected = _read_positions(hamming(bytes(message)), positions)
    syndrome = expected ^ received
    # No error, or an error in a parity bit: the data bits are intact.
    if syndrome & (syndrome - 1) == 0:
        return bytes(message)

    error_index = syndrome - syndrome.bit_length() - 1
    if 0 <= error_index < message_bits:
        _set_bit(message, error_index, not _get_bit(message, error_index))
    return bytes(message)