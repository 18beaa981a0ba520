"""Preview series and scrolling traces of messages, bitstreams and signals."""

from collections import deque
from collections.abc import Iterator
from dataclasses import dataclass

from .link import crc, encode_message, hamming, parity
from .physical import (
    BipolarModulator,
    QAM8Modulator,
    amplitude_shift_key,
    frequency_shift_key,
    manchester,
    nrz_polar,
)
from .settings import ErrorControl, TransmitModulation, TransmitterSettings

Point = tuple[float, float]

_BIT_STEP = 1.0 / 8


def _bits(data: bytes) -> Iterator[bool]:
    for byte in bytes(data):
        for shift in range(7, -1, -1):
            yield bool((byte >> shift) & 1)


def digital_series(data: bytes) -> list[Point]:
    """Square-wave points of the bits of the data, one unit of x per bit."""
    points: list[Point] = []
    for position, bit in enumerate(_bits(data)):
        level = float(bit)
        points.append((float(position), level))
        points.append((float(position + 1), level))
    return points


def _level(
    modulation: TransmitModulation,
    bit: bool,
    progress: float,
    first_sample: bool,
    bipolar: BipolarModulator,
    qam8: QAM8Modulator,
) -> float:
    if modulation is TransmitModulation.NRZ_POLAR:
        return nrz_polar(bit)
    if modulation is TransmitModulation.MANCHESTER:
        return manchester(bit, progress)
    if modulation is TransmitModulation.BIPOLAR:
        return bipolar.level(bit, first_sample)
    if modulation is TransmitModulation.ASK:
        return amplitude_shift_key(bit, progress)
    if modulation is TransmitModulation.FSK:
        return frequency_shift_key(bit, progress)
    if modulation is TransmitModulation.QAM8:
        return qam8.level(bit, progress, first_sample)
    raise ValueError(f"unknown modulation: {modulation!r}")


def analog_series(data: bytes, settings: TransmitterSettings) -> list[Point]:
    """Signal samples the transmitter would produce for the data, ``resolution`` per bit."""
    resolution = settings.resolution
    if resolution <= 0:
        raise ValueError("resolution must be positive")
    step = 1.0 / resolution
    bipolar = BipolarModulator()
    qam8 = QAM8Modulator()
    current = 0.0
    points: list[Point] = []
    for bit in _bits(data):
        for sample in range(resolution):
            progress = current - int(current)
            energy = _level(settings.modulation, bit, progress, sample == 0, bipolar, qam8)
            points.append((current, energy))
            current += step
    return points


def _protect(message: bytes, error_control: ErrorControl) -> bytes:
    if error_control is ErrorControl.NONE:
        return bytes(message)
    if error_control is ErrorControl.PARITY_BIT:
        return parity(message)
    if error_control is ErrorControl.CRC:
        return crc(message)
    if error_control is ErrorControl.HAMMING:
        return hamming(message)
    raise ValueError(f"unknown error control: {error_control!r}")


@dataclass(frozen=True)
class Preview:
    """Every stage a message goes through before it reaches the medium."""

    message: bytes
    protected: bytes
    framed: bytes
    message_series: list[Point]
    protected_series: list[Point]
    framed_series: list[Point]
    signal_series: list[Point]


def build_preview(message: bytes, settings: TransmitterSettings) -> Preview:
    """Show the message, its error-control bits, its frames and the resulting signal."""
    message = bytes(message)
    protected = _protect(message, settings.error_control)
    framed = encode_message(message, settings.framing, settings.error_control)
    return Preview(
        message=message,
        protected=protected,
        framed=framed,
        message_series=digital_series(message),
        protected_series=digital_series(protected),
        framed_series=digital_series(framed),
        signal_series=analog_series(framed, settings),
    )


class BitstreamTrace:
    """Scrolling square-wave trace of the most recent eight bits."""

    CAPACITY = 16

    def __init__(self) -> None:
        self._points: deque[Point] = deque()

    @property
    def points(self) -> list[Point]:
        return list(self._points)

    def push(self, bit: bool) -> list[Point]:
        """Add a bit at the right edge, scroll left, and return the trace."""
        if len(self._points) >= self.CAPACITY:
            self._points.popleft()
            self._points.popleft()
        last_x, last_y = self._points[-1] if self._points else (1.0, 0.0)
        x = last_x + _BIT_STEP
        self._points.append((x, last_y))
        self._points.append((x, float(bit)))
        self._points = deque((px - _BIT_STEP, py) for px, py in self._points)
        return self.points


class SignalTrace:
    """Scrolling trace of the most recent eight bits' worth of signal samples."""

    def __init__(self, resolution: int) -> None:
        if resolution <= 0:
            raise ValueError("resolution must be positive")
        self._resolution = resolution
        self._points: deque[Point] = deque()

    @property
    def capacity(self) -> int:
        return 8 * self._resolution

    @property
    def points(self) -> list[Point]:
        return list(self._points)

    def push(self, energy: float) -> list[Point]:
        """Add a sample at the right edge, scroll left, and return the trace."""
        if len(self._points) >= self.capacity:
            self._points.popleft()
        spacing = _BIT_STEP / self._resolution
        self._points.append((1.0, float(energy)))
        self._points = deque((x - spacing, y) for x, y in self._points)
        return self.points