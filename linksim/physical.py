"""Physical layer: line codes and carrier modulations, and their demodulators."""

import cmath
import math
from collections.abc import Sequence

AMPLITUDE = 1.0
BIPOLAR_THRESHOLD = 0.5

_ASK_FREQUENCY = 1.0
_ASK_ZERO_FACTOR = 0.0
_FSK_FREQUENCY_ONE = 2.0
_FSK_FREQUENCY_ZERO = 1.0
_QAM8_FREQUENCY = 4.0

_LOW = 0.707106781185  # sqrt(2) / 2
_HIGH = 1.73205080757  # sqrt(3)

QAM8_CONSTELLATION = {
    0b000: complex(_HIGH, 0.0),
    0b001: complex(_LOW, _LOW),
    0b010: complex(-_LOW, _LOW),
    0b011: complex(0.0, _HIGH),
    0b100: complex(_LOW, -_LOW),
    0b101: complex(0.0, -_HIGH),
    0b110: complex(-_HIGH, 0.0),
    0b111: complex(-_LOW, -_LOW),
}


def nrz_polar(bit: bool) -> float:
    """Positive level for a one, negative level for a zero."""
    return AMPLITUDE if bit else -AMPLITUDE


def manchester(bit: bool, bit_progress: float) -> float:
    """Opposite of NRZ polar in the first half of the bit, equal to it in the second."""
    level = nrz_polar(bit)
    return level if bit_progress > 0.5 else -level


def amplitude_shift_key(bit: bool, bit_progress: float) -> float:
    """Sine carrier whose amplitude depends on the bit."""
    carrier = math.sin(_ASK_FREQUENCY * 2.0 * math.pi * bit_progress)
    return carrier * (AMPLITUDE if bit else AMPLITUDE * _ASK_ZERO_FACTOR)


def frequency_shift_key(bit: bool, bit_progress: float) -> float:
    """Sine carrier whose frequency depends on the bit."""
    frequency = _FSK_FREQUENCY_ONE if bit else _FSK_FREQUENCY_ZERO
    return math.sin(2.0 * math.pi * bit_progress * frequency) * AMPLITUDE


class BipolarModulator:
    """Alternate mark inversion: zeros are silent, ones alternate in sign."""

    def __init__(self) -> None:
        self._last_one = -1

    def level(self, bit: bool, update: bool = False) -> float:
        """Signal level for the bit; ``update`` marks the start of a new one bit."""
        if not bit:
            return 0.0
        if update:
            self._last_one = -self._last_one
        return self._last_one * AMPLITUDE


class QAM8Modulator:
    """8-QAM: three bits at a time are mapped to a phase and an amplitude."""

    def __init__(self) -> None:
        self._count = 0
        self._tribit = 0
        self._incoming = 0

    def level(self, bit: bool, bit_progress: float, update: bool = False) -> float:
        """Signal level; ``update`` feeds the bit into the current group of three."""
        if update:
            self._incoming = ((self._incoming << 1) | int(bool(bit))) & 0xFF
            self._count = (self._count + 1) % 3
            if self._count == 0:
                self._tribit = self._incoming
                self._incoming = 0

        symbol = QAM8_CONSTELLATION.get(self._tribit & 0b111, complex(0.0, 0.0))
        phase = cmath.phase(symbol)
        magnitude = abs(symbol)

        tribit_progress = (self._count + bit_progress) / 3.0
        t = 2.0 * math.pi * tribit_progress * _QAM8_FREQUENCY + phase
        return AMPLITUDE * magnitude * math.sin(t)


def _require_samples(signal: Sequence[float]) -> None:
    if not signal:
        raise ValueError("cannot demodulate an empty signal")


def demodulate_nrz_polar(signal: Sequence[float]) -> bool:
    """Sample the middle of the bit: positive means one."""
    _require_samples(signal)
    return signal[len(signal) // 2] > 0


def demodulate_manchester(signal: Sequence[float]) -> bool:
    """A rising edge inside the bit means one."""
    _require_samples(signal)
    first = signal[int(0.25 * len(signal))]
    second = signal[int(0.75 * len(signal))]
    return first < 0 < second


def demodulate_bipolar(signal: Sequence[float]) -> bool:
    """A level beyond the threshold, of either sign, means one."""
    _require_samples(signal)
    return abs(signal[len(signal) // 2]) > BIPOLAR_THRESHOLD * AMPLITUDE