"""Shared bit and byte timing for transmitter and receiver."""

import time

_DEFAULT_BIT_US = 200_000


class Clock:
    """Divides time since creation into bit and byte periods.

    Moments are in seconds on the ``time.monotonic`` scale; durations are in
    seconds, with a bit lasting a whole number of microseconds.
    """

    def __init__(self, frequency: float) -> None:
        self._start_ns = time.monotonic_ns()
        self._bit_us = _DEFAULT_BIT_US
        self.set_bit_frequency(frequency)

    def set_bit_frequency(self, frequency: float) -> None:
        """Set the number of bits per second."""
        if not frequency > 0:
            raise ValueError("frequency must be positive")
        bit_us = int(1e6 / frequency)
        if bit_us <= 0:
            raise ValueError("frequency too high: a bit must last at least a microsecond")
        self._bit_us = bit_us

    def set_byte_frequency(self, frequency: float) -> None:
        """Set the number of bytes per second."""
        self.set_bit_frequency(8 * frequency)

    def bit_duration(self) -> float:
        return self._bit_us / 1e6

    def byte_duration(self) -> float:
        return 8 * self._bit_us / 1e6

    def _period_start_ns(self, period_us: int, now_ns: int) -> int:
        elapsed_us = (now_ns - self._start_ns) // 1000
        return self._start_ns + (elapsed_us // period_us) * period_us * 1000

    def current_bit(self) -> float:
        """Start of the bit period now under way."""
        return self._period_start_ns(self._bit_us, time.monotonic_ns()) / 1e9

    def next_bit(self) -> float:
        """Start of the next bit period."""
        start = self._period_start_ns(self._bit_us, time.monotonic_ns())
        return (start + self._bit_us * 1000) / 1e9

    def current_byte(self) -> float:
        """Start of the byte period now under way."""
        return self._period_start_ns(8 * self._bit_us, time.monotonic_ns()) / 1e9

    def next_byte(self) -> float:
        """Start of the next byte period."""
        byte_us = 8 * self._bit_us
        start = self._period_start_ns(byte_us, time.monotonic_ns())
        return (start + byte_us * 1000) / 1e9

    def _progress(self, period_us: int) -> float:
        now_ns = time.monotonic_ns()
        start = self._period_start_ns(period_us, now_ns)
        return ((now_ns - start) // 1000) / period_us

    def bit_progress(self) -> float:
        """Fraction of the current bit period already past."""
        return self._progress(self._bit_us)

    def byte_progress(self) -> float:
        """Fraction of the current byte period already past."""
        return self._progress(8 * self._bit_us)

    def sleep_until(self, moment: float) -> None:
        """Block until the given moment; return at once if it has passed."""
        remaining = moment - time.monotonic_ns() / 1e9
        if remaining > 0:
            time.sleep(remaining)