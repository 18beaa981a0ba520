"""Transmitting side: queues framed messages and drives the medium bit by bit."""

import random
import threading
from collections import deque
from collections.abc import Callable
from typing import Optional

from .clock import Clock
from .link import encode_message
from .medium import Medium, Permission
from .physical import (
    BipolarModulator,
    QAM8Modulator,
    amplitude_shift_key,
    frequency_shift_key,
    manchester,
    nrz_polar,
)
from .settings import TransmitModulation, TransmitterSettings

BitCallback = Callable[[bool], None]
EnergyCallback = Callable[[float], None]


class Transmitter:
    """Encodes messages into frames and puts them on the medium as signal samples.

    Each byte period sends one queued byte (or a zero byte when the queue is
    empty); each bit is held for ``settings.resolution`` samples.
    """

    def __init__(
        self,
        medium: Medium,
        clock: Clock,
        settings: Optional[TransmitterSettings] = None,
        on_bit: Optional[BitCallback] = None,
        on_energy: Optional[EnergyCallback] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._medium = medium
        self._clock = clock
        self._on_bit = on_bit
        self._on_energy = on_energy
        self._rng = rng or random.Random()
        self._queue: deque[int] = deque()
        self._lock = threading.Lock()
        self._active_byte = 0
        self._sending_bit = False
        self._first_sub = True
        self._bipolar = BipolarModulator()
        self._qam8 = QAM8Modulator()
        self._settings = TransmitterSettings()
        self.set_settings(settings or TransmitterSettings())

    @property
    def settings(self) -> TransmitterSettings:
        return self._settings

    @property
    def pending(self) -> int:
        """Number of encoded bytes still waiting to be sent."""
        with self._lock:
            return len(self._queue)

    def set_settings(self, settings: TransmitterSettings) -> None:
        """Replace the settings and retune the clock to their frequency."""
        self._settings = settings
        self._clock.set_bit_frequency(settings.frequency)

    def send(self, message: bytes) -> None:
        """Frame and protect the message and queue it for transmission."""
        framed = encode_message(
            message, self._settings.framing, self._settings.error_control
        )
        with self._lock:
            self._queue.extend(framed)

    def update_byte(self) -> None:
        """Start a new byte period with the next queued byte, or zero if none."""
        with self._lock:
            self._active_byte = self._queue.popleft() if self._queue else 0

    def update_bit(self, index: int) -> None:
        """Start bit ``index`` (0 is the most significant) of the active byte."""
        bit = bool(self._active_byte & (1 << (7 - index)))
        if self._rng.random() < self._settings.error_chance:
            bit = not bit
        self._sending_bit = bit
        if self._on_bit is not None:
            self._on_bit(bit)
        self._first_sub = True

    def update_sub(self) -> None:
        """Put one sample of the current bit on the medium."""
        signal = self.energy(self._sending_bit)
        self._medium.narrow(Permission.WRITE)
        self._medium.transmit(signal)
        if self._on_energy is not None:
            self._on_energy(signal)
        self._first_sub = False

    def energy(self, bit: bool) -> float:
        """Signal level for the bit at the current moment of the bit period."""
        modulation = self._settings.modulation
        if modulation is TransmitModulation.NRZ_POLAR:
            return nrz_polar(bit)
        if modulation is TransmitModulation.BIPOLAR:
            return self._bipolar.level(bit, self._first_sub)
        progress = self._clock.bit_progress()
        if modulation is TransmitModulation.MANCHESTER:
            return manchester(bit, progress)
        if modulation is TransmitModulation.ASK:
            return amplitude_shift_key(bit, progress)
        if modulation is TransmitModulation.FSK:
            return frequency_shift_key(bit, progress)
        if modulation is TransmitModulation.QAM8:
            return self._qam8.level(bit, progress, self._first_sub)
        raise ValueError(f"unknown modulation: {modulation!r}")

    def run_cycle(self) -> None:
        """Send one byte period: eight bits, each as a run of samples."""
        clock = self._clock
        next_byte = clock.next_byte()
        self.update_byte()
        for index in range(8):
            next_bit = clock.next_bit()
            self.update_bit(index)
            bit_start = clock.current_bit()
            resolution = self._settings.resolution
            sub_interval = clock.bit_duration() / resolution
            for step in range(resolution):
                self.update_sub()
                clock.sleep_until(bit_start + (step + 1) * sub_interval)
            clock.sleep_until(next_bit)
        clock.sleep_until(next_byte)

    def run(self, stop_event: threading.Event) -> None:
        """Wait for a byte boundary, then send byte periods until stopped."""
        self._clock.sleep_until(self._clock.next_byte())
        while not stop_event.is_set():
            self.run_cycle()