"""Receiving side: samples the medium, recovers bits, bytes and frames."""

import threading
from collections.abc import Callable
from typing import Optional

from .clock import Clock
from .link import (
    deframe_count,
    deframe_insert,
    detect_crc,
    detect_hamming,
    detect_parity,
)
from .medium import Medium, Permission
from .physical import demodulate_bipolar, demodulate_manchester, demodulate_nrz_polar
from .settings import ErrorControl, Framing, ReceiveModulation, ReceiverSettings

BitCallback = Callable[[bool], None]
EnergyCallback = Callable[[float], None]
MessageCallback = Callable[[bytes], None]


class Receiver:
    """Listens to the medium in step with the clock and decodes frames."""

    def __init__(
        self,
        medium: Medium,
        clock: Clock,
        settings: Optional[ReceiverSettings] = None,
        on_bit: Optional[BitCallback] = None,
        on_energy: Optional[EnergyCallback] = None,
        on_message: Optional[MessageCallback] = None,
    ) -> None:
        self._medium = medium
        self._clock = clock
        self._on_bit = on_bit
        self._on_energy = on_energy
        self._on_message = on_message
        self._settings = ReceiverSettings()
        self.set_settings(settings or ReceiverSettings())

    @property
    def settings(self) -> ReceiverSettings:
        return self._settings

    def set_settings(self, settings: ReceiverSettings) -> None:
        """Replace the settings and retune the clock to their frequency."""
        self._settings = settings
        self._clock.set_bit_frequency(settings.frequency)

    def calc_bit(self) -> bool:
        """Sample the current bit period and demodulate it."""
        resolution = self._settings.resolution
        bit_start = self._clock.current_bit()
        sub_duration = self._clock.bit_duration() / resolution
        self._medium.narrow(Permission.READ)
        signal = []
        for step in range(resolution):
            heard = self._medium.listen()
            signal.append(heard)
            if self._on_energy is not None:
                self._on_energy(heard)
            self._clock.sleep_until(bit_start + step * sub_duration)

        modulation = self._settings.modulation
        if modulation is ReceiveModulation.NRZ_POLAR:
            return demodulate_nrz_polar(signal)
        if modulation is ReceiveModulation.MANCHESTER:
            return demodulate_manchester(signal)
        if modulation is ReceiveModulation.BIPOLAR:
            return demodulate_bipolar(signal)
        raise ValueError(f"unknown modulation: {modulation!r}")

    def read_bit(self) -> bool:
        """Read one bit and wait for the next bit period."""
        bit_end = self._clock.next_bit()
        bit = self.calc_bit()
        if self._on_bit is not None:
            self._on_bit(bit)
        self._clock.sleep_until(bit_end)
        return bit

    def read_byte(self) -> int:
        """Read eight bits, most significant first, and wait for the next byte period."""
        byte_end = self._clock.next_byte()
        value = 0
        for _ in range(8):
            value = (value << 1) | int(self.read_bit())
        self._clock.sleep_until(byte_end)
        return value

    def listen_frame(self) -> bytes:
        """Read one frame and check it; empty bytes if no frame was found."""
        framing = self._settings.framing
        if framing is Framing.BYTE_INSERTION:
            data = deframe_insert(self.read_byte)
        elif framing is Framing.BYTE_COUNT:
            data = deframe_count(self.read_byte)
        else:
            raise ValueError(f"unknown framing: {framing!r}")

        if not data:
            return b""

        error_control = self._settings.error_control
        if error_control is ErrorControl.NONE:
            return data
        if error_control is ErrorControl.PARITY_BIT:
            return detect_parity(data)
        if error_control is ErrorControl.CRC:
            return detect_crc(data)
        if error_control is ErrorControl.HAMMING:
            return detect_hamming(data)
        raise ValueError(f"unknown error control: {error_control!r}")

    def run(self, stop_event: threading.Event) -> None:
        """Wait for a byte boundary, then report frames until stopped."""
        self._clock.sleep_until(self._clock.next_byte())
        while not stop_event.is_set():
            message = self.listen_frame()
            if message and self._on_message is not None:
                self._on_message(message)