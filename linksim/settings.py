"""Transmitter and receiver configuration, and the link-layer options they share."""

from dataclasses import dataclass
from enum import Enum, auto


class Framing(Enum):
    """How frames are delimited on the wire."""

    BYTE_COUNT = auto()
    BYTE_INSERTION = auto()


class ErrorControl(Enum):
    """Error detection or correction applied to each frame."""

    NONE = auto()
    PARITY_BIT = auto()
    CRC = auto()
    HAMMING = auto()


class TransmitModulation(Enum):
    """Line codes and carrier modulations the transmitter can produce."""

    NRZ_POLAR = auto()
    MANCHESTER = auto()
    BIPOLAR = auto()
    ASK = auto()
    FSK = auto()
    QAM8 = auto()


class ReceiveModulation(Enum):
    """Line codes the receiver can demodulate."""

    NRZ_POLAR = auto()
    MANCHESTER = auto()
    BIPOLAR = auto()


@dataclass(frozen=True)
class TransmitterSettings:
    """Transmitter configuration.

    ``frequency`` is in bits per second, ``resolution`` is the number of
    signal samples per bit and ``error_chance`` the probability of flipping
    each transmitted bit.
    """

    frequency: float = 10.0
    resolution: int = 4
    error_chance: float = 0.0
    modulation: TransmitModulation = TransmitModulation.NRZ_POLAR
    framing: Framing = Framing.BYTE_COUNT
    error_control: ErrorControl = ErrorControl.NONE


@dataclass(frozen=True)
class ReceiverSettings:
    """Receiver configuration; the fields mirror :class:`TransmitterSettings`."""

    frequency: float = 10.0
    resolution: int = 10
    modulation: ReceiveModulation = ReceiveModulation.NRZ_POLAR
    framing: Framing = Framing.BYTE_COUNT
    error_control: ErrorControl = ErrorControl.NONE