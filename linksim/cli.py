"""Command line: a transmitter and a receiver joined by a simulated line.

The receiver runs in a background thread and writes every received message
to standard output; the transmitter sends each line of standard input.
"""

import argparse
import sys
import threading
import time
from collections.abc import Iterable
from typing import Optional

from .clock import Clock
from .medium import Permission
from .receiver import Receiver
from .settings import (
    ErrorControl,
    Framing,
    ReceiveModulation,
    ReceiverSettings,
    TransmitModulation,
    TransmitterSettings,
)
from .transmitter import Transmitter

_TRAILING_BYTES = 2


def _option(name: str) -> str:
    return name.lower().replace("_", "-")


_TX_MODULATIONS = {_option(m.name): m for m in TransmitModulation}
_RX_MODULATIONS = {_option(m.name): m for m in ReceiveModulation}
_FRAMINGS = {_option(f.name): f for f in Framing}
_ERROR_CONTROLS = {_option(e.name): e for e in ErrorControl}


class _SharedLine:
    """An in-process line: listeners hear the most recently transmitted level."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._value = 0.0
        self._ends: set[Permission] = set()

    def narrow(self, permission: Permission) -> None:
        """Record that an end with this permission uses the line."""
        if permission not in (Permission.READ, Permission.WRITE):
            raise ValueError(f"a line end must read or write, not {permission!r}")
        with self._lock:
            self._ends.add(permission)

    def transmit(self, value: float) -> None:
        with self._lock:
            self._value = float(value)

    def listen(self) -> float:
        with self._lock:
            return self._value


def _positive_float(text: str) -> float:
    value = float(text)
    if not value > 0:
        raise argparse.ArgumentTypeError("must be positive")
    return value


def _positive_int(text: str) -> int:
    value = int(text)
    if value <= 0:
        raise argparse.ArgumentTypeError("must be positive")
    return value


def _probability(text: str) -> float:
    value = float(text)
    if not 0.0 <= value <= 1.0:
        raise argparse.ArgumentTypeError("must be between 0 and 1")
    return value


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="linksim",
        description="Send lines of standard input over a simulated physical link.",
    )
    parser.add_argument("--frequency", type=_positive_float, default=10.0,
                        help="bits per second (default 10)")
    parser.add_argument("--resolution", type=_positive_int, default=10,
                        help="signal samples per bit (default 10)")
    parser.add_argument("--error-chance", type=_probability, default=0.0,
                        help="probability of flipping each sent bit (default 0)")
    parser.add_argument("--modulation", choices=sorted(_TX_MODULATIONS), default="nrz-polar")
    parser.add_argument("--receiver-modulation", choices=sorted(_RX_MODULATIONS), default=None,
                        help="defaults to the transmitter's when the receiver supports it")
    parser.add_argument("--framing", choices=sorted(_FRAMINGS), default="byte-count")
    parser.add_argument("--error-control", choices=sorted(_ERROR_CONTROLS), default="none")
    return parser


def _parse_settings(
    argv: Optional[list[str]] = None,
) -> tuple[TransmitterSettings, ReceiverSettings]:
    args = _build_parser().parse_args(argv)
    framing = _FRAMINGS[args.framing]
    error_control = _ERROR_CONTROLS[args.error_control]
    rx_name = args.receiver_modulation
    if rx_name is None:
        rx_name = args.modulation if args.modulation in _RX_MODULATIONS else "nrz-polar"
    transmitter = TransmitterSettings(
        frequency=args.frequency,
        resolution=args.resolution,
        error_chance=args.error_chance,
        modulation=_TX_MODULATIONS[args.modulation],
        framing=framing,
        error_control=error_control,
    )
    receiver = ReceiverSettings(
        frequency=args.frequency,
        resolution=args.resolution,
        modulation=_RX_MODULATIONS[rx_name],
        framing=framing,
        error_control=error_control,
    )
    return transmitter, receiver


def _print_message(message: bytes) -> None:
    sys.stdout.buffer.write(message)
    sys.stdout.buffer.flush()


def _receive(receiver: Receiver, stop: threading.Event) -> None:
    try:
        receiver.run(stop)
    except Exception as exc:
        print(f"linksim: receiver failed: {exc}", file=sys.stderr)


def _transmit(transmitter: Transmitter, clock: Clock, lines: Iterable[bytes]) -> None:
    for line in lines:
        transmitter.send(line)
    while transmitter.pending:
        time.sleep(clock.byte_duration())
    time.sleep(_TRAILING_BYTES * clock.byte_duration())


def main(argv: Optional[list[str]] = None) -> int:
    """Run receiver and transmitter side by side and send standard input across the link."""
    tx_settings, rx_settings = _parse_settings(argv)
    line = _SharedLine()
    clock = Clock(tx_settings.frequency)

    transmitter = Transmitter(line, clock, tx_settings)
    receiver = Receiver(line, clock, rx_settings, on_message=_print_message)

    stop = threading.Event()
    workers = [
        threading.Thread(target=transmitter.run, args=(stop,), daemon=True),
        threading.Thread(target=_receive, args=(receiver, stop), daemon=True),
    ]
    for worker in workers:
        worker.start()
    try:
        _transmit(transmitter, clock, sys.stdin.buffer)
    except KeyboardInterrupt:
        pass
    finally:
        stop.set()
        for worker in workers:
            worker.join(timeout=4 * clock.byte_duration())
    return 0


if __name__ == "__main__":
    sys.exit(main())