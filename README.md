# linksim

linksim simulates a transmitter and a receiver joined by a line. It follows
a message on its way down through the data link and physical layers and
back up again:

- **Error control**: none, a parity byte, a 4-byte CRC check value (CRC-32
  polynomial `0x04C11DB7`), or a Hamming code that corrects a single flipped
  data bit.
- **Framing**: byte counting, or flag bytes (`0x7E`) with escaping
  (`0x7D`), known here as byte insertion.
- **Line coding and modulation**: NRZ polar, Manchester, bipolar, ASK, FSK
  and 8-QAM on the transmitting side; NRZ polar, Manchester and bipolar
  demodulation on the receiving side.

Both ends follow a shared clock that divides time into bit and byte
periods. Each bit is held for a number of signal samples (the resolution),
and the transmitter can flip bits at random with a chosen probability so
that the error-control codes have something to do.

## Installation

```
pip install .
```

For running the tests:

```
pip install .[test]
pytest
```

## Command line

```
linksim
```

This starts a transmitter and a receiver in two threads of one process,
joined by an in-memory line. Each line read from standard input is sent as
a message; everything the receiver decodes is written to standard output.
When the input ends, the command waits until the queued bytes have been
sent, lets two more byte periods pass, and stops.

Options (see `linksim --help`):

| Option | Values | Default |
| --- | --- | --- |
| `--frequency` | bits per second, positive | `10` |
| `--resolution` | samples per bit, positive integer | `10` |
| `--error-chance` | probability of flipping each sent bit, 0 to 1 | `0` |
| `--modulation` | `nrz-polar`, `manchester`, `bipolar`, `ask`, `fsk`, `qam8` | `nrz-polar` |
| `--receiver-modulation` | `nrz-polar`, `manchester`, `bipolar` | the transmitter's, or `nrz-polar` if the receiver cannot demodulate it |
| `--framing` | `byte-count`, `byte-insertion` | `byte-count` |
| `--error-control` | `none`, `parity-bit`, `crc`, `hamming` | `none` |

Messages longer than 16 bytes are split into several frames, and each frame
is decoded on its own. When a parity or CRC check fails, the receiver
outputs `\nERROR DETECTED` in place of that frame. Between messages the
transmitter sends zero bytes, which the receiver treats as no frame.

At low frequencies this is slow by design: at the default 10 bits per
second one byte takes 0.8 seconds.

## Using the library

### Data link layer

`linksim.link` works on `bytes`:

```python
from linksim.link import encode_message, crc, detect_crc, hamming, detect_hamming
from linksim.settings import Framing, ErrorControl

frame = encode_message(b"hello", Framing.BYTE_INSERTION, ErrorControl.CRC)

assert detect_crc(crc(b"hello")) == b"hello"
assert detect_hamming(hamming(b"hi")) == b"hi"
```

It also provides `count_bytes`, `insert_bytes`, `escape_flags`,
`frame_flags`, `parity`, `crc32` and `detect_parity`. The deframers
`deframe_count` and `deframe_insert` take a function that returns the next
received byte as an `int`.

### Physical layer

`linksim.physical` turns bits into signal levels and back:

```python
from linksim.physical import manchester, demodulate_manchester

samples = [manchester(True, step / 10) for step in range(10)]
assert demodulate_manchester(samples) is True
```

`nrz_polar`, `manchester`, `amplitude_shift_key` and `frequency_shift_key`
are plain functions; bipolar and 8-QAM keep state between bits, so they are
the classes `BipolarModulator` and `QAM8Modulator`. The demodulators are
`demodulate_nrz_polar`, `demodulate_manchester` and `demodulate_bipolar`.

### Settings

`linksim.settings` holds the enums `Framing`, `ErrorControl`,
`TransmitModulation` and `ReceiveModulation`, and the frozen dataclasses
`TransmitterSettings` (default resolution 4) and `ReceiverSettings`
(default resolution 10).

### Preview

`linksim.preview.build_preview` returns a `Preview` with the message, the
message after error control, the framed bytes, and their points for
plotting: square-wave series of the bits and the sampled signal the
transmitter would produce.

```python
from linksim.preview import build_preview
from linksim.settings import TransmitterSettings

preview = build_preview(b"hi", TransmitterSettings())
```

`BitstreamTrace` and `SignalTrace` keep scrolling point lists of the most
recent eight bits, and of the most recent eight bits' worth of samples.

### Transmitter, receiver, clock and medium

`linksim.transmitter.Transmitter` queues framed messages and, in step with
a `linksim.clock.Clock`, puts samples on a line; `linksim.receiver.Receiver`
samples the line, recovers bits, bytes and frames, and reports messages
through a callback. Both accept callbacks for each bit and each sample.

`linksim.medium.Medium` is a line carried over a non-blocking pipe. Once
narrowed to its `Permission.READ` or `Permission.WRITE` end, the other end
is closed, so it serves a writer and a reader in two processes that share
the pipe; within one process, give both ends an object with the same
`narrow`, `transmit` and `listen` methods, as the command does.

## What it does not do

There are no windows, live charts or settings dialogs: the preview and the
traces return point lists for you to plot, and the command takes its
settings from options when it starts. The command runs both ends in one
process rather than two.