"""Simulated physical and data link layers between a transmitter and a receiver.

Modules: settings, link (framing and error control), physical (line codes
and modulations), medium, clock, transmitter, receiver, preview and cli.
"""

__version__ = "0.1.0"