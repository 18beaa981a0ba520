"""A one-way transmission medium carried over a non-blocking pipe."""

import os
import struct
from enum import Enum

_SAMPLE = struct.Struct("=f")
_CHUNK = 4096


class Permission(Enum):
    """Which end of the medium an endpoint uses."""

    NOT_SET = -1
    READ = 0
    WRITE = 1


class Medium:
    """Float samples written at one end are heard at the other.

    The medium starts with both ends open; after a fork each side narrows it
    to the end it uses. Listening returns the most recent sample, or the last
    one heard if nothing new has arrived.
    """

    def __init__(self) -> None:
        read_fd, write_fd = os.pipe()
        os.set_blocking(read_fd, False)
        os.set_blocking(write_fd, False)
        self._fds = {Permission.READ: read_fd, Permission.WRITE: write_fd}
        self._permission = Permission.NOT_SET
        self._value = 0.0
        self._pending = b""
        self._closed = False

    @property
    def permission(self) -> Permission:
        return self._permission

    def _check_open(self) -> None:
        if self._closed:
            raise ValueError("medium is closed")

    def narrow(self, permission: Permission) -> None:
        """Keep only the given end; asking for the other end afterwards is an error."""
        self._check_open()
        if permission is Permission.NOT_SET:
            raise ValueError("Medium cannot narrow to NOT_SET.")
        if self._permission is Permission.NOT_SET:
            other = Permission.WRITE if permission is Permission.READ else Permission.READ
            os.close(self._fds.pop(other))
            self._permission = permission
        elif permission is not self._permission:
            raise RuntimeError("Attempted to access medium from the wrong READ/WRITE end.")

    def transmit(self, value: float) -> None:
        """Put a sample on the medium."""
        self._check_open()
        if self._permission is not Permission.WRITE:
            raise ValueError("This endpoint does not have writing permissions.")
        packed = _SAMPLE.pack(value)
        try:
            os.write(self._fds[Permission.WRITE], packed)
        except OSError as exc:
            raise RuntimeError("Error writing to medium.") from exc
        self._value = _SAMPLE.unpack(packed)[0]

    def listen(self) -> float:
        """Drain the medium and return the latest sample."""
        self._check_open()
        if self._permission is not Permission.READ:
            raise ValueError("This endpoint does not have reading permissions.")
        buffer = bytearray(self._pending)
        fd = self._fds[Permission.READ]
        while True:
            try:
                chunk = os.read(fd, _CHUNK)
            except BlockingIOError:
                break
            except OSError as exc:
                raise RuntimeError("Error reading medium") from exc
            if not chunk:
                break
            buffer += chunk
        usable = len(buffer) - len(buffer) % _SAMPLE.size
        if usable:
            self._value = _SAMPLE.unpack_from(buffer, usable - _SAMPLE.size)[0]
        self._pending = bytes(buffer[usable:])
        return self._value

    def close(self) -> None:
        """Close whatever ends are still open."""
        if self._closed:
            return
        for fd in self._fds.values():
            os.close(fd)
        self._fds.clear()
        self._closed = True

    def __enter__(self) -> "Medium":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()