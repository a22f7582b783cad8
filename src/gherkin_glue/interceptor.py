"""Tee ``sys.stdout`` or ``sys.stderr`` into an in-memory buffer.

Formatters use :class:`Pipe` to collect what steps print while still
passing the output through to the real stream.
"""

from __future__ import annotations

import io
import sys
import threading
import typing as typ

STREAM_NAMES = ("stdout", "stderr")


def _validate_stream_name(name: str) -> None:
    if name not in STREAM_NAMES:
        msg = f"stream name must be 'stdout' or 'stderr', got {name!r}"
        raise ValueError(msg)


class Pipe:
    """A text stream that forwards writes and keeps a copy of them.

    Only the capabilities listed on the class are forwarded to the wrapped
    stream; anything else raises :class:`AttributeError`.

    Parameters
    ----------
    stream : TextIO
        The stream to forward to.

    """

    __slots__ = ("_buffer", "_lock", "_wrapped", "stream")

    def __init__(self, stream: typ.TextIO) -> None:
        """Start buffering writes to *stream*."""
        self.stream = stream
        self._buffer = io.StringIO()
        self._lock = threading.Lock()
        self._wrapped = True

    def write(self, text: str) -> int:
        """Write *text* through, buffering it while wrapped."""
        with self._lock:
            if self._wrapped:
                self._buffer.write(text)
            return self.stream.write(text)

    def writelines(self, lines: typ.Iterable[str]) -> None:
        """Write each line in turn."""
        for line in lines:
            self.write(line)

    def buffer_string(self) -> str:
        """Return everything written while wrapped."""
        with self._lock:
            return self._buffer.getvalue()

    def flush(self) -> None:
        """Flush the wrapped stream."""
        self.stream.flush()

    def isatty(self) -> bool:
        """Report whether the wrapped stream is a terminal."""
        return self.stream.isatty()

    def fileno(self) -> int:
        """Return the wrapped stream's file descriptor."""
        return self.stream.fileno()

    def writable(self) -> bool:
        """Pipes are always writable."""
        return True

    @property
    def encoding(self) -> str:
        """Encoding of the wrapped stream."""
        return self.stream.encoding

    @property
    def errors(self) -> str | None:
        """Error handling scheme of the wrapped stream."""
        return self.stream.errors

    def stop_buffering(self) -> typ.TextIO:
        """Stop buffering and return the wrapped stream."""
        with self._lock:
            self._wrapped = False
        return self.stream

    @classmethod
    def wrap(cls, name: str) -> Pipe:
        """Replace ``sys.<name>`` with a pipe around it.

        Raises
        ------
        ValueError
            If *name* is not ``stdout`` or ``stderr``.

        """
        _validate_stream_name(name)
        pipe = cls(getattr(sys, name))
        setattr(sys, name, pipe)
        return pipe

    @classmethod
    def unwrap(cls, name: str) -> object:
        """Restore ``sys.<name>`` if it is a pipe.

        Returns the pipe that was removed, or the current stream unchanged
        when it is not a pipe.

        Raises
        ------
        ValueError
            If *name* is not ``stdout`` or ``stderr``.

        """
        _validate_stream_name(name)
        current = getattr(sys, name)
        if not isinstance(current, cls):
            return current
        setattr(sys, name, current.stop_buffering())
        return current
