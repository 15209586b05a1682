"""Forward subprocess output live while keeping a bounded copy of it."""

from __future__ import annotations

import codecs
import io
import logging
import threading
from typing import IO, Any, Optional

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 65536


class OutputTee:
    """Drain one pipe on a background thread.

    Every chunk is written to ``sink`` as soon as it arrives and appended to an
    in-memory buffer holding at most ``limit`` bytes. Output past the limit is
    still forwarded but no longer buffered; ``truncated`` reports it.
    """

    def __init__(self, pipe: IO[bytes], sink: Optional[IO[Any]], *, limit: int, name: str = "") -> None:
        self._pipe = pipe
        self._sink = sink
        self._limit = max(int(limit), 0)
        self._name = name
        self._buffer = bytearray()
        self._truncated = False
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._thread: Optional[threading.Thread] = None

    def start(self) -> "OutputTee":
        self._thread = threading.Thread(target=self._drain, name=f"tee-{self._name}", daemon=True)
        self._thread.start()
        return self

    def join(self, timeout: float | None = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    @property
    def truncated(self) -> bool:
        return self._truncated

    def getvalue(self) -> bytes:
        return bytes(self._buffer)

    def text(self) -> str:
        return self.getvalue().decode("utf-8", errors="replace")

    def _drain(self) -> None:
        read = getattr(self._pipe, "read1", self._pipe.read)
        try:
            for chunk in iter(lambda: read(_CHUNK_SIZE), b""):
                self._forward(chunk)
                self._keep(chunk)
            self._forward_text(self._decoder.decode(b"", final=True))
        finally:
            self._pipe.close()

    def _keep(self, chunk: bytes) -> None:
        room = self._limit - len(self._buffer)
        if len(chunk) > room:
            if not self._truncated:
                logger.warning("%s output exceeded %s bytes; buffering stopped", self._name or "subprocess", self._limit)
            self._truncated = True
            chunk = chunk[: max(room, 0)]
        self._buffer.extend(chunk)

    def _forward(self, chunk: bytes) -> None:
        sink = self._sink
        if sink is None:
            return
        binary = getattr(sink, "buffer", None)
        if binary is not None:
            sink.flush()
            binary.write(chunk)
            binary.flush()
            return
        if isinstance(sink, io.TextIOBase):
            self._forward_text(self._decoder.decode(chunk))
            return
        sink.write(chunk)
        sink.flush()

    def _forward_text(self, text: str) -> None:
        # a multibyte character split across reads stays in the decoder
        if self._sink is None or not text:
            return
        self._sink.write(text)
        self._sink.flush()
