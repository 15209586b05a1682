"""Tests for the live output tee."""

from __future__ import annotations

import io

from republish_core.npm.tee import OutputTee


class _TricklePipe(io.BytesIO):
    """Pipe handing out one byte per read, like a slow child process."""

    def read1(self, size: int = -1) -> bytes:
        return super().read1(1)


def test_multibyte_characters_split_across_reads_reach_text_sink() -> None:
    sink = io.StringIO()
    tee = OutputTee(_TricklePipe("ééé\n".encode("utf-8")), sink, limit=1024, name="stdout").start()
    tee.join()

    assert sink.getvalue() == "ééé\n"
    assert tee.text() == "ééé\n"


def test_incomplete_trailing_character_is_replaced_once() -> None:
    sink = io.StringIO()
    tee = OutputTee(_TricklePipe("ok é".encode("utf-8")[:-1]), sink, limit=1024).start()
    tee.join()

    assert sink.getvalue() == "ok \ufffd"


def test_binary_sink_receives_raw_bytes_and_buffer_is_capped() -> None:
    payload = "é".encode("utf-8") * 10
    sink = io.BytesIO()
    tee = OutputTee(_TricklePipe(payload), sink, limit=5, name="stderr").start()
    tee.join()

    assert sink.getvalue() == payload
    assert tee.truncated
    assert tee.getvalue() == payload[:5]
