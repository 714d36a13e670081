from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest

from mepfix.ui.keypress import stdin_poller

if TYPE_CHECKING:
    from collections.abc import Iterator
    from typing import TextIO

pytestmark = pytest.mark.skipif(os.name == "nt", reason="select() needs a POSIX pipe")


@pytest.fixture
def pipe() -> Iterator[tuple[TextIO, TextIO]]:
    read_fd, write_fd = os.pipe()
    with os.fdopen(read_fd, "r") as reader, os.fdopen(write_fd, "w") as writer:
        yield reader, writer


def test_nothing_typed_does_not_cancel(pipe: tuple[TextIO, TextIO]) -> None:
    reader, _ = pipe

    assert stdin_poller(reader)() is False


def test_q_line_cancels(pipe: tuple[TextIO, TextIO]) -> None:
    reader, writer = pipe
    poll = stdin_poller(reader)

    writer.write("Q\n")
    writer.flush()

    assert poll() is True


def test_other_input_is_ignored(pipe: tuple[TextIO, TextIO]) -> None:
    reader, writer = pipe
    poll = stdin_poller(reader)

    writer.write("continue\n")
    writer.flush()

    assert poll() is False
    assert poll() is False


def test_partial_line_returns_without_blocking(pipe: tuple[TextIO, TextIO]) -> None:
    reader, writer = pipe
    poll = stdin_poller(reader)

    writer.write("q")
    writer.flush()
    assert poll() is False

    writer.write("\n")
    writer.flush()
    assert poll() is True


def test_line_split_across_reads_is_reassembled(pipe: tuple[TextIO, TextIO]) -> None:
    reader, writer = pipe
    poll = stdin_poller(reader)

    writer.write("keep going\nq")
    writer.flush()
    assert poll() is False

    writer.write("uit\n")
    writer.flush()
    assert poll() is True
