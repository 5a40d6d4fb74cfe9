"""Tests for terminal output and keypress cancellation."""

import asyncio
import io
import os
import sys

import pytest

from ai_shell.streaming import CancelToken, read_data
from ai_shell.terminal import KeypressWatcher, is_stop_key, read_to_terminal, write_stdout
from conftest import fragments


class TestIsStopKey:
    """Tests for is_stop_key."""

    def test_quit_key(self):
        assert is_stop_key("q") is True
        assert is_stop_key("Q") is True

    def test_escape_alone(self):
        assert is_stop_key("\x1b") is True

    def test_escape_sequence_ignored(self):
        """Test arrow keys (ESC sequences) do not cancel."""
        assert is_stop_key("\x1b[A") is False

    def test_other_keys(self):
        assert is_stop_key("a") is False
        assert is_stop_key("\n") is False

    def test_quit_in_burst(self):
        """Test a q typed among other keys still cancels."""
        assert is_stop_key("abq") is True


class TestKeypressWatcher:
    """Tests for KeypressWatcher without a TTY."""

    def test_inactive_without_tty(self):
        """Test a non-interactive stream leaves the watcher inactive."""
        token = CancelToken()

        async def run():
            with KeypressWatcher(token, stream=io.StringIO()) as watcher:
                return watcher.active

        assert asyncio.run(run()) is False
        assert token.cancelled is False

    def test_inactive_without_loop(self):
        """Test entering outside a running loop is harmless."""
        with KeypressWatcher(CancelToken(), stream=io.StringIO()) as watcher:
            assert watcher.active is False


class TestReadToTerminal:
    """Tests for read_to_terminal."""

    def test_reads_through_writer(self, monkeypatch):
        """Test the reader runs to completion with a custom writer."""
        monkeypatch.setattr("sys.stdin", io.StringIO())
        writes = []
        token = CancelToken()

        result = asyncio.run(read_to_terminal(
            read_data(fragments("data: ls\n\ndata: -la"), cancel=token),
            token,
            writer=writes.append,
        ))

        assert result == "ls-la"
        assert writes == ["ls", "-la"]

    def test_default_writer_is_stdout(self, monkeypatch, capsys):
        """Test output goes to stdout by default."""
        monkeypatch.setattr("sys.stdin", io.StringIO())
        token = CancelToken()

        asyncio.run(read_to_terminal(read_data(fragments("data: echo hi")), token))

        assert capsys.readouterr().out == "echo hi"


def test_write_stdout(capsys):
    """Test write_stdout writes text unchanged."""
    write_stdout("a\nb")
    assert capsys.readouterr().out == "a\nb"


# ============================================================================
# KeypressWatcher on a pseudo-terminal
# ============================================================================

@pytest.fixture
def pty_stream():
    """Pseudo-terminal pair: (master fd, text stream on the slave end)."""
    if sys.platform == "win32":
        pytest.skip("Requires a POSIX pseudo-terminal")
    master, slave = os.openpty()
    stream = os.fdopen(slave, "r")
    yield master, stream
    stream.close()
    os.close(master)


@pytest.mark.skipif(sys.platform == "win32", reason="Requires termios")
class TestKeypressWatcherTerminal:
    """Tests for KeypressWatcher attached to a real terminal."""

    def test_cbreak_inside_block_restored_after(self, pty_stream):
        """Test canonical mode and echo are off inside the block only."""
        import termios

        _, stream = pty_stream
        fd = stream.fileno()
        original = termios.tcgetattr(fd)

        async def run():
            with KeypressWatcher(CancelToken(), stream=stream) as watcher:
                return watcher.active, termios.tcgetattr(fd)

        active, inside = asyncio.run(run())

        assert active is True
        assert inside[3] & termios.ICANON == 0
        assert inside[3] & termios.ECHO == 0
        assert termios.tcgetattr(fd) == original

    def test_q_cancels_stream(self, pty_stream):
        """Test pressing q mid-stream stops the reader with the partial text."""
        import termios

        master, stream = pty_stream
        fd = stream.fileno()
        original = termios.tcgetattr(fd)
        token = CancelToken()
        consumed = []

        async def source():
            for chunk in ["data: one", "data: two", "data: three"]:
                consumed.append(chunk)
                yield chunk
                await asyncio.sleep(0.05)

        def writer(text):
            if text == "one":
                os.write(master, b"q")

        async def run():
            with KeypressWatcher(token, stream=stream):
                return await read_data(source(), cancel=token)(writer)

        result = asyncio.run(run())

        assert result == "one"
        assert token.cancelled is True
        assert consumed == ["data: one", "data: two"]
        assert termios.tcgetattr(fd) == original

    def test_other_key_does_not_cancel(self, pty_stream):
        """Test keys other than q and Esc are ignored."""
        master, stream = pty_stream
        token = CancelToken()

        async def source():
            yield "data: one"
            await asyncio.sleep(0.05)
            yield "data: two"

        def writer(text):
            if text == "one":
                os.write(master, b"x")

        async def run():
            with KeypressWatcher(token, stream=stream):
                return await read_data(source(), cancel=token)(writer)

        assert asyncio.run(run()) == "onetwo"
        assert token.cancelled is False

    def test_restored_after_exception(self, pty_stream):
        """Test the terminal mode is restored when the block raises."""
        import termios

        _, stream = pty_stream
        fd = stream.fileno()
        original = termios.tcgetattr(fd)
        watcher = KeypressWatcher(CancelToken(), stream=stream)

        async def run():
            with watcher:
                assert watcher.active is True
                raise RuntimeError("source failed")

        with pytest.raises(RuntimeError, match="source failed"):
            asyncio.run(run())

        assert watcher.active is False
        assert termios.tcgetattr(fd) == original
