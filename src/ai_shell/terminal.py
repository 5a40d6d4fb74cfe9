"""
Terminal interactif : sortie des réponses et observation des touches.

`q` ou Échap interrompent la lecture en cours : le watcher passe le
terminal en mode cbreak, écoute stdin sur la boucle asyncio, et annule
le CancelToken fourni. Tout est restauré à la sortie du bloc `with`.
"""

import asyncio
import logging
import os
import sys
from typing import TextIO

from .streaming import CancelToken, Reader

# Lecture touche par touche (Unix uniquement)
try:
    import termios
    import tty
    HAS_TERMIOS = True
except ImportError:
    HAS_TERMIOS = False

logger = logging.getLogger(__name__)

QUIT_KEY = "q"
ESCAPE_KEY = "\x1b"


def is_stop_key(data: str) -> bool:
    """
    Vérifie si une lecture de stdin correspond à une touche d'arrêt.

    Une séquence d'échappement (flèches, F1...) commence aussi par
    ESC : seule la touche Échap seule compte.
    """
    if data == ESCAPE_KEY:
        return True
    return QUIT_KEY in data.lower()


class KeypressWatcher:
    """
    Context manager liant les touches d'arrêt à un CancelToken.

    Usage:
        token = CancelToken()
        with KeypressWatcher(token):
            text = await read(write_stdout)

    Sans terminal interactif, le watcher ne fait rien.
    """

    def __init__(self, token: CancelToken, stream: TextIO | None = None):
        self.token = token
        self.stream = stream if stream is not None else sys.stdin
        self._fd: int | None = None
        self._saved_attrs: list | None = None
        self._loop: asyncio.AbstractEventLoop | None = None

    @property
    def active(self) -> bool:
        return self._loop is not None

    def _is_interactive(self) -> bool:
        if not HAS_TERMIOS:
            return False
        try:
            return self.stream.isatty()
        except (AttributeError, ValueError):
            return False

    def _on_key(self) -> None:
        try:
            data = os.read(self._fd, 32).decode("utf-8", errors="ignore")
        except OSError:
            return
        if is_stop_key(data):
            self.token.cancel()

    def __enter__(self) -> "KeypressWatcher":
        if not self._is_interactive():
            return self

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("Pas de boucle asyncio active, touches ignorées")
            return self

        fd = self.stream.fileno()
        saved = termios.tcgetattr(fd)
        tty.setcbreak(fd)
        try:
            loop.add_reader(fd, self._on_key)
        except NotImplementedError:
            # Boucle sans support des descripteurs (ex: Proactor)
            termios.tcsetattr(fd, termios.TCSADRAIN, saved)
            logger.debug("Boucle asyncio sans add_reader, touches ignorées")
            return self

        self._fd = fd
        self._saved_attrs = saved
        self._loop = loop
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._loop is None:
            return
        try:
            self._loop.remove_reader(self._fd)
        finally:
            termios.tcsetattr(self._fd, termios.TCSADRAIN, self._saved_attrs)
            self._loop = None
            self._fd = None
            self._saved_attrs = None


def write_stdout(text: str) -> None:
    """Writer par défaut : écrit sur stdout sans tampon."""
    sys.stdout.write(text)
    sys.stdout.flush()


async def read_to_terminal(
    reader: Reader,
    token: CancelToken,
    writer=write_stdout,
) -> str:
    """Exécute un lecteur en laissant `q`/Échap l'interrompre."""
    with KeypressWatcher(token):
        return await reader(writer)
