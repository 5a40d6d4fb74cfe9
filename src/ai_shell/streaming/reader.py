"""
Lecteur de flux de réponse.

Consomme une séquence asynchrone de fragments de texte, retire les
marqueurs `data:` et les motifs exclus (balises de code markdown...),
transmet le texte nettoyé au fur et à mesure à un writer, et retourne
le texte complet. Peut être interrompu entre deux payloads via un
CancelToken.
"""

import asyncio
import re
from typing import AsyncIterable, Awaitable, Callable, Iterable, Union

ExclusionPattern = Union[str, re.Pattern, None]
Writer = Callable[[str], None]
Reader = Callable[[Writer], Awaitable[str]]

PAYLOAD_DELIMITER = "\n\n"

_DATA_PREFIX = re.compile(r"\A\n?data:\s*")


class CancelToken:
    """Drapeau d'annulation partagé entre l'observateur de touches et le lecteur."""

    def __init__(self) -> None:
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True

    def __repr__(self) -> str:
        return f"<CancelToken cancelled={self._cancelled}>"


def parse_content(payload: str) -> str:
    """Retire le marqueur `data:` (et le saut de ligne qui le précède) en tête de payload."""
    return _DATA_PREFIX.sub("", payload, count=1)


def strip_patterns(content: str, excluded: Iterable[ExclusionPattern]) -> str:
    """Supprime toutes les occurrences de chaque motif, dans l'ordre de la liste."""
    for pattern in excluded:
        if pattern is None:
            continue
        if isinstance(pattern, re.Pattern):
            content = pattern.sub("", content)
        else:
            content = content.replace(pattern, "")
    return content


class StreamReader:
    """
    Lecteur d'un flux de réponse, à usage unique.

    Le flux n'est consommé qu'une seule fois : chaque requête crée
    son propre StreamReader (et donc son propre accumulateur).
    """

    def __init__(
        self,
        source: AsyncIterable[str | bytes],
        excluded: Iterable[ExclusionPattern] = (),
        cancel: CancelToken | None = None,
    ):
        self.source = source
        self.excluded = list(excluded)
        self.cancel = cancel

    def _cancelled(self) -> bool:
        return self.cancel is not None and self.cancel.cancelled

    async def read(self, writer: Writer) -> str:
        """
        Lit le flux jusqu'au bout (ou jusqu'à l'annulation).

        Args:
            writer: Callback appelé avec chaque morceau de texte nettoyé

        Returns:
            Le texte nettoyé accumulé (partiel si annulé)
        """
        data = ""

        async for chunk in self.source:
            if isinstance(chunk, bytes):
                chunk = chunk.decode("utf-8")

            for payload in chunk.split(PAYLOAD_DELIMITER):
                # Laisse tourner l'observateur de touches avant de vérifier le drapeau
                await asyncio.sleep(0)
                if self._cancelled():
                    await self._close_source()
                    return data

                content = parse_content(payload)
                if content:
                    cleaned = strip_patterns(content, self.excluded)
                    writer(cleaned)
                    data += cleaned

        return data

    async def _close_source(self) -> None:
        """Ferme le générateur source pour ne plus consommer de fragments."""
        aclose = getattr(self.source, "aclose", None)
        if aclose is not None:
            await aclose()


def read_data(
    source: AsyncIterable[str | bytes],
    *excluded: ExclusionPattern,
    cancel: CancelToken | None = None,
) -> Reader:
    """
    Crée un lecteur pour un flux de réponse.

    Usage:
        read_script = read_data(stream, *SHELL_CODE_EXCLUSIONS, cancel=token)
        script = await read_script(write_stdout)
    """
    return StreamReader(source, excluded, cancel).read
