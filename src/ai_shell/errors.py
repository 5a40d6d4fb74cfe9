"""Erreurs connues et affichage des erreurs CLI."""

import traceback

from rich.console import Console
from rich.text import Text

from . import __version__

console = Console(stderr=True)

INDENT = " " * 4


class KnownError(Exception):
    """Erreur attendue, affichée sans trace à l'utilisateur."""


def handle_cli_error(error: BaseException) -> None:
    """
    Affiche les détails d'une erreur inattendue.

    Les KnownError sont déjà explicites : seul leur message compte.
    Pour le reste, on affiche la trace (sans la première ligne)
    et la version pour faciliter les rapports de bug.
    """
    if isinstance(error, KnownError):
        return

    lines = traceback.format_exception(type(error), error, error.__traceback__)
    trace = "".join(lines[1:]).rstrip()
    if trace:
        console.print(trace, style="dim", markup=False, highlight=False)
    console.print(f"\n{INDENT}[dim]ai-shell v{__version__}[/]")


def report_error(error: BaseException) -> None:
    """Affiche une erreur au format CLI (✖ message + détails)."""
    console.print(Text.assemble("\n", ("✖ ", "red"), str(error)))
    handle_cli_error(error)
