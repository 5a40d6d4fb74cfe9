"""
Point d'entrée CLI pour ai-shell.

Usage:
    ai lister tous les fichiers du dossier
    ai -s "trouver les gros fichiers"      # sans explication
    ai chat
    ai config                              # menu interactif
    ai config get MODEL
    ai config set MISTRAL_KEY=<clé> LANGUAGE=en
"""

import asyncio
import logging
import sys
from typing import Any, Coroutine

import click
from rich.console import Console
from rich.logging import RichHandler

from . import __version__
from .config import CONFIG_PARSERS, get_config, serialize_value, set_configs, show_config_ui
from .errors import KnownError, report_error

console = Console(stderr=True)


def setup_logging(debug: bool = False) -> None:
    """Logs sur stderr via rich ; WARNING par défaut, DEBUG avec --debug."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, rich_tracebacks=True)],
    )


def run_or_exit(coroutine: Coroutine[Any, Any, None]) -> None:
    """Exécute une commande async ; toute erreur est affichée puis exit 1."""
    try:
        asyncio.run(coroutine)
    except KeyboardInterrupt:
        console.print("\n[dim]Interrompu[/]")
        sys.exit(130)
    except Exception as e:
        report_error(e)
        sys.exit(1)


async def _prompt_main(prompt: str | None, silent: bool) -> None:
    from .prompt import prompt as prompt_flow

    await prompt_flow(get_config(), use_prompt=prompt, silent=silent)


async def _chat_main() -> None:
    from .chat import run_chat

    await run_chat(get_config())


class PromptGroup(click.Group):
    """
    Groupe dont les mots inconnus sont passés à la commande par défaut.

    `ai lister les fichiers` équivaut à `ai prompt lister les fichiers`.
    """

    default_command = "prompt"

    def resolve_command(self, ctx: click.Context, args: list[str]):
        if args and self.get_command(ctx, args[0]) is None:
            return self.default_command, self.get_command(ctx, self.default_command), args
        return super().resolve_command(ctx, args)


@click.group(cls=PromptGroup, invoke_without_command=True)
@click.pass_context
@click.option(
    "--prompt", "-p",
    default=None,
    help="Demande à transformer en commande",
)
@click.option(
    "--silent", "-s",
    is_flag=True,
    help="Mode silencieux : n'affiche pas l'explication de la commande",
)
@click.option(
    "--debug",
    is_flag=True,
    help="Affiche les logs de debug",
)
@click.option(
    "--version", "-v",
    is_flag=True,
    help="Affiche la version",
)
def main(
    ctx: click.Context,
    prompt: str | None,
    silent: bool,
    debug: bool,
    version: bool,
) -> None:
    """
    ai-shell - Vos demandes en langage naturel, traduites en commandes shell.

    Propulsé par Mistral.

    \b
    Exemples:
        ai                                  # Demande interactive
        ai lister les fichiers modifiés     # Demande directe
        ai -s "compresser le dossier logs"  # Sans explication
        ai chat                             # Conversation

    \b
    Pendant l'affichage d'une réponse, `q` ou Échap l'interrompt.
    """
    setup_logging(debug)
    ctx.ensure_object(dict)
    ctx.obj["silent"] = silent

    if version:
        console.print(f"ai-shell v{__version__}")
        return

    # Si une sous-commande est appelée, elle prend le relais
    if ctx.invoked_subcommand is not None:
        return

    run_or_exit(_prompt_main(prompt, silent))


# === SOUS-COMMANDES ===

@main.command("prompt")
@click.argument("words", nargs=-1)
@click.option("--silent", "-s", is_flag=True, help="N'affiche pas l'explication")
@click.pass_context
def prompt_command(ctx: click.Context, words: tuple[str, ...], silent: bool):
    """Transforme une demande en commande (commande par défaut)."""
    silent = silent or ctx.obj.get("silent", False)
    run_or_exit(_prompt_main(" ".join(words) or None, silent))


@main.command()
def chat():
    """Démarre une conversation, jusqu'à ce que vous tapiez `exit`."""
    run_or_exit(_chat_main())


@main.group(invoke_without_command=True)
@click.pass_context
def config(ctx: click.Context):
    """Affiche ou modifie la configuration (~/.ai-shell)."""
    if ctx.invoked_subcommand is None:
        show_config_ui()


@config.command("get")
@click.argument("keys", nargs=-1)
def config_get(keys: tuple[str, ...]):
    """Affiche des valeurs de config (toutes par défaut)."""
    try:
        current = get_config(require_key=False)
    except KnownError as e:
        report_error(e)
        sys.exit(1)

    for key in keys or CONFIG_PARSERS:
        if key in CONFIG_PARSERS:
            click.echo(f"{key}={serialize_value(current.get(key))}")


@config.command("set")
@click.argument("pairs", nargs=-1, required=True)
def config_set(pairs: tuple[str, ...]):
    """Enregistre des valeurs au format CLE=valeur."""
    try:
        key_values = []
        for pair in pairs:
            key, sep, value = pair.partition("=")
            if not sep:
                raise KnownError(f"Format invalide : {pair} (attendu CLE=valeur)")
            key_values.append((key, value))
        set_configs(key_values)
    except KnownError as e:
        report_error(e)
        sys.exit(1)


@config.command("ui")
def config_ui():
    """Menu interactif de configuration."""
    show_config_ui()


if __name__ == "__main__":
    main()
