"""
Flux interactif principal.

Demande → commande générée → explication → exécuter / modifier /
réviser / copier / annuler. Les réponses du modèle s'affichent au fil
de l'eau et peuvent être interrompues avec `q` ou Échap.
"""

import logging
import random

import pyperclip
from rich.console import Console
from rich.prompt import Prompt
from rich.text import Text

from .completion import get_explanation, get_revision, get_script
from .config import AIShellConfig, Colors
from .providers import ProviderBase
from .shell import run_script
from .streaming import CancelToken
from .terminal import read_to_terminal, write_stdout

# Édition de ligne avec texte pré-rempli (absent sous Windows)
try:
    import readline
except ImportError:
    readline = None

logger = logging.getLogger(__name__)
console = Console(stderr=True)

SAMPLE_PROMPTS = [
    "supprimer tous les fichiers .log du dossier courant",
    "lister les 10 plus gros fichiers de mon home",
    "trouver les fichiers modifiés aujourd'hui",
    "compresser le dossier logs en tar.gz",
    "afficher les processus qui écoutent sur un port",
    "convertir video.mov en mp4 avec ffmpeg",
]


def ask_text(message: str, placeholder: str = "") -> str | None:
    """Demande un texte non vide. Retourne None si l'utilisateur annule."""
    if placeholder:
        console.print(f"[dim]{placeholder}[/]")
    while True:
        try:
            value = Prompt.ask(message, console=console).strip()
        except (KeyboardInterrupt, EOFError):
            return None
        if value:
            return value
        console.print("[yellow]Veuillez entrer un prompt.[/]")


def edit_line(initial: str, message: str = "Modifiez le script : ") -> str | None:
    """Édition d'une ligne pré-remplie (readline). None si annulé ou vide."""
    if readline is not None:
        readline.set_startup_hook(lambda: readline.insert_text(initial))
    try:
        return input(message).strip() or None
    except (KeyboardInterrupt, EOFError):
        return None
    finally:
        if readline is not None:
            readline.set_startup_hook()


def end_block() -> None:
    """Sépare deux blocs de réponse."""
    write_stdout("\n\n")
    console.print("•", style="dim")


class PromptFlow:
    """
    Session de génération d'une commande.

    Le mode silencieux (option -s ou SILENT_MODE) saute l'explication.
    """

    MENU = [
        ("run", "✅ Oui", "C'est parti !"),
        ("edit", "📝 Modifier", "Ajuster la commande avant de l'exécuter"),
        ("revise", "🔁 Réviser", "Donner un retour et obtenir une nouvelle version"),
        ("copy", "📋 Copier", "Copier la commande dans le presse-papiers"),
        ("cancel", "❌ Annuler", "Quitter"),
    ]

    def __init__(
        self,
        config: AIShellConfig,
        silent: bool = False,
        provider: ProviderBase | None = None,
    ):
        self.config = config
        self.silent = silent or config.silent_mode
        self.provider = provider

    async def run(self, prompt: str | None = None) -> None:
        """Point d'entrée : génère, explique, puis propose les actions."""
        console.print()
        console.print(Text.assemble(("ai-shell", f"bold {Colors.ORANGE}")))

        prompt = prompt or ask_text(
            "Que voulez-vous faire ?",
            placeholder=f"ex : {random.choice(SAMPLE_PROMPTS)}",
        )
        if not prompt:
            console.print("[dim]Au revoir ![/]")
            return

        token = CancelToken()
        with console.status("Chargement..."):
            read_script = await get_script(
                prompt,
                key=self.config.mistral_key,
                model=self.config.model,
                cancel=token,
                provider=self.provider,
            )
        console.print("[bold]Votre script :[/]\n")
        script = await read_to_terminal(read_script, token)
        end_block()

        if not self.silent:
            await self.explain(script)

        await self.run_or_revise(script)

    async def explain(self, script: str) -> str:
        """Affiche l'explication du script."""
        token = CancelToken()
        with console.status("Explication en cours..."):
            read_explanation = await get_explanation(
                script,
                key=self.config.mistral_key,
                model=self.config.model,
                language=self.config.language,
                cancel=token,
                provider=self.provider,
            )
        console.print("[bold]Explication :[/]\n")
        explanation = await read_to_terminal(read_explanation, token)
        end_block()
        return explanation

    async def revise(self, script: str) -> str:
        """Demande un retour, génère une nouvelle version et l'explique."""
        revision = ask_text(
            "Que voulez-vous changer dans ce script ?",
            placeholder="ex : changer le nom du dossier",
        )
        if not revision:
            return script

        token = CancelToken()
        with console.status("Chargement..."):
            read_script = await get_revision(
                revision,
                script,
                key=self.config.mistral_key,
                model=self.config.model,
                cancel=token,
                provider=self.provider,
            )
        console.print("[bold]Votre nouveau script :[/]\n")
        new_script = await read_to_terminal(read_script, token)
        end_block()

        if not self.silent:
            await self.explain(new_script)

        return new_script

    def menu_for(self, script: str) -> list[tuple[str, str, str]]:
        """Options proposées : pas d'exécution possible pour un script vide."""
        if not script.strip():
            return [option for option in self.MENU if option[0] not in ("run", "edit")]
        return list(self.MENU)

    def choose_action(self, script: str) -> str:
        options = self.menu_for(script)
        question = "Réviser ce script ?" if not script.strip() else "Exécuter ce script ?"

        console.print(f"[bold]{question}[/]")
        for index, (_, label, hint) in enumerate(options, start=1):
            console.print(f"  [bold]{index}[/]. {label} [dim]({hint})[/]")

        try:
            choice = Prompt.ask(
                "Choix",
                choices=[str(i) for i in range(1, len(options) + 1)],
                default="1",
                console=console,
            )
        except (KeyboardInterrupt, EOFError):
            return "cancel"
        return options[int(choice) - 1][0]

    async def run_or_revise(self, script: str) -> None:
        """Boucle d'actions sur le script courant."""
        while True:
            action = self.choose_action(script)

            if action == "run":
                await self.execute(script)
                return

            if action == "edit":
                edited = edit_line(script)
                if edited:
                    await self.execute(edited)
                return

            if action == "revise":
                script = await self.revise(script)
                continue

            if action == "copy":
                self.copy(script)
                return

            console.print("[dim]Au revoir ![/]")
            return

    async def execute(self, script: str) -> None:
        console.print(Text.assemble(("Exécution : ", "bold"), (script, "green")))
        console.print()
        result = await run_script(script)
        if result.error:
            console.print(Text.assemble(("Erreur : ", "red"), result.error))
        elif result.return_code:
            console.print(f"[dim]Code de sortie : {result.return_code}[/]")

    def copy(self, script: str) -> None:
        try:
            pyperclip.copy(script)
        except pyperclip.PyperclipException as e:
            logger.debug("Presse-papiers indisponible: %s", e)
            console.print("[yellow]Presse-papiers indisponible sur ce système[/]")
            return
        console.print("[green]✓[/] Copié dans le presse-papiers !")


async def prompt(
    config: AIShellConfig,
    use_prompt: str | None = None,
    silent: bool = False,
    provider: ProviderBase | None = None,
) -> None:
    """Lance le flux interactif."""
    await PromptFlow(config, silent=silent, provider=provider).run(use_prompt)
