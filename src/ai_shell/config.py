"""
Configuration de ai-shell.

Fichier clé=valeur `~/.ai-shell` (ou `$AI_SHELL_CONFIG`), lu et écrit
avec python-dotenv. Les valeurs passées en ligne de commande ont
priorité sur le fichier ; `MISTRAL_API_KEY` (environnement ou .env)
sert de repli pour la clé.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

from dotenv import dotenv_values, load_dotenv, set_key
from rich.console import Console
from rich.prompt import Confirm, Prompt

from .errors import KnownError
from .i18n import DEFAULT_LANGUAGE, LANGUAGES, get_language_name
from .providers import DEFAULT_MODEL, MistralProvider

load_dotenv()

logger = logging.getLogger(__name__)
console = Console(stderr=True)

COMMAND_NAME = "ai"
CONFIG_FILENAME = ".ai-shell"


def get_config_path() -> Path:
    """Chemin du fichier de config (surchargeable via AI_SHELL_CONFIG)."""
    return Path(os.getenv("AI_SHELL_CONFIG") or Path.home() / CONFIG_FILENAME)


# === PARSEURS ===

def _parse_key(key: str | None) -> str:
    if not key:
        raise KnownError(
            "Veuillez définir votre clé API Mistral via "
            f"`{COMMAND_NAME} config set MISTRAL_KEY=<votre clé>`"
        )
    return key


def _parse_model(model: str | None) -> str:
    return model or DEFAULT_MODEL


def _parse_silent_mode(mode: str | None) -> bool:
    return str(mode).lower() == "true"


def _parse_language(language: str | None) -> str:
    return language or DEFAULT_LANGUAGE


CONFIG_PARSERS: dict[str, Callable[[str | None], Any]] = {
    "MISTRAL_KEY": _parse_key,
    "MODEL": _parse_model,
    "SILENT_MODE": _parse_silent_mode,
    "LANGUAGE": _parse_language,
}

# Valeurs écrites à la création du fichier (la clé reste à définir)
DEFAULT_CONFIG: dict[str, str] = {
    "MODEL": DEFAULT_MODEL,
    "SILENT_MODE": "false",
    "LANGUAGE": DEFAULT_LANGUAGE,
}


@dataclass
class AIShellConfig:
    """Configuration validée."""

    mistral_key: str = ""
    model: str = DEFAULT_MODEL
    silent_mode: bool = False
    language: str = DEFAULT_LANGUAGE

    FIELDS = {
        "MISTRAL_KEY": "mistral_key",
        "MODEL": "model",
        "SILENT_MODE": "silent_mode",
        "LANGUAGE": "language",
    }

    def get(self, key: str) -> Any:
        """Valeur d'une propriété par son nom de config (ex: 'MODEL')."""
        return getattr(self, self.FIELDS[key])


def serialize_value(value: Any) -> str:
    """Forme texte d'une valeur de config (booléens en minuscules)."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


# === LECTURE / ÉCRITURE ===

def read_config_file(path: Path | None = None) -> dict[str, str]:
    """Lit le fichier de config, le crée avec les valeurs par défaut s'il n'existe pas."""
    path = path or get_config_path()

    if not path.exists():
        console.print(f"[dim]Fichier de config introuvable. Création de {path}...[/]")
        path.touch()
        for key, value in DEFAULT_CONFIG.items():
            set_key(path, key, value, quote_mode="never")
        return dict(DEFAULT_CONFIG)

    return {key: value for key, value in dotenv_values(path).items() if value is not None}


def get_config(
    cli_config: dict[str, str] | None = None,
    path: Path | None = None,
    require_key: bool = True,
) -> AIShellConfig:
    """
    Charge et valide la configuration.

    Args:
        cli_config: Valeurs prioritaires (ex: options de ligne de commande)
        path: Fichier de config (défaut: ~/.ai-shell)
        require_key: Si False, une clé absente ne lève pas d'erreur

    Returns:
        AIShellConfig validée
    """
    raw = read_config_file(path)
    cli_config = cli_config or {}
    values = {}

    for key, parser in CONFIG_PARSERS.items():
        value = cli_config.get(key) or raw.get(key)
        if key == "MISTRAL_KEY":
            value = value or os.getenv("MISTRAL_API_KEY")
            if not value and not require_key:
                values[AIShellConfig.FIELDS[key]] = ""
                continue
        values[AIShellConfig.FIELDS[key]] = parser(value)

    return AIShellConfig(**values)


def set_configs(key_values: list[tuple[str, str]], path: Path | None = None) -> None:
    """
    Valide puis enregistre des paires clé/valeur.

    Raises:
        KnownError: Propriété inconnue ou valeur invalide
    """
    path = path or get_config_path()
    read_config_file(path)

    parsed = []
    for key, value in key_values:
        parser = CONFIG_PARSERS.get(key)
        if parser is None:
            raise KnownError(f"Propriété de config invalide : {key}")
        parsed.append((key, serialize_value(parser(value))))

    for key, value in parsed:
        set_key(path, key, value, quote_mode="never")
        logger.debug("Config %s mise à jour dans %s", key, path)


# === INTERFACE INTERACTIVE ===

def _obfuscate(key: str) -> str:
    return f"...{key[-3:]}" if key else "(non définie)"


def show_config_ui(path: Path | None = None) -> None:
    """Menu interactif de modification de la config."""
    models = [m for category in MistralProvider.MODELS.values() for m in category]

    while True:
        config = get_config(path=path, require_key=False)
        options = [
            ("MISTRAL_KEY", "Clé Mistral", _obfuscate(config.mistral_key)),
            ("SILENT_MODE", "Mode silencieux", serialize_value(config.silent_mode)),
            ("MODEL", "Modèle", config.model),
            ("LANGUAGE", "Langue", get_language_name(config.language)),
            ("cancel", "Annuler", "Quitter"),
        ]

        console.print("\n[bold]Configuration ai-shell[/]\n")
        for index, (_, label, hint) in enumerate(options, start=1):
            console.print(f"  [bold]{index}[/]. {label} [dim]({hint})[/]")
        console.print()

        try:
            choice = Prompt.ask(
                "Modifier",
                choices=[str(i) for i in range(1, len(options) + 1)],
                default=str(len(options)),
                console=console,
            )
            key = options[int(choice) - 1][0]

            if key == "cancel":
                return

            if key == "MISTRAL_KEY":
                value = Prompt.ask("Entrez votre clé API Mistral", password=True, console=console)
                if not value.strip():
                    console.print("[yellow]Veuillez entrer une clé[/]")
                    continue
                set_configs([(key, value.strip())], path)
            elif key == "SILENT_MODE":
                enabled = Confirm.ask(
                    "Activer le mode silencieux ?",
                    default=config.silent_mode,
                    console=console,
                )
                set_configs([(key, serialize_value(enabled))], path)
            elif key == "MODEL":
                console.print(f"[dim]Modèles : {', '.join(models)}[/]")
                value = Prompt.ask("Modèle", default=config.model, console=console)
                set_configs([(key, value.strip())], path)
            elif key == "LANGUAGE":
                console.print(
                    "[dim]"
                    + ", ".join(f"{code} ({name})" for code, name in LANGUAGES.items())
                    + "[/]"
                )
                value = Prompt.ask(
                    "Langue",
                    choices=list(LANGUAGES),
                    default=config.language,
                    show_choices=False,
                    console=console,
                )
                set_configs([(key, value)], path)

        except (KeyboardInterrupt, EOFError):
            console.print("\n[dim]Annulé[/]")
            return


# Couleurs ai-shell (orange Mistral)
class Colors:
    """Palette de couleurs."""

    ORANGE = "#FF7000"
    SUCCESS = "#3FB950"
