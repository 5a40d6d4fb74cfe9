"""
Requêtes au modèle : génération, explication et révision de commandes.

Chaque fonction `get_*` retourne un lecteur (voir streaming.read_data)
que l'appelant exécute avec son writer, typiquement la sortie standard.
"""

import logging
import re

from .i18n import DEFAULT_LANGUAGE, get_language_name
from .providers import DEFAULT_MODEL, Completion, ProviderBase, get_provider
from .shell import ShellEnvironment, shell_environment
from .streaming import CancelToken, Reader, completion_to_iterable, read_data

logger = logging.getLogger(__name__)

# Le modèle répond avec des blocs de code markdown, souvent
# au format GitHub ("```bash"). On ne garde que la commande.
SHELL_CODE_EXCLUSIONS = [
    re.compile(r"```[a-zA-Z]*\n", re.IGNORECASE),
    re.compile(r"```"),
    "\n",
]

MAX_COMPLETIONS = 10


# === PROMPTS ===

EXPLAIN_SCRIPT = (
    "Donne une description claire et concise du script, en un minimum de mots. "
    "Présente les étapes sous forme de liste."
)


def _generation_details(environment: ShellEnvironment) -> str:
    return (
        "Réponds uniquement avec la commande sur une seule ligne, entourée de trois backticks. "
        "Elle doit pouvoir être exécutée directement dans le shell cible. "
        "N'ajoute aucun autre texte.\n\n"
        f"La commande doit fonctionner sur le système {environment.os_name()}."
    )


def get_full_prompt(prompt: str, environment: ShellEnvironment = shell_environment) -> str:
    """Prompt de génération d'une commande à partir d'une demande."""
    return (
        "Crée une commande sur une seule ligne, à saisir et exécuter dans un terminal, "
        "d'après ce qui est demandé dans le prompt.\n\n"
        f"Le shell cible est {environment.detect_shell()}\n\n"
        f"{_generation_details(environment)}\n\n"
        f"Le prompt est : {prompt}"
    )


def get_explanation_prompt(script: str, language: str = DEFAULT_LANGUAGE) -> str:
    """Prompt d'explication d'un script, dans la langue configurée."""
    return (
        f"{EXPLAIN_SCRIPT} Réponds en {get_language_name(language)}.\n\n"
        f"Le script : {script}"
    )


def get_revision_prompt(
    prompt: str,
    code: str,
    environment: ShellEnvironment = shell_environment,
) -> str:
    """Prompt de révision d'un script existant."""
    return (
        "Modifie le script suivant selon ce qui est demandé dans le prompt.\n\n"
        f"Le script : {code}\n\n"
        f"Le prompt : {prompt}\n\n"
        f"{_generation_details(environment)}"
    )


# === REQUÊTES ===

async def generate_completion(
    prompt: str | list[dict],
    key: str,
    model: str | None = None,
    number: int = 1,
    provider: ProviderBase | None = None,
) -> Completion:
    """
    Envoie une requête de complétion.

    Args:
        prompt: Texte du prompt, ou historique de messages {"role", "content"}
        key: Clé API Mistral
        model: Modèle (défaut: mistral-small-latest)
        number: Nombre de choix (plafonné à 10)
        provider: Client à utiliser (défaut: Mistral avec la clé donnée)

    Raises:
        KnownError: Erreur réseau ou API explicable
    """
    provider = provider or get_provider(key)

    if isinstance(prompt, list):
        messages = prompt
    else:
        messages = [{"role": "user", "content": str(prompt)}]

    logger.debug("Complétion: %d message(s), n=%d", len(messages), number)

    return await provider.complete(
        messages=messages,
        model=model or DEFAULT_MODEL,
        count=min(number, MAX_COMPLETIONS),
    )


async def get_script(
    prompt: str,
    key: str,
    model: str | None = None,
    cancel: CancelToken | None = None,
    provider: ProviderBase | None = None,
) -> Reader:
    """Génère une commande ; le lecteur retire les balises de code."""
    completion = await generate_completion(
        get_full_prompt(prompt), key=key, model=model, provider=provider,
    )
    return read_data(completion_to_iterable(completion), *SHELL_CODE_EXCLUSIONS, cancel=cancel)


async def get_explanation(
    script: str,
    key: str,
    model: str | None = None,
    language: str = DEFAULT_LANGUAGE,
    cancel: CancelToken | None = None,
    provider: ProviderBase | None = None,
) -> Reader:
    """Demande l'explication d'un script ; le texte est transmis tel quel."""
    completion = await generate_completion(
        get_explanation_prompt(script, language), key=key, model=model, provider=provider,
    )
    return read_data(completion_to_iterable(completion), cancel=cancel)


async def get_revision(
    prompt: str,
    code: str,
    key: str,
    model: str | None = None,
    cancel: CancelToken | None = None,
    provider: ProviderBase | None = None,
) -> Reader:
    """Révise un script selon le retour de l'utilisateur."""
    completion = await generate_completion(
        get_revision_prompt(prompt, code), key=key, model=model, provider=provider,
    )
    return read_data(completion_to_iterable(completion), *SHELL_CODE_EXCLUSIONS, cancel=cancel)
