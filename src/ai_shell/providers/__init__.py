"""
Provider LLM pour ai-shell.

Un seul backend : l'API cloud Mistral.
"""

from .base import Completion, ProviderBase
from .mistral import DEFAULT_MODEL, MistralProvider, translate_error

__all__ = [
    "Completion",
    "DEFAULT_MODEL",
    "MistralProvider",
    "ProviderBase",
    "get_provider",
    "translate_error",
]


def get_provider(api_key: str) -> ProviderBase:
    """Crée le client de complétion pour la clé donnée."""
    return MistralProvider(api_key=api_key)
