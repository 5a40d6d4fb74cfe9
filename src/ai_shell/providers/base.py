"""
Classe de base du client de complétion.

Un seul provider hébergé est supporté (Mistral), mais le reste
du code ne dépend que de cette interface.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass
class Completion:
    """Résultat (non-streamé) d'une requête de complétion."""
    choices: list[str] = field(default_factory=list)
    usage: dict | None = None  # {"prompt_tokens": int, "completion_tokens": int}
    model: str = ""

    @property
    def text(self) -> str:
        """Texte du premier choix (vide si aucun)."""
        return self.choices[0] if self.choices else ""


class ProviderBase(ABC):
    """Interface abstraite du client de complétion."""

    name: str = "base"

    @abstractmethod
    async def complete(
        self,
        messages: list[dict],
        model: str,
        count: int = 1,
    ) -> Completion:
        """
        Demande une complétion complète (pas de streaming).

        Args:
            messages: Liste de messages au format {"role": str, "content": str}
            model: Nom du modèle à utiliser
            count: Nombre de choix à générer

        Returns:
            Completion avec un texte par choix
        """
        ...

    @abstractmethod
    def list_models(self) -> list[str]:
        """Liste les modèles disponibles."""
        ...

    def get_default_model(self) -> str:
        """Retourne le modèle par défaut pour ce provider."""
        models = self.list_models()
        return models[0] if models else ""
