"""
Mistral API Provider.

Client de complétion pour l'API cloud Mistral AI, avec traduction
des erreurs HTTP courantes en messages lisibles.
"""

import json
import logging

import httpx
from mistralai import Mistral
from mistralai.models import AssistantMessage, SystemMessage, UserMessage

from ..errors import KnownError
from .base import Completion, ProviderBase

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "mistral-small-latest"
DEFAULT_HOST = "api.mistral.ai"

# L'API refuse plus de 10 choix par requête
MAX_CHOICES = 10


def _format_body(body: str | None) -> str:
    """Indente le corps de réponse s'il s'agit de JSON."""
    if not body:
        return ""
    try:
        return json.dumps(json.loads(body), indent=2, ensure_ascii=False)
    except ValueError:
        return body


def _request_host(error: httpx.RequestError) -> str:
    try:
        return error.request.url.host or DEFAULT_HOST
    except RuntimeError:
        # Exception créée sans requête associée
        return DEFAULT_HOST


def translate_error(error: Exception) -> KnownError | None:
    """
    Convertit une erreur du SDK en KnownError si on sait l'expliquer.

    Returns:
        La KnownError à lever, ou None pour propager l'erreur telle quelle
    """
    if isinstance(error, (httpx.ConnectError, httpx.ConnectTimeout)):
        return KnownError(
            f"Erreur de connexion à {_request_host(error)} ({type(error).__name__}). "
            "Êtes-vous connecté à internet ?"
        )

    status = getattr(error, "status_code", None)
    if not isinstance(status, int):
        return None

    body = _format_body(getattr(error, "body", None))

    if status == 429:
        return KnownError(
            "La requête à Mistral a échoué avec le statut 429. "
            "Le quota est dépassé ou la facturation n'est pas configurée : "
            "vérifiez votre abonnement sur console.mistral.ai.\n\n"
            "Message complet de Mistral :\n\n"
            f"{body}\n"
        )
    if body:
        return KnownError(
            f"La requête à Mistral a échoué avec le statut {status} :\n\n{body}\n"
        )
    return None


class MistralProvider(ProviderBase):
    """Provider pour l'API Mistral AI."""

    name = "mistral"

    MODELS = {
        "chat": [
            "mistral-small-latest",
            "mistral-medium-latest",
            "mistral-large-latest",
        ],
        "code": [
            "codestral-latest",
            "devstral-small-latest",
        ],
        "edge": [
            "ministral-8b-latest",
            "ministral-3b-latest",
        ],
    }

    def __init__(self, api_key: str):
        if not api_key:
            raise KnownError("Clé API Mistral manquante")
        self.api_key = api_key

    def _create_client(self) -> Mistral:
        return Mistral(api_key=self.api_key)

    def _convert_messages(self, messages: list[dict]) -> list:
        """Convertit les messages au format Mistral."""
        result = []
        for msg in messages:
            role = msg.get("role", "user")
            content = msg.get("content", "")

            if role == "system":
                result.append(SystemMessage(content=content))
            elif role == "assistant":
                result.append(AssistantMessage(content=content))
            else:
                result.append(UserMessage(content=content))
        return result

    @staticmethod
    def _content_to_text(content) -> str:
        """Le contenu peut être une chaîne ou une liste de chunks."""
        if content is None:
            return ""
        if isinstance(content, str):
            return content
        return "".join(
            item.text for item in content
            if getattr(item, "text", None)
        )

    async def complete(
        self,
        messages: list[dict],
        model: str,
        count: int = 1,
    ) -> Completion:
        """Complétion non-streamée via l'API Mistral."""
        client = self._create_client()
        count = max(1, min(count, MAX_CHOICES))
        logger.debug("Requête Mistral: model=%s, n=%d, %d messages", model, count, len(messages))

        try:
            response = await client.chat.complete_async(
                model=model or DEFAULT_MODEL,
                messages=self._convert_messages(messages),
                n=count,
                stream=False,
            )
        except Exception as error:
            known = translate_error(error)
            if known is None:
                raise
            logger.debug("Erreur Mistral traduite: %r", error)
            raise known from error

        choices = [
            self._content_to_text(choice.message.content)
            for choice in response.choices or []
        ]

        usage = None
        if response.usage:
            usage = {
                "prompt_tokens": response.usage.prompt_tokens or 0,
                "completion_tokens": response.usage.completion_tokens or 0,
            }
            logger.debug("Usage Mistral: %s", usage)

        return Completion(choices=choices, usage=usage, model=response.model or model)

    def list_models(self) -> list[str]:
        """Liste tous les modèles Mistral proposés."""
        all_models = []
        for category_models in self.MODELS.values():
            all_models.extend(category_models)
        return all_models

    def get_default_model(self) -> str:
        return DEFAULT_MODEL
