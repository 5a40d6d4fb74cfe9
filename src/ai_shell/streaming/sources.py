"""Sources de fragments pour le StreamReader."""

from typing import AsyncIterator

from ..providers.base import Completion


async def completion_to_iterable(completion: Completion) -> AsyncIterator[str]:
    """
    Expose une complétion non-streamée comme un flux d'un seul fragment.

    Le lecteur ne fait pas la différence avec un vrai flux multi-fragments.
    """
    yield f"data: {completion.text}"
