"""Exécution des commandes générées dans le shell de l'utilisateur."""

import asyncio
import logging
import os
from dataclasses import dataclass

from .environment import ShellEnvironment, shell_environment

logger = logging.getLogger(__name__)


@dataclass
class RunResult:
    """Résultat de l'exécution d'une commande."""

    command: str
    return_code: int | None
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.error is None and self.return_code == 0


async def run_script(
    script: str,
    environment: ShellEnvironment = shell_environment,
    record_history: bool = True,
) -> RunResult:
    """
    Exécute une commande avec stdin/stdout/stderr hérités du terminal.

    Un échec de la commande n'est pas une erreur d'ai-shell : le code
    de retour est simplement rapporté. La commande est ajoutée à
    l'historique du shell dans tous les cas.
    """
    executable = environment.shell_path or None
    logger.debug("Exécution via %s: %s", executable or "shell par défaut", script)

    try:
        process = await asyncio.create_subprocess_shell(
            script,
            executable=executable,
            env=os.environ.copy(),
        )
        return_code = await process.wait()
        result = RunResult(command=script, return_code=return_code)
    except OSError as e:
        result = RunResult(command=script, return_code=None, error=str(e))

    if record_history:
        environment.append_to_history(script)

    return result
