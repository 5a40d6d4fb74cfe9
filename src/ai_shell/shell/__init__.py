"""
Intégration shell pour ai-shell.

Fonctionnalités :
- Détection du shell et du système cible (pour le prompt)
- Exécution des commandes générées
- Ajout des commandes exécutées à l'historique du shell
"""

from .environment import ShellEnvironment, shell_environment
from .runner import RunResult, run_script

__all__ = ["RunResult", "ShellEnvironment", "run_script", "shell_environment"]
