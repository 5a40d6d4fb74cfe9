"""
Détection de l'environnement shell.

Shell cible, système d'exploitation, et historique du shell
(pour que les commandes lancées par ai-shell y apparaissent).
"""

import logging
import os
import platform
import time
from pathlib import Path, PureWindowsPath

logger = logging.getLogger(__name__)


class ShellEnvironment:
    """Shell et système de l'utilisateur."""

    # Fichiers d'historique relatifs au home, par shell
    HISTORY_FILES = {
        "bash": ".bash_history",
        "sh": ".bash_history",
        "zsh": ".zsh_history",
        "fish": ".local/share/fish/fish_history",
        "ksh": ".ksh_history",
        "tcsh": ".history",
    }

    def __init__(self, environ: dict[str, str] | None = None, home: Path | None = None):
        self.environ = environ if environ is not None else os.environ
        self.home = home or Path.home()

    @property
    def shell_path(self) -> str:
        return self.environ.get("SHELL", "")

    def detect_shell(self) -> str:
        """Détecte le shell courant (bash, zsh, powershell...)."""
        if self.shell_path:
            return Path(self.shell_path).name

        if platform.system() == "Windows":
            # PSModulePath est défini dans les sessions PowerShell
            if "PSModulePath" in self.environ:
                return "powershell"
            comspec = self.environ.get("COMSPEC", "cmd.exe")
            return PureWindowsPath(comspec).stem.lower()

        return "sh"

    def os_name(self) -> str:
        """Nom lisible du système (ex: 'macOS 14.5', 'Ubuntu 24.04', 'Windows 11')."""
        system = platform.system()
        if system == "Darwin":
            version = platform.mac_ver()[0]
            return f"macOS {version}".strip()
        if system == "Linux":
            try:
                release = platform.freedesktop_os_release()
                return release.get("PRETTY_NAME", "Linux")
            except OSError:
                return "Linux"
        if system == "Windows":
            return f"Windows {platform.release()}".strip()
        return system or "inconnu"

    def history_file(self) -> Path | None:
        """Fichier d'historique du shell courant, si connu."""
        if not self.shell_path:
            return None
        relative = self.HISTORY_FILES.get(Path(self.shell_path).name)
        if not relative:
            return None
        return self.home / relative

    def format_history_entry(self, command: str, timestamp: int | None = None) -> str:
        """Formate une entrée selon la syntaxe d'historique du shell."""
        timestamp = int(time.time()) if timestamp is None else timestamp
        shell = Path(self.shell_path).name
        if shell == "zsh":
            return f": {timestamp}:0;{command}"
        if shell == "fish":
            return f"- cmd: {command}\n  when: {timestamp}"
        return command

    def append_to_history(self, command: str) -> bool:
        """
        Ajoute une commande à l'historique du shell.

        Returns:
            True si l'entrée a été écrite
        """
        history_file = self.history_file()
        if history_file is None:
            return False

        try:
            with open(history_file, "a", encoding="utf-8") as f:
                f.write(self.format_history_entry(command) + "\n")
        except OSError as e:
            # L'historique est un bonus : on ne bloque pas l'exécution
            logger.debug("Écriture impossible dans %s: %s", history_file, e)
            return False
        return True


# Instance globale
shell_environment = ShellEnvironment()
