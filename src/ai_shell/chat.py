"""
Mode chat : conversation multi-tours avec le modèle.

L'historique complet est renvoyé à chaque tour. Une réponse
interrompue (`q`/Échap) est conservée telle quelle dans l'historique.
"""

from rich.console import Console
from rich.prompt import Prompt
from rich.text import Text

from .completion import generate_completion
from .config import AIShellConfig, Colors
from .errors import KnownError, report_error
from .providers import ProviderBase
from .streaming import CancelToken, Writer, completion_to_iterable, read_data
from .terminal import read_to_terminal, write_stdout

console = Console(stderr=True)

EXIT_WORD = "exit"


class ChatSession:
    """Conversation en cours et son historique."""

    def __init__(self, config: AIShellConfig, provider: ProviderBase | None = None):
        self.config = config
        self.provider = provider
        self.history: list[dict] = []

    async def reply(self, user_prompt: str, writer: Writer = write_stdout) -> str:
        """
        Envoie un message et affiche la réponse au fil de l'eau.

        Returns:
            La réponse (partielle si interrompue)
        """
        self.history.append({"role": "user", "content": user_prompt})

        try:
            with console.status("RÉFLEXION..."):
                completion = await generate_completion(
                    self.history,
                    key=self.config.mistral_key,
                    model=self.config.model,
                    provider=self.provider,
                )
        except Exception:
            # Le message sans réponse ne doit pas rester dans l'historique
            self.history.pop()
            raise

        console.print(Text.assemble(("AI Shell:", f"bold {Colors.SUCCESS}")))
        console.print()

        token = CancelToken()
        read_response = read_data(completion_to_iterable(completion), cancel=token)
        response = await read_to_terminal(read_response, token, writer)

        self.history.append({"role": "assistant", "content": response})
        return response


def ask_user() -> str | None:
    """Lit le prochain message. None pour quitter."""
    while True:
        try:
            value = Prompt.ask(f"[cyan]Vous :[/] [dim](« {EXIT_WORD} » pour quitter)[/]", console=console)
        except (KeyboardInterrupt, EOFError):
            return None
        value = value.strip()
        if value == EXIT_WORD:
            return None
        if value:
            return value
        console.print("[yellow]Veuillez entrer un prompt.[/]")


async def run_chat(config: AIShellConfig, provider: ProviderBase | None = None) -> None:
    """Boucle de conversation jusqu'à `exit`, Ctrl+C ou EOF."""
    session = ChatSession(config, provider)

    console.print()
    console.print(Text.assemble(("┌ ", "dim"), ("Nouvelle conversation", f"bold {Colors.ORANGE}")))

    while True:
        user_prompt = ask_user()
        if user_prompt is None:
            console.print("[dim]Au revoir ![/]")
            return

        try:
            await session.reply(user_prompt)
        except KnownError as e:
            report_error(e)
            continue

        write_stdout("\n\n")
