"""Operator console — colored status lines and prompts on the terminal."""

from enum import Enum
from typing import Optional

from rich.console import Console as RichConsole
from rich.prompt import Prompt


class Colors(str, Enum):
    """Status categories and the rich style each one prints in."""

    INFO = "bold blue"
    WARNING = "bold yellow"
    ERROR = "bold red"
    SUCCESS = "bold green"
    NONE = ""


class Console:
    """Thin wrapper over rich so commands can be driven by a fake in tests."""

    def __init__(self, console: Optional[RichConsole] = None):
        self.console = console or RichConsole(highlight=False)

    def write(self, text: str, color: Colors = Colors.NONE) -> None:
        self.console.print(text, style=color.value or None, markup=False)

    def clear(self) -> None:
        self.console.clear()

    def read(self, prompt: str, is_required: bool = False) -> str:
        """Ask for a line of input; re-ask while empty when required."""
        while True:
            answer = Prompt.ask(prompt, console=self.console, default="", show_default=False)
            answer = answer.strip()
            if answer or not is_required:
                return answer
            self.write("A value is required.", Colors.ERROR)


console = Console()
