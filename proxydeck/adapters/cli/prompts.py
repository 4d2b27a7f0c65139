"""
Rich-based user prompts
"""
from typing import Optional
from rich.console import Console
from rich.prompt import Prompt, Confirm

from ...core.interfaces import PromptProvider
from ...core.logging import get_stdout_console


class RichPromptProvider(PromptProvider):
    """Answers confirmation gate prompts and credential questions on the terminal"""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or get_stdout_console()

    def prompt(self, message: str, default: Optional[str] = None, password: bool = False) -> str:
        """Prompt user for input"""
        return Prompt.ask(message, password=password, default=default, console=self.console)

    def confirm(self, message: str, default: bool = False) -> bool:
        """Ask a yes/no question; destructive actions default to no"""
        return Confirm.ask(message, default=default, console=self.console)
