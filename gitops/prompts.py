"""Operator confirmation sources."""

import sys
from abc import ABC, abstractmethod

import click
import questionary

_YES = {"y", "yes"}


def interpret_answer(answer: str, default: bool) -> bool:
    """Map a typed answer to yes/no.

    Blank input gives `default`; anything other than y/yes is a no.
    """
    normalized = answer.strip().lower()
    if not normalized:
        return default
    return normalized in _YES


class ConfirmationSource(ABC):
    """Answers the yes/no questions asked by the workflow engines."""

    @abstractmethod
    def confirm(self, question: str, default: bool = False) -> bool:
        ...

    @abstractmethod
    def require_token(self, question: str, token: str) -> bool:
        """True only if the operator types exactly `token`."""
        ...


class TerminalConfirmations(ConfirmationSource):
    """Reads answers from standard input, one line per question."""

    def __init__(self, interactive: bool | None = None) -> None:
        if interactive is None:
            interactive = sys.stdin.isatty() and sys.stdout.isatty()
        self.interactive = interactive

    def confirm(self, question: str, default: bool = False) -> bool:
        if self.interactive:
            return bool(questionary.confirm(question, default=default).unsafe_ask())
        suffix = "(Y/n)" if default else "(y/N)"
        answer = click.prompt(f"{question} {suffix}", default="", show_default=False, prompt_suffix=" ")
        return interpret_answer(answer, default)

    def require_token(self, question: str, token: str) -> bool:
        if self.interactive:
            answer = questionary.text(question).unsafe_ask()
        else:
            answer = click.prompt(question, default="", show_default=False, prompt_suffix=" ")
        return (answer or "").strip() == token

