"""Interactive input: masked secrets, line prompts, and risk confirmation.

Prompting is expressed as a small capability (:class:`Interaction`) with a
terminal implementation and a scripted one. The pipeline only talks to the
capability, so its state machine can be exercised without a real terminal.
Prompts are written to stderr so that stdout stays machine-readable.
"""
from __future__ import annotations

import os
import sys
from collections.abc import Iterable, Mapping, Sequence
from typing import Protocol

import typer

from .credentials import env_or_none
from .errors import UsageError
from .exit_codes import ExitCode

AFFIRMATIVE_ANSWERS = frozenset({"y", "yes"})


class Interaction(Protocol):
    """Capability used by the pipeline to talk to a human."""

    def is_interactive(self) -> bool:
        """Return ``True`` when blocking prompts can be answered."""
        ...

    def read_secret(self, prompt: str) -> str:
        """Read a value without echoing it."""
        ...

    def read_line(self, prompt: str) -> str:
        """Read a visible line of input."""
        ...


class TerminalInteraction:
    """Prompt on the controlling terminal."""

    def is_interactive(self) -> bool:
        return _isatty(sys.stdin) and _isatty(sys.stdout)

    def read_secret(self, prompt: str) -> str:
        return self._prompt(prompt, hide_input=True)

    def read_line(self, prompt: str) -> str:
        return self._prompt(prompt, hide_input=False)

    @staticmethod
    def _prompt(prompt: str, *, hide_input: bool) -> str:
        try:
            value = typer.prompt(
                prompt,
                default="",
                show_default=False,
                hide_input=hide_input,
                prompt_suffix="",
                err=True,
            )
        except typer.Abort:
            # Ctrl+C (or EOF) while waiting: stop the process, never resume
            # the pipeline with a partial value.
            raise typer.Exit(code=ExitCode.INTERRUPTED) from None
        return str(value)


class ScriptedInteraction:
    """Deterministic stand-in for :class:`TerminalInteraction`.

    Answers are consumed in order; every prompt shown is recorded in
    :attr:`prompts` for later inspection.
    """

    def __init__(
        self,
        *,
        interactive: bool = True,
        answers: Iterable[str] = (),
        secrets: Iterable[str] = (),
    ) -> None:
        self.interactive = interactive
        self._answers = list(answers)
        self._secrets = list(secrets)
        self.prompts: list[str] = []

    def is_interactive(self) -> bool:
        return self.interactive

    def read_secret(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self._secrets:
            raise UsageError(f"No scripted secret available for prompt {prompt!r}")
        return self._secrets.pop(0)

    def read_line(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self._answers:
            raise UsageError(f"No scripted answer available for prompt {prompt!r}")
        return self._answers.pop(0)


def _isatty(stream: object) -> bool:
    isatty = getattr(stream, "isatty", None)
    if isatty is None:
        return False
    try:
        return bool(isatty())
    except ValueError:  # closed stream
        return False


def interaction_allowed(interaction: Interaction, *, no_input: bool) -> bool:
    """Return ``True`` when prompting is both permitted and possible."""
    return not no_input and interaction.is_interactive()


def acquire_secret(
    env_names: Sequence[str],
    prompt: str,
    interaction: Interaction,
    *,
    allow_interactive: bool,
    env: Mapping[str, str] | None = None,
) -> str:
    """Return a secret from the first populated env var or a masked prompt."""
    source = os.environ if env is None else env
    value = env_or_none(source, *env_names)
    if value is not None:
        return value

    if not allow_interactive:
        joined = ", ".join(env_names)
        raise UsageError(f"Missing secret in env ({joined}) for non-interactive mode")

    entered = interaction.read_secret(prompt).strip()
    if not entered:
        raise UsageError("No secret entered")
    return entered


def confirm_risk(
    label: str,
    interaction: Interaction,
    *,
    bypass: bool,
    allow_interactive: bool,
) -> None:
    """Require ``--yes`` or an explicit affirmative answer before continuing."""
    if bypass:
        return
    if not allow_interactive:
        raise UsageError(f"{label} is risky; run with --yes in non-interactive mode")
    answer = interaction.read_line(f"{label}. Continue? [y/N]: ").strip().lower()
    if answer not in AFFIRMATIVE_ANSWERS:
        raise UsageError("Cancelled by user")


__all__ = [
    "Interaction",
    "ScriptedInteraction",
    "TerminalInteraction",
    "acquire_secret",
    "confirm_risk",
    "interaction_allowed",
]
