"""Confirmation policies for destructive choices (overwrite, recreate)."""

import sys
from typing import Protocol

import typer

from multicluster.logging_config import get_logger

logger = get_logger(__name__)


class Confirmer(Protocol):
    """Decides whether a destructive action may proceed."""

    def __call__(self, question: str) -> bool: ...


class InteractiveConfirmer:
    """Ask the operator on the terminal; the default answer is no."""

    def __call__(self, question: str) -> bool:
        try:
            return typer.confirm(question, default=False)
        except typer.Abort:
            # EOF or Ctrl-C at the prompt
            logger.info(f"{question} -> no (input closed)")
            return False


class FixedAnswer:
    """Answer every question the same way without prompting."""

    def __init__(self, answer: bool):
        self.answer = answer

    def __call__(self, question: str) -> bool:
        logger.info(f"{question} -> {'yes' if self.answer else 'no'} (non-interactive)")
        return self.answer


def choose_confirmer(assume_yes: bool = False, non_interactive: bool = False) -> Confirmer:
    """Pick the confirmation policy for this run.

    ``assume_yes`` wins. Otherwise prompts only happen on a terminal; without
    one (or with ``non_interactive``) the non-destructive answer is taken.
    """
    if assume_yes:
        return FixedAnswer(True)
    if non_interactive or not sys.stdin.isatty():
        return FixedAnswer(False)
    return InteractiveConfirmer()
