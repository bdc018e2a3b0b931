"""
Conflict resolution prompts.

When the resolution policy is ask_each, the conflict detector calls a
prompt once per conflicting candidate, in candidate order. A prompt is
any callable taking a ResolutionRequest and returning a
ResolutionDecision, or None to cancel the import.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Callable, Protocol, TextIO

from notemarker.core.models import Conflict, Marker, ResolutionStrategy
from notemarker.utils.logger import get_logger

logger = get_logger(__name__)

# Choices offered to a user, in menu order
PROMPT_OPTIONS = {
    ResolutionStrategy.SKIP: "Skip this marker",
    ResolutionStrategy.REPLACE: "Replace existing marker(s)",
    ResolutionStrategy.OFFSET: "Offset to next available timecode",
    ResolutionStrategy.CANCEL: "Cancel entire operation",
}


@dataclass(frozen=True)
class ResolutionRequest:
    """What a prompt is asked to decide on.

    Attributes:
        candidate: The conflicting candidate marker
        candidate_index: Its position in the candidate list
        conflicts: Every conflict found for it
        summary: Human-readable description of the conflicts
    """

    candidate: Marker
    candidate_index: int
    conflicts: tuple[Conflict, ...]
    summary: str


@dataclass(frozen=True)
class ResolutionDecision:
    """A prompt's answer.

    With apply_to_all set, the strategy is used for every remaining
    conflicting candidate without asking again.
    """

    strategy: ResolutionStrategy
    apply_to_all: bool = False


class ResolutionPrompt(Protocol):
    def __call__(self, request: ResolutionRequest) -> ResolutionDecision | None: ...


class BatchPrompt:
    """Headless prompt that always answers with the same strategy.

    Example:
        >>> detector = MarkerConflictDetector(prompt=BatchPrompt(ResolutionStrategy.OFFSET))
    """

    def __init__(self, strategy: ResolutionStrategy | str, apply_to_all: bool = True) -> None:
        self.strategy = ResolutionStrategy(strategy)
        if self.strategy is ResolutionStrategy.ASK_EACH:
            raise ValueError("A batch prompt needs a concrete strategy, not ask_each")
        self.apply_to_all = apply_to_all
        self.calls = 0

    def __call__(self, request: ResolutionRequest) -> ResolutionDecision:
        self.calls += 1
        return ResolutionDecision(self.strategy, self.apply_to_all)


class ConsolePrompt:
    """Interactive prompt for the command line.

    Shows the conflict summary and a numbered menu. Answering with an
    upper-case letter ("S", "R", "O") applies the choice to all remaining
    conflicts. "c" or end of input cancels; an empty answer asks again.

    Args:
        input_func: Function reading one answer (default: input)
        output: Stream the menu is written to (default: sys.stdout)
    """

    KEYS = {"s": ResolutionStrategy.SKIP, "r": ResolutionStrategy.REPLACE, "o": ResolutionStrategy.OFFSET}

    def __init__(self, input_func: Callable[[str], str] = input, output: TextIO | None = None) -> None:
        self.input_func = input_func
        self.output = output or sys.stdout

    def _write(self, text: str = "") -> None:
        self.output.write(text + "\n")

    def __call__(self, request: ResolutionRequest) -> ResolutionDecision | None:
        self._write()
        self._write(request.summary.rstrip())
        for strategy, label in PROMPT_OPTIONS.items():
            self._write(f"  [{strategy.value[0]}] {label}")
        self._write("  Use an upper-case letter to apply the choice to all remaining conflicts")

        while True:
            try:
                answer = self.input_func("Resolution [s/r/o/c]: ").strip()
            except EOFError:
                logger.warning("No answer on input, cancelling conflict resolution")
                return None

            if not answer:
                continue
            if answer.lower() == "c":
                return None

            strategy = self.KEYS.get(answer.lower())
            if strategy is not None:
                return ResolutionDecision(strategy, apply_to_all=answer.isupper())

            self._write(f"Unknown choice '{answer}'")
