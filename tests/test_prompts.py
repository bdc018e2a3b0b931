"""Unit tests for conflict resolution prompts."""

import io

import pytest

from notemarker.core.models import Marker, ResolutionStrategy
from notemarker.core.timecode_calc import parse
from notemarker.markers.prompts import BatchPrompt, ConsolePrompt, ResolutionRequest

REQUEST = ResolutionRequest(
    Marker("VO in", parse("00:01:00:00")),
    0,
    (),
    'Marker "VO in" at 00:01:00:00 has 1 conflict(s):\n1. Exact match\n',
)


def console(*answers):
    replies = iter(answers)
    output = io.StringIO()

    def read(prompt):
        try:
            return next(replies)
        except StopIteration:
            raise EOFError

    return ConsolePrompt(read, output), output


class TestBatchPrompt:
    def test_always_same_answer(self):
        prompt = BatchPrompt("skip")
        decision = prompt(REQUEST)

        assert decision.strategy is ResolutionStrategy.SKIP
        assert decision.apply_to_all
        assert prompt.calls == 1

    def test_rejects_ask_each(self):
        with pytest.raises(ValueError):
            BatchPrompt(ResolutionStrategy.ASK_EACH)


class TestConsolePrompt:
    def test_lower_case_answer(self):
        prompt, output = console("o")
        decision = prompt(REQUEST)

        assert decision.strategy is ResolutionStrategy.OFFSET
        assert not decision.apply_to_all
        assert 'Marker "VO in"' in output.getvalue()
        assert "[c] Cancel entire operation" in output.getvalue()

    def test_upper_case_applies_to_all(self):
        prompt, _ = console("R")
        decision = prompt(REQUEST)

        assert decision.strategy is ResolutionStrategy.REPLACE
        assert decision.apply_to_all

    def test_unknown_answer_asks_again(self):
        prompt, output = console("x", "s")

        assert prompt(REQUEST).strategy is ResolutionStrategy.SKIP
        assert "Unknown choice 'x'" in output.getvalue()

    def test_empty_answer_asks_again(self):
        prompt, _ = console("", "   ", "s")
        assert prompt(REQUEST).strategy is ResolutionStrategy.SKIP

    @pytest.mark.parametrize("answers", [("c",), ("C",), ("", "c"), ()])
    def test_cancel(self, answers):
        prompt, _ = console(*answers)
        assert prompt(REQUEST) is None
