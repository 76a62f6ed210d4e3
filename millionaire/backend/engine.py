"""Turn engine driving one player up the prize ladder."""

from __future__ import annotations

import logging
import random
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from millionaire.backend.errors import InvalidChoiceError, InvalidStateError, LifelinePendingError
from millionaire.backend.ladder import DEFAULT_LADDER, PrizeLadder
from millionaire.backend.lifelines import LifelineResult, use_lifeline
from millionaire.backend.models import LifelineKind, Player, Question, TerminalReason
from millionaire.backend.providers import AdviceProvider

logger = logging.getLogger(__name__)


class TurnPhase(str, Enum):
    AWAITING_ANSWER = "awaiting_answer"
    RESOLVING = "resolving"
    TERMINAL = "terminal"


@dataclass(frozen=True)
class AnswerOutcome:
    question_index: int
    choice: str
    correct: bool
    correct_answer: str
    terminal: bool
    prize: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "questionIndex": self.question_index,
            "choice": self.choice,
            "correct": self.correct,
            "correctAnswer": self.correct_answer,
            "terminal": self.terminal,
            "prize": self.prize,
        }


class TurnEngine:
    """State machine for a single player's turn.

    ``awaiting_answer(i)`` --submit_answer--> ``resolving`` --resolve--> either
    ``awaiting_answer(i + 1)`` or ``terminal``. ``walk_away`` goes straight to
    ``terminal`` and is only accepted before an answer was submitted. ``terminal`` is
    absorbing.
    """

    def __init__(
        self,
        player: Player,
        questions: Sequence[Question],
        ladder: PrizeLadder = DEFAULT_LADDER,
        advice: AdviceProvider | None = None,
        rng: random.Random | None = None,
        advice_timeout: float | None = None,
    ) -> None:
        self.player = player
        self.questions = tuple(questions)
        self.ladder = ladder
        self.advice = advice
        self.rng = rng or random.Random()
        self.advice_timeout = advice_timeout
        self.phase = TurnPhase.TERMINAL if player.terminal else TurnPhase.AWAITING_ANSWER
        self.selected_answer: str | None = None
        self.eliminated: tuple[str, ...] = ()
        self.pending_lifeline: LifelineKind | None = None

    @property
    def question_index(self) -> int:
        return self.player.question_index

    @property
    def current_question(self) -> Question:
        return self.questions[self.player.question_index]

    @property
    def secured_prize(self) -> int:
        if self.player.prize_index < 0:
            return 0
        return self.ladder.prize_at(self.player.prize_index)

    def submit_answer(self, choice: str) -> bool:
        """Record ``choice`` for the current question.

        Returns False when an answer was already recorded; the first choice wins.
        """
        self._ensure_not_terminal()
        if self.phase is TurnPhase.RESOLVING:
            return False
        self._ensure_no_pending_lifeline()
        if choice not in self.current_question.options:
            raise InvalidChoiceError(f"{choice!r} is not an option of question {self.question_index}")
        if choice in self.eliminated:
            raise InvalidChoiceError(f"{choice!r} was removed by 50:50")
        self.selected_answer = choice
        self.phase = TurnPhase.RESOLVING
        return True

    def resolve(self) -> AnswerOutcome:
        self._ensure_not_terminal()
        if self.phase is not TurnPhase.RESOLVING or self.selected_answer is None:
            raise InvalidStateError("no answer has been submitted for the current question")

        index = self.question_index
        question = self.current_question
        choice = self.selected_answer
        correct = choice == question.correct_answer

        if not correct:
            prize = self.ladder.safe_haven_floor(index)
            self._finish(TerminalReason.WRONG_ANSWER, prize)
            return AnswerOutcome(index, choice, False, question.correct_answer, True, prize)

        if index == self.ladder.size - 1:
            self.player.prize_index = index
            prize = self.ladder.prize_at(index)
            self._finish(TerminalReason.WON, prize)
            return AnswerOutcome(index, choice, True, question.correct_answer, True, prize)

        self.player.prize_index = index
        self.player.question_index = index + 1
        self.selected_answer = None
        self.eliminated = ()
        self.phase = TurnPhase.AWAITING_ANSWER
        return AnswerOutcome(index, choice, True, question.correct_answer, False, self.ladder.prize_at(index))

    def answer(self, choice: str) -> AnswerOutcome:
        """Submit and resolve in one step."""
        self.submit_answer(choice)
        return self.resolve()

    def walk_away(self) -> int:
        self._ensure_not_terminal()
        if self.phase is not TurnPhase.AWAITING_ANSWER:
            raise InvalidStateError("cannot walk away after an answer was submitted")
        self._ensure_no_pending_lifeline()
        prize = self.ladder.secured_prize(self.question_index)
        self._finish(TerminalReason.WALKED_AWAY, prize)
        return prize

    async def use_lifeline(self, kind: LifelineKind | str) -> LifelineResult:
        self._ensure_not_terminal()
        if self.phase is not TurnPhase.AWAITING_ANSWER:
            raise InvalidStateError("lifelines are only available before answering")
        self._ensure_no_pending_lifeline()

        kind = LifelineKind(kind)
        question_index = self.question_index
        self.pending_lifeline = kind
        try:
            result = await use_lifeline(
                kind,
                self.current_question,
                self.player.lifelines,
                advice=self.advice,
                rng=self.rng,
                timeout=self.advice_timeout,
            )
        finally:
            self.pending_lifeline = None

        if result.eliminated and self.question_index == question_index:
            self.eliminated = result.eliminated
        return result

    def snapshot(self) -> dict[str, Any]:
        question = None
        if self.phase is not TurnPhase.TERMINAL:
            question = {
                "prompt": self.current_question.prompt,
                "options": list(self.current_question.options),
            }
        return {
            "phase": self.phase.value,
            "questionIndex": self.question_index,
            "question": question,
            "eliminated": list(self.eliminated),
            "selectedAnswer": self.selected_answer,
            "pendingLifeline": self.pending_lifeline.value if self.pending_lifeline else None,
            "securedPrize": self.secured_prize,
        }

    def _finish(self, reason: TerminalReason, prize: int) -> None:
        self.phase = TurnPhase.TERMINAL
        self.player.finish(reason, prize)
        logger.info("player %r finished: %s with %s", self.player.name, reason.value, prize)

    def _ensure_not_terminal(self) -> None:
        if self.phase is TurnPhase.TERMINAL or self.player.terminal:
            raise InvalidStateError(f"turn of {self.player.name!r} is already over")

    def _ensure_no_pending_lifeline(self) -> None:
        if self.pending_lifeline is not None:
            raise LifelinePendingError(f"lifeline {self.pending_lifeline.value} is still pending")
