"""Domain models for questions, players and persisted results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from millionaire.backend.errors import AlreadyUsedError, InvalidStateError


class LifelineKind(str, Enum):
    FIFTY_FIFTY = "fifty_fifty"
    ASK_AUDIENCE = "ask_audience"
    PHONE_FRIEND = "phone_friend"


class TerminalReason(str, Enum):
    WON = "won"
    WRONG_ANSWER = "wrong_answer"
    WALKED_AWAY = "walked_away"


@dataclass(frozen=True)
class Question:
    prompt: str
    options: tuple[str, ...]
    correct_answer: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "prompt": self.prompt,
            "options": list(self.options),
            "correctAnswer": self.correct_answer,
        }


@dataclass
class Lifelines:
    fifty_fifty: bool = True
    ask_audience: bool = True
    phone_friend: bool = True

    def is_available(self, kind: LifelineKind) -> bool:
        return bool(getattr(self, LifelineKind(kind).value))

    def consume(self, kind: LifelineKind) -> None:
        kind = LifelineKind(kind)
        if not self.is_available(kind):
            raise AlreadyUsedError(f"lifeline {kind.value} was already used")
        setattr(self, kind.value, False)

    def to_dict(self) -> dict[str, bool]:
        return {
            "fiftyFifty": self.fifty_fifty,
            "askAudience": self.ask_audience,
            "phoneFriend": self.phone_friend,
        }


@dataclass
class Player:
    name: str
    prize_index: int = -1
    question_index: int = 0
    lifelines: Lifelines = field(default_factory=Lifelines)
    terminal_reason: TerminalReason | None = None
    final_prize: int = 0
    terminal: bool = False

    def __setattr__(self, name: str, value: Any) -> None:
        if getattr(self, "terminal", False):
            raise InvalidStateError(f"player {self.name!r} is terminal and cannot change")
        super().__setattr__(name, value)

    def finish(self, reason: TerminalReason, prize: int) -> None:
        self.terminal_reason = reason
        self.final_prize = prize
        self.terminal = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "prizeIndex": self.prize_index,
            "questionIndex": self.question_index,
            "lifelines": self.lifelines.to_dict(),
            "terminal": self.terminal,
            "terminalReason": self.terminal_reason.value if self.terminal_reason else None,
            "finalPrize": self.final_prize,
        }


@dataclass(frozen=True)
class PlayerResult:
    name: str
    final_prize: int
    reason: TerminalReason
    turn_order: int

    @property
    def walked_away(self) -> bool:
        return self.reason is TerminalReason.WALKED_AWAY

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "finalPrize": self.final_prize,
            "reason": self.reason.value,
            "turnOrder": self.turn_order,
            "walkedAway": self.walked_away,
        }
