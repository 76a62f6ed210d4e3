"""Session setup and turn sequencing across players."""

from __future__ import annotations

import logging
import random
import uuid
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from millionaire.backend.content import validate
from millionaire.backend.engine import TurnEngine
from millionaire.backend.errors import InvalidStateError, PrematureAdvanceError, ProviderError, SetupError
from millionaire.backend.ladder import DEFAULT_LADDER, PrizeLadder
from millionaire.backend.models import Player, PlayerResult, Question
from millionaire.backend.providers import AdviceProvider, QuizContentProvider
from millionaire.backend.store import ResultStore

logger = logging.getLogger(__name__)

MIN_PLAYERS = 1
MAX_PLAYERS = 4


@dataclass
class Session:
    players: list[Player]
    questions: tuple[Question, ...]
    topic: str
    ladder: PrizeLadder = DEFAULT_LADDER
    session_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    active_player_index: int = 0
    terminal: bool = False
    results: tuple[PlayerResult, ...] = ()

    @property
    def active_player(self) -> Player:
        return self.players[self.active_player_index]


def build_session(
    player_names: Sequence[str],
    topic: str,
    questions: Any,
    ladder: PrizeLadder = DEFAULT_LADDER,
    rng: random.Random | None = None,
) -> Session:
    """Validate setup inputs and content, then create a fresh session.

    Nothing is created when any check fails.
    """
    names = _validate_setup(player_names, topic)
    normalized = validate(questions, count=ladder.size, rng=rng)
    players = [Player(name=name) for name in names]
    return Session(players=players, questions=normalized, topic=topic.strip(), ladder=ladder)


async def start_session(
    player_names: Sequence[str],
    topic: str,
    content_provider: QuizContentProvider | None,
    ladder: PrizeLadder = DEFAULT_LADDER,
    rng: random.Random | None = None,
) -> Session:
    _validate_setup(player_names, topic)
    if content_provider is None:
        raise ProviderError("Cannot generate the quiz: no content provider is configured.")
    raw_questions = await content_provider.fetch_questions(topic.strip(), ladder.size)
    session = build_session(player_names, topic, raw_questions, ladder=ladder, rng=rng)
    logger.info("session %s created for %d players on %r", session.session_id, len(session.players), session.topic)
    return session


def _validate_setup(player_names: Sequence[str], topic: str) -> list[str]:
    if isinstance(player_names, str):
        raise SetupError("player names must be a list")
    names = [name.strip() if isinstance(name, str) else "" for name in player_names]
    if not MIN_PLAYERS <= len(names) <= MAX_PLAYERS:
        raise SetupError(f"a game needs between {MIN_PLAYERS} and {MAX_PLAYERS} players")
    if any(name == "" for name in names):
        raise SetupError("every player needs a name")
    if not isinstance(topic, str) or topic.strip() == "":
        raise SetupError("a topic is required")
    return names


def rank_results(players: Sequence[Player]) -> tuple[PlayerResult, ...]:
    """Order results by final prize, highest first; ties keep turn order."""
    records = [
        PlayerResult(
            name=player.name,
            final_prize=player.final_prize,
            reason=player.terminal_reason,
            turn_order=index,
        )
        for index, player in enumerate(players)
    ]
    return tuple(sorted(records, key=lambda record: (-record.final_prize, record.turn_order)))


class SessionOrchestrator:
    def __init__(
        self,
        session: Session,
        sink: ResultStore | None = None,
        user_id: str | None = None,
        advice: AdviceProvider | None = None,
        rng: random.Random | None = None,
        advice_timeout: float | None = None,
    ) -> None:
        self.session = session
        self.sink = sink
        self.user_id = user_id
        self.advice = advice
        self.rng = rng or random.Random()
        self.advice_timeout = advice_timeout
        self._turn = self._new_turn()

    @property
    def current_turn(self) -> TurnEngine:
        if self.session.terminal:
            raise InvalidStateError("session is over")
        return self._turn

    def advance(self) -> tuple[PlayerResult, ...] | None:
        """Hand the turn to the next unfinished player.

        Returns the ranked results when this call ended the session, otherwise None.
        """
        session = self.session
        if session.terminal:
            raise InvalidStateError("session is already over")
        if not session.active_player.terminal:
            raise PrematureAdvanceError(f"{session.active_player.name!r} has not finished yet")

        for index in range(session.active_player_index + 1, len(session.players)):
            if not session.players[index].terminal:
                session.active_player_index = index
                self._turn = self._new_turn()
                logger.info("session %s: turn passes to %r", session.session_id, session.active_player.name)
                return None

        results = rank_results(session.players)
        # A failed save leaves the session open so advance() can be retried.
        if self.sink is not None and self.user_id:
            self.sink.save_results(self.user_id, results, session_id=session.session_id)
        session.results = results
        session.terminal = True
        logger.info("session %s finished", session.session_id)
        return results

    def _new_turn(self) -> TurnEngine:
        return TurnEngine(
            self.session.active_player,
            self.session.questions,
            ladder=self.session.ladder,
            advice=self.advice,
            rng=self.rng,
            advice_timeout=self.advice_timeout,
        )
