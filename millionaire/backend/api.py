"""FastAPI endpoints for hosting millionaire games."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, NoReturn

from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel, Field

from .config import BackendSettings, load_settings
from .errors import GameError
from .models import LifelineKind
from .providers import AdviceProvider, QuizContentProvider, create_providers
from .session import SessionOrchestrator, start_session
from .state import build_game_state, build_meta, touch_meta
from .store import ResultStore, create_store

logger = logging.getLogger(__name__)


class CreateGameRequest(BaseModel):
    topic: str = Field(max_length=200)
    player_names: list[str]
    user_id: str | None = Field(default=None, max_length=200)


class AnswerRequest(BaseModel):
    choice: str = Field(min_length=1)


class GameStateResponse(BaseModel):
    state: dict[str, Any]


class AnswerResponse(BaseModel):
    outcome: dict[str, Any]
    state: dict[str, Any]


class WalkAwayResponse(BaseModel):
    prize: int
    state: dict[str, Any]


class LifelineResponse(BaseModel):
    lifeline: dict[str, Any]
    state: dict[str, Any]


class AdvanceResponse(BaseModel):
    results: list[dict[str, Any]] | None
    state: dict[str, Any]


class ResultsResponse(BaseModel):
    results: list[dict[str, Any]]


@dataclass
class GameRecord:
    orchestrator: SessionOrchestrator
    meta: dict[str, Any]
    version: int = 1

    def bump(self) -> None:
        self.version += 1
        self.meta = touch_meta(self.meta)


@dataclass
class GameRegistry:
    games: dict[str, GameRecord] = field(default_factory=dict)

    def add(self, record: GameRecord) -> str:
        game_id = str(uuid.uuid4())
        self.games[game_id] = record
        return game_id

    def get(self, game_id: str) -> GameRecord:
        record = self.games.get(game_id)
        if record is None:
            raise HTTPException(status_code=404, detail="Game not found")
        return record


def _raise_http(exc: GameError) -> NoReturn:
    logger.info("rejected request: %s", exc)
    raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc


def create_app(
    store: ResultStore | None = None,
    content_provider: QuizContentProvider | None = None,
    advice_provider: AdviceProvider | None = None,
    settings: BackendSettings | None = None,
) -> FastAPI:
    app = FastAPI(title="Millionaire Host API", version="0.1.0")
    runtime_settings = settings if settings is not None else load_settings()
    result_store = store if store is not None else create_store(runtime_settings.database_url)
    if content_provider is None and advice_provider is None:
        content_provider, advice_provider = create_providers(runtime_settings)
    registry = GameRegistry()
    app.state.registry = registry

    def get_store() -> ResultStore:
        return result_store

    def state_of(game_id: str, record: GameRecord) -> dict[str, Any]:
        return build_game_state(game_id, record.orchestrator, record.version, record.meta)

    @app.post("/api/games", response_model=GameStateResponse)
    async def create_game(
        payload: CreateGameRequest,
        local_store: ResultStore = Depends(get_store),
    ) -> GameStateResponse:
        try:
            session = await start_session(payload.player_names, payload.topic, content_provider)
        except GameError as exc:
            _raise_http(exc)
        orchestrator = SessionOrchestrator(
            session,
            sink=local_store,
            user_id=payload.user_id,
            advice=advice_provider,
            advice_timeout=runtime_settings.advice_timeout,
        )
        record = GameRecord(orchestrator=orchestrator, meta=build_meta(payload.user_id))
        game_id = registry.add(record)
        return GameStateResponse(state=state_of(game_id, record))

    @app.get("/api/games/{game_id}", response_model=GameStateResponse)
    async def get_game(game_id: str) -> GameStateResponse:
        record = registry.get(game_id)
        return GameStateResponse(state=state_of(game_id, record))

    @app.post("/api/games/{game_id}/answer", response_model=AnswerResponse)
    async def post_answer(game_id: str, payload: AnswerRequest) -> AnswerResponse:
        record = registry.get(game_id)
        try:
            outcome = record.orchestrator.current_turn.answer(payload.choice)
        except GameError as exc:
            _raise_http(exc)
        record.bump()
        return AnswerResponse(outcome=outcome.to_dict(), state=state_of(game_id, record))

    @app.post("/api/games/{game_id}/walk-away", response_model=WalkAwayResponse)
    async def post_walk_away(game_id: str) -> WalkAwayResponse:
        record = registry.get(game_id)
        try:
            prize = record.orchestrator.current_turn.walk_away()
        except GameError as exc:
            _raise_http(exc)
        record.bump()
        return WalkAwayResponse(prize=prize, state=state_of(game_id, record))

    @app.post("/api/games/{game_id}/lifelines/{kind}", response_model=LifelineResponse)
    async def post_lifeline(game_id: str, kind: LifelineKind) -> LifelineResponse:
        record = registry.get(game_id)
        try:
            result = await record.orchestrator.current_turn.use_lifeline(kind)
        except GameError as exc:
            _raise_http(exc)
        record.bump()
        return LifelineResponse(lifeline=result.to_dict(), state=state_of(game_id, record))

    @app.post("/api/games/{game_id}/advance", response_model=AdvanceResponse)
    def post_advance(game_id: str) -> AdvanceResponse:
        record = registry.get(game_id)
        try:
            results = record.orchestrator.advance()
        except GameError as exc:
            _raise_http(exc)
        record.bump()
        payload = None if results is None else [entry.to_dict() for entry in results]
        return AdvanceResponse(results=payload, state=state_of(game_id, record))

    @app.get("/api/users/{user_id}/results", response_model=ResultsResponse)
    def get_user_results(
        user_id: str,
        local_store: ResultStore = Depends(get_store),
    ) -> ResultsResponse:
        return ResultsResponse(results=local_store.get_results(user_id))

    return app


app = create_app()
