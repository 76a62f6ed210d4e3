"""State builders for game snapshots."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from millionaire.backend.ladder import PrizeLadder
from millionaire.backend.session import SessionOrchestrator


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def build_meta(user_id: str | None) -> dict[str, Any]:
    now = _utc_now_iso()
    return {"userId": user_id, "createdAt": now, "updatedAt": now}


def touch_meta(meta: dict[str, Any]) -> dict[str, Any]:
    next_meta = dict(meta)
    next_meta["updatedAt"] = _utc_now_iso()
    return next_meta


def build_ladder_state(ladder: PrizeLadder) -> list[dict[str, Any]]:
    return [
        {"index": index, "prize": prize, "safeHaven": ladder.is_safe_haven(index)}
        for index, prize in enumerate(ladder.tiers)
    ]


def build_game_state(
    game_id: str,
    orchestrator: SessionOrchestrator,
    version: int,
    meta: dict[str, Any],
) -> dict[str, Any]:
    """Return the client-facing snapshot; correct answers are never included."""
    session = orchestrator.session
    return {
        "id": game_id,
        "sessionId": session.session_id,
        "version": version,
        "status": "results" if session.terminal else "playing",
        "topic": session.topic,
        "questionCount": len(session.questions),
        "activePlayerIndex": session.active_player_index,
        "players": [player.to_dict() for player in session.players],
        "turn": None if session.terminal else orchestrator.current_turn.snapshot(),
        "ladder": build_ladder_state(session.ladder),
        "results": [record.to_dict() for record in session.results],
        "meta": dict(meta),
    }
