"""Persistence interfaces and implementations for per-user game results."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
import logging
from typing import Any, Protocol
import uuid

from millionaire.backend.models import PlayerResult

logger = logging.getLogger(__name__)

MAX_RESULTS_PER_USER = 20


class ResultStore(Protocol):
    def save_results(
        self,
        user_id: str,
        records: Sequence[PlayerResult],
        session_id: str | None = None,
    ) -> list[dict[str, Any]]:
        """Merge new records in front of the user's history and return the kept history."""

    def get_results(self, user_id: str) -> list[dict[str, Any]]:
        """Return the user's history, most recent first."""


def _record_payload(record: PlayerResult, session_id: str | None, recorded_at: str) -> dict[str, Any]:
    payload = record.to_dict()
    payload["sessionId"] = session_id
    payload["recordedAt"] = recorded_at
    return payload


def merge_history(
    new_records: Sequence[dict[str, Any]],
    history: Sequence[dict[str, Any]],
    limit: int = MAX_RESULTS_PER_USER,
) -> list[dict[str, Any]]:
    return [*new_records, *history][:limit]


@dataclass
class InMemoryResultStore:
    limit: int = MAX_RESULTS_PER_USER

    def __post_init__(self) -> None:
        self._results: dict[str, list[dict[str, Any]]] = {}

    def save_results(
        self,
        user_id: str,
        records: Sequence[PlayerResult],
        session_id: str | None = None,
    ) -> list[dict[str, Any]]:
        now = datetime.now(timezone.utc).isoformat()
        payloads = [_record_payload(record, session_id, now) for record in records]
        merged = merge_history(payloads, self._results.get(user_id, []), self.limit)
        self._results[user_id] = merged
        logger.info("stored %d results for user %s (%d kept)", len(payloads), user_id, len(merged))
        return list(merged)

    def get_results(self, user_id: str) -> list[dict[str, Any]]:
        return list(self._results.get(user_id, []))


@dataclass
class PostgresResultStore:
    database_url: str
    limit: int = MAX_RESULTS_PER_USER

    def _connect(self) -> Any:
        import psycopg

        return psycopg.connect(self.database_url)

    def save_results(
        self,
        user_id: str,
        records: Sequence[PlayerResult],
        session_id: str | None = None,
    ) -> list[dict[str, Any]]:
        now = datetime.now(timezone.utc)

        with self._connect() as conn:
            with conn.cursor() as cur:
                # Inserted oldest-last so that ordering by seq DESC reproduces the ranking.
                for record in reversed(records):
                    cur.execute(
                        """
                        INSERT INTO millionaire_results
                        (id, user_id, session_id, player_name, final_prize, reason, turn_order, recorded_at)
                        VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
                        """,
                        (
                            str(uuid.uuid4()),
                            user_id,
                            session_id,
                            record.name,
                            record.final_prize,
                            record.reason.value,
                            record.turn_order,
                            now,
                        ),
                    )
                cur.execute(
                    """
                    DELETE FROM millionaire_results
                    WHERE user_id = %s
                      AND id NOT IN (
                        SELECT id FROM millionaire_results
                        WHERE user_id = %s
                        ORDER BY seq DESC
                        LIMIT %s
                      )
                    """,
                    (user_id, user_id, self.limit),
                )
            conn.commit()

        logger.info("stored %d results for user %s", len(records), user_id)
        return self.get_results(user_id)

    def get_results(self, user_id: str) -> list[dict[str, Any]]:
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    SELECT player_name, final_prize, reason, turn_order, session_id, recorded_at
                    FROM millionaire_results
                    WHERE user_id = %s
                    ORDER BY seq DESC
                    LIMIT %s
                    """,
                    (user_id, self.limit),
                )
                rows = cur.fetchall()

        results: list[dict[str, Any]] = []
        for name, final_prize, reason, turn_order, session_id, recorded_at in rows:
            results.append(
                {
                    "name": name,
                    "finalPrize": int(final_prize),
                    "reason": reason,
                    "turnOrder": int(turn_order),
                    "walkedAway": reason == "walked_away",
                    "sessionId": session_id,
                    "recordedAt": recorded_at.isoformat() if isinstance(recorded_at, datetime) else recorded_at,
                }
            )
        return results


def create_store(database_url: str | None) -> ResultStore:
    if database_url:
        return PostgresResultStore(database_url=database_url)
    return InMemoryResultStore()
