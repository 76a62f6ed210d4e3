"""One-shot lifeline logic: 50:50, ask the audience and phone a friend."""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Any

from millionaire.backend.errors import ProviderError
from millionaire.backend.models import LifelineKind, Lifelines, Question
from millionaire.backend.providers import AdviceProvider

logger = logging.getLogger(__name__)

ADVICE_UNAVAILABLE_MESSAGE = "Lifeline unavailable. Check that the AI API key is configured."
ADVICE_FAILED_MESSAGE = "Sorry, the lifeline is not available right now. Check the AI API key and your connection."


@dataclass(frozen=True)
class LifelineResult:
    kind: LifelineKind
    eliminated: tuple[str, ...] = ()
    audience: dict[str, float] | None = None
    audience_valid: bool = False
    advice: str | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "eliminated": list(self.eliminated),
            "audience": dict(self.audience) if self.audience is not None else None,
            "audienceValid": self.audience_valid,
            "advice": self.advice,
            "error": self.error,
        }


async def use_lifeline(
    kind: LifelineKind | str,
    question: Question,
    lifelines: Lifelines,
    advice: AdviceProvider | None = None,
    rng: random.Random | None = None,
    timeout: float | None = None,
) -> LifelineResult:
    """Consume ``kind`` from ``lifelines`` and compute its result.

    Raises ``AlreadyUsedError`` (without touching ``lifelines``) when the lifeline was
    spent before. Provider trouble never raises: the lifeline stays consumed and the
    result carries an ``error`` message for the player instead.
    """
    kind = LifelineKind(kind)
    lifelines.consume(kind)

    if kind is LifelineKind.FIFTY_FIFTY:
        return LifelineResult(kind=kind, eliminated=fifty_fifty(question, rng or random.Random()))

    if advice is None:
        logger.info("lifeline %s used without an advice provider", kind.value)
        return LifelineResult(kind=kind, error=ADVICE_UNAVAILABLE_MESSAGE)

    try:
        if kind is LifelineKind.ASK_AUDIENCE:
            poll = await asyncio.wait_for(advice.audience_poll(question), timeout=timeout)
            valid = audience_is_valid(poll, question)
            if not valid:
                logger.warning("audience poll for %r is inconsistent; showing it as advisory only", question.prompt)
            return LifelineResult(
                kind=kind,
                audience=dict(poll) if isinstance(poll, dict) else None,
                audience_valid=valid,
            )

        text = await asyncio.wait_for(advice.phone_advice(question), timeout=timeout)
        return LifelineResult(kind=kind, advice=text)
    except ProviderError as exc:
        logger.warning("lifeline %s failed: %s", kind.value, exc)
        return LifelineResult(kind=kind, error=ADVICE_FAILED_MESSAGE)
    except asyncio.TimeoutError:
        logger.warning("lifeline %s timed out after %ss", kind.value, timeout)
        return LifelineResult(kind=kind, error=ADVICE_FAILED_MESSAGE)
    except Exception:
        logger.warning("lifeline %s failed unexpectedly", kind.value, exc_info=True)
        return LifelineResult(kind=kind, error=ADVICE_FAILED_MESSAGE)


def fifty_fifty(question: Question, rng: random.Random) -> tuple[str, ...]:
    """Return the two wrong options to hide, in their on-screen order."""
    wrong = [option for option in question.options if option != question.correct_answer]
    kept = rng.choice(wrong)
    return tuple(option for option in wrong if option != kept)


def audience_is_valid(poll: Any, question: Question) -> bool:
    if not isinstance(poll, dict) or set(poll) != set(question.options):
        return False
    try:
        shares = {option: float(share) for option, share in poll.items()}
    except (TypeError, ValueError):
        return False
    if any(share < 0 for share in shares.values()):
        return False
    if abs(sum(shares.values()) - 100.0) > 0.5:
        return False
    correct_share = shares[question.correct_answer]
    return all(share < correct_share for option, share in shares.items() if option != question.correct_answer)
